from django.db import models
import uuid


class AuditSeverity(models.TextChoices):
    INFO = 'info', 'Info'
    WARNING = 'warning', 'Warning'
    CRITICAL = 'critical', 'Critical'


class AuditLog(models.Model):
    """Immutable record of a committed operation."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Who did it (email/role are snapshots so entries survive user changes)
    actor = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_entries'
    )
    actor_email = models.CharField(max_length=255, blank=True)
    actor_role = models.CharField(max_length=20, blank=True)

    station = models.ForeignKey(
        'stations.Station',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_entries'
    )

    action = models.CharField(max_length=50)
    entity_type = models.CharField(max_length=50)
    entity_id = models.CharField(max_length=64, blank=True)
    old_values = models.JSONField(null=True, blank=True)
    new_values = models.JSONField(null=True, blank=True)

    category = models.CharField(max_length=30, default='general')
    severity = models.CharField(max_length=10, choices=AuditSeverity.choices, default=AuditSeverity.INFO)
    success = models.BooleanField(default=True)
    description = models.CharField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='audit_entity_idx'),
            models.Index(fields=['station', 'created_at'], name='audit_station_created_idx'),
            models.Index(fields=['category', 'severity'], name='audit_category_severity_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.action} {self.entity_type} {self.entity_id}"
