# ==========================================
# apps/stations/models.py
# ==========================================

from django.db import models
import uuid


class Station(models.Model):
    """
    Fuel station, the tenant boundary.

    Owners reach stations through ``owner``; managers and employees are
    attached through User.station.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey('accounts.User', on_delete=models.PROTECT, related_name='owned_stations')
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=20, unique=True, null=True, blank=True)
    city = models.CharField(max_length=100, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'stations'
        indexes = [
            models.Index(fields=['owner', 'created_at'], name='stations_owner_created_idx'),
        ]
        ordering = ['name']

    def __str__(self):
        return self.name
