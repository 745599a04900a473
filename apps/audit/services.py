"""
Audit sink.

Audit writes are fire-and-forget: a failure here is logged and never
reaches the operation being audited.
"""

import logging

from django.db import transaction

from .models import AuditLog

logger = logging.getLogger(__name__)


def log_audit(
    *,
    actor=None,
    action,
    entity_type,
    entity_id=None,
    station_id=None,
    old_values=None,
    new_values=None,
    category='general',
    severity='info',
    success=True,
    description='',
):
    """
    Persist one audit event.

    Returns the AuditLog, or None when the write failed.
    """
    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                actor=actor,
                actor_email=getattr(actor, 'email', '') or '',
                actor_role=getattr(actor, 'role', '') or '',
                station_id=station_id,
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else '',
                old_values=old_values,
                new_values=new_values,
                category=category,
                severity=severity,
                success=success,
                description=description[:500],
            )
    except Exception:
        logger.exception("Audit write failed for %s %s %s", action, entity_type, entity_id)
        return None


def schedule_audit(**event):
    """Write the audit event once the surrounding transaction commits."""
    transaction.on_commit(lambda: log_audit(**event))
