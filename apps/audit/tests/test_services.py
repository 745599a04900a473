import pytest

from apps.audit.models import AuditLog
from apps.audit.services import log_audit, schedule_audit


@pytest.mark.django_db
class TestLogAudit:

    def test_snapshots_actor(self, owner, station):
        entry = log_audit(
            actor=owner,
            action='CREATE',
            entity_type='CashHandover',
            entity_id='abc',
            station_id=station.id,
            new_values={'status': 'pending'},
            category='finance',
        )

        assert entry is not None
        assert entry.actor_email == 'owner@example.com'
        assert entry.actor_role == 'owner'
        assert entry.station_id == station.id
        assert entry.new_values == {'status': 'pending'}
        assert entry.severity == 'info'

    def test_without_actor(self, db):
        entry = log_audit(action='SEED', entity_type='Station')

        assert entry.actor is None
        assert entry.actor_email == ''
        assert entry.entity_id == ''

    def test_long_description_truncated(self, owner):
        entry = log_audit(actor=owner, action='NOTE', entity_type='Station', description='x' * 600)

        assert len(entry.description) == 500

    def test_write_failure_is_swallowed(self, owner, monkeypatch):
        def broken_create(**kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(AuditLog.objects, 'create', broken_create)

        assert log_audit(actor=owner, action='CREATE', entity_type='CashHandover') is None


@pytest.mark.django_db
class TestScheduleAudit:

    def test_written_on_commit(self, owner, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            schedule_audit(actor=owner, action='CONFIRM', entity_type='CashHandover', entity_id='abc')
            assert AuditLog.objects.count() == 0

        assert len(callbacks) == 1
        callbacks[0]()
        assert AuditLog.objects.filter(action='CONFIRM', entity_id='abc').exists()
