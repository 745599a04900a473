"""
Management command to seed a demo station with one full handover cycle.

Usage:
    python manage.py seed_demo_data

This creates (if missing):
- 1 owner, 1 manager and 2 employees
- 1 station owned by the owner
- A shift collection per employee, their handovers to the manager, the
  manager's handover to the owner and the bank deposit, all confirmed

Handovers are only seeded for a station that has none; records are never
deleted, so the command can be re-run safely.
"""

from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User, UserRole
from apps.handovers.apps import get_handover_config
from apps.handovers.models import CashHandover, HandoverType
from apps.handovers.services import (
    confirm_handover,
    create_handover,
    create_shift_collection,
    record_bank_deposit,
)
from apps.stations.models import Station

DEMO_PASSWORD = 'password123'


class Command(BaseCommand):
    help = 'Seed a demo station with a complete cash handover cycle'

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding demo data...')

        users = self.create_users()
        station = self.create_station(users)

        if CashHandover.objects.filter(station=station).exists():
            self.stdout.write(self.style.WARNING(f'{station.name} already has handovers, skipping chain'))
        else:
            self.create_chain(users, station)

        self.stdout.write(self.style.SUCCESS('Demo data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Demo accounts:')
        for user in users.values():
            self.stdout.write(f'  {user.email} / {DEMO_PASSWORD} ({user.role})')

    def _user(self, email, name, role, **extra):
        user, created = User.objects.get_or_create(
            email=email,
            defaults={'name': name, 'role': role, **extra},
        )
        if created:
            user.set_password(DEMO_PASSWORD)
            user.save()
        return user

    def create_users(self):
        owner = self._user('owner@example.com', 'Olivia Owner', UserRole.OWNER)
        manager = self._user('manager@example.com', 'Manoj Manager', UserRole.MANAGER)
        employees = [
            self._user('ravi@example.com', 'Ravi', UserRole.EMPLOYEE, manager=manager),
            self._user('sita@example.com', 'Sita', UserRole.EMPLOYEE, manager=manager),
        ]
        self.stdout.write(f'  Users: {2 + len(employees)}')
        return {
            'owner': owner,
            'manager': manager,
            'employee_1': employees[0],
            'employee_2': employees[1],
        }

    def create_station(self, users):
        station, _ = Station.objects.get_or_create(
            code='DEMO-001',
            defaults={'name': 'Highway Fuels', 'city': 'Pune', 'owner': users['owner']},
        )
        User.objects.filter(
            id__in=[users['manager'].id, users['employee_1'].id, users['employee_2'].id]
        ).update(station=station)
        for key in ('manager', 'employee_1', 'employee_2'):
            users[key].refresh_from_db()
        self.stdout.write(f'  Station: {station.name}')
        return station

    def create_chain(self, users, station):
        config = get_handover_config()
        manager = users['manager']
        owner = users['owner']
        business_date = timezone.localdate() - timedelta(days=1)

        for key, collected in (('employee_1', Decimal('12500.00')), ('employee_2', Decimal('9800.00'))):
            employee = users[key]
            collection = create_shift_collection(
                actor=manager,
                station_id=station.id,
                employee_id=employee.id,
                cash_collected=collected,
                expected_cash=collected,
                handover_date=business_date,
                config=config,
            )
            confirm_handover(actor=manager, handover_id=collection.id, accept_as_is=True, config=config)

            to_manager = create_handover(
                actor=manager,
                station_id=station.id,
                handover_type=HandoverType.EMPLOYEE_TO_MANAGER,
                from_user_id=employee.id,
                handover_date=business_date,
                config=config,
            )
            confirm_handover(actor=manager, handover_id=to_manager.id, accept_as_is=True, config=config)

        to_owner = create_handover(
            actor=manager,
            station_id=station.id,
            handover_type=HandoverType.MANAGER_TO_OWNER,
            handover_date=business_date,
            config=config,
        )
        confirm_handover(actor=owner, handover_id=to_owner.id, accept_as_is=True, config=config)

        record_bank_deposit(
            actor=owner,
            station_id=station.id,
            amount=to_owner.expected_amount,
            bank_name='State Bank',
            deposit_reference='DEMO-DEP-1',
            config=config,
        )
        self.stdout.write(f'  Handovers: {CashHandover.objects.filter(station=station).count()}')
