"""
Management command to seed the demo accounts, profiles, appointments and
medications.  Safe to run repeatedly: existing rows are left alone.
"""
from datetime import date, datetime, time, timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from care.models import ROLE_EMPLOYEE, ROLE_PATIENT, Appointment, Employee, Medication, Patient
from care.services.accounts import ensure_role_groups

User = get_user_model()

DEMO_PASSWORD = 'Homecare-demo-1'

ACCOUNTS = [
    ('patient1', 'patient1@test.com', ROLE_PATIENT),
    ('patient2', 'patient2@test.com', ROLE_PATIENT),
    ('employee1', 'employee1@test.com', ROLE_EMPLOYEE),
    ('employee2', 'employee2@test.com', ROLE_EMPLOYEE),
]

PATIENTS = {
    'patient1': dict(full_name='Tor Hansen', address='Storgata 1, 0181 Oslo', date_of_birth=date(1945, 5, 15),
                     phone='+4712345678', health_info='Dementia, diabetes'),
    'patient2': dict(full_name='Kari Olsen', address='Lillegata 5, 0150 Oslo', date_of_birth=date(1952, 8, 22),
                     phone='+4787654321', health_info='Heart condition'),
}

EMPLOYEES = {
    'employee1': dict(full_name='Ida Johansen', address='Solveien 6, 1458 Oslo', department='Oslo'),
    'employee2': dict(full_name='Per Andersen', address='Bakkeveien 12, 0580 Oslo', department='Oslo'),
}


class Command(BaseCommand):
    help = "Seed demo users, profiles, appointments and medications (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument('--password', default=DEMO_PASSWORD, help='Password for newly created demo accounts')

    @transaction.atomic
    def handle(self, *args, **opts):
        groups = ensure_role_groups()
        users = {}
        for username, email, role in ACCOUNTS:
            user, created = User.objects.get_or_create(username=username, defaults={'email': email})
            if created:
                user.set_password(opts['password'])
                user.save(update_fields=['password'])
            user.groups.add(groups[role])
            users[username] = user
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role})"))

        patients = {
            key: Patient.objects.get_or_create(user=users[key], defaults=values)[0] for key, values in PATIENTS.items()
        }
        employees = {
            key: Employee.objects.get_or_create(user=users[key], defaults=values)[0] for key, values in EMPLOYEES.items()
        }

        if not Appointment.objects.exists():
            today = timezone.localdate()

            def at(days: int, hour: int) -> datetime:
                return timezone.make_aware(datetime.combine(today + timedelta(days=days), time(hour)))

            Appointment.objects.bulk_create([
                Appointment(subject='Routine check-up', description='Regular health check and medication review',
                            date=at(1, 10), patient=patients['patient1'], employee=employees['employee1'],
                            is_confirmed=True),
                Appointment(subject='Heart monitoring', description='Blood pressure and heart rate follow-up',
                            date=at(3, 14), patient=patients['patient2'], employee=employees['employee2'],
                            is_confirmed=True),
                Appointment(subject='Medication adjust', description='Adjust diabetes medication dosage',
                            date=at(7, 11), patient=patients['patient1'], employee=employees['employee1'],
                            is_confirmed=True),
            ])
            self.stdout.write(self.style.SUCCESS("Appointments created."))

        if not Medication.objects.exists():
            today = timezone.localdate()
            Medication.objects.bulk_create([
                Medication(medicine_name='Metformin', name='Metformin 500mg', patient=patients['patient1'],
                           indication='Type 2 Diabetes', dosage='500mg twice daily',
                           start_date=today - timedelta(days=30)),
                Medication(medicine_name='Lisinopril', name='Lisinopril 10mg', patient=patients['patient2'],
                           indication='High blood pressure', dosage='10mg once daily',
                           start_date=today - timedelta(days=60)),
                Medication(medicine_name='Paracetamol', name='Paracetamol 500mg', patient=patients['patient1'],
                           indication='Pain relief', dosage='500mg as needed, max 4 times daily',
                           start_date=today - timedelta(days=7), end_date=today + timedelta(days=7)),
            ])
            self.stdout.write(self.style.SUCCESS("Medications created."))

        self.stdout.write(self.style.SUCCESS("Demo data ensured."))
