"""
Database models for the home-care backend.

Accounts are Django's stock ``auth.User``; the two roles (``Patient`` and
``Employee``) are ``auth.Group`` rows.  Every account owns at most one
profile row, either a :class:`Patient` or an :class:`Employee`.
Appointments and medications reference patient/employee profiles, and
notifications are addressed to accounts.
"""
from __future__ import annotations

import datetime

from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models
from django.utils import timezone

ROLE_PATIENT = 'Patient'
ROLE_EMPLOYEE = 'Employee'
ROLES = (ROLE_PATIENT, ROLE_EMPLOYEE)

SUBJECT_PATTERN = r'^[0-9A-Za-zÆØÅæøå. -]{2,20}$'
PHONE_PATTERN = r'^\+47\d{8}$'

phone_validator = RegexValidator(PHONE_PATTERN, 'Phone number must start with +47 and have 8 numbers.')


class Patient(models.Model):
    """Care recipient profile linked one-to-one with a login account.

    ``full_name``/``address`` stay empty until the patient completes the
    profile after registering.
    """
    full_name = models.CharField(max_length=100, blank=True)
    address = models.CharField(max_length=255, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    # Unique when present; NULL for "no phone" so several patients may omit it
    phone = models.CharField(max_length=11, null=True, blank=True, unique=True, validators=[phone_validator])
    health_info = models.TextField(blank=True)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='patient_profile'
    )

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return self.full_name or f"Patient #{self.pk}"

    @property
    def is_complete(self) -> bool:
        return bool(self.full_name and self.address)


class Employee(models.Model):
    """Care staff profile linked one-to-one with a login account."""
    full_name = models.CharField(max_length=100, blank=True)
    address = models.CharField(max_length=255, blank=True)
    department = models.CharField(max_length=100, blank=True)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='employee_profile'
    )

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return self.full_name or f"Employee #{self.pk}"

    @property
    def is_complete(self) -> bool:
        return bool(self.full_name and self.address)


class Appointment(models.Model):
    """A visit between one patient and one employee."""
    subject = models.CharField(max_length=20, validators=[RegexValidator(SUBJECT_PATTERN)])
    description = models.TextField(blank=True)
    date = models.DateTimeField(db_index=True)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='appointments')
    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='appointments')
    # False for booking requests made by patients until staff confirms them
    is_confirmed = models.BooleanField(default=False)

    class Meta:
        ordering = ['date', 'id']

    def __str__(self) -> str:
        return f"{self.subject} @ {self.date:%Y-%m-%d %H:%M}"


class MedicationQuerySet(models.QuerySet):
    def active(self, today: datetime.date | None = None):
        today = today or timezone.localdate()
        return self.filter(models.Q(end_date__isnull=True) | models.Q(end_date__gte=today))


class Medication(models.Model):
    medicine_name = models.CharField(max_length=100)
    name = models.CharField(max_length=150, blank=True, help_text="Display name, e.g. 'Metformin 500mg'")
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='medications')
    indication = models.CharField(max_length=255, blank=True)
    dosage = models.CharField(max_length=255, blank=True)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)

    objects = MedicationQuerySet.as_manager()

    class Meta:
        ordering = ['-start_date', 'id']

    def __str__(self) -> str:
        return f"{self.medicine_name} ({self.patient_id})"

    def is_active(self, today: datetime.date | None = None) -> bool:
        today = today or timezone.localdate()
        return self.end_date is None or self.end_date >= today


class Notification(models.Model):
    """A message to one account about a change to an appointment or medication.

    ``related_id`` points at the triggering row for display only; the row
    may be gone by the time the notification is read.
    """
    TYPE_APPOINTMENT = 'appointment'
    TYPE_MEDICATION = 'medication'
    TYPE_CHOICES = ((TYPE_APPOINTMENT, 'appointment'), (TYPE_MEDICATION, 'medication'))

    recipient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    title = models.CharField(max_length=100)
    message = models.TextField()
    type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    related_id = models.IntegerField(null=True, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['recipient', 'is_read', 'created_at'], name='care_notifi_recipie_7c1d0e_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.type}:{self.title} -> {self.recipient_id}"


class AuditEvent(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='care_audite_action_3f9b2a_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
