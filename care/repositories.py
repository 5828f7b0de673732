"""
Database access for the care models.

One repository per entity.  Reads return model instances (or ``None``);
writes run in their own savepoint and report failure as ``None``/``False``
after logging it, leaving it to the service layer to decide what the
caller sees.
"""
from __future__ import annotations

import logging
from typing import Generic, Optional, TypeVar

from django.db import DatabaseError, models, transaction
from django.utils import timezone

from care.models import Appointment, Employee, Medication, Notification, Patient

logger = logging.getLogger(__name__)

M = TypeVar('M', bound=models.Model)


class Repository(Generic[M]):
    model: type[M]
    related: tuple[str, ...] = ()

    def queryset(self) -> models.QuerySet:
        qs = self.model.objects.all()
        if self.related:
            qs = qs.select_related(*self.related)
        return qs

    def get_all(self) -> list[M]:
        return list(self.queryset())

    def get_by_id(self, pk: int) -> Optional[M]:
        return self.queryset().filter(pk=pk).first()

    def create(self, obj: M) -> Optional[M]:
        try:
            with transaction.atomic():
                obj.save(force_insert=True)
        except DatabaseError:
            logger.exception('Failed to create %s', self.model.__name__)
            return None
        return obj

    def update(self, obj: M) -> bool:
        try:
            with transaction.atomic():
                obj.save(force_update=True)
        except DatabaseError:
            logger.exception('Failed to update %s %s', self.model.__name__, obj.pk)
            return False
        return True

    def delete(self, obj: M) -> bool:
        pk = obj.pk
        try:
            with transaction.atomic():
                obj.delete()
        except DatabaseError:
            logger.exception('Failed to delete %s %s', self.model.__name__, pk)
            return False
        # keep the id around for notification payloads
        obj.pk = pk
        return True


class PatientRepository(Repository[Patient]):
    model = Patient
    related = ('user',)

    def by_user_id(self, user_id: int) -> Optional[Patient]:
        return self.queryset().filter(user_id=user_id).first()

    def phone_taken(self, phone: str, *, exclude_id: int | None = None) -> bool:
        qs = Patient.objects.filter(phone=phone)
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return qs.exists()


class EmployeeRepository(Repository[Employee]):
    model = Employee
    related = ('user',)

    def by_user_id(self, user_id: int) -> Optional[Employee]:
        return self.queryset().filter(user_id=user_id).first()


class AppointmentRepository(Repository[Appointment]):
    model = Appointment
    related = ('patient', 'employee')

    def for_patient(self, patient_id: int) -> list[Appointment]:
        return list(self.queryset().filter(patient_id=patient_id))


class MedicationRepository(Repository[Medication]):
    model = Medication
    related = ('patient',)

    def for_patient(self, patient_id: int) -> list[Medication]:
        return list(self.queryset().filter(patient_id=patient_id))

    def active_for_patient(self, patient_id: int) -> list[Medication]:
        return list(
            self.queryset().filter(patient_id=patient_id).active(timezone.localdate()).order_by('-start_date', 'id')
        )


class NotificationRepository(Repository[Notification]):
    model = Notification

    def for_recipient(self, user_id: int) -> list[Notification]:
        return list(Notification.objects.filter(recipient_id=user_id).order_by('-created_at', '-id'))

    def unread_for(self, user_id: int) -> list[Notification]:
        return list(Notification.objects.filter(recipient_id=user_id, is_read=False).order_by('-created_at', '-id'))

    def unread_count(self, user_id: int) -> int:
        return Notification.objects.filter(recipient_id=user_id, is_read=False).count()

    def owned(self, pk: int, user_id: int) -> Optional[Notification]:
        return Notification.objects.filter(pk=pk, recipient_id=user_id).first()

    def mark_all_read(self, user_id: int) -> int:
        try:
            with transaction.atomic():
                return Notification.objects.filter(recipient_id=user_id, is_read=False).update(is_read=True)
        except DatabaseError:
            logger.exception('Failed to mark notifications read for user %s', user_id)
            return -1


patients = PatientRepository()
employees = EmployeeRepository()
appointments = AppointmentRepository()
medications = MedicationRepository()
notifications = NotificationRepository()
