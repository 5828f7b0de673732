"""
Appointment writes and their notification fan-out.

Every successful create/update/delete produces one notification for the
patient's account and one for the employee's account.  A participant
whose profile has no account is skipped with a warning.
"""
from __future__ import annotations

import logging
from typing import Any

from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from care.context import RequestContext
from care.exceptions import PersistenceFailed
from care.models import Appointment, Notification
from care.repositories import appointments as repo
from care.repositories import employees as employee_repo
from care.repositories import patients as patient_repo
from care.serializers.appointment import AppointmentSerializer
from care.services import notifications
from care.services.common import check_body_id, ensure_access, get_or_404
from care.services.notifications import NotificationIntent

logger = logging.getLogger(__name__)

CREATED = 'created'
UPDATED = 'updated'
CANCELLED = 'cancelled'

TITLES = {
    CREATED: 'New Appointment',
    UPDATED: 'Appointment Updated',
    CANCELLED: 'Appointment Cancelled',
}


def _when(appointment: Appointment) -> str:
    return timezone.localtime(appointment.date).strftime('%d.%m.%Y %H:%M')


def _message(action: str, appointment: Appointment, counterparty: str) -> str:
    subject, when = appointment.subject, _when(appointment)
    if action == CREATED:
        return f"A new appointment '{subject}' with {counterparty} has been scheduled for {when}."
    if action == UPDATED:
        return f"Your appointment '{subject}' with {counterparty} has been updated. New time: {when}."
    return f"Your appointment '{subject}' with {counterparty} on {when} has been cancelled."


def build_intents(action: str, appointment: Appointment) -> list[NotificationIntent]:
    """One intent per participant that has an account.

    ``appointment`` must have ``patient`` and ``employee`` loaded.
    """
    patient, employee = appointment.patient, appointment.employee
    pairs = (
        ('patient', patient, employee.full_name or 'your care worker'),
        ('employee', employee, patient.full_name or 'your patient'),
    )
    intents = []
    for side, profile, counterparty in pairs:
        if profile.user_id is None:
            logger.warning(
                'Appointment %s: %s %s has no account, skipping %s notification',
                appointment.id, side, profile.id, action,
            )
            continue
        intents.append(NotificationIntent(
            recipient_id=profile.user_id,
            title=TITLES[action],
            message=_message(action, appointment, counterparty),
            type=Notification.TYPE_APPOINTMENT,
            related_id=appointment.id,
        ))
    return intents


def list_all() -> list[Appointment]:
    return repo.get_all()


def list_for_patient(ctx: RequestContext, patient_id: int) -> list[Appointment]:
    patient = get_or_404(patient_repo, patient_id, 'Patient')
    ensure_access(ctx, patient, 'read appointments')
    return repo.for_patient(patient.id)


def get(appointment_id: int) -> Appointment:
    return get_or_404(repo, appointment_id, 'Appointment')


def create(ctx: RequestContext, data: Any) -> Appointment:
    s = AppointmentSerializer(data=data)
    s.is_valid(raise_exception=True)
    appointment = s.to_entity()
    appointment.id = None

    patient = patient_repo.get_by_id(appointment.patient_id)
    errors = {}
    if patient is None:
        errors['patientId'] = ['Patient not found.']
    if employee_repo.get_by_id(appointment.employee_id) is None:
        errors['employeeId'] = ['Employee not found.']
    if errors:
        raise ValidationError(errors)

    if not ctx.is_employee and not ctx.owns(patient):
        logger.warning('User %s tried to book for patient %s', ctx.user_id, patient.id)
        raise PermissionDenied('You can only book appointments for yourself.')
    # patient bookings are requests until staff confirms them
    appointment.is_confirmed = ctx.is_employee

    if repo.create(appointment) is None:
        raise PersistenceFailed()
    appointment = repo.get_by_id(appointment.id)
    notifications.dispatch(build_intents(CREATED, appointment))
    logger.info('Appointment %s created by user %s', appointment.id, ctx.user_id)
    return appointment


def update(ctx: RequestContext, appointment_id: int, data: Any) -> Appointment:
    check_body_id(appointment_id, data, 'appointmentId')
    s = AppointmentSerializer(data=data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    existing = get(appointment_id)
    # participants are fixed once booked
    existing.subject = vd['subject']
    existing.description = vd.get('description', '')
    existing.date = vd['date']
    existing.is_confirmed = vd.get('is_confirmed', existing.is_confirmed)
    if not repo.update(existing):
        raise PersistenceFailed()
    notifications.dispatch(build_intents(UPDATED, existing))
    logger.info('Appointment %s updated by user %s', existing.id, ctx.user_id)
    return existing


def delete(ctx: RequestContext, appointment_id: int) -> None:
    existing = get(appointment_id)
    # built before the row disappears
    intents = build_intents(CANCELLED, existing)
    if not repo.delete(existing):
        raise PersistenceFailed()
    notifications.dispatch(intents)
    logger.info('Appointment %s deleted by user %s', appointment_id, ctx.user_id)
