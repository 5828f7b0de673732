"""
Medication reads and writes.

Reads and writes are limited to employees and the patient who owns the
medication.  Each write sends one notification to the patient's account.
"""
from __future__ import annotations

import logging
from typing import Any

from rest_framework.exceptions import NotFound, ValidationError

from care.context import RequestContext
from care.exceptions import PersistenceFailed
from care.models import Medication, Notification
from care.repositories import medications as repo
from care.repositories import patients as patient_repo
from care.serializers.medication import MedicationSerializer
from care.services import notifications
from care.services.common import check_body_id, ensure_access, get_or_404
from care.services.notifications import NotificationIntent

logger = logging.getLogger(__name__)

ADDED = 'added'
UPDATED = 'updated'
REMOVED = 'removed'


def build_intent(action: str, medication: Medication, recipient_id: int | None) -> list[NotificationIntent]:
    if recipient_id is None:
        logger.warning(
            'Medication %s: patient %s has no account, skipping %s notification',
            medication.id, medication.patient_id, action,
        )
        return []
    name, dosage = medication.medicine_name, medication.dosage
    if action == ADDED:
        title = 'New Medication Added'
        message = f"A new medication '{name}' has been added to your treatment plan. Dosage: {dosage}."
    elif action == UPDATED:
        title = 'Medication Updated'
        message = f"Your medication '{name}' has been updated. New dosage: {dosage}."
    else:
        title = 'Medication Removed'
        message = f"The medication '{name}' has been removed from your treatment plan."
    return [NotificationIntent(
        recipient_id=recipient_id,
        title=title,
        message=message,
        type=Notification.TYPE_MEDICATION,
        related_id=medication.id,
    )]


def list_visible(ctx: RequestContext) -> list[Medication]:
    """Everything for employees, otherwise only the caller's own medications."""
    if ctx.is_employee:
        return repo.get_all()
    patient = patient_repo.by_user_id(ctx.user_id)
    if patient is None:
        return []
    return repo.for_patient(patient.id)


def active_for_patient(ctx: RequestContext, patient_id: int) -> list[Medication]:
    patient = get_or_404(patient_repo, patient_id, 'Patient')
    ensure_access(ctx, patient, 'read medications')
    return repo.active_for_patient(patient.id)


def my_active(ctx: RequestContext) -> list[Medication]:
    patient = patient_repo.by_user_id(ctx.user_id)
    if patient is None:
        raise NotFound('No patient profile for the current user.')
    return repo.active_for_patient(patient.id)


def get(ctx: RequestContext, medication_id: int) -> Medication:
    medication = get_or_404(repo, medication_id, 'Medication')
    ensure_access(ctx, medication.patient, 'read', f'medication {medication_id}')
    return medication


def create(ctx: RequestContext, data: Any) -> Medication:
    s = MedicationSerializer(data=data)
    s.is_valid(raise_exception=True)
    medication = s.to_entity()
    medication.id = None

    patient = patient_repo.get_by_id(medication.patient_id)
    if patient is None:
        raise ValidationError({'patientId': ['Patient not found.']})
    ensure_access(ctx, patient, 'create medication')

    if repo.create(medication) is None:
        raise PersistenceFailed()
    medication.patient = patient
    notifications.dispatch(build_intent(ADDED, medication, patient.user_id))
    logger.info('Medication %s created for patient %s by user %s', medication.id, patient.id, ctx.user_id)
    return medication


def update(ctx: RequestContext, medication_id: int, data: Any) -> Medication:
    check_body_id(medication_id, data, 'medicationId')
    s = MedicationSerializer(data=data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    existing = get_or_404(repo, medication_id, 'Medication')
    ensure_access(ctx, existing.patient, 'update', f'medication {medication_id}')

    if ctx.is_employee and vd['patient_id'] != existing.patient_id:
        patient = patient_repo.get_by_id(vd['patient_id'])
        if patient is None:
            raise ValidationError({'patientId': ['Patient not found.']})
        existing.patient = patient
    # for anyone else patientId is ignored: only staff move medications

    existing.medicine_name = vd['medicine_name']
    existing.name = vd['name']
    existing.indication = vd.get('indication', '')
    existing.dosage = vd.get('dosage', '')
    existing.start_date = vd['start_date']
    existing.end_date = vd.get('end_date')
    if not repo.update(existing):
        raise PersistenceFailed()
    notifications.dispatch(build_intent(UPDATED, existing, existing.patient.user_id))
    logger.info('Medication %s updated by user %s', existing.id, ctx.user_id)
    return existing


def delete(ctx: RequestContext, medication_id: int) -> None:
    existing = get_or_404(repo, medication_id, 'Medication')
    ensure_access(ctx, existing.patient, 'delete', f'medication {medication_id}')
    recipient_id = existing.patient.user_id
    if not repo.delete(existing):
        raise PersistenceFailed()
    notifications.dispatch(build_intent(REMOVED, existing, recipient_id))
    logger.info('Medication %s deleted by user %s', medication_id, ctx.user_id)
