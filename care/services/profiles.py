"""
Patient and employee profile reads and updates.
"""
from __future__ import annotations

import logging
from typing import Any

from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from care.context import RequestContext
from care.exceptions import PersistenceFailed
from care.models import Employee, Patient
from care.repositories import employees as employee_repo
from care.repositories import patients as patient_repo
from care.serializers.employee import EmployeeSerializer
from care.serializers.patient import PatientSerializer
from care.services.common import check_body_id, ensure_access, get_or_404

logger = logging.getLogger(__name__)

PHONE_IN_USE = 'This phone number is already in use'


def list_patients() -> list[Patient]:
    return patient_repo.get_all()


def get_patient(ctx: RequestContext, patient_id: int) -> Patient:
    patient = get_or_404(patient_repo, patient_id, 'Patient')
    ensure_access(ctx, patient, 'read', f'patient {patient_id}')
    return patient


def patient_by_user(ctx: RequestContext, user_id: int) -> Patient:
    if not ctx.is_employee and user_id != ctx.user_id:
        logger.warning('User %s denied patient lookup for user %s', ctx.user_id, user_id)
        raise PermissionDenied('You do not have access to this patient.')
    patient = patient_repo.by_user_id(user_id)
    if patient is None:
        raise NotFound('Patient not found.')
    return patient


def update_patient(ctx: RequestContext, patient_id: int, data: Any) -> Patient:
    check_body_id(patient_id, data, 'patientId', 'Patient ID mismatch.')
    s = PatientSerializer(data=data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    patient = get_or_404(patient_repo, patient_id, 'Patient')
    ensure_access(ctx, patient, 'update', f'patient {patient_id}')

    phone = vd.get('phone')
    if phone and patient_repo.phone_taken(phone, exclude_id=patient.id):
        raise ValidationError({'phone': [PHONE_IN_USE]})

    # scalar fields only, the account link never changes here
    patient.full_name = vd['full_name']
    patient.address = vd['address']
    patient.date_of_birth = vd['date_of_birth']
    patient.phone = phone
    patient.health_info = vd['health_info']
    if not patient_repo.update(patient):
        raise PersistenceFailed()
    logger.info('Patient %s updated by user %s', patient.id, ctx.user_id)
    return patient


def list_employees() -> list[Employee]:
    return employee_repo.get_all()


def get_employee(employee_id: int) -> Employee:
    return get_or_404(employee_repo, employee_id, 'Employee')


def employee_by_user(user_id: int) -> Employee:
    employee = employee_repo.by_user_id(user_id)
    if employee is None:
        raise NotFound('Employee not found.')
    return employee


def update_employee(ctx: RequestContext, employee_id: int, data: Any) -> Employee:
    check_body_id(employee_id, data, 'employeeId')
    s = EmployeeSerializer(data=data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    employee = get_or_404(employee_repo, employee_id, 'Employee')
    if employee.user_id is None or employee.user_id != ctx.user_id:
        logger.warning('User %s denied update on employee %s', ctx.user_id, employee_id)
        raise PermissionDenied('You can only update your own profile.')

    employee.full_name = vd['full_name']
    employee.address = vd['address']
    employee.department = vd.get('department', '')
    if not employee_repo.update(employee):
        raise PersistenceFailed()
    logger.info('Employee %s updated by user %s', employee.id, ctx.user_id)
    return employee
