"""
Entity <-> transport mapping: reading a model and building it back keeps
every scalar field; related objects are left for the caller to reattach.
"""
from datetime import date, datetime, timedelta, timezone as dt_timezone

import pytest

from care.models import Appointment, Employee, Medication, Patient
from care.serializers.appointment import AppointmentSerializer
from care.serializers.employee import EmployeeSerializer
from care.serializers.medication import MedicationSerializer
from care.serializers.patient import PatientSerializer

pytestmark = pytest.mark.django_db


def _rebuild(serializer_class, obj):
    s = serializer_class(data=serializer_class.from_entity(obj))
    assert s.is_valid(), s.errors
    return s.to_entity()


def test_appointment_round_trip():
    patient = Patient.objects.create(full_name='Tor Hansen', address='Storgata 1')
    employee = Employee.objects.create(full_name='Ida Johansen', address='Solveien 6')
    original = Appointment.objects.create(
        subject='Check-up', description='Bring the pill box',
        date=datetime(2030, 3, 4, 9, 30, tzinfo=dt_timezone.utc),
        patient=patient, employee=employee, is_confirmed=True,
    )
    data = AppointmentSerializer.from_entity(original)
    assert data['patientName'] == 'Tor Hansen'
    assert data['employeeName'] == 'Ida Johansen'

    rebuilt = _rebuild(AppointmentSerializer, original)
    for field in ('id', 'subject', 'description', 'date', 'patient_id', 'employee_id', 'is_confirmed'):
        assert getattr(rebuilt, field) == getattr(original, field), field
    assert rebuilt.pk is not None and rebuilt._state.adding
    # related rows are not attached, only their ids
    assert 'patient' not in rebuilt._state.fields_cache
    assert 'employee' not in rebuilt._state.fields_cache


def test_medication_round_trip():
    patient = Patient.objects.create(full_name='Kari Olsen', address='Lillegata 5')
    start = date.today() - timedelta(days=7)
    original = Medication.objects.create(
        medicine_name='Paracetamol', name='Paracetamol 500mg', patient=patient, indication='Pain relief',
        dosage='500mg as needed, max 4 times daily', start_date=start, end_date=start + timedelta(days=14),
    )
    rebuilt = _rebuild(MedicationSerializer, original)
    for field in ('id', 'medicine_name', 'name', 'patient_id', 'indication', 'dosage', 'start_date', 'end_date'):
        assert getattr(rebuilt, field) == getattr(original, field), field
    assert 'patient' not in rebuilt._state.fields_cache


def test_patient_round_trip():
    original = Patient.objects.create(
        full_name='Tor Hansen', address='Storgata 1, 0181 Oslo', date_of_birth=date(1945, 5, 15),
        phone='+4712345678', health_info='Dementia, diabetes',
    )
    rebuilt = _rebuild(PatientSerializer, original)
    for field in ('id', 'full_name', 'address', 'date_of_birth', 'phone', 'health_info'):
        assert getattr(rebuilt, field) == getattr(original, field), field


def test_employee_round_trip():
    original = Employee.objects.create(full_name='Per Andersen', address='Bakkeveien 12', department='Oslo')
    rebuilt = _rebuild(EmployeeSerializer, original)
    for field in ('id', 'full_name', 'address', 'department'):
        assert getattr(rebuilt, field) == getattr(original, field), field


def test_markup_is_stripped_from_free_text():
    s = AppointmentSerializer(data={
        'subject': 'Visit', 'description': '<b>Bring</b> <i>keys</i>',
        'date': '2030-01-01T10:00:00Z', 'patientId': 1, 'employeeId': 1,
    })
    assert s.is_valid(), s.errors
    assert s.validated_data['description'] == 'Bring keys'
