from rest_framework import serializers

from care.models import SUBJECT_PATTERN, Appointment
from care.serializers.base import EntitySerializer, clean_text

SUBJECT_ERROR = 'The Subject must be numbers or letters and between 2 to 20 characters.'


class AppointmentSerializer(EntitySerializer):
    appointmentId = serializers.IntegerField(source='id', required=False, allow_null=True)
    subject = serializers.RegexField(SUBJECT_PATTERN, max_length=20, error_messages={'invalid': SUBJECT_ERROR})
    description = serializers.CharField(required=False, allow_blank=True, default='')
    date = serializers.DateTimeField()
    patientId = serializers.IntegerField(source='patient_id')
    employeeId = serializers.IntegerField(source='employee_id')
    isConfirmed = serializers.BooleanField(source='is_confirmed', required=False)
    patientName = serializers.SerializerMethodField()
    employeeName = serializers.SerializerMethodField()

    class Meta:
        model = Appointment
        fields = [
            'appointmentId', 'subject', 'description', 'date', 'patientId', 'employeeId',
            'isConfirmed', 'patientName', 'employeeName',
        ]

    def get_patientName(self, obj):
        patient = getattr(obj, 'patient', None) if obj.patient_id else None
        return patient.full_name if patient else None

    def get_employeeName(self, obj):
        employee = getattr(obj, 'employee', None) if obj.employee_id else None
        return employee.full_name if employee else None

    def validate_description(self, v):
        return clean_text(v) or ''
