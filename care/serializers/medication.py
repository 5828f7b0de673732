from rest_framework import serializers

from care.models import Medication
from care.serializers.base import EntitySerializer, clean_text


class MedicationSerializer(EntitySerializer):
    medicationId = serializers.IntegerField(source='id', required=False, allow_null=True)
    medicineName = serializers.CharField(source='medicine_name', max_length=100)
    name = serializers.CharField(max_length=150, required=False, allow_blank=True, default='')
    patientId = serializers.IntegerField(source='patient_id')
    patientName = serializers.SerializerMethodField()
    indication = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    dosage = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    startDate = serializers.DateField(source='start_date')
    endDate = serializers.DateField(source='end_date', required=False, allow_null=True, default=None)
    isActive = serializers.SerializerMethodField()

    class Meta:
        model = Medication
        fields = [
            'medicationId', 'medicineName', 'name', 'patientId', 'patientName',
            'indication', 'dosage', 'startDate', 'endDate', 'isActive',
        ]

    def get_patientName(self, obj):
        patient = getattr(obj, 'patient', None) if obj.patient_id else None
        return patient.full_name if patient else None

    def get_isActive(self, obj):
        return obj.is_active()

    def validate_medicineName(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Medicine name is required.')
        return v

    def validate_indication(self, v):
        return clean_text(v) or ''

    def validate_dosage(self, v):
        return clean_text(v) or ''

    def validate(self, attrs):
        start, end = attrs.get('start_date'), attrs.get('end_date')
        if start and end and end < start:
            raise serializers.ValidationError({'endDate': ['End date must be on or after the start date.']})
        if not attrs.get('name'):
            # display name defaults to the medicine name
            attrs['name'] = attrs.get('medicine_name', '')
        return attrs
