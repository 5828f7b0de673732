from rest_framework import serializers

from care.models import PHONE_PATTERN, SUBJECT_PATTERN, Patient
from care.serializers.base import EntitySerializer, clean_text

NAME_ERROR = 'The Name must be numbers or letters and between 2 to 20 characters.'
PHONE_ERROR = 'Phone number must start with +47 and have 8 numbers.'


class PatientSerializer(EntitySerializer):
    patientId = serializers.IntegerField(source='id', required=False, allow_null=True)
    fullName = serializers.RegexField(
        SUBJECT_PATTERN, source='full_name', max_length=20, error_messages={'invalid': NAME_ERROR}
    )
    address = serializers.CharField(max_length=255)
    dateOfBirth = serializers.DateField(source='date_of_birth')
    # declared explicitly: uniqueness is checked by the service, not a validator
    phone = serializers.RegexField(
        PHONE_PATTERN, required=False, allow_null=True, allow_blank=True, error_messages={'invalid': PHONE_ERROR}
    )
    healthInfo = serializers.CharField(source='health_info', allow_blank=False)
    userId = serializers.IntegerField(source='user_id', read_only=True)

    class Meta:
        model = Patient
        fields = ['patientId', 'fullName', 'address', 'dateOfBirth', 'phone', 'healthInfo', 'userId']

    def validate_address(self, v):
        return clean_text(v)

    def validate_healthInfo(self, v):
        return clean_text(v)

    def validate_phone(self, v):
        # blank and null both mean "no phone"
        return v or None

