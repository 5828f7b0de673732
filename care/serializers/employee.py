from rest_framework import serializers

from care.models import Employee
from care.serializers.base import EntitySerializer, clean_text


class EmployeeSerializer(EntitySerializer):
    employeeId = serializers.IntegerField(source='id', required=False, allow_null=True)
    fullName = serializers.CharField(source='full_name', max_length=100)
    address = serializers.CharField(max_length=255)
    department = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    userId = serializers.IntegerField(source='user_id', read_only=True)

    class Meta:
        model = Employee
        fields = ['employeeId', 'fullName', 'address', 'department', 'userId']

    def validate_fullName(self, v):
        v = clean_text(v)
        if len(v) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters.')
        return v

    def validate_address(self, v):
        return clean_text(v)

    def validate_department(self, v):
        return clean_text(v) or ''
