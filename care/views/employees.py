from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from care.context import get_context
from care.serializers.employee import EmployeeSerializer
from care.services import profiles


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_employees(request):
    return Response(EmployeeSerializer.from_entities(profiles.list_employees()))


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def employee_detail(request, pk: int):
    if request.method == 'GET':
        return Response(EmployeeSerializer.from_entity(profiles.get_employee(pk)))
    employee = profiles.update_employee(get_context(request), pk, request.data)
    return Response(EmployeeSerializer.from_entity(employee))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def employee_by_user(request, user_id: int):
    return Response(EmployeeSerializer.from_entity(profiles.employee_by_user(user_id)))
