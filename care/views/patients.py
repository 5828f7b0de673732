"""
Patient profile endpoints.

Staff may list and edit every patient; a patient may only read and edit
the profile linked to their own account.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from care.context import get_context
from care.permissions import IsEmployee
from care.serializers.patient import PatientSerializer
from care.services import profiles


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsEmployee])
def list_patients(request):
    return Response(PatientSerializer.from_entities(profiles.list_patients()))


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def patient_detail(request, pk: int):
    ctx = get_context(request)
    if request.method == 'GET':
        return Response(PatientSerializer.from_entity(profiles.get_patient(ctx, pk)))
    return Response(PatientSerializer.from_entity(profiles.update_patient(ctx, pk, request.data)))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def patient_by_user(request, user_id: int):
    return Response(PatientSerializer.from_entity(profiles.patient_by_user(get_context(request), user_id)))
