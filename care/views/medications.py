"""
Medication endpoints.  All of them need a token; the service layer decides
whether the caller may see or touch a given patient's medications.
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from care.context import get_context
from care.serializers.medication import MedicationSerializer
from care.services import medications

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def medication_collection(request):
    ctx = get_context(request)
    if request.method == 'GET':
        visible = medications.list_visible(ctx)
        logger.info('Retrieved %d medications for user %s', len(visible), ctx.user_id)
        return Response(MedicationSerializer.from_entities(visible))
    medication = medications.create(ctx, request.data)
    return Response(MedicationSerializer.from_entity(medication), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def medications_for_patient(request, patient_id: int):
    rows = medications.active_for_patient(get_context(request), patient_id)
    return Response(MedicationSerializer.from_entities(rows))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_medications(request):
    return Response(MedicationSerializer.from_entities(medications.my_active(get_context(request))))


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def medication_detail(request, pk: int):
    ctx = get_context(request)
    if request.method == 'GET':
        return Response(MedicationSerializer.from_entity(medications.get(ctx, pk)))
    if request.method == 'PUT':
        return Response(MedicationSerializer.from_entity(medications.update(ctx, pk, request.data)))
    medications.delete(ctx, pk)
    return Response(status=status.HTTP_204_NO_CONTENT)
