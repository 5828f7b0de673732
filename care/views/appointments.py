"""
Appointment endpoints.

Reads of the full list and single appointments are open; everything else
requires a token, and edits/cancellations are staff only.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from care.context import get_context
from care.permissions import IsEmployee, ReadOnly
from care.serializers.appointment import AppointmentSerializer
from care.services import appointments


@api_view(['GET', 'POST'])
@permission_classes([ReadOnly | IsAuthenticated])
def appointment_collection(request):
    if request.method == 'GET':
        return Response(AppointmentSerializer.from_entities(appointments.list_all()))
    appointment = appointments.create(get_context(request), request.data)
    return Response(AppointmentSerializer.from_entity(appointment), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def appointments_for_patient(request, patient_id: int):
    rows = appointments.list_for_patient(get_context(request), patient_id)
    return Response(AppointmentSerializer.from_entities(rows))


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([ReadOnly | IsEmployee])
def appointment_detail(request, pk: int):
    if request.method == 'GET':
        return Response(AppointmentSerializer.from_entity(appointments.get(pk)))
    ctx = get_context(request)
    if request.method == 'PUT':
        appointment = appointments.update(ctx, pk, request.data)
        return Response(AppointmentSerializer.from_entity(appointment))
    appointments.delete(ctx, pk)
    return Response(status=status.HTTP_204_NO_CONTENT)
