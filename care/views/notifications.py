"""
Notification inbox of the calling account.  Ids belonging to someone else
are reported as not found.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from care.context import get_context
from care.serializers.notification import NotificationSerializer
from care.services import notifications


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_notifications(request):
    rows = notifications.list_for(get_context(request))
    return Response(NotificationSerializer(rows, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def unread_notifications(request):
    rows = notifications.unread_for(get_context(request))
    return Response(NotificationSerializer(rows, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def unread_count(request):
    return Response(notifications.unread_count(get_context(request)))


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def mark_read(request, pk: int):
    row = notifications.mark_read(get_context(request), pk)
    return Response(NotificationSerializer(row).data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def mark_all_read(request):
    updated = notifications.mark_all_read(get_context(request))
    return Response({'updated': updated})


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def delete_notification(request, pk: int):
    notifications.delete(get_context(request), pk)
    return Response(status=status.HTTP_204_NO_CONTENT)
