"""
Registration, login and logout.

Login is username/password only and answers every bad credential the
same way so an unknown username cannot be told apart from a wrong
password.
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from care.context import get_context
from care.serializers.auth import LoginSerializer, RegisterSerializer
from care.services import accounts
from care.services.audit import log_action
from care.throttling import LoginRateThrottle, RegisterRateThrottle

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = {'ok': False, 'error': {'code': 'authentication_failed', 'message': 'Invalid username or password.'}}


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([RegisterRateThrottle])
def register_view(request):
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = accounts.register(**s.validated_data)
    log_action(user=user, action='register', object_type='user', object_id=user.id,
               detail={'role': s.validated_data['role'], 'ip': request.META.get('REMOTE_ADDR')})
    return Response({'message': 'User registered successfully', 'userId': user.id}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']

    user = accounts.check_credentials(request, username, s.validated_data['password'])
    if not user:
        logger.info('Failed login for %r', username)
        log_action(user=None, action='login', object_type='user', object_id=None,
                   detail={'result': 'fail', 'username': username, 'ip': request.META.get('REMOTE_ADDR')})
        return Response(INVALID_CREDENTIALS, status=status.HTTP_401_UNAUTHORIZED)

    logger.info('User %s logged in', user.id)
    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': request.META.get('REMOTE_ADDR')})
    return Response({'token': accounts.issue_token(user)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    # tokens are stateless; the client drops its copy
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id)
    return Response({'message': 'Logout successful'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response(accounts.profile_status(get_context(request)))
