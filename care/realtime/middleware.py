"""
WebSocket authentication from a ``?token=<jwt>`` query parameter.

Browsers cannot set an ``Authorization`` header on a WebSocket handshake,
so the SPA passes the same access token it uses for REST calls in the
query string.
"""
from __future__ import annotations

import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

logger = logging.getLogger(__name__)


@database_sync_to_async
def _user_for_token(raw: str):
    try:
        token = AccessToken(raw)
    except TokenError:
        logger.info('Rejected websocket token')
        return AnonymousUser()
    User = get_user_model()
    user_id = token.get(api_settings.USER_ID_CLAIM)
    user = User.objects.filter(**{api_settings.USER_ID_FIELD: user_id}, is_active=True).first()
    return user or AnonymousUser()


class JWTQueryAuthMiddleware:
    def __init__(self, inner):
        self.inner = inner

    async def __call__(self, scope, receive, send):
        query = parse_qs(scope.get("query_string", b"").decode())
        raw = (query.get("token") or [None])[0]
        scope = dict(scope, user=await _user_for_token(raw) if raw else AnonymousUser())
        return await self.inner(scope, receive, send)
