"""
Bearer-token authentication that resolves the caller's roles once.

Kept apart from the views so DRF can import it from settings without
pulling in the rest of the app.
"""
from __future__ import annotations

from rest_framework_simplejwt.authentication import JWTAuthentication

from care.context import RequestContext


class ContextJWTAuthentication(JWTAuthentication):
    """simplejwt authentication returning ``(user, RequestContext)``.

    ``request.auth`` therefore holds the normalised identity instead of the
    raw token.
    """

    def authenticate(self, request):
        result = super().authenticate(request)
        if result is None:
            return None
        user, token = result
        return user, RequestContext.from_claims(token.payload, user=user)
