"""
Request-scoped caller identity.

The bearer token is decoded once per request by
:class:`care.authentication.ContextJWTAuthentication`, which normalises the
role claims into a :class:`RequestContext` and stores it on
``request.auth``.  Views read it with :func:`get_context` and hand it to the
services explicitly, so no authorisation rule looks at raw claims.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from rest_framework.exceptions import NotAuthenticated

from care.models import ROLE_EMPLOYEE

# Every claim key a role may have been issued under
ROLE_CLAIM_KEYS = (
    'role',
    'roles',
    'http://schemas.microsoft.com/ws/2008/06/identity/claims/role',
)


def normalize_roles(claims: Mapping[str, Any]) -> frozenset[str]:
    """Union every role claim spelling into one case-folded set."""
    roles: set[str] = set()
    for key in ROLE_CLAIM_KEYS:
        value = claims.get(key)
        if value is None:
            continue
        if isinstance(value, str):
            value = [value]
        for item in value:
            if isinstance(item, str) and item.strip():
                roles.add(item.strip().casefold())
    return frozenset(roles)


@dataclass(frozen=True)
class RequestContext:
    user_id: int
    username: str = ''
    roles: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any], user=None) -> 'RequestContext':
        user_id = getattr(user, 'id', None) or int(claims['nameid'])
        username = getattr(user, 'username', None) or str(claims.get('sub') or '')
        return cls(user_id=user_id, username=username, roles=normalize_roles(claims))

    @classmethod
    def from_user(cls, user) -> 'RequestContext':
        names: Iterable[str] = user.groups.values_list('name', flat=True)
        return cls(user_id=user.id, username=user.username, roles=normalize_roles({'role': list(names)}))

    def has_role(self, role: str) -> bool:
        return role.casefold() in self.roles

    @property
    def is_employee(self) -> bool:
        return self.has_role(ROLE_EMPLOYEE)

    def owns(self, patient) -> bool:
        return patient is not None and patient.user_id is not None and patient.user_id == self.user_id

    def can_access(self, patient) -> bool:
        return self.is_employee or self.owns(patient)


def get_context(request) -> RequestContext:
    """Return the caller's :class:`RequestContext`.

    Falls back to the user's groups when the request was authenticated by
    something other than the bearer token (session login, ``force_authenticate``).
    """
    ctx = getattr(request, 'auth', None)
    if isinstance(ctx, RequestContext):
        return ctx
    user = getattr(request, 'user', None)
    if not (user and user.is_authenticated):
        raise NotAuthenticated()
    return RequestContext.from_user(user)
