"""
Account registration, credential checks and token issuance.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.models import Group, update_last_login
from django.db import transaction
from rest_framework_simplejwt.tokens import AccessToken

from care.context import RequestContext
from care.models import ROLE_EMPLOYEE, ROLE_PATIENT, ROLES, Employee, Patient
from care.repositories import employees as employee_repo
from care.repositories import patients as patient_repo

User = get_user_model()
logger = logging.getLogger(__name__)

PROFILE_SETUP_ROUTE = '/profile-setup'
HOME_ROUTE = '/'


def ensure_role_groups() -> dict[str, Group]:
    return {name: Group.objects.get_or_create(name=name)[0] for name in ROLES}


@transaction.atomic
def register(*, username: str, email: str, password: str, role: str) -> User:
    """Create the account, its role membership and an empty profile row."""
    groups = ensure_role_groups()
    user = User.objects.create_user(username=username, email=email, password=password)
    user.groups.add(groups[role])
    if role == ROLE_PATIENT:
        Patient.objects.create(user=user)
    else:
        Employee.objects.create(user=user)
    logger.info('Registered %s account %s (%s)', role, user.username, user.id)
    return user


def check_credentials(request, username: str, password: str) -> Optional[User]:
    user = authenticate(request, username=username, password=password)
    if user is None:
        return None
    update_last_login(None, user)
    return user


def role_names(user) -> list[str]:
    return sorted(user.groups.filter(name__in=ROLES).values_list('name', flat=True))


def issue_token(user) -> str:
    """Signed access token carrying the identity and role claims.

    ``nameid``/``exp``/``iat``/``jti`` come from simplejwt; the profile id is
    deliberately absent, clients resolve it via ``/user/{userId}``.
    """
    token = AccessToken.for_user(user)
    token['sub'] = user.username
    token['email'] = user.email or ''
    roles = role_names(user)
    # a single role is a plain string claim, several become a list
    if len(roles) == 1:
        token['role'] = roles[0]
    elif roles:
        token['role'] = roles
    return str(token)


def profile_status(ctx: RequestContext) -> dict:
    """Where the client should go after login.

    A profile is complete once both full name and address are set; until
    then the SPA sends the user to profile setup.
    """
    if ctx.is_employee:
        kind, profile = ROLE_EMPLOYEE, employee_repo.by_user_id(ctx.user_id)
    else:
        kind, profile = ROLE_PATIENT, patient_repo.by_user_id(ctx.user_id)
    complete = bool(profile and profile.is_complete)
    return {
        'userId': ctx.user_id,
        'username': ctx.username,
        'roles': sorted(r.title() for r in ctx.roles),
        'profileType': kind,
        'profileId': profile.id if profile else None,
        'fullName': profile.full_name if profile else '',
        'profileComplete': complete,
        'nextRoute': HOME_ROUTE if complete else PROFILE_SETUP_ROUTE,
    }
