import pytest
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from care.context import RequestContext, normalize_roles
from care.models import Patient
from care.tests.factories import make_patient, make_user

pytestmark = pytest.mark.django_db

MS_ROLE = 'http://schemas.microsoft.com/ws/2008/06/identity/claims/role'


def test_roles_are_unioned_across_claim_spellings():
    claims = {'role': 'Patient', 'roles': ['EMPLOYEE', 'patient'], MS_ROLE: ' Employee '}
    assert normalize_roles(claims) == frozenset({'patient', 'employee'})


def test_missing_or_odd_role_claims():
    assert normalize_roles({}) == frozenset()
    assert normalize_roles({'role': None, 'roles': [], MS_ROLE: ['', 3]}) == frozenset()


def test_ownership():
    ctx = RequestContext(user_id=7, roles=frozenset({'patient'}))
    mine = Patient(user_id=7)
    theirs = Patient(user_id=8)
    orphan = Patient(user_id=None)
    assert ctx.owns(mine) and ctx.can_access(mine)
    assert not ctx.owns(theirs) and not ctx.can_access(theirs)
    assert not ctx.can_access(orphan)
    assert not ctx.owns(None)

    staff = RequestContext(user_id=1, roles=frozenset({'employee'}))
    assert staff.is_employee and staff.can_access(theirs) and staff.can_access(orphan)


def _client_with_claim(user, key, value):
    token = AccessToken.for_user(user)
    token[key] = value
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    return client


@pytest.mark.parametrize('key,value', [
    ('role', 'Employee'),
    ('roles', ['employee']),
    (MS_ROLE, ['Patient', 'EMPLOYEE']),
])
def test_employee_role_from_any_claim_key(key, value):
    # no group membership: the token alone decides
    user = make_user('staff')
    make_patient('someone')
    r = _client_with_claim(user, key, value).get(reverse('list_patients'))
    assert r.status_code == 200


def test_patient_claim_does_not_grant_staff_access():
    user = make_user('plain')
    r = _client_with_claim(user, 'role', 'Patient').get(reverse('list_patients'))
    assert r.status_code == 403


def test_session_style_authentication_uses_groups():
    user = make_user('staff', 'Employee')
    client = APIClient()
    client.force_authenticate(user)
    assert client.get(reverse('list_patients')).status_code == 200
