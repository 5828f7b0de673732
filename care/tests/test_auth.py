"""
Registration, login, logout and the post-login profile check.
"""
import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from care.models import AuditEvent, Employee, Patient
from care.tests.factories import PASSWORD, client_for, make_patient, make_user

pytestmark = pytest.mark.django_db

User = get_user_model()


def register(client, **overrides):
    data = {'username': 'alice', 'email': 'alice@example.com', 'password': PASSWORD, 'role': 'Patient'}
    data.update(overrides)
    return client.post(reverse('register_view'), data, format='json')


def login(client, username, password=PASSWORD):
    return client.post(reverse('login_view'), {'username': username, 'password': password}, format='json')


def test_register_patient_creates_groups_membership_and_empty_profile():
    r = register(APIClient())
    assert r.status_code == 201
    user = User.objects.get(username='alice')
    assert set(Group.objects.values_list('name', flat=True)) == {'Patient', 'Employee'}
    assert list(user.groups.values_list('name', flat=True)) == ['Patient']
    profile = Patient.objects.get(user=user)
    assert profile.full_name == ''
    assert not Employee.objects.filter(user=user).exists()
    assert AuditEvent.objects.filter(action='register', user=user).exists()


def test_register_employee_gets_employee_profile():
    r = register(APIClient(), username='ida', role='Employee')
    assert r.status_code == 201
    assert Employee.objects.filter(user__username='ida').exists()


@pytest.mark.parametrize('role', ['patient', 'EMPLOYEE', 'Admin', ''])
def test_register_rejects_unknown_role(role):
    r = register(APIClient(), role=role)
    assert r.status_code == 400
    assert 'role' in r.data['error']['fields']
    assert not User.objects.filter(username='alice').exists()


def test_register_rejects_duplicate_username_and_weak_password():
    client = APIClient()
    assert register(client).status_code == 201
    r = register(client, email='other@example.com')
    assert r.status_code == 400
    assert 'username' in r.data['error']['fields']

    r = register(client, username='bob', password='123')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'invalid'
    assert r.data['error']['fields']['password']


def test_login_token_carries_identity_and_roles():
    user = make_user('tor', 'Patient')
    r = login(APIClient(), 'tor')
    assert r.status_code == 200
    assert set(r.data) == {'token'}

    token = AccessToken(r.data['token'])
    assert token['sub'] == 'tor'
    assert token['email'] == 'tor@example.com'
    assert int(token['nameid']) == user.id
    assert token['role'] == 'Patient'
    for claim in ('jti', 'iat', 'exp'):
        assert claim in token.payload
    # two hour lifetime
    assert token['exp'] - token['iat'] == 120 * 60
    # profile ids are not part of the token
    assert 'patientId' not in token.payload


def test_role_claim_becomes_a_list_only_for_several_roles():
    user = make_user('both', 'Patient')
    user.groups.add(Group.objects.get(name='Employee'))
    token = AccessToken(login(APIClient(), 'both').data['token'])
    assert token['role'] == ['Employee', 'Patient']

    make_user('nobody-special')
    token = AccessToken(login(APIClient(), 'nobody-special').data['token'])
    assert 'role' not in token.payload


def test_bad_credentials_are_indistinguishable():
    make_user('tor', 'Patient')
    client = APIClient()
    wrong_password = login(client, 'tor', 'not-the-password')
    unknown_user = login(client, 'nobody', 'not-the-password')
    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.data == unknown_user.data
    assert AuditEvent.objects.filter(action='login', detail__result='fail').count() == 2


def test_logout_needs_token():
    assert APIClient().post(reverse('logout_view')).status_code == 401
    user = make_user('tor', 'Patient')
    r = client_for(user).post(reverse('logout_view'))
    assert r.status_code == 200
    assert r.data['message'] == 'Logout successful'


def test_garbage_token_is_401():
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION='Bearer not.a.token')
    r = client.get(reverse('me_view'))
    assert r.status_code == 401
    assert r.data['ok'] is False


def test_alice_registers_logs_in_and_is_sent_to_profile_setup():
    client = APIClient()
    assert register(client).status_code == 201
    token = login(client, 'alice').data['token']
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

    me = client.get(reverse('me_view')).data
    assert me['username'] == 'alice'
    assert me['roles'] == ['Patient']
    assert me['fullName'] == ''
    assert me['profileComplete'] is False
    assert me['nextRoute'] == '/profile-setup'

    # profile id is resolved separately, then the profile is filled in
    profile = client.get(reverse('patient_by_user', args=[me['userId']])).data
    r = client.put(reverse('patient_detail', args=[profile['patientId']]), {
        'patientId': profile['patientId'],
        'fullName': 'Alice Berg',
        'address': 'Kirkeveien 10, 0368 Oslo',
        'dateOfBirth': '1950-01-01',
        'healthInfo': 'None',
    }, format='json')
    assert r.status_code == 200

    me = client.get(reverse('me_view')).data
    assert me['profileComplete'] is True
    assert me['nextRoute'] == '/'


def test_me_for_seeded_patient_is_complete():
    patient = make_patient('tor')
    me = client_for(patient.user).get(reverse('me_view')).data
    assert me['profileId'] == patient.id
    assert me['profileType'] == 'Patient'
    assert me['nextRoute'] == '/'


@pytest.mark.parametrize('url_name', ['login_view', 'register_view'])
def test_auth_endpoints_are_rate_limited(url_name):
    client = APIClient()
    url = reverse(url_name)
    # 20/min per address; malformed bodies still count
    for _ in range(20):
        assert client.post(url, {}, format='json').status_code == 400
    r = client.post(url, {}, format='json')
    assert r.status_code == 429
    assert r.data['error']['code'] == 'throttled'
    assert r.has_header('Retry-After')


def test_rate_limit_is_per_address():
    url = reverse('login_view')
    for _ in range(20):
        APIClient().post(url, {}, format='json', REMOTE_ADDR='10.0.0.1')
    assert APIClient().post(url, {}, format='json', REMOTE_ADDR='10.0.0.1').status_code == 429
    assert APIClient().post(url, {}, format='json', REMOTE_ADDR='10.0.0.2').status_code == 400
