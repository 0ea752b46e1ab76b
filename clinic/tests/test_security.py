import pytest
from django.core.management import call_command
from django.urls import reverse
from rest_framework.test import APIClient

from clinic.models import User
from clinic.throttling import LoginRateThrottle

pytestmark = pytest.mark.django_db


def login(client, username, password, **extra):
    payload = {'username': username, 'password': password}
    payload.update(extra)
    return client.post(reverse('login_view'), payload, format='json')


def test_no_role_bypass_in_login():
    client = APIClient()
    u = User.objects.create_user(username='u1', password='P@ssw0rd1', role='nurse')
    r = login(client, 'u1', 'P@ssw0rd1', role='admin')
    assert r.status_code == 200
    assert r.data['data']['role'] == 'nurse'
    u.refresh_from_db()
    assert u.role == 'nurse'


def test_login_returns_jwt_and_legacy_token():
    client = APIClient()
    User.objects.create_user(username='u_jwt', password='P@ssw0rd1', role='doctor')
    r = login(client, 'u_jwt', 'P@ssw0rd1')
    assert r.status_code == 200
    data = r.data['data']
    assert data['jwt_access'] and data['jwt_refresh'] and data['token']
    assert data['user']['username'] == 'u_jwt'


def test_account_alias_is_accepted():
    client = APIClient()
    User.objects.create_user(username='u2', password='P@ssw0rd1', role='doctor')
    r = client.post(reverse('login_view'), {'account': 'u2', 'password': 'P@ssw0rd1'}, format='json')
    assert r.status_code == 200


def test_wrong_password_uses_error_envelope():
    client = APIClient()
    User.objects.create_user(username='u3', password='P@ssw0rd1', role='doctor')
    r = login(client, 'u3', 'nope')
    assert r.status_code == 400
    assert r.data == {'success': False, 'error': 'Invalid username or password'}


def test_inactive_account_cannot_login_or_use_old_token():
    client = APIClient()
    u = User.objects.create_user(username='u4', password='P@ssw0rd1', role='nurse')
    token = login(client, 'u4', 'P@ssw0rd1').data['data']['token']
    u.status = 'INACTIVE'
    u.save()

    r = login(client, 'u4', 'P@ssw0rd1')
    assert r.status_code == 400
    assert r.data['error'] == 'Account is inactive'

    client.credentials(HTTP_AUTHORIZATION=f'Token {token}')
    assert client.get(reverse('me_view')).status_code == 401


def test_token_and_jwt_both_authenticate():
    client = APIClient()
    User.objects.create_user(username='u5', password='P@ssw0rd1', role='receptionist')
    data = login(client, 'u5', 'P@ssw0rd1').data['data']

    client.credentials(HTTP_AUTHORIZATION=f"Token {data['token']}")
    r = client.get(reverse('me_view'))
    assert r.status_code == 200
    assert r.data['data']['role'] == 'receptionist'

    jwt_client = APIClient()
    jwt_client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['jwt_access']}")
    assert jwt_client.get(reverse('me_view')).data['data']['username'] == 'u5'


def test_refresh_and_logout():
    client = APIClient()
    User.objects.create_user(username='u6', password='P@ssw0rd1', role='doctor')
    data = login(client, 'u6', 'P@ssw0rd1').data['data']

    r = client.post(reverse('jwt_refresh_view'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['data']['jwt_access']

    client.credentials(HTTP_AUTHORIZATION=f"Token {data['token']}")
    r = client.post(reverse('jwt_logout_view'), {}, format='json')
    assert r.status_code == 200
    # the legacy token is gone as well
    assert client.get(reverse('me_view')).status_code == 401


def test_bogus_refresh_token_is_rejected():
    r = APIClient().post(reverse('jwt_refresh_view'), {'refresh': 'not-a-token'}, format='json')
    assert r.status_code == 401
    assert r.data['success'] is False


def test_login_is_throttled(monkeypatch):
    monkeypatch.setattr(LoginRateThrottle, 'rate', '2/min', raising=False)
    client = APIClient()
    codes = [login(client, 'ghost', 'x').status_code for _ in range(3)]
    assert codes[:2] == [400, 400]
    assert codes[2] == 429


def test_ensure_test_users_command():
    call_command('ensure_test_users', '--password', 'P@ssw0rd1')
    roles = dict(User.objects.values_list('username', 'role'))
    assert roles['doctor1'] == 'doctor'
    assert roles['reception1'] == 'receptionist'
    # running twice does not duplicate accounts
    call_command('ensure_test_users', '--password', 'P@ssw0rd1')
    assert User.objects.filter(username='doctor1').count() == 1
