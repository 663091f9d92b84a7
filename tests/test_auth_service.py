import base64
import json
from datetime import datetime, timedelta

import pytest

from expense_core.services import MockAuthService
from expense_core.services.auth_service import hash_password


@pytest.fixture
def auth():
    return MockAuthService()


def decode_payload(token):
    segment = token.split('.')[1]
    return json.loads(base64.urlsafe_b64decode(segment + '=' * (-len(segment) % 4)))


class TestLogin:
    def test_valid_credentials(self, auth):
        before = datetime.now()
        response = auth.login('admin@test.com', '123456')

        assert response.success
        assert response.user.id == 1
        assert response.user.email == 'admin@test.com'
        assert response.token.count('.') == 2
        assert before + timedelta(hours=23) < response.expires_at <= datetime.now() + timedelta(hours=24)

    def test_email_is_case_insensitive(self, auth):
        response = auth.login('Demo@Test.com', 'demo')

        assert response.success
        assert response.user.id == 3

    @pytest.mark.parametrize('email, password', [
        ('admin@test.com', 'wrong'),
        ('nobody@test.com', '123456'),
    ])
    def test_invalid_credentials(self, auth, email, password):
        response = auth.login(email, password)

        assert not response.success
        assert response.token == ''
        assert response.message == 'Invalid email or password'

    def test_token_payload(self, auth):
        response = auth.login('user@test.com', 'password')
        payload = decode_payload(response.token)

        assert payload['user_id'] == 2
        assert payload['email'] == 'user@test.com'
        assert payload['exp'] - payload['iat'] == 24 * 3600


class TestTokens:
    def test_fresh_token_is_valid(self, auth):
        token = auth.login('admin@test.com', '123456').token

        assert auth.validate_token(token)

    def test_malformed_tokens_are_invalid(self, auth):
        assert not auth.validate_token('not-a-token')
        assert not auth.validate_token('a.%%%.c')

    def test_expired_token_is_invalid(self, auth):
        user = auth.login('admin@test.com', '123456').user
        token = auth._generate_token(user, now=datetime.now() - timedelta(hours=25))

        assert not auth.validate_token(token)

    def test_user_from_token(self, auth):
        token = auth.login('user@test.com', 'password').token
        user = auth.get_user_from_token(token)

        assert user.id == 2
        assert user.email == 'user@test.com'
        assert auth.get_user_from_token('garbage') is None

    def test_refresh_token(self, auth):
        old = auth.login('demo@test.com', 'demo').token
        refreshed = auth.refresh_token(old)

        assert refreshed.success
        assert refreshed.user.email == 'demo@test.com'
        assert auth.validate_token(refreshed.token)
        assert auth.refresh_token('garbage') is None


def test_password_hash_is_salted_sha256():
    assert hash_password('demo') != hash_password('demo ')
    assert len(hash_password('demo')) == 64


def test_available_test_users(auth):
    assert auth.get_available_test_users() == [
        'admin@test.com (password: 123456)',
        'user@test.com (password: password)',
        'demo@test.com (password: demo)',
    ]
