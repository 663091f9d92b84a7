"""
Authentication providers.

This module defines the interface shared by the authentication providers
and the offline mock provider used for demos and tests.
"""

import base64
import hashlib
import json
import logging
import random
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..models.user import AuthResponse, User
from ..utils.date_utils import DateFormatter

logger = logging.getLogger(__name__)

PASSWORD_SALT = 'salt123'
TOKEN_LIFETIME = timedelta(hours=24)
INVALID_CREDENTIALS_MESSAGE = 'Invalid email or password'


class AuthProvider(ABC):
    """Interface for authentication providers"""

    @abstractmethod
    def login(self, email: str, password: str) -> AuthResponse:
        """Authenticate with email and password"""

    @abstractmethod
    def validate_token(self, token: str) -> bool:
        """Whether the token is still valid"""

    @abstractmethod
    def logout(self) -> None:
        """End the provider side of the session"""


def hash_password(password: str) -> str:
    return hashlib.sha256((password + PASSWORD_SALT).encode('utf-8')).hexdigest()


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode('ascii')


def _b64decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + '=' * (-len(segment) % 4))


# Test users: email, password, id, name, created_at
_MOCK_USERS = [
    (1, 'admin@test.com', '123456', 'Administrator', '2024-01-01T00:00:00.000Z'),
    (2, 'user@test.com', 'password', 'Demo User', '2024-06-15T10:30:00.000Z'),
    (3, 'demo@test.com', 'demo', 'Test User', '2024-11-01T14:20:00.000Z'),
]


class MockAuthService(AuthProvider):
    """
    Offline authentication against a fixed set of test users.

    Issues unsigned JWT-shaped tokens whose payload carries the user
    and an expiry 24 hours after issue.
    """

    def __init__(self):
        self._users = [
            {
                'id': user_id,
                'email': email,
                'password': password,
                'password_hash': hash_password(password),
                'name': name,
                'created_at': created_at,
            }
            for user_id, email, password, name, created_at in _MOCK_USERS
        ]

    def _find_user(self, email: str) -> Optional[Dict[str, Any]]:
        email = email.lower()
        return next((u for u in self._users if u['email'].lower() == email), None)

    def _generate_token(self, user: User, now: Optional[datetime] = None) -> str:
        now = now or datetime.now()
        header = {'typ': 'JWT', 'alg': 'HS256'}
        payload = {
            'user_id': user.id,
            'email': user.email,
            'name': user.name,
            'iat': int(now.timestamp()),
            'exp': int((now + TOKEN_LIFETIME).timestamp()),
        }
        signature = f"fake_signature_{random.randint(0, 99999)}"
        return '.'.join([
            _b64encode(json.dumps(header).encode('utf-8')),
            _b64encode(json.dumps(payload).encode('utf-8')),
            _b64encode(signature.encode('utf-8')),
        ])

    @staticmethod
    def _decode_payload(token: str) -> Optional[Dict[str, Any]]:
        parts = token.split('.')
        if len(parts) != 3:
            return None
        try:
            payload = json.loads(_b64decode(parts[1]).decode('utf-8'))
        except (ValueError, UnicodeDecodeError) as e:
            logger.debug(f"Token payload could not be decoded: {e}")
            return None
        return payload if isinstance(payload, dict) else None

    def login(self, email: str, password: str) -> AuthResponse:
        """
        Authenticate a test user.

        Args:
            email: Email, matched case-insensitively
            password: Plain text password

        Returns:
            AuthResponse: Token and user on success, error response otherwise
        """
        logger.info(f"Mock login for {email}")
        user_data = self._find_user(email)
        if user_data is None or user_data['password_hash'] != hash_password(password):
            logger.warning(f"Mock login failed for {email}")
            return AuthResponse.error(INVALID_CREDENTIALS_MESSAGE, email=email)

        user = User(
            id=user_data['id'],
            email=user_data['email'],
            name=user_data['name'],
            created_at=DateFormatter.parse_datetime(user_data['created_at'])
        )
        now = datetime.now()
        return AuthResponse(
            token=self._generate_token(user, now),
            user=user,
            expires_at=now + TOKEN_LIFETIME,
            success=True,
            message='Login successful'
        )

    def validate_token(self, token: str) -> bool:
        payload = self._decode_payload(token)
        if payload is None:
            return False
        try:
            return datetime.now().timestamp() < int(payload['exp'])
        except (KeyError, TypeError, ValueError):
            return False

    def get_user_from_token(self, token: str) -> Optional[User]:
        """Rebuild the user carried in a token, or None if it cannot be read"""
        payload = self._decode_payload(token)
        if payload is None:
            return None
        try:
            return User(
                id=payload['user_id'],
                email=payload['email'],
                name=payload.get('name'),
                created_at=datetime.now()
            )
        except (KeyError, ValueError) as e:
            logger.debug(f"Token payload has no usable user: {e}")
            return None

    def refresh_token(self, old_token: str) -> Optional[AuthResponse]:
        """Issue a fresh token for the user in `old_token`"""
        user = self.get_user_from_token(old_token)
        if user is None:
            return None
        now = datetime.now()
        logger.info(f"Token refreshed for {user.email}")
        return AuthResponse(
            token=self._generate_token(user, now),
            user=user,
            expires_at=now + TOKEN_LIFETIME,
            success=True,
            message='Token refreshed'
        )

    def logout(self) -> None:
        logger.info("Mock logout")

    def get_available_test_users(self) -> List[str]:
        return [f"{u['email']} (password: {u['password']})" for u in self._users]
