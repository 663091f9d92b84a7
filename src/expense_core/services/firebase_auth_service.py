"""
Firebase authentication provider.

Password sign-in, sign-up and reset go through the Identity Toolkit REST
API; user profiles live in the Firestore `users` collection and ID tokens
are verified with the Admin SDK.
"""

import hashlib
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import firebase_admin
import requests
from firebase_admin import auth, credentials, firestore
from firebase_admin import exceptions as firebase_exceptions

from ..api.errors import AuthenticationError, ConfigurationError
from ..api.request_handler import RequestHandler
from ..models.user import AuthResponse, User
from ..utils.date_utils import DateFormatter
from .auth_service import AuthProvider

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = 'https://identitytoolkit.googleapis.com/v1'
USERS_COLLECTION = 'users'
DEFAULT_TOKEN_LIFETIME = 3600
DEFAULT_TIMEOUT = 20.0

# Identity Toolkit error codes and the message shown for each
ERROR_MESSAGES = {
    'EMAIL_NOT_FOUND': 'User not found',
    'INVALID_PASSWORD': 'Wrong password',
    'INVALID_LOGIN_CREDENTIALS': 'Invalid email or password',
    'INVALID_EMAIL': 'Invalid email',
    'USER_DISABLED': 'User disabled',
    'TOO_MANY_ATTEMPTS_TRY_LATER': 'Too many attempts. Try again later',
    'EMAIL_EXISTS': 'This email is already registered',
    'WEAK_PASSWORD': 'The password is too weak',
}


def user_id_from_uid(uid: str) -> int:
    """Stable positive 31-bit integer ID for a Firebase UID"""
    digest = hashlib.sha256(uid.encode('utf-8')).digest()
    return int.from_bytes(digest[:4], 'big') & 0x7FFFFFFF


def init_firebase_app(service_account_path: Optional[str] = None) -> firebase_admin.App:
    """Return the default Firebase app, initializing it on first use"""
    try:
        return firebase_admin.get_app()
    except ValueError:
        cred = credentials.Certificate(service_account_path) if service_account_path else None
        return firebase_admin.initialize_app(cred)


class FirebaseAuthService(AuthProvider):
    """
    Authentication backed by Firebase.

    No method raises to its caller: failures come back as
    `AuthResponse.error(...)`, `None` or `False`.
    """

    def __init__(self,
                 api_key: str,
                 service_account_path: Optional[str] = None,
                 firestore_client: Any = None,
                 app: Optional[firebase_admin.App] = None,
                 session: Optional[requests.Session] = None,
                 timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize the Firebase provider.

        Args:
            api_key: Firebase web API key
            service_account_path: Service account JSON for the Admin SDK
            firestore_client: Optional Firestore client (tests inject one)
            app: Optional initialized Firebase app
            session: Optional pre-built session
            timeout: REST request timeout in seconds
        """
        if not api_key:
            raise ConfigurationError("Firebase web API key is required")

        self.service_account_path = service_account_path
        self._app = app
        self._db = firestore_client

        self.session = session or requests.Session()
        self.session.headers.update({'Content-Type': 'application/json'})
        self.session.params = {'key': api_key}
        self.request_handler = RequestHandler(
            session=self.session,
            base_url=IDENTITY_TOOLKIT_URL,
            timeout=timeout
        )

        self._current: Optional[Dict[str, Any]] = None

    @property
    def app(self) -> firebase_admin.App:
        if self._app is None:
            self._app = init_firebase_app(self.service_account_path)
        return self._app

    @property
    def db(self) -> Any:
        if self._db is None:
            self._db = firestore.client(self.app)
        return self._db

    def _users(self) -> Any:
        return self.db.collection(USERS_COLLECTION)

    def _call(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Call an Identity Toolkit endpoint.

        Raises:
            AuthenticationError: With the friendly message for the error code
        """
        try:
            response = self.request_handler.make_request('POST', f"accounts:{endpoint}", data=payload)
        except requests.RequestException as e:
            raise AuthenticationError(f"Connection error: {e}")

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code != 200:
            raw = (body.get('error') or {}).get('message', '') if isinstance(body, dict) else ''
            code = raw.split(':')[0].strip()
            message = ERROR_MESSAGES.get(code, raw or 'Unknown error')
            raise AuthenticationError(message, status_code=response.status_code, details={'code': code})

        return body if isinstance(body, dict) else {}

    def _remember(self, data: Dict[str, Any]) -> None:
        self._current = {
            'uid': data['localId'],
            'email': data.get('email'),
            'id_token': data.get('idToken', ''),
            'refresh_token': data.get('refreshToken'),
            'display_name': data.get('displayName'),
        }

    @staticmethod
    def _expires_at(data: Dict[str, Any]) -> datetime:
        seconds = int(data.get('expiresIn') or DEFAULT_TOKEN_LIFETIME)
        return datetime.now() + timedelta(seconds=seconds)

    @staticmethod
    def _user_from_document(data: Dict[str, Any]) -> User:
        return User(
            id=data['id'],
            email=data['email'],
            name=data.get('name'),
            created_at=DateFormatter.parse_datetime(data['created_at'])
        )

    def _create_user_document(self, uid: str, email: str, name: Optional[str]) -> User:
        user = User(
            id=user_id_from_uid(uid),
            email=email,
            name=name or email.split('@')[0],
            created_at=datetime.now()
        )
        self._users().document(uid).set({
            **user.to_map(),
            'firebase_uid': uid,
        })
        return user

    def register(self, email: str, password: str, name: Optional[str] = None) -> AuthResponse:
        """
        Create an account and its user document.

        Args:
            email: Email address
            password: Password
            name: Display name, defaults to the email's local part

        Returns:
            AuthResponse: Token and user on success, error response otherwise
        """
        logger.info(f"Firebase: registering {email}")
        try:
            data = self._call('signUp', {'email': email, 'password': password, 'returnSecureToken': True})
            self._remember(data)
            if name:
                self._call('update', {'idToken': data['idToken'], 'displayName': name, 'returnSecureToken': False})
            user = self._create_user_document(data['localId'], email, name)
        except AuthenticationError as e:
            logger.warning(f"Firebase: registration failed for {email}: {e.message}")
            return AuthResponse.error(e.message, email=email)
        except Exception as e:
            logger.exception(f"Firebase: unexpected registration error for {email}")
            return AuthResponse.error(f"Unexpected error: {e}", email=email)

        return AuthResponse(
            token=data.get('idToken', ''),
            user=user,
            expires_at=self._expires_at(data),
            success=True,
            message='User registered successfully'
        )

    def login(self, email: str, password: str) -> AuthResponse:
        """
        Sign in with email and password.

        A missing user document is created on the fly for accounts
        that predate the `users` collection.
        """
        logger.info(f"Firebase: signing in {email}")
        try:
            data = self._call('signInWithPassword', {'email': email, 'password': password, 'returnSecureToken': True})
            self._remember(data)
            uid = data['localId']
            snapshot = self._users().document(uid).get()
            if snapshot.exists:
                user = self._user_from_document(snapshot.to_dict())
            else:
                logger.info(f"Firebase: creating missing user document for {uid}")
                user = self._create_user_document(uid, data.get('email') or email, data.get('displayName'))
        except AuthenticationError as e:
            logger.warning(f"Firebase: login failed for {email}: {e.message}")
            return AuthResponse.error(e.message, email=email)
        except Exception as e:
            logger.exception(f"Firebase: unexpected login error for {email}")
            return AuthResponse.error(f"Unexpected error: {e}", email=email)

        return AuthResponse(
            token=data.get('idToken', ''),
            user=user,
            expires_at=self._expires_at(data),
            success=True,
            message='Login successful'
        )

    def logout(self) -> None:
        # ID tokens are stateless; forgetting them ends the session here
        self._current = None
        logger.info("Firebase: signed out")

    @property
    def is_authenticated(self) -> bool:
        return self._current is not None

    def get_current_app_user(self) -> Optional[User]:
        """Load the signed-in user's document, or None"""
        if self._current is None:
            return None
        try:
            snapshot = self._users().document(self._current['uid']).get()
            if not snapshot.exists:
                return None
            return self._user_from_document(snapshot.to_dict())
        except Exception:
            logger.exception("Firebase: could not load current user")
            return None

    def send_password_reset_email(self, email: str) -> bool:
        try:
            self._call('sendOobCode', {'requestType': 'PASSWORD_RESET', 'email': email})
        except AuthenticationError as e:
            logger.warning(f"Firebase: password reset failed for {email}: {e.message}")
            return False
        logger.info(f"Firebase: password reset sent to {email}")
        return True

    def update_profile(self, name: Optional[str] = None, photo_url: Optional[str] = None) -> bool:
        """
        Update the signed-in user's display name and photo.

        Returns:
            bool: False when nobody is signed in or the update fails
        """
        if self._current is None:
            return False

        payload: Dict[str, Any] = {'idToken': self._current['id_token'], 'returnSecureToken': False}
        if name is not None:
            payload['displayName'] = name
        if photo_url is not None:
            payload['photoUrl'] = photo_url

        try:
            self._call('update', payload)
            self._users().document(self._current['uid']).update({
                'name': name,
                'updated_at': datetime.now().isoformat(),
            })
        except AuthenticationError as e:
            logger.warning(f"Firebase: profile update failed: {e.message}")
            return False
        except Exception:
            logger.exception("Firebase: profile update failed")
            return False

        self._current['display_name'] = name
        return True

    def validate_token(self, token: str) -> bool:
        if not token:
            return False
        try:
            auth.verify_id_token(token, app=self.app)
        except (ValueError, OSError, firebase_exceptions.FirebaseError) as e:
            logger.debug(f"Firebase: token rejected: {e}")
            return False
        return True
