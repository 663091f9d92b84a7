"""
Local session persistence.

The session token is kept in the OS secure store through `keyring`;
the user, token expiry and flags go to a JSON preferences file.
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from ..api.errors import SessionStorageError
from ..models.user import User
from ..utils.date_utils import DateFormatter

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_NAME = 'expense-assistant'
DEFAULT_PREFERENCES_PATH = os.path.join('~', '.expense_assistant', 'session.json')

TOKEN_KEY = 'auth_token'
USER_KEY = 'current_user'
TOKEN_EXPIRY_KEY = 'token_expiry'
IS_LOGGED_IN_KEY = 'is_logged_in'
SYNC_DONE_KEY = 'initial_sync_done'


class SessionStore:
    """
    Store for the signed-in session.

    Writes raise `SessionStorageError`; reads log problems and return
    None or False.
    """

    def __init__(self,
                 preferences_path: str = DEFAULT_PREFERENCES_PATH,
                 service_name: str = DEFAULT_SERVICE_NAME,
                 secure_storage: Any = keyring):
        """
        Initialize the session store.

        Args:
            preferences_path: JSON file for non-secret session data
            service_name: Keyring service the token is stored under
            secure_storage: Object with keyring's get/set/delete_password API
        """
        self.preferences_path = Path(os.path.expanduser(preferences_path))
        self.service_name = service_name
        self.secure_storage = secure_storage

    def _read_preferences(self) -> Dict[str, Any]:
        if not self.preferences_path.exists():
            return {}
        with open(self.preferences_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def _write_preferences(self, preferences: Dict[str, Any]) -> None:
        self.preferences_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.preferences_path, 'w', encoding='utf-8') as f:
            json.dump(preferences, f, indent=2)

    def _update_preferences(self, **changes: Any) -> None:
        try:
            preferences = self._read_preferences()
        except (OSError, ValueError) as e:
            logger.warning(f"Discarding unreadable preferences file: {e}")
            preferences = {}
        for key, value in changes.items():
            if value is None:
                preferences.pop(key, None)
            else:
                preferences[key] = value
        self._write_preferences(preferences)

    def _delete_token(self) -> None:
        try:
            self.secure_storage.delete_password(self.service_name, TOKEN_KEY)
        except PasswordDeleteError:
            pass
        except KeyringError as e:
            logger.error(f"Error deleting token: {e}")

    def save(self, token: str, user: User, expires_at: datetime) -> None:
        """
        Persist a new session after a successful login.

        Raises:
            SessionStorageError: If the token or preferences cannot be written
        """
        try:
            self.secure_storage.set_password(self.service_name, TOKEN_KEY, token)
        except KeyringError as e:
            logger.error(f"Error saving token: {e}")
            raise SessionStorageError("Could not save session", details={'error': str(e)})

        try:
            self._update_preferences(**{
                USER_KEY: user.to_map(),
                TOKEN_EXPIRY_KEY: expires_at.isoformat(),
                IS_LOGGED_IN_KEY: True,
            })
        except (OSError, TypeError) as e:
            logger.error(f"Error saving session: {e}")
            # A token without its user and expiry is not a session
            self._delete_token()
            raise SessionStorageError("Could not save session", details={'error': str(e)})
        logger.info(f"Session saved for {user.email}")

    save_session = save

    def get_token(self) -> Optional[str]:
        try:
            return self.secure_storage.get_password(self.service_name, TOKEN_KEY)
        except KeyringError as e:
            logger.error(f"Error reading token: {e}")
            return None

    def get_current_user(self) -> Optional[User]:
        try:
            data = self._read_preferences().get(USER_KEY)
            return User.from_map(data) if data else None
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Error reading current user: {e}")
            return None

    def get_token_expiry(self) -> Optional[datetime]:
        try:
            value = self._read_preferences().get(TOKEN_EXPIRY_KEY)
            return DateFormatter.parse_datetime(value) if value else None
        except (OSError, ValueError) as e:
            logger.error(f"Error reading token expiry: {e}")
            return None

    def is_logged_in(self) -> bool:
        """
        Whether a session exists and has not expired.

        An expired session is cleared as a side effect.
        """
        try:
            if not self._read_preferences().get(IS_LOGGED_IN_KEY, False):
                return False
        except (OSError, ValueError) as e:
            logger.error(f"Error checking login state: {e}")
            return False

        expiry = self.get_token_expiry()
        if expiry is None:
            return False

        if datetime.now(expiry.tzinfo) > expiry:
            logger.info("Session expired, clearing it")
            self.clear()
            return False
        return True

    def clear(self) -> None:
        """Remove the token, user, expiry and sync flag"""
        self._delete_token()

        try:
            self._update_preferences(**{
                USER_KEY: None,
                TOKEN_EXPIRY_KEY: None,
                IS_LOGGED_IN_KEY: False,
                SYNC_DONE_KEY: None,
            })
        except OSError as e:
            logger.error(f"Error clearing session: {e}")
            return
        logger.info("Session cleared")

    clear_session = clear

    def update_token(self, token: str, expires_at: datetime) -> None:
        """
        Replace the token after a refresh.

        Raises:
            SessionStorageError: If the token or expiry cannot be written
        """
        try:
            self.secure_storage.set_password(self.service_name, TOKEN_KEY, token)
            self._update_preferences(**{TOKEN_EXPIRY_KEY: expires_at.isoformat()})
        except (KeyringError, OSError) as e:
            logger.error(f"Error updating token: {e}")
            raise SessionStorageError("Could not update token", details={'error': str(e)})
        logger.info("Token updated")

    def mark_sync_done(self) -> None:
        try:
            self._update_preferences(**{SYNC_DONE_KEY: True})
        except OSError as e:
            logger.error(f"Error marking sync as done: {e}")

    def is_sync_done(self) -> bool:
        try:
            return bool(self._read_preferences().get(SYNC_DONE_KEY, False))
        except (OSError, ValueError) as e:
            logger.error(f"Error reading sync flag: {e}")
            return False

    def clear_sync_flag(self) -> None:
        try:
            self._update_preferences(**{SYNC_DONE_KEY: None})
        except OSError as e:
            logger.error(f"Error clearing sync flag: {e}")

    def session_info(self) -> Dict[str, Any]:
        """Summary of the stored session without exposing the token"""
        user = self.get_current_user()
        expiry = self.get_token_expiry()
        return {
            'logged_in': self.is_logged_in(),
            'email': user.email if user else None,
            'user_id': user.id if user else None,
            'expires_at': expiry.isoformat() if expiry else None,
            'has_token': self.get_token() is not None,
        }
