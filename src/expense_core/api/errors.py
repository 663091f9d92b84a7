"""
Error classes for the expense assistant service layer.

This module provides the exception hierarchy used outside of the chat
fallback loop, which reports failures as values instead of raising.
"""

from typing import Dict, Any, Optional


class APIError(Exception):
    """Base exception for API errors"""
    def __init__(self, message: str, status_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(APIError):
    """Exception raised for authentication errors"""
    pass


class ConfigurationError(APIError):
    """Exception raised when required settings or credentials are missing"""
    pass


class SessionStorageError(APIError):
    """Exception raised when session data cannot be persisted"""
    pass
