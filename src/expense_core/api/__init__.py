"""
API clients for interacting with external services.

This module provides the LLM gateway clients and the error hierarchy.
"""

# Import error classes
from .errors import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    SessionStorageError
)

# Import request handler
from .request_handler import RequestHandler

# Import base client
from .base_client import BaseAPIClient

# Import gateway clients
from .openrouter_client import OpenRouterClient
from .model_fallback_client import ModelFallbackClient, DEFAULT_MODELS

__all__ = [
    # Base classes
    'BaseAPIClient',
    'RequestHandler',

    # Error classes
    'APIError',
    'AuthenticationError',
    'ConfigurationError',
    'SessionStorageError',

    # Gateway clients
    'OpenRouterClient',
    'ModelFallbackClient',
    'DEFAULT_MODELS'
]
