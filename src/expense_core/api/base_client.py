"""
Base API client for the LLM gateway.

This module provides the foundation for HTTP interactions with the
gateway, handling authentication headers and the shared session.
"""

import logging
import os
from typing import Any, Dict, Optional

import requests

from .errors import ConfigurationError
from .request_handler import RequestHandler

# Setup logger
logger = logging.getLogger(__name__)

# Load configuration from environment variables with defaults
DEFAULT_API_URL = os.environ.get('OPENROUTER_BASE_URL', 'https://openrouter.ai/api/v1')
DEFAULT_TIMEOUT = float(os.environ.get('OPENROUTER_TIMEOUT', '60'))


class BaseAPIClient:
    """
    Base client for interacting with a bearer-token JSON API.

    This class provides the foundation for all API interactions, handling:
    - Authentication
    - Default headers
    - Request execution through a RequestHandler
    """

    def __init__(self,
                 api_key: str,
                 base_url: str = DEFAULT_API_URL,
                 timeout: float = DEFAULT_TIMEOUT,
                 extra_headers: Optional[Dict[str, str]] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize the API client.

        Args:
            api_key: API key sent as a bearer credential
            base_url: Base URL for the API
            timeout: Request timeout in seconds
            extra_headers: Headers added to every request
            session: Optional pre-built session (tests inject one)
        """
        if not api_key:
            raise ConfigurationError("API key is required")

        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

        # Setup session with default headers
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        })
        if extra_headers:
            self.session.headers.update(extra_headers)

        # Initialize request handler
        self.request_handler = RequestHandler(
            session=self.session,
            base_url=self.base_url,
            timeout=self.timeout
        )

        logger.debug(f"Initialized API client with base URL: {self.base_url}")

    def post(self,
             endpoint: str,
             data: Dict[str, Any],
             headers: Optional[Dict[str, Any]] = None,
             timeout: Optional[float] = None) -> requests.Response:
        """
        Make a POST request to the API.

        Args:
            endpoint: API endpoint
            data: Request body data
            headers: Additional headers
            timeout: Request timeout

        Returns:
            requests.Response: Raw response
        """
        return self.request_handler.make_request('POST', endpoint, data, headers, timeout)

    def close(self) -> None:
        """Close the underlying HTTP session"""
        self.session.close()
