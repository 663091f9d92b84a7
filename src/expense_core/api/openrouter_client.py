"""
OpenRouter chat completions client.

This module provides the transport for one chat completion attempt against
an OpenRouter-compatible gateway.
"""

import logging
from typing import Optional

import requests

from .base_client import BaseAPIClient, DEFAULT_API_URL, DEFAULT_TIMEOUT
from ..models.chat import ChatRequest
from ..utils.api_utils import build_chat_payload

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_ENDPOINT = 'chat/completions'
DEFAULT_REFERER = 'http://localhost:8080'
DEFAULT_TITLE = 'Expense Assistant'


class OpenRouterClient(BaseAPIClient):
    """
    Client for the chat completions endpoint.

    Adds the attribution headers the gateway expects (referrer URL and
    client title) on top of the bearer credential.
    """

    def __init__(self,
                 api_key: str,
                 base_url: str = DEFAULT_API_URL,
                 timeout: float = DEFAULT_TIMEOUT,
                 referer: str = DEFAULT_REFERER,
                 title: str = DEFAULT_TITLE,
                 session: Optional[requests.Session] = None):
        super().__init__(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            extra_headers={
                'HTTP-Referer': referer,
                'X-Title': title
            },
            session=session
        )

    def chat_completion(self,
                        model: str,
                        request: ChatRequest,
                        timeout: Optional[float] = None) -> requests.Response:
        """
        Send one chat completion request to a single model.

        Args:
            model: Model identifier
            request: System prompt and user message
            timeout: Request timeout (overrides default)

        Returns:
            requests.Response: Raw response, whatever its status
        """
        payload = build_chat_payload(model, request)
        return self.post(CHAT_COMPLETIONS_ENDPOINT, payload, timeout=timeout)
