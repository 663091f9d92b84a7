"""
API utilities for chat completion requests and responses.

This module provides helpers for reading the gateway's chat completion
responses and error bodies.
"""

import json
import logging
from typing import Any, Dict

import requests

from ..models.chat import ChatErrorKind, ChatRequest

# Setup logger
logger = logging.getLogger(__name__)

# Statuses meaning "this model is busy or unavailable, try the next one"
RATE_LIMIT_STATUS_CODES = frozenset({429, 503})

DEFAULT_ERROR_MESSAGE = "Unknown error"


class InvalidChatResponse(ValueError):
    """Raised when a 200 response does not carry a usable answer"""
    def __init__(self, kind: ChatErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)


def build_chat_payload(model: str, request: ChatRequest) -> Dict[str, Any]:
    """
    Build the JSON body for a chat completion request

    Args:
        model (str): Model identifier
        request (ChatRequest): Prompt to send

    Returns:
        Dict[str, Any]: Request body
    """
    return {
        "model": model,
        "messages": request.to_messages(),
    }


def extract_chat_content(response: requests.Response) -> str:
    """
    Extract choices[0].message.content from a successful response

    Args:
        response (requests.Response): Response with status 200

    Returns:
        str: The model's answer

    Raises:
        InvalidChatResponse: If the body is empty, not JSON, or lacks content
    """
    body = (response.text or "").strip()
    if not body:
        raise InvalidChatResponse(ChatErrorKind.EMPTY_BODY, "Empty response from server")

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        logger.debug(f"Response text: {body[:500]}...")
        raise InvalidChatResponse(ChatErrorKind.MALFORMED_JSON, f"Error processing response: {e}")

    if not isinstance(data, dict):
        raise InvalidChatResponse(ChatErrorKind.MALFORMED_JSON, "Error processing response: unexpected JSON structure")

    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        raise InvalidChatResponse(ChatErrorKind.MISSING_CONTENT, "Server response has no valid content")

    choice = choices[0]
    message = choice.get("message") if isinstance(choice, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        raise InvalidChatResponse(ChatErrorKind.MISSING_CONTENT, "Server response has no content")

    return content


def extract_error_message(response: requests.Response, default: str = DEFAULT_ERROR_MESSAGE) -> str:
    """
    Extract error.message from an error response

    Args:
        response (requests.Response): Response object
        default (str): Message used when the body carries none

    Returns:
        str: Error message
    """
    try:
        data = response.json()
    except ValueError:
        return default

    if not isinstance(data, dict):
        return default

    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return default
