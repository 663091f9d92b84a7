"""
Utility functions and classes for the expense assistant.

This module provides utilities for reading gateway responses and for
date handling.
"""

from .api_utils import (
    InvalidChatResponse,
    RATE_LIMIT_STATUS_CODES,
    build_chat_payload,
    extract_chat_content,
    extract_error_message
)
from .date_utils import DateFormatter

__all__ = [
    # API utilities
    'InvalidChatResponse',
    'RATE_LIMIT_STATUS_CODES',
    'build_chat_payload',
    'extract_chat_content',
    'extract_error_message',

    # Date utilities
    'DateFormatter'
]
