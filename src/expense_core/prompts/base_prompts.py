"""
Base prompt management for the expense assistant's AI features.

This module provides the base class for prompt templates: a system message
plus a user message built from domain data.
"""

import logging
from typing import Any, Dict, Iterable

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "Spanish"

# Tone rules shared by every user-facing prompt
FRIENDLY_TONE_RULES = """CRITICAL INSTRUCTIONS:
- Address the user directly (you/your), never as "the user"
- Be warm and positive, not critical or alarmist
- Remember you are talking to a real person, not to data
- Be concise and direct
- Give specific numbers
- Suggest practical actions
- Use a conversational, friendly tone"""


def format_money(value: float) -> str:
    """Format an amount as $1234.50"""
    return f"${value:.2f}"


def format_bullets(items: Iterable[str]) -> str:
    """Render one '- item' line per entry"""
    return "\n".join(f"- {item}" for item in items)


class BasePrompt:
    """
    Base class for all prompt templates with common functionality.

    Subclasses provide the system message and implement
    `build_user_message`; this class appends the response language
    instruction to the system message.
    """

    system_message: str = ""

    def __init__(self, language: str = DEFAULT_LANGUAGE, version: str = "1.0"):
        """
        Initialize a base prompt template.

        Args:
            language: Language the model must answer in
            version: Version identifier for the prompt template
        """
        self.language = language
        self.version = version

    def build_system_prompt(self) -> str:
        """
        Build the complete system prompt.

        Returns:
            str: The system message with the language instruction
        """
        return f"{self.system_message}\n\nAlways answer in {self.language}."

    def build_user_message(self, **data: Any) -> str:
        """Build the user message from domain data"""
        raise NotImplementedError

    def build(self, **data: Any) -> Dict[str, str]:
        """
        Build both prompt parts.

        Returns:
            Dict[str, str]: system_prompt and user_message
        """
        return {
            "system_prompt": self.build_system_prompt(),
            "user_message": self.build_user_message(**data),
        }
