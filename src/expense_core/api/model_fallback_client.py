"""
Model fallback client for chat completions.

This module sends a prompt to a ranked list of models, moving on to the
next model whenever the current one cannot answer, and reports the outcome
as a ChatResult instead of raising.
"""

import logging
from typing import List, Optional, Sequence, Union

import requests

from .openrouter_client import OpenRouterClient
from ..models.chat import (
    ChatAttempt,
    ChatErrorKind,
    ChatFailure,
    ChatRequest,
    ChatResult,
    ChatSuccess
)
from ..utils.api_utils import (
    InvalidChatResponse,
    RATE_LIMIT_STATUS_CODES,
    extract_chat_content,
    extract_error_message
)

logger = logging.getLogger(__name__)

# Models in order of preference
DEFAULT_MODELS = (
    'tngtech/deepseek-r1t-chimera:free',
    'mistralai/mistral-small-3.1-24b-instruct:free',
    'qwen/qwen3-4b:free',
)

DEFAULT_TIMEOUT = 60.0

EXHAUSTED_MESSAGE = 'No more models available to try'


class ModelFallbackClient:
    """
    Sends chat requests through a fixed, ordered chain of models.

    The client holds no per-call state: every call to `send` walks the
    chain from the first model with its own attempt list, so one instance
    can serve concurrent callers.
    """

    def __init__(self,
                 client: OpenRouterClient,
                 models: Sequence[str] = DEFAULT_MODELS,
                 timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize the fallback client.

        Args:
            client: Transport used for each attempt
            models: Model identifiers, highest priority first
            timeout: Per-attempt timeout in seconds
        """
        self.client = client
        self.models = tuple(models)
        self.timeout = timeout

    def send(self, system_prompt: str, user_message: str) -> ChatResult:
        """
        Send a prompt, falling back through the model chain.

        Args:
            system_prompt: Instructions for the model
            user_message: User content

        Returns:
            ChatResult: ChatSuccess with the first answer, or ChatFailure
            describing the terminal state
        """
        request = ChatRequest(system_prompt=system_prompt, user_message=user_message)
        attempts: List[ChatAttempt] = []

        for index, model in enumerate(self.models):
            outcome = self._attempt(model, request)
            if isinstance(outcome, ChatSuccess):
                logger.info(f"Response obtained from model {model}")
                return outcome

            attempts.append(outcome)
            if index < len(self.models) - 1:
                logger.warning(
                    f"Model {model} failed ({outcome.kind.value}: {outcome.detail}), trying next model"
                )

        return self._final_failure(attempts)

    def _attempt(self, model: str, request: ChatRequest) -> Union[ChatSuccess, ChatAttempt]:
        """Run a single attempt against one model"""
        logger.info(f"Trying model: {model}")

        try:
            response = self.client.chat_completion(model, request, timeout=self.timeout)
        except requests.Timeout as e:
            logger.error(f"Timeout calling model {model}: {e}")
            return ChatAttempt(model=model, kind=ChatErrorKind.TIMEOUT,
                               detail=f"Connection error: timeout after {self.timeout:g}s")
        except requests.RequestException as e:
            logger.error(f"Request error calling model {model}: {e}")
            return ChatAttempt(model=model, kind=ChatErrorKind.TRANSPORT_ERROR,
                               detail=f"Connection error: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error calling model {model}")
            return ChatAttempt(model=model, kind=ChatErrorKind.TRANSPORT_ERROR,
                               detail=f"Connection error: {e}")

        status_code = response.status_code
        logger.debug(f"Gateway response status for {model}: {status_code}")

        if status_code == 200:
            try:
                text = extract_chat_content(response)
            except InvalidChatResponse as e:
                logger.error(f"Invalid response from model {model}: {e.message}")
                return ChatAttempt(model=model, kind=e.kind, detail=e.message, status_code=status_code)
            return ChatSuccess(text=text, model=model)

        if status_code in RATE_LIMIT_STATUS_CODES:
            logger.warning(f"Model {model} is unavailable (HTTP {status_code})")
            return ChatAttempt(model=model, kind=ChatErrorKind.RATE_LIMITED,
                               detail=f"Model {model} unavailable (HTTP {status_code})",
                               status_code=status_code)

        message = extract_error_message(response)
        logger.error(f"Error from model {model} (HTTP {status_code}): {message}")
        return ChatAttempt(model=model, kind=ChatErrorKind.BACKEND_ERROR,
                           detail=message, status_code=status_code)

    def _final_failure(self, attempts: List[ChatAttempt]) -> ChatFailure:
        """Turn the attempt history into the terminal failure"""
        last: Optional[ChatAttempt] = attempts[-1] if attempts else None

        if last is None or last.kind == ChatErrorKind.RATE_LIMITED:
            logger.error(EXHAUSTED_MESSAGE)
            return ChatFailure(kind=ChatErrorKind.EXHAUSTED, message=EXHAUSTED_MESSAGE, attempts=attempts)

        logger.error(f"All models failed, last error: {last.detail}")
        return ChatFailure(kind=last.kind, message=last.detail, attempts=attempts)
