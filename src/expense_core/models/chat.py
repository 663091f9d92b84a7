"""
Chat data models for the LLM gateway.

This module contains the request and result models exchanged with the
model fallback client. Results are a tagged union so callers can tell a
transient failure from a terminal one without parsing strings.
"""

from enum import Enum
from typing import List, Optional, Annotated, Union, Literal

from pydantic import BaseModel, Field


class ChatErrorKind(str, Enum):
    """Reason a chat attempt (or the whole chain) failed"""
    TIMEOUT = "timeout"
    EMPTY_BODY = "empty_body"
    MALFORMED_JSON = "malformed_json"
    MISSING_CONTENT = "missing_content"
    RATE_LIMITED = "rate_limited"
    BACKEND_ERROR = "backend_error"
    TRANSPORT_ERROR = "transport_error"
    EXHAUSTED = "exhausted"


RETRYABLE_KINDS = frozenset({
    ChatErrorKind.TIMEOUT,
    ChatErrorKind.RATE_LIMITED,
    ChatErrorKind.TRANSPORT_ERROR,
    ChatErrorKind.EXHAUSTED,
})


class ChatRequest(BaseModel):
    """Model for a single chat prompt"""
    system_prompt: Annotated[str, Field(description="Instructions for the backend model")]
    user_message: Annotated[str, Field(description="User content")]

    def to_messages(self) -> List[dict]:
        """Build the ordered message list sent to the gateway"""
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.user_message},
        ]


class ChatAttempt(BaseModel):
    """Model for one failed attempt against a single model"""
    model: Annotated[str, Field(description="Model that was tried")]
    kind: Annotated[ChatErrorKind, Field(description="Why the attempt failed")]
    detail: Annotated[str, Field(description="Human readable failure detail")]
    status_code: Annotated[Optional[int], Field(None, description="HTTP status, if a response arrived")]


class ChatSuccess(BaseModel):
    """Model for a successful chat completion"""
    ok: Literal[True] = True
    text: Annotated[str, Field(description="Answer returned by the model")]
    model: Annotated[str, Field(description="Model that produced the answer")]

    @property
    def is_success(self) -> bool:
        return True


class ChatFailure(BaseModel):
    """Model for a chat request that no model could answer"""
    ok: Literal[False] = False
    kind: Annotated[ChatErrorKind, Field(description="Failure kind of the terminal state")]
    message: Annotated[str, Field(description="Human readable failure message")]
    attempts: Annotated[List[ChatAttempt], Field(default_factory=list, description="Attempts made, in order")]

    @property
    def is_success(self) -> bool:
        return False

    @property
    def retryable(self) -> bool:
        """Whether trying the whole request again later may succeed"""
        return self.kind in RETRYABLE_KINDS


ChatResult = Union[ChatSuccess, ChatFailure]
