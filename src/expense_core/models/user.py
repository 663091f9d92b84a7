"""
User and authentication data models.

This module contains Pydantic models for application users and the
response returned by authentication providers.
"""

from pydantic import BaseModel, Field
from typing import Dict, Optional, Annotated, Any
from datetime import datetime

from ..utils.date_utils import DateFormatter


class User(BaseModel):
    """Model for an application user"""
    id: Annotated[int, Field(description="User ID")]
    email: Annotated[str, Field(description="Email address")]
    name: Annotated[Optional[str], Field(None, description="Display name")]
    created_at: Annotated[datetime, Field(description="Account creation timestamp")]

    @classmethod
    def from_map(cls, data: Dict[str, Any]) -> 'User':
        """Create instance from a stored map"""
        return cls(
            id=data['id'],
            email=data['email'],
            name=data.get('name'),
            created_at=DateFormatter.parse_datetime(data['created_at'])
        )

    def to_map(self) -> Dict[str, Any]:
        """Convert to a storable map"""
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'created_at': self.created_at.isoformat()
        }

    def copy_with(self, **changes: Any) -> 'User':
        """Copy with the given non-None fields replaced"""
        return self.model_copy(update={k: v for k, v in changes.items() if v is not None})


class AuthResponse(BaseModel):
    """Model for the outcome of a login, registration or token refresh"""
    token: Annotated[str, Field(description="Session token, empty on failure")]
    user: Annotated[User, Field(description="Authenticated user")]
    expires_at: Annotated[datetime, Field(description="Token expiry")]
    success: Annotated[bool, Field(default=True, description="Whether authentication succeeded")]
    message: Annotated[Optional[str], Field(None, description="Human readable outcome")]

    @classmethod
    def error(cls, message: str, email: str = '') -> 'AuthResponse':
        """Build a failed response with an empty token and placeholder user"""
        now = datetime.now()
        return cls(
            token='',
            user=User(id=0, email=email, created_at=now),
            expires_at=now,
            success=False,
            message=message
        )

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'AuthResponse':
        """Create instance from an API style JSON map"""
        return cls(
            token=data['token'],
            user=User.from_map(data['user']),
            expires_at=DateFormatter.parse_datetime(data['expires_at']),
            success=data.get('success', True),
            message=data.get('message')
        )

    def to_json(self) -> Dict[str, Any]:
        """Convert to an API style JSON map"""
        return {
            'token': self.token,
            'user': self.user.to_map(),
            'expires_at': self.expires_at.isoformat(),
            'success': self.success,
            'message': self.message
        }
