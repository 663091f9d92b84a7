"""
Category data models.

This module contains the Pydantic model for expense categories.
"""

from pydantic import BaseModel, Field
from typing import Dict, Optional, Annotated, Any


class Category(BaseModel):
    """Model for an expense category (e.g. Food, Transport)"""
    id: Annotated[Optional[int], Field(None, description="Category ID")]
    name: Annotated[str, Field(description="Category name")]
    icon: Annotated[str, Field(description="Material icon name")]
    color: Annotated[str, Field(description="Hex color string")]

    @classmethod
    def from_map(cls, data: Dict[str, Any]) -> 'Category':
        """Create instance from a stored row"""
        return cls(
            id=data.get('id'),
            name=data['name'],
            icon=data['icon'],
            color=data['color']
        )

    def to_map(self) -> Dict[str, Any]:
        """Convert to a storable row"""
        return {
            'id': self.id,
            'name': self.name,
            'icon': self.icon,
            'color': self.color
        }

    def copy_with(self, **changes: Any) -> 'Category':
        """Copy with the given non-None fields replaced"""
        return self.model_copy(update={k: v for k, v in changes.items() if v is not None})
