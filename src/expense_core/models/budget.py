"""
Budget data models.

This module contains Pydantic models for monthly per-category budgets and
the status levels derived from how much of a budget has been spent.
"""

from enum import Enum
from pydantic import BaseModel, Field
from typing import Dict, Optional, Annotated, Any
from datetime import datetime

from ..utils.date_utils import DateFormatter


class BudgetStatus(str, Enum):
    """Spending level of a budget"""
    SAFE = "safe"            # 0-49% spent
    ON_TRACK = "on_track"    # 50-79% spent
    WARNING = "warning"      # 80-99% spent
    EXCEEDED = "exceeded"    # 100%+ spent

    @property
    def color_name(self) -> str:
        return _STATUS_COLORS[self]

    @property
    def message(self) -> str:
        return _STATUS_MESSAGES[self]


_STATUS_COLORS = {
    BudgetStatus.SAFE: 'green',
    BudgetStatus.ON_TRACK: 'yellow',
    BudgetStatus.WARNING: 'orange',
    BudgetStatus.EXCEEDED: 'red',
}

_STATUS_MESSAGES = {
    BudgetStatus.SAFE: 'Budget is safe',
    BudgetStatus.ON_TRACK: 'On track',
    BudgetStatus.WARNING: 'Careful! Close to the limit',
    BudgetStatus.EXCEEDED: 'Budget exceeded!',
}


class Budget(BaseModel):
    """Model for a monthly spending limit on one category"""
    id: Annotated[Optional[int], Field(None, description="Budget ID")]
    category_id: Annotated[int, Field(description="Category this budget limits")]
    user_id: Annotated[int, Field(description="Owner user ID")]
    amount: Annotated[float, Field(description="Budgeted amount")]
    month: Annotated[int, Field(ge=1, le=12, description="Budget month (1-12)")]
    year: Annotated[int, Field(description="Budget year")]
    created_at: Annotated[datetime, Field(description="Creation timestamp")]
    updated_at: Annotated[datetime, Field(description="Last update timestamp")]

    @classmethod
    def from_map(cls, data: Dict[str, Any]) -> 'Budget':
        """Create instance from a stored row"""
        return cls(
            id=data.get('id'),
            category_id=data['category_id'],
            user_id=data['user_id'],
            amount=float(data['amount']),
            month=data['month'],
            year=data['year'],
            created_at=DateFormatter.parse_datetime(data['created_at']),
            updated_at=DateFormatter.parse_datetime(data['updated_at'])
        )

    def to_map(self) -> Dict[str, Any]:
        """Convert to a storable row"""
        return {
            'id': self.id,
            'category_id': self.category_id,
            'user_id': self.user_id,
            'amount': self.amount,
            'month': self.month,
            'year': self.year,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat()
        }

    def copy_with(self, **changes: Any) -> 'Budget':
        """Copy with the given non-None fields replaced"""
        return self.model_copy(update={k: v for k, v in changes.items() if v is not None})

    @property
    def key(self) -> str:
        """Unique key combining category, month and year"""
        return f"{self.category_id}_{self.month}_{self.year}"

    @property
    def is_current_month(self) -> bool:
        now = datetime.now()
        return self.month == now.month and self.year == now.year

    def spent_percentage(self, spent_amount: float) -> float:
        """Percentage of the budget already spent"""
        if self.amount <= 0:
            return 0.0
        return (spent_amount / self.amount) * 100

    def remaining_amount(self, spent_amount: float) -> float:
        return self.amount - spent_amount

    def is_exceeded(self, spent_amount: float) -> bool:
        return spent_amount > self.amount

    def status(self, spent_amount: float) -> BudgetStatus:
        """Classify the budget by the percentage spent"""
        percentage = self.spent_percentage(spent_amount)

        if percentage >= 100:
            return BudgetStatus.EXCEEDED
        elif percentage >= 80:
            return BudgetStatus.WARNING
        elif percentage >= 50:
            return BudgetStatus.ON_TRACK
        else:
            return BudgetStatus.SAFE
