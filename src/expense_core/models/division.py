"""
Expense division data models.

This module contains the Pydantic models for splitting a set of expenses
between participants by percentage, and for the transfers that settle it.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Annotated, Any
from datetime import datetime

from ..utils.date_utils import DateFormatter


class Participant(BaseModel):
    """Model for one person's share of a division"""
    id: Annotated[Optional[int], Field(None, description="Participant ID")]
    division_id: Annotated[int, Field(default=0, description="Division this share belongs to")]
    name: Annotated[str, Field(description="Participant name")]
    percentage: Annotated[float, Field(description="Share of the total, 0-100")]
    amount_owed: Annotated[float, Field(default=0.0, description="Share of the total in money")]

    @classmethod
    def from_map(cls, data: Dict[str, Any]) -> 'Participant':
        return cls(
            id=data.get('id'),
            division_id=data['division_id'],
            name=data['name'],
            percentage=float(data['percentage']),
            amount_owed=float(data['amount_owed'])
        )

    def to_map(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'division_id': self.division_id,
            'name': self.name,
            'percentage': self.percentage,
            'amount_owed': self.amount_owed
        }

    def copy_with(self, **changes: Any) -> 'Participant':
        """Copy with the given non-None fields replaced"""
        return self.model_copy(update={k: v for k, v in changes.items() if v is not None})


class ExpenseDivision(BaseModel):
    """Model for a group of expenses split between participants"""
    id: Annotated[Optional[int], Field(None, description="Division ID")]
    user_id: Annotated[int, Field(description="Owner user ID")]
    name: Annotated[str, Field(description="Division name, e.g. 'February 2025'")]
    created_at: Annotated[datetime, Field(description="When the division was created")]
    settled_at: Annotated[Optional[datetime], Field(None, description="When the division was settled")]
    total_amount: Annotated[float, Field(description="Total being split")]
    expense_ids: Annotated[List[int], Field(default_factory=list, description="IDs of the included expenses")]
    participants: Annotated[List[Participant], Field(default_factory=list, description="Shares of the total")]
    is_settled: Annotated[bool, Field(default=False, description="Whether the division was settled")]

    @classmethod
    def from_map(cls, data: Dict[str, Any]) -> 'ExpenseDivision':
        """
        Create instance from a SQL row.

        Expense IDs are stored comma separated and participants live in
        their own table, so they are not part of the row.
        """
        expense_ids = data.get('expense_ids') or ''
        return cls(
            id=data.get('id'),
            user_id=data['user_id'],
            name=data['name'],
            created_at=DateFormatter.parse_datetime(data['created_at']),
            settled_at=DateFormatter.parse_datetime(data['settled_at']) if data.get('settled_at') else None,
            total_amount=float(data['total_amount']),
            expense_ids=[int(i) for i in expense_ids.split(',')] if expense_ids else [],
            is_settled=data.get('is_settled') == 1
        )

    def to_map(self) -> Dict[str, Any]:
        """Convert to a SQL row"""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'created_at': self.created_at.isoformat(),
            'settled_at': self.settled_at.isoformat() if self.settled_at else None,
            'total_amount': self.total_amount,
            'expense_ids': ','.join(str(i) for i in self.expense_ids),
            'is_settled': 1 if self.is_settled else 0
        }

    def copy_with(self, **changes: Any) -> 'ExpenseDivision':
        """Copy with the given non-None fields replaced"""
        return self.model_copy(update={k: v for k, v in changes.items() if v is not None})


class Settlement(BaseModel):
    """Model for one transfer that settles part of a division"""
    debtor: Annotated[str, Field(description="Who pays")]
    creditor: Annotated[str, Field(description="Who receives")]
    amount: Annotated[float, Field(description="Amount transferred")]

    def __str__(self) -> str:
        return f"{self.debtor} pays {self.creditor} ${self.amount:.2f}"
