"""
Expense data models.

This module contains the Pydantic model for a single expense, including
credit card purchases split into installments.
"""

from pydantic import BaseModel, Field
from typing import Dict, Optional, Annotated, Any
from datetime import datetime

from ..utils.date_utils import DateFormatter


class Expense(BaseModel):
    """Model for an expense owned by a user"""
    id: Annotated[Optional[int], Field(None, description="Expense ID")]
    user_id: Annotated[int, Field(description="Owner user ID")]
    amount: Annotated[float, Field(description="Expense amount")]
    description: Annotated[str, Field(description="Expense description")]
    date: Annotated[datetime, Field(description="When the expense happened")]
    category_id: Annotated[int, Field(description="Associated category ID")]

    # Credit card installments
    is_credit_card: Annotated[bool, Field(default=False, description="Paid with a credit card")]
    total_installments: Annotated[Optional[int], Field(None, description="Total number of installments")]
    current_installment: Annotated[Optional[int], Field(None, description="This installment's number")]
    credit_card_group_id: Annotated[Optional[str], Field(None, description="Groups the installments of one purchase")]
    is_paid: Annotated[bool, Field(default=False, description="Whether this installment was paid")]

    @classmethod
    def from_map(cls, data: Dict[str, Any]) -> 'Expense':
        """Create instance from a SQL row, where booleans are stored as 0/1"""
        return cls(
            id=data.get('id'),
            user_id=data['user_id'],
            amount=float(data['amount']),
            description=data['description'],
            date=DateFormatter.parse_datetime(data['date']),
            category_id=data['category_id'],
            is_credit_card=data.get('is_credit_card') == 1,
            total_installments=data.get('total_installments'),
            current_installment=data.get('current_installment'),
            credit_card_group_id=data.get('credit_card_group_id'),
            is_paid=data.get('is_paid') == 1
        )

    @classmethod
    def from_firestore_map(cls, data: Dict[str, Any]) -> 'Expense':
        """Create instance from a Firestore document, which keeps real booleans"""
        return cls(
            id=data.get('id'),
            user_id=data['user_id'],
            amount=float(data['amount']),
            description=data['description'],
            date=DateFormatter.parse_datetime(data['date']),
            category_id=data['category_id'],
            is_credit_card=data.get('is_credit_card') or False,
            total_installments=data.get('total_installments'),
            current_installment=data.get('current_installment'),
            credit_card_group_id=data.get('credit_card_group_id'),
            is_paid=data.get('is_paid') or False
        )

    def to_map(self) -> Dict[str, Any]:
        """Convert to a SQL row"""
        data = self.to_firestore_map()
        data['is_credit_card'] = 1 if self.is_credit_card else 0
        data['is_paid'] = 1 if self.is_paid else 0
        return data

    def to_firestore_map(self) -> Dict[str, Any]:
        """Convert to a Firestore document"""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'amount': self.amount,
            'description': self.description,
            'date': self.date.isoformat(),
            'category_id': self.category_id,
            'is_credit_card': self.is_credit_card,
            'total_installments': self.total_installments,
            'current_installment': self.current_installment,
            'credit_card_group_id': self.credit_card_group_id,
            'is_paid': self.is_paid
        }

    def copy_with(self, **changes: Any) -> 'Expense':
        """Copy with the given non-None fields replaced"""
        return self.model_copy(update={k: v for k, v in changes.items() if v is not None})

    @property
    def is_installment(self) -> bool:
        return (self.is_credit_card
                and self.current_installment is not None
                and self.total_installments is not None)

    @property
    def display_description(self) -> str:
        """Description with the installment number appended, if any"""
        if self.is_installment:
            return f"{self.description} (Installment {self.current_installment}/{self.total_installments})"
        return self.description
