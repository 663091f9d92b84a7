"""
Core data models for the expense assistant.

This package contains Pydantic models for chat requests and results and
for the expense tracking domain.
"""

from .chat import (
    ChatAttempt,
    ChatErrorKind,
    ChatFailure,
    ChatRequest,
    ChatResult,
    ChatSuccess
)

from .category import Category

from .budget import (
    Budget,
    BudgetStatus
)

from .expense import Expense

from .user import (
    User,
    AuthResponse
)

from .division import (
    ExpenseDivision,
    Participant,
    Settlement
)

from .report import (
    MonthlyReport,
    SpendingSummary
)

__all__ = [
    # Chat models
    'ChatAttempt',
    'ChatErrorKind',
    'ChatFailure',
    'ChatRequest',
    'ChatResult',
    'ChatSuccess',

    # Category models
    'Category',

    # Budget models
    'Budget',
    'BudgetStatus',

    # Expense models
    'Expense',

    # User models
    'User',
    'AuthResponse',

    # Division models
    'ExpenseDivision',
    'Participant',
    'Settlement',

    # Report models
    'MonthlyReport',
    'SpendingSummary'
]
