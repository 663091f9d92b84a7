"""
Prompt templates for the expense assistant's AI features.
"""

from .base_prompts import (
    BasePrompt,
    DEFAULT_LANGUAGE
)

from .expense_prompts import (
    ExpenseAnalysisPrompt,
    ExpenseQuestionPrompt,
    ExpenseForecastPrompt
)

__all__ = [
    # Base classes
    'BasePrompt',
    'DEFAULT_LANGUAGE',

    # Expense prompts
    'ExpenseAnalysisPrompt',
    'ExpenseQuestionPrompt',
    'ExpenseForecastPrompt'
]
