"""
Report data models.

This module contains models for monthly spending reports and the spending
summary handed to the AI analysis prompt.
"""

from pydantic import BaseModel, Field
from typing import Dict, Optional, Annotated
from datetime import datetime

MONTH_NAMES = (
    '', 'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December'
)


class SpendingSummary(BaseModel):
    """Model for the figures the expense analysis prompt is built from"""
    total_spent: Annotated[float, Field(description="Total spent in the period")]
    by_category: Annotated[Dict[str, float], Field(default_factory=dict, description="Spending by category name")]
    trends: Annotated[Dict[str, str], Field(default_factory=dict, description="Change vs previous month, e.g. '+12.5%'")]
    credit_card_debt: Annotated[float, Field(default=0.0, description="Unpaid credit card installments")]


class MonthlyReport(BaseModel):
    """Model for one month of spending with a comparison to the month before"""
    year: Annotated[int, Field(description="Report year")]
    month: Annotated[int, Field(ge=1, le=12, description="Report month (1-12)")]
    total: Annotated[float, Field(description="Total spent in the month")]
    expense_count: Annotated[int, Field(description="Number of expenses")]
    average_expense: Annotated[float, Field(description="Average expense amount")]
    category_totals: Annotated[Dict[int, float], Field(default_factory=dict, description="Total by category ID")]
    first_expense_date: Annotated[Optional[datetime], Field(None, description="Earliest expense in the month")]
    last_expense_date: Annotated[Optional[datetime], Field(None, description="Latest expense in the month")]

    # Comparison with the previous month
    previous_month_total: Annotated[Optional[float], Field(None, description="Previous month total")]
    change_percentage: Annotated[Optional[float], Field(None, description="Change vs previous month, in percent")]
    expense_count_change: Annotated[Optional[int], Field(None, description="Change in number of expenses")]

    # Top category of the month
    top_category_id: Annotated[Optional[int], Field(None, description="Category with the highest total")]
    top_category_amount: Annotated[Optional[float], Field(None, description="Total of the top category")]

    @property
    def month_name(self) -> str:
        return MONTH_NAMES[self.month]

    @property
    def has_increased(self) -> bool:
        return self.change_percentage is not None and self.change_percentage > 0

    @property
    def has_decreased(self) -> bool:
        return self.change_percentage is not None and self.change_percentage < 0

    @property
    def change_text(self) -> str:
        """Describe the change against the previous month"""
        if not self.change_percentage:
            return 'No change'

        direction = 'more than' if self.has_increased else 'less than'
        return f"{abs(self.change_percentage):.1f}% {direction} the previous month"

    @property
    def is_current_month(self) -> bool:
        now = datetime.now()
        return self.year == now.year and self.month == now.month

    def __str__(self) -> str:
        return f"MonthlyReport({self.month_name} {self.year}: ${self.total:.2f}, {self.expense_count} expenses)"
