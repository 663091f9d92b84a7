"""
Expense analysis service.

This module turns raw expenses into the figures the AI prompts and the
monthly history need: category totals, month-over-month trends,
credit card debt, question context and monthly reports.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from collections import defaultdict

from ..models.category import Category
from ..models.expense import Expense
from ..models.report import MonthlyReport, SpendingSummary
from ..utils.date_utils import DateFormatter

logger = logging.getLogger(__name__)

UNKNOWN_CATEGORY = 'Other'

CategoryLookup = Mapping[int, Category]


class ExpenseAnalysisService:
    """
    Service for summarizing expenses.

    All methods are pure functions of their arguments; the service holds
    no data of its own.
    """

    def __init__(self, unknown_category: str = UNKNOWN_CATEGORY):
        """
        Initialize the analysis service.

        Args:
            unknown_category: Name used for expenses whose category is unknown
        """
        self.unknown_category = unknown_category

    def category_name(self, expense: Expense, categories: CategoryLookup) -> str:
        category = categories.get(expense.category_id)
        return category.name if category else self.unknown_category

    def total(self, expenses: Iterable[Expense]) -> float:
        return sum(e.amount for e in expenses)

    def category_totals(self, expenses: Iterable[Expense], categories: CategoryLookup) -> Dict[str, float]:
        """
        Sum expenses by category name.

        Args:
            expenses: Expenses to group
            categories: Categories by ID

        Returns:
            Dict[str, float]: Total by category name, in first-seen order
        """
        totals: Dict[str, float] = {}
        for expense in expenses:
            name = self.category_name(expense, categories)
            totals[name] = totals.get(name, 0.0) + expense.amount
        return totals

    def month_over_month_trends(self,
                                current: Sequence[Expense],
                                previous: Sequence[Expense],
                                categories: CategoryLookup) -> Dict[str, str]:
        """
        Percentage change per category against the previous period.

        Only categories present in the current period that also had
        spending in the previous period get an entry.

        Returns:
            Dict[str, str]: e.g. {"Food": "+12.5%", "Transport": "-3.0%"}
        """
        current_totals = self.category_totals(current, categories)
        previous_totals = self.category_totals(previous, categories)

        trends = {}
        for name, current_total in current_totals.items():
            previous_total = previous_totals.get(name, 0.0)
            if previous_total > 0:
                change = ((current_total - previous_total) / previous_total) * 100
                sign = '+' if change > 0 else ''
                trends[name] = f"{sign}{change:.1f}%"
        return trends

    def credit_card_debt(self, expenses: Iterable[Expense]) -> float:
        """Sum of credit card expenses not yet paid"""
        return sum(e.amount for e in expenses if e.is_credit_card and not e.is_paid)

    def spending_summary(self,
                         current: Sequence[Expense],
                         previous: Sequence[Expense],
                         categories: CategoryLookup) -> SpendingSummary:
        """Build everything the analysis prompt needs in one pass"""
        summary = SpendingSummary(
            total_spent=self.total(current),
            by_category=self.category_totals(current, categories),
            trends=self.month_over_month_trends(current, previous, categories),
            credit_card_debt=self.credit_card_debt(current)
        )
        logger.debug(
            f"Spending summary: total={summary.total_spent:.2f}, "
            f"categories={len(summary.by_category)}, debt={summary.credit_card_debt:.2f}"
        )
        return summary

    def question_context(self,
                         expenses: Sequence[Expense],
                         categories: CategoryLookup,
                         recent: int = 5) -> Dict[str, Any]:
        """
        Build the data context sent along with a user question.

        Args:
            expenses: Expenses to describe, most recent first
            categories: Categories by ID
            recent: How many individual expenses to include

        Returns:
            Dict[str, Any]: total, per-category totals and recent expenses
        """
        return {
            'total_spent': self.total(expenses),
            'by_category': self.category_totals(expenses, categories),
            'recent_expenses': [
                {
                    'description': e.description,
                    'amount': e.amount,
                    'date': DateFormatter.format_display(e.date),
                    'category': self.category_name(e, categories),
                }
                for e in list(expenses)[:recent]
            ],
        }

    def expenses_in_month(self, expenses: Iterable[Expense], year: int, month: int) -> List[Expense]:
        return [e for e in expenses if DateFormatter.in_month(e.date, year, month)]

    def monthly_report(self,
                       expenses: Iterable[Expense],
                       year: int,
                       month: int,
                       previous: Optional[Iterable[Expense]] = None) -> Optional[MonthlyReport]:
        """
        Build the report for one month, compared with the month before.

        Args:
            expenses: Expenses containing the month (and the month before,
                unless `previous` is given)
            year: Report year
            month: Report month (1-12)
            previous: Expenses of the previous month, when already loaded

        Returns:
            Optional[MonthlyReport]: None when the month has no expenses
        """
        expenses = list(expenses)
        month_expenses = self.expenses_in_month(expenses, year, month)
        if not month_expenses:
            return None

        total = self.total(month_expenses)
        category_totals: Dict[int, float] = defaultdict(float)
        for expense in month_expenses:
            category_totals[expense.category_id] += expense.amount

        top_category_id, top_category_amount = max(category_totals.items(), key=lambda x: x[1])
        dates = sorted(e.date for e in month_expenses)

        if previous is None:
            previous_year, previous_month = DateFormatter.previous_month(year, month)
            previous_expenses = self.expenses_in_month(expenses, previous_year, previous_month)
        else:
            previous_expenses = list(previous)

        previous_total = None
        change_percentage = None
        expense_count_change = None
        if previous_expenses:
            previous_total = self.total(previous_expenses)
            expense_count_change = len(month_expenses) - len(previous_expenses)
            if previous_total > 0:
                change_percentage = ((total - previous_total) / previous_total) * 100

        return MonthlyReport(
            year=year,
            month=month,
            total=total,
            expense_count=len(month_expenses),
            average_expense=total / len(month_expenses),
            category_totals=dict(category_totals),
            first_expense_date=dates[0],
            last_expense_date=dates[-1],
            previous_month_total=previous_total,
            change_percentage=change_percentage,
            expense_count_change=expense_count_change,
            top_category_id=top_category_id,
            top_category_amount=top_category_amount
        )

    def monthly_totals(self, expenses: Iterable[Expense], year: int, month: int, months: int = 3) -> List[float]:
        """Total per month for the `months` months ending at (year, month), oldest first"""
        expenses = list(expenses)
        return [
            self.total(self.expenses_in_month(expenses, y, m))
            for y, m in DateFormatter.last_months(year, month, months)
        ]

    def category_history(self,
                         expenses: Iterable[Expense],
                         categories: CategoryLookup,
                         year: int,
                         month: int,
                         months: int = 3) -> Dict[str, List[float]]:
        """
        Monthly totals per category name, oldest first.

        Months without spending in a category are 0.0.
        """
        expenses = list(expenses)
        periods = DateFormatter.last_months(year, month, months)

        history: Dict[str, List[float]] = {}
        for index, (period_year, period_month) in enumerate(periods):
            month_expenses = self.expenses_in_month(expenses, period_year, period_month)
            for name, amount in self.category_totals(month_expenses, categories).items():
                series = history.setdefault(name, [0.0] * len(periods))
                series[index] = amount
        return history

    def forecast_inputs(self,
                        expenses: Iterable[Expense],
                        categories: CategoryLookup,
                        year: int,
                        month: int,
                        months: int = 3) -> Tuple[List[float], Dict[str, List[float]]]:
        """
        Monthly totals and per-category monthly totals for a forecast.

        Args:
            expenses: Expenses to aggregate
            categories: Categories by ID
            year: Year of the most recent month
            month: Most recent month (1-12)
            months: How many months to include

        Returns:
            Tuple: (totals oldest first, {category name: totals oldest first})
        """
        expenses = list(expenses)
        return (
            self.monthly_totals(expenses, year, month, months),
            self.category_history(expenses, categories, year, month, months)
        )
