"""
Export service for expense data.

This module renders expenses as CSV text or as a PDF report and writes
exports to disk.
"""

import csv
import io
import logging
import os
from collections import OrderedDict
from datetime import datetime
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from ..models.category import Category
from ..models.expense import Expense
from ..utils.date_utils import DateFormatter

logger = logging.getLogger(__name__)

UNCATEGORIZED = 'Uncategorized'

CSV_HEADER = [
    'Date',
    'Description',
    'Amount',
    'Category',
    'Credit Card',
    'Current Installment',
    'Total Installments',
    'Paid',
]

DESCRIPTION_LIMIT = 30


def _yes_no(value: bool) -> str:
    return 'Yes' if value else 'No'


def _money(value: float, decimals: int = 2) -> str:
    return f"${value:,.{decimals}f}"


def _latin1(text: str) -> str:
    """Core PDF fonts only cover latin-1"""
    return text.encode('latin-1', 'replace').decode('latin-1')


class ExportService:
    """Service for exporting expenses to CSV and PDF"""

    def __init__(self, directory: str = 'exports'):
        """
        Initialize the export service.

        Args:
            directory: Default directory for saved exports
        """
        self.directory = directory

    @staticmethod
    def _category_name(expense: Expense, categories: Mapping[int, Category]) -> str:
        category = categories.get(expense.category_id)
        return category.name if category else UNCATEGORIZED

    def to_csv(self, expenses: Sequence[Expense], categories: Mapping[int, Category]) -> str:
        """
        Render expenses as CSV.

        Args:
            expenses: Expenses to export
            categories: Categories by ID

        Returns:
            str: CSV text with a header row
        """
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(CSV_HEADER)
        for expense in expenses:
            writer.writerow([
                DateFormatter.format_display(expense.date),
                expense.description,
                str(expense.amount),
                self._category_name(expense, categories),
                _yes_no(expense.is_credit_card),
                '' if expense.current_installment is None else str(expense.current_installment),
                '' if expense.total_installments is None else str(expense.total_installments),
                _yes_no(expense.is_paid),
            ])
        logger.info(f"Exported {len(expenses)} expenses to CSV")
        return output.getvalue()

    def category_breakdown(self,
                           expenses: Sequence[Expense],
                           categories: Mapping[int, Category]) -> "OrderedDict[str, Tuple[int, float]]":
        """Count and total per category name, in first-seen order"""
        breakdown: "OrderedDict[str, Tuple[int, float]]" = OrderedDict()
        for expense in expenses:
            name = self._category_name(expense, categories)
            count, total = breakdown.get(name, (0, 0.0))
            breakdown[name] = (count + 1, total + expense.amount)
        return breakdown

    @staticmethod
    def _status(expense: Expense) -> str:
        if not expense.is_credit_card:
            return 'Regular'
        status = f"Installment {expense.current_installment}/{expense.total_installments}"
        if expense.is_paid:
            status += ' (Paid)'
        return status

    @staticmethod
    def _table_row(pdf: FPDF, widths: List[float], values: List[str], height: float, fill: bool = False) -> None:
        for width, value in zip(widths, values):
            pdf.cell(width, height, _latin1(value), border=1, fill=fill)
        pdf.ln(height)

    def to_pdf(self,
               expenses: Sequence[Expense],
               categories: Mapping[int, Category],
               title: str,
               start_date: Optional[datetime] = None,
               end_date: Optional[datetime] = None) -> bytes:
        """
        Render an expense report as PDF.

        The report has the title, the period when both dates are given,
        an executive summary, a per-category table and a detail table.

        Args:
            expenses: Expenses to include
            categories: Categories by ID
            title: Report title
            start_date: Period start
            end_date: Period end

        Returns:
            bytes: The PDF document
        """
        total = sum(e.amount for e in expenses)
        credit_card = [e for e in expenses if e.is_credit_card]
        paid_installments = [e for e in credit_card if e.is_paid]
        average = total / len(expenses) if expenses else 0.0

        pdf = FPDF(format='A4')
        pdf.set_margins(12, 12)
        pdf.add_page()

        pdf.set_font('Helvetica', 'B', 20)
        pdf.cell(0, 12, _latin1(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        if start_date is not None and end_date is not None:
            pdf.set_font('Helvetica', 'I', 12)
            period = f"Period: {DateFormatter.format_display(start_date)} - {DateFormatter.format_display(end_date)}"
            pdf.cell(0, 8, period, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(6)

        pdf.set_font('Helvetica', 'B', 14)
        pdf.cell(0, 10, 'Executive Summary', new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font('Helvetica', '', 11)
        for line in (
            f"Total expenses: {len(expenses)}",
            f"Total amount: {_money(total)}",
            f"Regular expenses: {len(expenses) - len(credit_card)}",
            f"Credit card installments: {len(credit_card)}",
            f"Paid installments: {len(paid_installments)}",
            f"Average per expense: {_money(average)}",
        ):
            pdf.cell(0, 7, line, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(6)

        pdf.set_font('Helvetica', 'B', 14)
        pdf.cell(0, 10, 'Summary by Category', new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        widths = [70.0, 35.0, 40.0, 35.0]
        pdf.set_fill_color(230, 230, 230)
        pdf.set_font('Helvetica', 'B', 10)
        self._table_row(pdf, widths, ['Category', 'Count', 'Total', 'Percentage'], 8, fill=True)
        pdf.set_font('Helvetica', '', 10)
        for name, (count, amount) in self.category_breakdown(expenses, categories).items():
            percentage = (amount / total * 100) if total else 0.0
            self._table_row(pdf, widths, [name, str(count), _money(amount), f"{percentage:.1f}%"], 8)
        pdf.ln(6)

        pdf.set_font('Helvetica', 'B', 14)
        pdf.cell(0, 10, 'Expense Detail', new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        widths = [22.0, 62.0, 28.0, 36.0, 38.0]
        pdf.set_font('Helvetica', 'B', 9)
        self._table_row(pdf, widths, ['Date', 'Description', 'Amount', 'Category', 'Status'], 7, fill=True)
        pdf.set_font('Helvetica', '', 8)
        for expense in expenses:
            description = expense.description
            if len(description) > DESCRIPTION_LIMIT:
                description = description[:DESCRIPTION_LIMIT] + '...'
            self._table_row(pdf, widths, [
                DateFormatter.format_display(expense.date, short=True),
                description,
                _money(expense.amount, decimals=0),
                self._category_name(expense, categories),
                self._status(expense),
            ], 7)

        logger.info(f"Generated PDF report '{title}' with {len(expenses)} expenses")
        return bytes(pdf.output())

    def save(self, data: Union[str, bytes], file_name: str, directory: Optional[str] = None) -> str:
        """
        Write an export to disk.

        Args:
            data: CSV text or PDF bytes
            file_name: Target file name
            directory: Target directory, defaults to the configured one

        Returns:
            str: Path of the written file
        """
        target_dir = directory or self.directory
        os.makedirs(target_dir, exist_ok=True)
        path = os.path.join(target_dir, file_name)
        if isinstance(data, str):
            with open(path, 'w', encoding='utf-8', newline='') as f:
                f.write(data)
        else:
            with open(path, 'wb') as f:
                f.write(data)
        logger.info(f"Export written to {path}")
        return path
