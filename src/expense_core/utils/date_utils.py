"""
Date utilities for handling date formats and conversions.

This module provides utilities for parsing stored timestamps and for the
month arithmetic used by reports and forecasts.
"""

import logging
from typing import List, Tuple, Union
from datetime import datetime, date, timedelta
import dateutil.parser
from dateutil.relativedelta import relativedelta

# Setup logger
logger = logging.getLogger(__name__)

DISPLAY_FORMAT = '%d/%m/%Y'
SHORT_DISPLAY_FORMAT = '%d/%m/%y'


class DateFormatter:
    """Utility class for date formatting and parsing"""

    @staticmethod
    def parse_datetime(value: Union[str, datetime, date]) -> datetime:
        """
        Parse an ISO-8601 string (or date) into a datetime

        Args:
            value: Value to parse

        Returns:
            datetime: Parsed datetime

        Raises:
            ValueError: If value cannot be parsed
        """
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        try:
            return dateutil.parser.isoparse(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Date parsing error: {e}")
            raise ValueError(f"Invalid date string: {value}")

    @staticmethod
    def format_display(value: Union[datetime, date], short: bool = False) -> str:
        """
        Format a date the way reports show it (dd/mm/YYYY)

        Args:
            value: Date to format
            short: Use a two digit year

        Returns:
            str: Formatted date
        """
        return value.strftime(SHORT_DISPLAY_FORMAT if short else DISPLAY_FORMAT)

    @staticmethod
    def get_month_bounds(year: int, month: int) -> Tuple[date, date]:
        """
        Get the first and last day of a month

        Args:
            year: Year
            month: Month (1-12)

        Returns:
            tuple: (first_day, last_day) as date objects
        """
        first_day = date(year, month, 1)
        last_day = first_day + relativedelta(months=1) - timedelta(days=1)
        return (first_day, last_day)

    @staticmethod
    def previous_month(year: int, month: int) -> Tuple[int, int]:
        """Return (year, month) of the month before the given one"""
        previous = date(year, month, 1) - relativedelta(months=1)
        return (previous.year, previous.month)

    @staticmethod
    def last_months(year: int, month: int, count: int) -> List[Tuple[int, int]]:
        """
        Get the `count` months ending at (year, month), oldest first

        Args:
            year: Year of the most recent month
            month: Most recent month (1-12)
            count: Number of months

        Returns:
            List[Tuple[int, int]]: (year, month) pairs
        """
        anchor = date(year, month, 1)
        months = []
        for offset in range(count - 1, -1, -1):
            current = anchor - relativedelta(months=offset)
            months.append((current.year, current.month))
        return months

    @staticmethod
    def in_month(value: Union[datetime, date], year: int, month: int) -> bool:
        """Whether the value falls inside the given month"""
        return value.year == year and value.month == month
