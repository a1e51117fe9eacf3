"""
Date calculation and manipulation service.
Handles the effective "today", entry date keys and calendar windows.
"""
from datetime import datetime, timedelta, date
from typing import Optional, Union
import calendar
import os
import re

from habit_tracker.constants import ENTRY_DATE_PATTERN, ENTRY_DATE_FORMAT
from habit_tracker.exceptions import ValidationException

DateLike = Union[date, str]


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def get_effective_date(
        day_start_time: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> date:
        """
        Get the effective current date based on a day start time.

        If a day start time is configured and the current time is before it,
        returns yesterday's date. Otherwise returns today's date.

        Example: If day_start_time = "04:00" and current time is 01:30,
        the effective date is still yesterday, so a late-night entry is
        logged against the day the user hasn't finished yet.

        Args:
            day_start_time: "HH:MM" string; falls back to the
                HABIT_TRACKER_DAY_START_TIME environment variable
            now: Current moment (defaults to datetime.now())

        Returns:
            Effective date (today or yesterday)
        """
        now = now or datetime.now()
        today = now.date()

        if day_start_time is None:
            day_start_time = os.getenv("HABIT_TRACKER_DAY_START_TIME")
        if not day_start_time:
            return today

        try:
            day_start_hour, day_start_minute = DateService.parse_time(day_start_time)
        except (ValueError, IndexError):
            return today

        current_minutes = now.hour * 60 + now.minute
        start_minutes = day_start_hour * 60 + day_start_minute

        if current_minutes < start_minutes:
            return today - timedelta(days=1)

        return today

    @staticmethod
    def parse_time(time_str: str) -> tuple[int, int]:
        """
        Parse time string into hour and minute.

        Args:
            time_str: Time string in "HH:MM" format

        Returns:
            Tuple of (hour, minute)

        Raises:
            ValueError: If time string is invalid
        """
        parts = time_str.split(":")
        hour = int(parts[0])
        minute = int(parts[1])
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValueError(f"Time out of range: {time_str}")
        return hour, minute

    @staticmethod
    def parse_entry_date(value: str, field: str = "date") -> date:
        """
        Parse a YYYY-MM-DD entry key into a date.

        Raises:
            ValidationException: If the string is not a real calendar day
                in YYYY-MM-DD form
        """
        if not isinstance(value, str) or not re.match(ENTRY_DATE_PATTERN, value):
            raise ValidationException(field, f"{value!r} is not in YYYY-MM-DD format")
        try:
            return datetime.strptime(value, ENTRY_DATE_FORMAT).date()
        except ValueError:
            raise ValidationException(field, f"{value!r} is not a valid calendar date")

    @staticmethod
    def format_date(value: date) -> str:
        """Format a date as an entry key"""
        return value.strftime(ENTRY_DATE_FORMAT)

    @staticmethod
    def to_date_key(value: DateLike, field: str = "date") -> str:
        """Normalize a date or YYYY-MM-DD string into a validated entry key"""
        if isinstance(value, datetime):
            return DateService.format_date(value.date())
        if isinstance(value, date):
            return DateService.format_date(value)
        DateService.parse_entry_date(value, field)
        return value

    @staticmethod
    def days_between(earlier: str, later: str) -> int:
        """Whole days from one entry key to another"""
        return (DateService.parse_entry_date(later) - DateService.parse_entry_date(earlier)).days

    @staticmethod
    def get_week_range(target_date: date) -> tuple[date, date]:
        """
        Get the Sunday-Saturday week containing a date.

        Args:
            target_date: Any day of the week

        Returns:
            Tuple of (sunday, saturday), both inclusive
        """
        # date.weekday(): Monday=0 ... Sunday=6
        days_since_sunday = (target_date.weekday() + 1) % 7
        week_start = target_date - timedelta(days=days_since_sunday)
        return week_start, week_start + timedelta(days=6)

    @staticmethod
    def get_month_range(target_date: date) -> tuple[date, date]:
        """Get the first and last day of the month containing a date"""
        month_start = target_date.replace(day=1)
        month_end = target_date.replace(day=DateService.days_in_month(target_date))
        return month_start, month_end

    @staticmethod
    def days_in_month(target_date: date) -> int:
        return calendar.monthrange(target_date.year, target_date.month)[1]
