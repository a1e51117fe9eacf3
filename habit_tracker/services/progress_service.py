"""
Progress projections.
Read-only views computed from a habit's current entries: today's entry,
completion rate, weekly and monthly progress and date-range queries.
None of these ever mutate the habit.
"""
import math
from datetime import date
from typing import List, Optional

from habit_tracker.constants import (
    FREQUENCY_DAILY, FREQUENCY_WEEKLY, WEEKLY_PROGRESS_TARGETS, MAX_PROGRESS_PERCENT
)
from habit_tracker.domain import Habit, HabitEntry
from habit_tracker.schemas import HabitStats
from habit_tracker.services.date_service import DateService, DateLike


class ProgressService:
    """Service for read-only habit projections"""

    @staticmethod
    def get_entries_in_range(habit: Habit, start: DateLike, end: DateLike) -> List[HabitEntry]:
        """
        Get entries whose date falls within [start, end], both inclusive.

        Args:
            habit: Habit to read
            start: First day (date or YYYY-MM-DD)
            end: Last day (date or YYYY-MM-DD)

        Returns:
            Matching entries sorted ascending by date
        """
        start_key = DateService.to_date_key(start, "start")
        end_key = DateService.to_date_key(end, "end")
        return sorted(
            (entry for entry in habit.entries if start_key <= entry.date <= end_key),
            key=lambda entry: entry.date
        )

    @staticmethod
    def is_completed_on_date(habit: Habit, entry_date: DateLike) -> bool:
        key = DateService.to_date_key(entry_date)
        for entry in habit.entries:
            if entry.date == key:
                return entry.value >= habit.target_count
        return False

    @staticmethod
    def today_entry(habit: Habit, today: date) -> Optional[HabitEntry]:
        key = DateService.format_date(today)
        for entry in habit.entries:
            if entry.date == key:
                return entry
        return None

    @staticmethod
    def completion_rate(habit: Habit) -> int:
        """
        Percentage of entries that reached the target, rounded half up.

        Returns:
            0..100, 0 for a habit without entries
        """
        if not habit.entries:
            return 0
        completed = sum(1 for entry in habit.entries if entry.value >= habit.target_count)
        return math.floor(completed * 100 / len(habit.entries) + 0.5)

    @staticmethod
    def weekly_progress(habit: Habit, today: date) -> float:
        """
        Progress over the Sunday-Saturday week containing today.

        The target per week is 7 periods for daily habits, 1 for weekly and
        0.25 for monthly habits, so a single monthly completion in a week
        already reads as 100.
        """
        week_start, week_end = DateService.get_week_range(today)
        target = WEEKLY_PROGRESS_TARGETS[habit.frequency]
        return ProgressService._progress(habit, week_start, week_end, target)

    @staticmethod
    def monthly_progress(habit: Habit, today: date) -> float:
        """
        Progress over the calendar month containing today.

        The target per month is the number of days in the month for daily
        habits, ceil(days / 7) for weekly and 1 for monthly habits.
        """
        month_start, month_end = DateService.get_month_range(today)
        days_in_month = DateService.days_in_month(today)
        if habit.frequency == FREQUENCY_DAILY:
            target = days_in_month
        elif habit.frequency == FREQUENCY_WEEKLY:
            target = math.ceil(days_in_month / 7)
        else:
            target = 1
        return ProgressService._progress(habit, month_start, month_end, target)

    @staticmethod
    def _progress(habit: Habit, start: date, end: date, target: float) -> float:
        entries = ProgressService.get_entries_in_range(habit, start, end)
        completed = sum(1 for entry in entries if entry.value >= habit.target_count)
        return min(MAX_PROGRESS_PERCENT, completed / target * 100)

    @staticmethod
    def snapshot(habit: Habit, today: date) -> HabitStats:
        """Bundle the stored counters with every projection for one habit"""
        return HabitStats(
            habit_id=habit.id,
            current_streak=habit.current_streak,
            longest_streak=habit.longest_streak,
            total_completions=habit.total_completions,
            completion_rate=ProgressService.completion_rate(habit),
            weekly_progress=ProgressService.weekly_progress(habit, today),
            monthly_progress=ProgressService.monthly_progress(habit, today),
            today_entry=ProgressService.today_entry(habit, today),
        )
