"""
Streak calculation service.
Derives current and longest streaks from a habit's entry series.
"""
from datetime import date, timedelta
from typing import Iterable, List, NamedTuple

from habit_tracker.constants import STREAK_GAP_DAYS, CURRENT_STREAK_STEP_DAYS
from habit_tracker.domain import Habit, HabitEntry
from habit_tracker.services.date_service import DateService


class StreakResult(NamedTuple):
    current: int
    longest: int


class StreakService:
    """
    Stateless streak calculator.

    Always performs a full scan over the entries; there is no incremental
    bookkeeping to drift out of sync when past entries are edited or removed.
    """

    @staticmethod
    def qualifying_entries(entries: Iterable[HabitEntry], target_count: int) -> List[HabitEntry]:
        """Entries that reach the target, ascending by date"""
        return sorted(
            (entry for entry in entries if entry.value >= target_count),
            key=lambda entry: entry.date
        )

    @staticmethod
    def calculate(
        entries: Iterable[HabitEntry],
        frequency: str,
        target_count: int,
        today: date
    ) -> StreakResult:
        """
        Calculate current and longest streak.

        Longest streak: consecutive qualifying entries whose dates are at
        most the cadence gap apart (1, 7 or 31 days).

        Current streak: starting at today, step back 1, 7 or 30 days at a time
        while a qualifying entry exists on exactly that day. Zero if today
        itself has no qualifying entry.

        Monthly cadence uses fixed day counts, not calendar months.

        Args:
            entries: Habit entries in any order
            frequency: daily, weekly or monthly
            target_count: Value an entry must reach to qualify
            today: Reference day for the current streak

        Returns:
            StreakResult(current, longest), with longest >= current
        """
        qualifying = StreakService.qualifying_entries(entries, target_count)
        if not qualifying:
            return StreakResult(0, 0)

        longest = StreakService._longest_run(qualifying, STREAK_GAP_DAYS[frequency])
        current = StreakService._current_run(
            {entry.date for entry in qualifying},
            CURRENT_STREAK_STEP_DAYS[frequency],
            today
        )
        return StreakResult(current, max(longest, current))

    @staticmethod
    def _longest_run(qualifying: List[HabitEntry], max_gap: int) -> int:
        longest = 0
        run = 1
        for prev, curr in zip(qualifying, qualifying[1:]):
            if DateService.days_between(prev.date, curr.date) <= max_gap:
                run += 1
            else:
                longest = max(longest, run)
                run = 1
        return max(longest, run)

    @staticmethod
    def _current_run(qualifying_dates: set, step_days: int, today: date) -> int:
        check_date = today
        streak = 0
        while DateService.format_date(check_date) in qualifying_dates:
            streak += 1
            check_date -= timedelta(days=step_days)
        return streak

    @staticmethod
    def apply(habit: Habit, today: date, keep_record: bool = True) -> Habit:
        """
        Recompute streaks and store them on the habit.

        Args:
            habit: Habit to update in place
            today: Reference day for the current streak
            keep_record: Keep the stored longest streak as a high-water mark.
                Pass False to rebuild it from the remaining entries only,
                which is what removing an entry needs.

        Returns:
            The same habit
        """
        result = StreakService.calculate(
            habit.entries, habit.frequency, habit.target_count, today
        )
        habit.current_streak = result.current
        if keep_record:
            habit.longest_streak = max(habit.longest_streak, result.longest)
        else:
            habit.longest_streak = result.longest
        return habit
