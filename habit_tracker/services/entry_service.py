"""
Entry store service.
Keeps a habit's entries unique per calendar day and sorted, maintains
total_completions and triggers streak recalculation after every change.
"""
import logging
import math
from datetime import date, datetime
from numbers import Real
from typing import Optional

from habit_tracker.constants import NOTE_MAX_LENGTH
from habit_tracker.domain import Habit, HabitEntry
from habit_tracker.exceptions import ValidationException
from habit_tracker.services.date_service import DateService
from habit_tracker.services.streak_service import StreakService

logger = logging.getLogger("habit_tracker.entries")


class EntryService:
    """Stateless mutations over a habit's entry list"""

    @staticmethod
    def find_entry(habit: Habit, entry_date: str) -> Optional[HabitEntry]:
        for entry in habit.entries:
            if entry.date == entry_date:
                return entry
        return None

    @staticmethod
    def validate_entry(entry_date: str, value, note: Optional[str] = None) -> None:
        """
        Validate entry input before anything is changed.

        Raises:
            ValidationException: On a malformed date, a negative or
                non-numeric value, or an over-long note
        """
        DateService.parse_entry_date(entry_date)

        if isinstance(value, bool) or not isinstance(value, Real):
            raise ValidationException("value", f"{value!r} is not a number")
        if math.isnan(value) or math.isinf(value):
            raise ValidationException("value", "must be a finite number")
        if value < 0:
            raise ValidationException("value", "must be greater than or equal to 0")

        if note is not None and len(note) > NOTE_MAX_LENGTH:
            raise ValidationException("note", f"must be at most {NOTE_MAX_LENGTH} characters")

    @staticmethod
    def add_entry(
        habit: Habit,
        entry_date: str,
        value: float,
        note: Optional[str] = None,
        today: Optional[date] = None
    ) -> Habit:
        """
        Record progress for a day.

        An existing entry for the same day is overwritten with the same
        semantics as update_entry; otherwise a new entry is appended.

        Args:
            habit: Habit to mutate in place
            entry_date: Day key in YYYY-MM-DD form
            value: Measured progress (>= 0)
            note: Optional note
            today: Reference day for the current streak

        Returns:
            The same habit
        """
        EntryService.validate_entry(entry_date, value, note)
        today = today or DateService.get_effective_date()

        existing = EntryService.find_entry(habit, entry_date)
        if existing is not None:
            EntryService._overwrite(habit, existing, value, note)
        else:
            habit.entries.append(HabitEntry(date=entry_date, value=value, note=note))
            if value >= habit.target_count:
                habit.total_completions += 1
            logger.debug(f"Habit {habit.id}: added entry {entry_date} = {value}")

        EntryService.normalize(habit)
        StreakService.apply(habit, today)
        habit.updated_at = datetime.utcnow()
        return habit

    @staticmethod
    def update_entry(
        habit: Habit,
        entry_date: str,
        value: float,
        note: Optional[str] = None,
        today: Optional[date] = None
    ) -> Habit:
        """
        Change the value of an existing entry.

        Falls back to add_entry when no entry exists for the day. The note
        is only replaced when a new one is given.
        """
        EntryService.validate_entry(entry_date, value, note)
        today = today or DateService.get_effective_date()

        existing = EntryService.find_entry(habit, entry_date)
        if existing is None:
            return EntryService.add_entry(habit, entry_date, value, note, today)

        EntryService._overwrite(habit, existing, value, note)
        StreakService.apply(habit, today)
        habit.updated_at = datetime.utcnow()
        return habit

    @staticmethod
    def remove_entry(habit: Habit, entry_date: str, today: Optional[date] = None) -> Habit:
        """
        Delete the entry for a day if present.

        Removing history rebuilds the longest streak from what is left.
        """
        DateService.parse_entry_date(entry_date)
        today = today or DateService.get_effective_date()

        existing = EntryService.find_entry(habit, entry_date)
        if existing is not None:
            if existing.value >= habit.target_count:
                habit.total_completions = max(0, habit.total_completions - 1)
            habit.entries = [entry for entry in habit.entries if entry.date != entry_date]
            logger.debug(f"Habit {habit.id}: removed entry {entry_date}")

        StreakService.apply(habit, today, keep_record=False)
        habit.updated_at = datetime.utcnow()
        return habit

    @staticmethod
    def normalize(habit: Habit) -> Habit:
        """De-duplicate entries by date (last write wins) and sort ascending"""
        unique = {}
        for entry in habit.entries:
            unique[entry.date] = entry
        habit.entries = sorted(unique.values(), key=lambda entry: entry.date)
        return habit

    @staticmethod
    def count_completions(habit: Habit) -> int:
        return sum(1 for entry in habit.entries if entry.value >= habit.target_count)

    @staticmethod
    def _overwrite(habit: Habit, entry: HabitEntry, value: float, note: Optional[str]) -> None:
        was_completed = entry.value >= habit.target_count
        is_completed = value >= habit.target_count

        entry.value = value
        if note is not None:
            entry.note = note
        entry.updated_at = datetime.utcnow()

        if not was_completed and is_completed:
            habit.total_completions += 1
        elif was_completed and not is_completed:
            habit.total_completions = max(0, habit.total_completions - 1)

        logger.debug(f"Habit {habit.id}: updated entry {entry.date} = {value}")
