"""
Habit use cases.
Runs the load -> mutate -> recompute -> save cycle for entry mutations
and covers habit creation, listing and archival.
"""
import logging
from datetime import date, datetime
from typing import List, Optional
from pydantic import ValidationError
from sqlalchemy.orm import Session

from habit_tracker.domain import Habit, HabitEntry
from habit_tracker.exceptions import (
    ValidationException, HabitNotFoundException, ConcurrencyConflictException
)
from habit_tracker.repositories.habit_repository import HabitRepository
from habit_tracker.schemas import HabitCreate, HabitUpdate, HabitStats
from habit_tracker.services.date_service import DateService, DateLike
from habit_tracker.services.entry_service import EntryService
from habit_tracker.services.progress_service import ProgressService
from habit_tracker.services.streak_service import StreakService

logger = logging.getLogger("habit_tracker.service")


class HabitService:
    """Service for managing habits and their entries"""

    def __init__(self, db: Session):
        self.db = db
        self.habit_repo = HabitRepository()
        self.date_service = DateService()

    # --- Habits ---

    def create_habit(self, user_id: str, data) -> Habit:
        """
        Create a habit for a user.

        Args:
            user_id: Owner of the habit
            data: HabitCreate or a dict with the same fields

        Raises:
            ValidationException: If the payload is invalid (e.g. target_count < 1)
        """
        habit_data = self._parse(HabitCreate, data)
        habit = Habit(user_id=user_id, **habit_data.model_dump())
        self.habit_repo.save(self.db, habit)
        logger.info(f"Created habit {habit.id} for user {user_id}")
        return habit

    def get_habit(self, habit_id: int, user_id: Optional[str] = None) -> Habit:
        """
        Get a habit, optionally checking that it belongs to a user.

        A habit owned by someone else is reported as not found.
        """
        habit = self.habit_repo.load(self.db, habit_id)
        if user_id is not None and habit.user_id != user_id:
            raise HabitNotFoundException(habit_id)
        return habit

    def list_habits(self, user_id: str, include_archived: bool = False) -> List[Habit]:
        return self.habit_repo.get_by_user(self.db, user_id, include_archived)

    def list_active_habits(self, user_id: str) -> List[Habit]:
        return self.habit_repo.get_active(self.db, user_id)

    def update_habit(
        self,
        habit_id: int,
        data,
        user_id: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> Habit:
        """Update display metadata; frequency and target_count stay fixed"""
        changes = {
            key: value
            for key, value in self._parse(HabitUpdate, data).model_dump(exclude_unset=True).items()
            if value is not None or key in ("description", "color")
        }
        habit = self._load_for_write(habit_id, user_id, expected_version)

        for key, value in changes.items():
            setattr(habit, key, value)
        habit.updated_at = datetime.utcnow()

        self.habit_repo.save(self.db, habit)
        return habit

    def archive_habit(
        self,
        habit_id: int,
        user_id: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> Habit:
        """Soft-archive a habit; its entries are kept"""
        return self._set_archived(habit_id, True, user_id, expected_version)

    def unarchive_habit(
        self,
        habit_id: int,
        user_id: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> Habit:
        return self._set_archived(habit_id, False, user_id, expected_version)

    def recalculate(
        self,
        habit_id: int,
        user_id: Optional[str] = None,
        today: Optional[date] = None
    ) -> Habit:
        """
        Rebuild every derived counter from the entries alone.

        Repairs habits whose stored totals were written by older code.
        """
        habit = self._load_for_write(habit_id, user_id, None)
        EntryService.normalize(habit)
        habit.total_completions = EntryService.count_completions(habit)
        StreakService.apply(habit, self._today(today), keep_record=False)
        self.habit_repo.save(self.db, habit)
        return habit

    # --- Entries ---

    def add_entry(
        self,
        habit_id: int,
        entry_date: str,
        value: float,
        note: Optional[str] = None,
        user_id: Optional[str] = None,
        expected_version: Optional[int] = None,
        today: Optional[date] = None
    ) -> Habit:
        """Record progress for a day, overwriting any entry for that day"""
        EntryService.validate_entry(entry_date, value, note)
        habit = self._load_for_write(habit_id, user_id, expected_version)
        EntryService.add_entry(habit, entry_date, value, note, self._today(today))
        self.habit_repo.save(self.db, habit)
        return habit

    def update_entry(
        self,
        habit_id: int,
        entry_date: str,
        value: float,
        note: Optional[str] = None,
        user_id: Optional[str] = None,
        expected_version: Optional[int] = None,
        today: Optional[date] = None
    ) -> Habit:
        EntryService.validate_entry(entry_date, value, note)
        habit = self._load_for_write(habit_id, user_id, expected_version)
        EntryService.update_entry(habit, entry_date, value, note, self._today(today))
        self.habit_repo.save(self.db, habit)
        return habit

    def remove_entry(
        self,
        habit_id: int,
        entry_date: str,
        user_id: Optional[str] = None,
        expected_version: Optional[int] = None,
        today: Optional[date] = None
    ) -> Habit:
        """Delete the entry for a day; a missing entry is not an error"""
        DateService.parse_entry_date(entry_date)
        habit = self._load_for_write(habit_id, user_id, expected_version)
        EntryService.remove_entry(habit, entry_date, self._today(today))
        self.habit_repo.save(self.db, habit)
        return habit

    # --- Reads ---

    def get_entries_in_range(
        self,
        habit_id: int,
        start: DateLike,
        end: DateLike,
        user_id: Optional[str] = None
    ) -> List[HabitEntry]:
        habit = self.get_habit(habit_id, user_id)
        return ProgressService.get_entries_in_range(habit, start, end)

    def is_completed_on_date(
        self,
        habit_id: int,
        entry_date: DateLike,
        user_id: Optional[str] = None
    ) -> bool:
        habit = self.get_habit(habit_id, user_id)
        return ProgressService.is_completed_on_date(habit, entry_date)

    def get_stats(
        self,
        habit_id: int,
        user_id: Optional[str] = None,
        today: Optional[date] = None
    ) -> HabitStats:
        """Streak counters plus completion rate and weekly/monthly progress"""
        habit = self.get_habit(habit_id, user_id)
        return ProgressService.snapshot(habit, self._today(today))

    # --- Helpers ---

    def _today(self, today: Optional[date]) -> date:
        return today or self.date_service.get_effective_date()

    def _load_for_write(
        self,
        habit_id: int,
        user_id: Optional[str],
        expected_version: Optional[int]
    ) -> Habit:
        habit = self.get_habit(habit_id, user_id)
        if expected_version is not None and habit.version != expected_version:
            raise ConcurrencyConflictException(habit_id, expected_version, habit.version)
        return habit

    def _set_archived(
        self,
        habit_id: int,
        archived: bool,
        user_id: Optional[str],
        expected_version: Optional[int]
    ) -> Habit:
        habit = self._load_for_write(habit_id, user_id, expected_version)
        habit.is_archived = archived
        habit.updated_at = datetime.utcnow()
        self.habit_repo.save(self.db, habit)
        logger.info(f"Habit {habit_id} {'archived' if archived else 'unarchived'}")
        return habit

    @staticmethod
    def _parse(schema, data):
        if isinstance(data, schema):
            return data
        if isinstance(data, dict):
            try:
                return schema.model_validate(data)
            except ValidationError as e:
                error = e.errors()[0]
                field = ".".join(str(part) for part in error["loc"]) or "payload"
                raise ValidationException(field, error["msg"]) from e
        raise ValidationException("payload", f"expected {schema.__name__} or dict")
