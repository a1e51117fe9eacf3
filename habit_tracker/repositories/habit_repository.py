"""
Habit repository - Data access layer for habits and their entries.
Maps HabitRecord rows to plain Habit values and guards writes with an
optimistic version check.
"""
import json
import logging
from typing import List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from habit_tracker.domain import Habit, HabitEntry
from habit_tracker.exceptions import (
    HabitNotFoundException, ConcurrencyConflictException, DatabaseException
)
from habit_tracker.models import HabitRecord, HabitEntryRecord

logger = logging.getLogger("habit_tracker.repository")


class HabitRepository:
    """Repository for Habit data access"""

    @staticmethod
    def load(db: Session, habit_id: int) -> Habit:
        """
        Load a habit with all of its entries.

        Raises:
            HabitNotFoundException: If no habit has this ID
        """
        record = db.query(HabitRecord).filter(HabitRecord.id == habit_id).first()
        if not record:
            raise HabitNotFoundException(habit_id)
        return HabitRepository._to_domain(record)

    @staticmethod
    def get_by_user(db: Session, user_id: str, include_archived: bool = False) -> List[Habit]:
        """Get a user's habits, newest first"""
        query = db.query(HabitRecord).filter(HabitRecord.user_id == user_id)
        if not include_archived:
            query = query.filter(HabitRecord.is_archived == False)  # noqa: E712
        records = query.order_by(HabitRecord.created_at.desc(), HabitRecord.id.desc()).all()
        return [HabitRepository._to_domain(record) for record in records]

    @staticmethod
    def get_active(db: Session, user_id: str) -> List[Habit]:
        """Get a user's active, non-archived habits, newest first"""
        records = db.query(HabitRecord).filter(
            HabitRecord.user_id == user_id,
            HabitRecord.is_active == True,  # noqa: E712
            HabitRecord.is_archived == False,  # noqa: E712
        ).order_by(HabitRecord.created_at.desc(), HabitRecord.id.desc()).all()
        return [HabitRepository._to_domain(record) for record in records]

    @staticmethod
    def save(db: Session, habit: Habit) -> int:
        """
        Persist a habit and its entries.

        New habits are inserted at version 1. Existing habits are only
        written when the stored version still equals habit.version; the
        stored version is then incremented.

        Args:
            db: Database session
            habit: Habit to persist; id and version are updated in place

        Returns:
            The new version

        Raises:
            ConcurrencyConflictException: If the habit changed since it was loaded
            HabitNotFoundException: If the habit no longer exists
            DatabaseException: If the write fails
        """
        try:
            if habit.id is None:
                version = HabitRepository._insert(db, habit)
            else:
                version = HabitRepository._update(db, habit)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to save habit {habit.id}: {e}")
            raise DatabaseException("save", str(e)) from e

        habit.version = version
        logger.info(f"Habit {habit.title} saved for user {habit.user_id}")
        return version

    @staticmethod
    def _insert(db: Session, habit: Habit) -> int:
        record = HabitRecord(version=1, created_at=habit.created_at, **HabitRepository._columns(habit))
        record.entries = [HabitRepository._entry_record(entry) for entry in habit.entries]
        db.add(record)
        db.flush()
        habit.id = record.id
        return record.version

    @staticmethod
    def _update(db: Session, habit: Habit) -> int:
        new_version = habit.version + 1
        claimed = db.query(HabitRecord).filter(
            HabitRecord.id == habit.id,
            HabitRecord.version == habit.version,
        ).update({HabitRecord.version: new_version}, synchronize_session=False)

        if claimed == 0:
            actual = db.query(HabitRecord.version).filter(HabitRecord.id == habit.id).scalar()
            db.rollback()
            if actual is None:
                raise HabitNotFoundException(habit.id)
            logger.warning(
                f"Stale write rejected for habit {habit.id}: "
                f"version {habit.version}, stored {actual}"
            )
            raise ConcurrencyConflictException(habit.id, habit.version, actual)

        # The bulk UPDATE bypassed the identity map
        db.expire_all()
        record = db.get(HabitRecord, habit.id)
        for name, value in HabitRepository._columns(habit).items():
            setattr(record, name, value)
        HabitRepository._sync_entries(record, habit.entries)
        db.flush()
        return new_version

    @staticmethod
    def _sync_entries(record: HabitRecord, entries: List[HabitEntry]) -> None:
        """Match entry rows to entries by date: update, delete or add"""
        wanted = {entry.date: entry for entry in entries}
        existing = {entry_record.date: entry_record for entry_record in record.entries}

        for entry_date, entry_record in existing.items():
            if entry_date not in wanted:
                record.entries.remove(entry_record)

        for entry_date, entry in wanted.items():
            entry_record = existing.get(entry_date)
            if entry_record is None:
                record.entries.append(HabitRepository._entry_record(entry))
            else:
                entry_record.value = entry.value
                entry_record.note = entry.note
                entry_record.updated_at = entry.updated_at

    @staticmethod
    def _columns(habit: Habit) -> dict:
        return {
            "user_id": habit.user_id,
            "title": habit.title,
            "description": habit.description,
            "color": habit.color,
            "frequency": habit.frequency,
            "target_count": habit.target_count,
            "unit": habit.unit,
            "reminders": json.dumps(habit.reminders),
            "is_active": habit.is_active,
            "is_archived": habit.is_archived,
            "current_streak": habit.current_streak,
            "longest_streak": habit.longest_streak,
            "total_completions": habit.total_completions,
            "updated_at": habit.updated_at,
        }

    @staticmethod
    def _entry_record(entry: HabitEntry) -> HabitEntryRecord:
        return HabitEntryRecord(
            date=entry.date,
            value=entry.value,
            note=entry.note,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )

    @staticmethod
    def _to_domain(record: HabitRecord) -> Habit:
        return Habit(
            id=record.id,
            user_id=record.user_id,
            title=record.title,
            description=record.description,
            color=record.color,
            frequency=record.frequency,
            target_count=record.target_count,
            unit=record.unit,
            reminders=json.loads(record.reminders) if record.reminders else [],
            is_active=record.is_active,
            is_archived=record.is_archived,
            entries=[HabitEntry.model_validate(entry) for entry in record.entries],
            current_streak=record.current_streak,
            longest_streak=record.longest_streak,
            total_completions=record.total_completions,
            version=record.version,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
