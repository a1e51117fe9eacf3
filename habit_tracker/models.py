from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float, ForeignKey, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from datetime import datetime

from habit_tracker.database import Base


class HabitRecord(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)

    # Display metadata
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    color = Column(String(7), nullable=True)  # #RRGGBB

    # Cadence and target
    frequency = Column(String, default="daily", index=True)  # daily, weekly, monthly
    target_count = Column(Integer, default=1)
    unit = Column(String(20), default="times")

    # Settings
    reminders = Column(String, nullable=True)  # JSON array of "HH:MM"
    is_active = Column(Boolean, default=True, index=True)
    is_archived = Column(Boolean, default=False, index=True)

    # Derived stats (recomputed on every entry mutation)
    current_streak = Column(Integer, default=0)
    longest_streak = Column(Integer, default=0)
    total_completions = Column(Integer, default=0)

    # Optimistic concurrency token
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    entries = relationship(
        "HabitEntryRecord",
        back_populates="habit",
        cascade="all, delete-orphan",
        order_by="HabitEntryRecord.date",
    )

    __table_args__ = (
        Index("ix_habits_user_active_created", "user_id", "is_active", "created_at"),
    )


class HabitEntryRecord(Base):
    __tablename__ = "habit_entries"

    id = Column(Integer, primary_key=True, index=True)
    habit_id = Column(Integer, ForeignKey("habits.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    value = Column(Float, nullable=False, default=0.0)
    note = Column(String(200), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)

    habit = relationship("HabitRecord", back_populates="entries")

    __table_args__ = (
        UniqueConstraint("habit_id", "date", name="uq_habit_entry_date"),
    )
