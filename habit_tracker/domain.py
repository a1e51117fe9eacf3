"""
Plain habit values the services operate on.
They carry no persistence logic; the repository maps them to and from
database rows.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional

from habit_tracker.constants import (
    FREQUENCY_DAILY, DEFAULT_UNIT, DEFAULT_TARGET_COUNT, Frequency
)


class HabitEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: str  # YYYY-MM-DD
    value: float = Field(ge=0)
    note: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Habit(BaseModel):
    id: Optional[int] = None
    user_id: str
    title: str
    description: Optional[str] = None
    color: Optional[str] = None

    frequency: Frequency = FREQUENCY_DAILY
    target_count: int = Field(default=DEFAULT_TARGET_COUNT, ge=1)
    unit: str = DEFAULT_UNIT
    reminders: List[str] = Field(default_factory=list)

    is_active: bool = True
    is_archived: bool = False

    entries: List[HabitEntry] = Field(default_factory=list)

    # Derived, never set by callers
    current_streak: int = 0
    longest_streak: int = 0
    total_completions: int = 0

    # 0 until the first save
    version: int = 0

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
