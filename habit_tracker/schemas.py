from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
import re

from habit_tracker.constants import (
    TITLE_MAX_LENGTH, DESCRIPTION_MAX_LENGTH, UNIT_MAX_LENGTH,
    COLOR_PATTERN, REMINDER_TIME_PATTERN,
    DEFAULT_UNIT, DEFAULT_TARGET_COUNT, Frequency
)
from habit_tracker.domain import HabitEntry


def _check_reminders(reminders: Optional[List[str]]) -> Optional[List[str]]:
    if reminders is None:
        return reminders
    for reminder in reminders:
        if not re.match(REMINDER_TIME_PATTERN, reminder):
            raise ValueError(f"Invalid reminder time: {reminder}. Expected HH:MM")
    return reminders


class HabitBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    unit: str = Field(default=DEFAULT_UNIT, min_length=1, max_length=UNIT_MAX_LENGTH)
    reminders: List[str] = Field(default_factory=list)

    @field_validator("title", "unit", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("reminders")
    @classmethod
    def validate_reminders(cls, value):
        return _check_reminders(value)


class HabitCreate(HabitBase):
    frequency: Frequency = "daily"
    target_count: int = Field(default=DEFAULT_TARGET_COUNT, ge=1)


class HabitUpdate(BaseModel):
    # frequency and target_count are fixed once entries exist
    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    unit: Optional[str] = Field(None, min_length=1, max_length=UNIT_MAX_LENGTH)
    reminders: Optional[List[str]] = None
    is_active: Optional[bool] = None

    @field_validator("title", "unit", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("reminders")
    @classmethod
    def validate_reminders(cls, value):
        return _check_reminders(value)


class HabitStats(BaseModel):
    """Derived view of a habit, computed on demand and never persisted"""
    habit_id: Optional[int]
    current_streak: int = 0
    longest_streak: int = 0
    total_completions: int = 0
    completion_rate: int = 0
    weekly_progress: float = 0.0
    monthly_progress: float = 0.0
    today_entry: Optional[HabitEntry] = None
