"""
Application-wide constants and configuration defaults.
"""
from typing import Literal

# Habit frequencies
FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_MONTHLY = "monthly"
FREQUENCIES = (FREQUENCY_DAILY, FREQUENCY_WEEKLY, FREQUENCY_MONTHLY)
Frequency = Literal["daily", "weekly", "monthly"]

# Max distance in days between two qualifying entries of the same streak
STREAK_GAP_DAYS = {
    FREQUENCY_DAILY: 1,
    FREQUENCY_WEEKLY: 7,
    FREQUENCY_MONTHLY: 31,
}

# Step used when walking back from today for the current streak
CURRENT_STREAK_STEP_DAYS = {
    FREQUENCY_DAILY: 1,
    FREQUENCY_WEEKLY: 7,
    FREQUENCY_MONTHLY: 30,
}

# Target periods inside one Sunday-Saturday week
WEEKLY_PROGRESS_TARGETS = {
    FREQUENCY_DAILY: 7,
    FREQUENCY_WEEKLY: 1,
    FREQUENCY_MONTHLY: 0.25,
}

MAX_PROGRESS_PERCENT = 100

# Field formats and limits
ENTRY_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
ENTRY_DATE_FORMAT = "%Y-%m-%d"
REMINDER_TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
UNIT_MAX_LENGTH = 20
NOTE_MAX_LENGTH = 200

DEFAULT_UNIT = "times"
DEFAULT_TARGET_COUNT = 1

# Configuration defaults (overridable through environment variables)
DEFAULT_DATABASE_URL = "sqlite:///./habits.db"
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/habit-tracker"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"
DEFAULT_LOG_FILE = "habit_tracker.log"
DEFAULT_LOG_LEVEL = "INFO"
