"""
Custom exceptions for the habit tracker.
Every error here is raised to the immediate caller and is recoverable by
correcting the input or reloading the habit.
"""


class HabitTrackerException(Exception):
    """Base exception for the habit tracker"""
    pass


class HabitNotFoundException(HabitTrackerException):
    """Raised when a habit does not exist or belongs to another user"""
    def __init__(self, habit_id: int):
        self.habit_id = habit_id
        super().__init__(f"Habit with ID {habit_id} not found")


class ValidationException(HabitTrackerException):
    """Raised when data validation fails"""
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Validation error for {field}: {message}")


class ConcurrencyConflictException(HabitTrackerException):
    """Raised when a habit was changed by someone else since it was loaded"""
    def __init__(self, habit_id: int, expected_version: int, actual_version=None):
        self.habit_id = habit_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Habit {habit_id} was modified concurrently: "
            f"expected version {expected_version}, found {actual_version}"
        )


class DatabaseException(HabitTrackerException):
    """Raised when database operations fail"""
    def __init__(self, operation: str, details: str):
        self.operation = operation
        self.details = details
        super().__init__(f"Database {operation} failed: {details}")
