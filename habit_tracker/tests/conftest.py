"""
Shared fixtures: in-memory database, fixed "today" and habit factories.
"""
import pytest
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from habit_tracker.database import init_db
from habit_tracker.domain import Habit
from habit_tracker.services.entry_service import EntryService


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with all tables created"""
    engine = create_engine("sqlite:///:memory:")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    SessionLocal = sessionmaker(bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def today():
    """Friday 2024-01-05; its week runs Sun 2023-12-31 .. Sat 2024-01-06"""
    return date(2024, 1, 5)


@pytest.fixture
def make_habit():
    """Factory for unsaved habits (daily, target 1, unit 'glass' by default)"""
    def _make(**overrides):
        fields = {"user_id": "user-1", "title": "Drink water", "unit": "glass"}
        fields.update(overrides)
        return Habit(**fields)
    return _make


@pytest.fixture
def five_day_habit(make_habit, today):
    """Daily habit with a qualifying entry on each of 2024-01-01..2024-01-05"""
    habit = make_habit()
    for day in range(1, 6):
        EntryService.add_entry(habit, f"2024-01-0{day}", 1, today=today)
    return habit
