"""
Tests for EntryService.

Tests cover:
1. One entry per day, sorted ascending
2. Overwrite and update semantics
3. total_completions bookkeeping
4. Streak recalculation after insert, overwrite and removal
5. Input validation before any change
"""
import pytest

from habit_tracker.domain import HabitEntry
from habit_tracker.exceptions import ValidationException
from habit_tracker.services.entry_service import EntryService


def completions(habit):
    return sum(1 for e in habit.entries if e.value >= habit.target_count)


class TestAddEntry:
    """Tests for add_entry"""

    def test_entries_are_sorted(self, make_habit, today):
        habit = make_habit()

        for d in ("2024-01-03", "2024-01-01", "2024-01-02"):
            EntryService.add_entry(habit, d, 1, today=today)

        assert [e.date for e in habit.entries] == ["2024-01-01", "2024-01-02", "2024-01-03"]

    def test_overwrite_keeps_one_entry(self, make_habit, today):
        """Adding twice for the same day keeps a single entry with the last value"""
        habit = make_habit()
        EntryService.add_entry(habit, "2024-01-05", 1, today=today)
        count = len(habit.entries)

        EntryService.add_entry(habit, "2024-01-05", 3, today=today)

        assert len(habit.entries) == count
        assert habit.entries[0].value == 3
        assert habit.total_completions == 1

    def test_overwrite_keeps_created_at(self, make_habit, today):
        habit = make_habit()
        EntryService.add_entry(habit, "2024-01-05", 1, note="first", today=today)
        created = habit.entries[0].created_at

        EntryService.add_entry(habit, "2024-01-05", 2, today=today)

        assert habit.entries[0].created_at == created
        assert habit.entries[0].note == "first"

    def test_below_target_is_not_a_completion(self, make_habit, today):
        habit = make_habit(target_count=3)

        EntryService.add_entry(habit, "2024-01-05", 2, today=today)

        assert habit.total_completions == 0
        assert habit.current_streak == 0

    def test_five_consecutive_days(self, five_day_habit):
        """Scenario: 2024-01-01..05 logged with value 1"""
        assert five_day_habit.current_streak == 5
        assert five_day_habit.longest_streak == 5
        assert five_day_habit.total_completions == 5

    def test_overwrite_today_with_zero(self, five_day_habit, today):
        """Today no longer qualifies; the longest streak stays at its record"""
        EntryService.add_entry(five_day_habit, "2024-01-05", 0, today=today)

        assert five_day_habit.current_streak == 0
        assert five_day_habit.longest_streak == 5
        assert five_day_habit.total_completions == 4
        assert len(five_day_habit.entries) == 5

    def test_many_adds_stay_unique(self, make_habit, today):
        habit = make_habit()
        dates = ["2024-01-02", "2024-01-01", "2024-01-02", "2024-01-04", "2024-01-01", "2024-01-03"]

        for value, d in enumerate(dates):
            EntryService.add_entry(habit, d, value, today=today)

        keys = [e.date for e in habit.entries]
        assert keys == sorted(set(dates))
        assert habit.total_completions == completions(habit)


class TestUpdateEntry:
    """Tests for update_entry"""

    def test_missing_entry_is_added(self, make_habit, today):
        habit = make_habit()

        EntryService.update_entry(habit, "2024-01-05", 1, today=today)

        assert len(habit.entries) == 1
        assert habit.total_completions == 1
        assert habit.current_streak == 1

    def test_completion_to_non_completion_decrements(self, five_day_habit, today):
        EntryService.update_entry(five_day_habit, "2024-01-03", 0, today=today)

        assert five_day_habit.total_completions == 4
        assert five_day_habit.current_streak == 2

    def test_non_completion_to_completion_increments(self, make_habit, today):
        habit = make_habit(target_count=2)
        EntryService.add_entry(habit, "2024-01-05", 1, today=today)

        EntryService.update_entry(habit, "2024-01-05", 2, today=today)

        assert habit.total_completions == 1
        assert habit.current_streak == 1

    def test_note_kept_when_not_given(self, make_habit, today):
        habit = make_habit()
        EntryService.add_entry(habit, "2024-01-05", 1, note="morning", today=today)

        EntryService.update_entry(habit, "2024-01-05", 2, today=today)
        assert habit.entries[0].note == "morning"

        EntryService.update_entry(habit, "2024-01-05", 2, note="evening", today=today)
        assert habit.entries[0].note == "evening"

    def test_total_never_negative(self, make_habit, today):
        """A drifted counter is floored at zero"""
        habit = make_habit()
        EntryService.add_entry(habit, "2024-01-05", 1, today=today)
        habit.total_completions = 0

        EntryService.update_entry(habit, "2024-01-05", 0, today=today)

        assert habit.total_completions == 0


class TestRemoveEntry:
    """Tests for remove_entry"""

    def test_remove_middle_splits_streak(self, five_day_habit, today):
        """Removing 2024-01-03 leaves runs of 2 and 2"""
        EntryService.remove_entry(five_day_habit, "2024-01-03", today=today)

        assert [e.date for e in five_day_habit.entries] == [
            "2024-01-01", "2024-01-02", "2024-01-04", "2024-01-05"
        ]
        assert five_day_habit.longest_streak == 2
        assert five_day_habit.current_streak == 2
        assert five_day_habit.total_completions == 4

    def test_remove_missing_is_noop(self, five_day_habit, today):
        EntryService.remove_entry(five_day_habit, "2023-06-01", today=today)

        assert len(five_day_habit.entries) == 5
        assert five_day_habit.total_completions == 5
        assert five_day_habit.longest_streak == 5

    def test_remove_non_completion_keeps_total(self, make_habit, today):
        habit = make_habit(target_count=2)
        EntryService.add_entry(habit, "2024-01-04", 2, today=today)
        EntryService.add_entry(habit, "2024-01-05", 1, today=today)

        EntryService.remove_entry(habit, "2024-01-05", today=today)

        assert habit.total_completions == 1

    def test_remove_rebuilds_record_kept_by_earlier_overwrite(self, five_day_habit, today):
        """
        An overwrite keeps the longest streak as a high-water mark, but any
        removal rebuilds it from the remaining entries.
        """
        EntryService.update_entry(five_day_habit, "2024-01-03", 0, today=today)
        assert five_day_habit.current_streak == 2
        assert five_day_habit.longest_streak == 5

        EntryService.remove_entry(five_day_habit, "2024-01-01", today=today)

        assert five_day_habit.current_streak == 2
        assert five_day_habit.longest_streak == 2
        assert five_day_habit.total_completions == 3

    def test_remove_everything(self, five_day_habit, today):
        for day in range(1, 6):
            EntryService.remove_entry(five_day_habit, f"2024-01-0{day}", today=today)

        assert five_day_habit.entries == []
        assert five_day_habit.current_streak == 0
        assert five_day_habit.longest_streak == 0
        assert five_day_habit.total_completions == 0


class TestValidation:
    """Invalid input is rejected before the habit changes"""

    @pytest.mark.parametrize("bad_date", ["2024-1-5", "05-01-2024", "2024/01/05", "", "2024-02-30", "2024-13-01"])
    def test_rejects_bad_dates(self, five_day_habit, today, bad_date):
        before = five_day_habit.model_dump()

        with pytest.raises(ValidationException) as exc_info:
            EntryService.add_entry(five_day_habit, bad_date, 1, today=today)

        assert exc_info.value.field == "date"
        assert five_day_habit.model_dump() == before

    @pytest.mark.parametrize("bad_value", [-1, -0.5, float("nan"), float("inf"), "3", None, True])
    def test_rejects_bad_values(self, five_day_habit, today, bad_value):
        before = five_day_habit.model_dump()

        with pytest.raises(ValidationException) as exc_info:
            EntryService.update_entry(five_day_habit, "2024-01-05", bad_value, today=today)

        assert exc_info.value.field == "value"
        assert five_day_habit.model_dump() == before

    def test_rejects_long_note(self, make_habit, today):
        habit = make_habit()

        with pytest.raises(ValidationException):
            EntryService.add_entry(habit, "2024-01-05", 1, note="x" * 201, today=today)

        assert habit.entries == []

    def test_remove_rejects_bad_date(self, five_day_habit, today):
        with pytest.raises(ValidationException):
            EntryService.remove_entry(five_day_habit, "yesterday", today=today)

        assert len(five_day_habit.entries) == 5

    def test_value_is_required(self):
        with pytest.raises(TypeError):
            EntryService.validate_entry("2024-01-05")

    def test_zero_and_fractions_allowed(self, make_habit, today):
        habit = make_habit()

        EntryService.add_entry(habit, "2024-01-04", 0, today=today)
        EntryService.add_entry(habit, "2024-01-05", 1.5, today=today)

        assert [e.value for e in habit.entries] == [0, 1.5]


class TestConsistency:

    def test_total_matches_entries_after_mixed_mutations(self, make_habit, today):
        """total_completions always equals the number of qualifying entries"""
        habit = make_habit(target_count=2)
        operations = [
            ("add", "2024-01-01", 2), ("add", "2024-01-02", 1), ("update", "2024-01-02", 3),
            ("add", "2024-01-01", 0), ("remove", "2024-01-02", None), ("update", "2024-01-03", 2),
            ("add", "2024-01-03", 5), ("remove", "2024-01-09", None), ("update", "2024-01-01", 2),
            ("add", "2024-01-05", 2), ("remove", "2024-01-01", None), ("add", "2024-01-04", 2),
        ]

        for op, d, value in operations:
            if op == "add":
                EntryService.add_entry(habit, d, value, today=today)
            elif op == "update":
                EntryService.update_entry(habit, d, value, today=today)
            else:
                EntryService.remove_entry(habit, d, today=today)
            assert habit.total_completions == completions(habit)
            assert habit.longest_streak >= habit.current_streak >= 0

        assert [e.date for e in habit.entries] == ["2024-01-03", "2024-01-04", "2024-01-05"]
        assert habit.current_streak == 3

    def test_normalize_last_write_wins(self, make_habit):
        habit = make_habit(entries=[
            HabitEntry(date="2024-01-02", value=1),
            HabitEntry(date="2024-01-01", value=1),
            HabitEntry(date="2024-01-02", value=4),
        ])

        EntryService.normalize(habit)

        assert [(e.date, e.value) for e in habit.entries] == [("2024-01-01", 1), ("2024-01-02", 4)]
