"""
Tests for the task-completion classifier and record ingestion.
"""

import pytest

from progress_panel.analytics.classifier import (
    TaskCounts,
    classify,
    classify_record,
    classify_records,
    percentage,
    round_half_up,
)
from progress_panel.records import (
    Client,
    ClientStatus,
    MonthStatus,
    MonthlyTaskRecord,
    Staff,
    TaskCompletion,
    resolve_staff_name,
    same_id,
)


class TestClassify:
    """Test completed/total counting."""

    def test_mixed_values(self):
        counts = classify({"a": True, "b": "完了", "c": False, "d": "pending"})
        assert counts == TaskCounts(completed=2, total=4)

    def test_other_values_are_not_done(self):
        counts = classify({"a": None, "b": 1, "c": "true", "d": "済"})
        assert counts == TaskCounts(completed=0, total=4)

    @pytest.mark.parametrize("tasks", [None, [], "完了", 3])
    def test_not_a_mapping_counts_as_empty(self, tasks):
        assert classify(tasks) == TaskCounts(completed=0, total=0)

    def test_empty_mapping(self):
        counts = classify({})
        assert counts.total == 0
        assert counts.rate == 0

    def test_accepts_resolved_values(self):
        counts = classify({"a": TaskCompletion.DONE, "b": TaskCompletion.NOT_DONE})
        assert counts == TaskCounts(completed=1, total=2)


class TestRates:
    """Test percentage rounding."""

    def test_half_rounds_up(self):
        assert round_half_up(12.5) == 13
        assert round_half_up(12.4) == 12
        assert round_half_up(0.5) == 1

    def test_percentage(self):
        assert percentage(1, 8) == 13
        assert percentage(2, 3) == 67
        assert percentage(1, 3) == 33
        assert percentage(5, 0) == 0

    def test_counts_flags(self):
        assert TaskCounts(3, 3).is_fully_completed
        assert not TaskCounts(0, 0).is_fully_completed
        assert TaskCounts(0, 2).is_unstarted
        assert not TaskCounts(0, 0).is_unstarted

    def test_counts_add(self):
        assert TaskCounts(1, 2) + TaskCounts(2, 3) == TaskCounts(3, 5)

    def test_to_dict(self):
        assert TaskCounts(1, 2).to_dict() == {"completed": 1, "total": 2, "rate": 50}


class TestRecordIngestion:
    """Test records built from persistence rows."""

    def test_task_values_resolved_once(self):
        record = MonthlyTaskRecord.from_dict(
            {"client_id": 1, "month": "2024-04", "tasks": {"x": True, "y": "完了", "z": False}}
        )
        assert record.task_map == {
            "x": TaskCompletion.DONE,
            "y": TaskCompletion.DONE,
            "z": TaskCompletion.NOT_DONE,
        }
        assert classify_record(record) == TaskCounts(2, 3)

    def test_malformed_tasks_do_not_raise(self):
        record = MonthlyTaskRecord.from_dict({"client_id": 1, "month": "2024-04", "tasks": "oops"})
        assert record.malformed_tasks is True
        assert classify_record(record) == TaskCounts(0, 0)

    def test_missing_tasks_field(self):
        record = MonthlyTaskRecord.from_dict({"client_id": 1, "month": "2024-04"})
        assert record.malformed_tasks is True
        assert record.tasks == ()

    @pytest.mark.parametrize("text,expected,delayed", [
        ("遅延", MonthStatus.DELAYED, True),
        ("停滞", MonthStatus.STALLED, True),
        ("順調", MonthStatus.NORMAL, False),
        (None, MonthStatus.NORMAL, False),
    ])
    def test_month_status(self, text, expected, delayed):
        record = MonthlyTaskRecord.from_dict({"client_id": 1, "month": "2024-04", "tasks": {}, "status": text})
        assert record.status == expected
        assert record.is_delayed is delayed
        assert record.status_text == text

    def test_ingestion_does_not_mutate_row(self):
        row = {"client_id": 1, "month": "2024-04", "tasks": {"x": True}, "status": "遅延"}
        original = {"client_id": 1, "month": "2024-04", "tasks": {"x": True}, "status": "遅延"}
        MonthlyTaskRecord.from_dict(row)
        assert row == original

    def test_classify_records_sums(self):
        records = [
            MonthlyTaskRecord.from_dict({"client_id": 1, "month": "2024-04", "tasks": {"x": True}}),
            MonthlyTaskRecord.from_dict({"client_id": 1, "month": "2024-05", "tasks": {"x": False, "y": True}}),
        ]
        assert classify_records(records) == TaskCounts(2, 3)

    def test_client_from_row_with_staff_join(self):
        client = Client.from_dict({
            "id": 5, "name": "A", "staff_id": 1, "fiscal_month": "3",
            "status": "INACTIVE", "staffs": {"name": "佐藤"},
        })
        assert client.fiscal_month == 3
        assert client.status == ClientStatus.INACTIVE
        assert client.staff_name == "佐藤"

    @pytest.mark.parametrize("value", [None, "", 0, 13, "x"])
    def test_invalid_fiscal_month_is_none(self, value):
        assert Client.from_dict({"id": 1, "fiscal_month": value}).fiscal_month is None

    def test_unknown_client_status_defaults_to_active(self):
        assert Client.from_dict({"id": 1, "status": "archived"}).status == ClientStatus.ACTIVE


class TestIdentifiers:
    """Test loose identifier matching and staff lookup."""

    def test_same_id(self):
        assert same_id(1, "1")
        assert same_id("a", "a")
        assert not same_id(1, 2)
        assert not same_id(None, None)

    def test_resolve_staff_name(self):
        staffs = [Staff(id=1, name="佐藤")]
        assert resolve_staff_name(staffs, "1") == "佐藤"
        assert resolve_staff_name(staffs, 2) == "未設定"
        assert resolve_staff_name(staffs, None) == "未設定"
