"""Pytest configuration and fixtures for test suite."""

import os
import sys
from datetime import date
from pathlib import Path

import pytest

# Set test environment BEFORE any other imports
os.environ.setdefault("PROGRESS_ENVIRONMENT", "test")

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


# =============================================================================
# SAMPLE DATA
# =============================================================================

STAFF_ROWS = [
    {"id": 1, "name": "佐藤"},
    {"id": 2, "name": "鈴木"},
    {"id": 3, "name": "高橋"},
]

CLIENT_ROWS = [
    {"id": 101, "name": "青木商店", "staff_id": 1, "fiscal_month": 3, "status": "active"},
    {"id": 102, "name": "井上工務店", "staff_id": 1, "fiscal_month": 12, "status": "active"},
    {"id": 103, "name": "上田建設", "staff_id": 2, "fiscal_month": 3, "status": "active"},
    {"id": 104, "name": "江藤医院", "staff_id": 99, "fiscal_month": 6, "status": "inactive"},
]

TASK_ROWS = [
    # 青木商店: fully done April, partly done May
    {"client_id": 101, "month": "2024-04", "tasks": {"記帳": True, "試算表": "完了"}, "status": None, "completed": True},
    {"client_id": 101, "month": "2024-05", "tasks": {"記帳": True, "試算表": False}, "status": None},
    # 井上工務店: stalled April, nothing started May
    {"client_id": 102, "month": "2024-04", "tasks": {"記帳": True, "試算表": True, "請求": True}, "status": "停滞"},
    {"client_id": 102, "month": "2024-05", "tasks": {"記帳": False, "試算表": False}, "status": None},
    # 上田建設: done both months
    {"client_id": 103, "month": "2024-04", "tasks": {"記帳": True}, "status": None, "completed": True},
    {"client_id": 103, "month": "2024-05", "tasks": {"記帳": True}, "status": None, "completed": True},
    # Outside the usual period and a malformed record
    {"client_id": 103, "month": "2023-12", "tasks": {"記帳": False}, "status": "遅延"},
    {"client_id": 104, "month": "2024-04", "tasks": None, "status": None},
]


@pytest.fixture
def staff_rows():
    return [dict(row) for row in STAFF_ROWS]


@pytest.fixture
def client_rows():
    return [dict(row) for row in CLIENT_ROWS]


@pytest.fixture
def task_rows():
    return [dict(row) for row in TASK_ROWS]


@pytest.fixture
def snapshot(client_rows, staff_rows, task_rows):
    """Ingested sample data."""
    from progress_panel.data_access import DataSnapshot
    return DataSnapshot.from_rows(client_rows, staff_rows, task_rows)


@pytest.fixture
def data_source(client_rows, staff_rows, task_rows):
    from progress_panel.data_access import InMemoryDataSource
    return InMemoryDataSource(client_rows, staff_rows, task_rows)


@pytest.fixture
def settings():
    from config import Settings
    return Settings()


@pytest.fixture
def analytics_service(data_source, settings):
    from progress_panel.services import AnalyticsService
    return AnalyticsService(data_source, settings)


@pytest.fixture
def today():
    """Fixed reference day for period and backlog calculations."""
    return date(2024, 6, 15)
