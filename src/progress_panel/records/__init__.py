"""
Record Models for the Progress Panel

Read-only views of the persistence layer's rows:
- Clients with staff assignment and fiscal month
- Staff members
- Monthly task records with resolved task completion and month status
"""

from .record_models import (
    Client,
    ClientStatus,
    MonthStatus,
    MonthlyTaskRecord,
    Staff,
    TaskCompletion,
    DONE_MARKER,
    UNASSIGNED_STAFF_NAME,
    resolve_staff_name,
    same_id,
)

__all__ = [
    "Client",
    "ClientStatus",
    "MonthStatus",
    "MonthlyTaskRecord",
    "Staff",
    "TaskCompletion",
    "DONE_MARKER",
    "UNASSIGNED_STAFF_NAME",
    "resolve_staff_name",
    "same_id",
]
