"""
Data Access

Contract for the persistence collaborator and snapshot loading.

The collaborator returns already-parsed rows (plain mappings). The
analytics layer only ever sees an immutable DataSnapshot built from one
parallel fetch of all three collections.
"""

import asyncio
from abc import ABC, abstractmethod
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
import logging

from ..records import Client, MonthlyTaskRecord, Staff

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


class DataSource(ABC):
    """Bulk, unfiltered access to clients, staff and monthly task records."""

    @abstractmethod
    async def get_clients(self) -> List[Row]:
        ...

    @abstractmethod
    async def get_staffs(self) -> List[Row]:
        ...

    @abstractmethod
    async def get_monthly_tasks(self) -> List[Row]:
        ...


class InMemoryDataSource(DataSource):
    """
    Data source backed by lists of rows.

    Rows are copied on the way in and on the way out so callers can
    never mutate the stored data.
    """

    def __init__(
        self,
        clients: Optional[Iterable[Row]] = None,
        staffs: Optional[Iterable[Row]] = None,
        monthly_tasks: Optional[Iterable[Row]] = None,
    ):
        self._clients: List[Dict[str, Any]] = [deepcopy(dict(r)) for r in clients or []]
        self._staffs: List[Dict[str, Any]] = [deepcopy(dict(r)) for r in staffs or []]
        self._monthly_tasks: List[Dict[str, Any]] = [deepcopy(dict(r)) for r in monthly_tasks or []]

    async def get_clients(self) -> List[Row]:
        return deepcopy(self._clients)

    async def get_staffs(self) -> List[Row]:
        return deepcopy(self._staffs)

    async def get_monthly_tasks(self) -> List[Row]:
        return deepcopy(self._monthly_tasks)


@dataclass(frozen=True)
class DataSnapshot:
    """One consistent, read-only view of the three collections."""
    clients: Tuple[Client, ...] = ()
    staffs: Tuple[Staff, ...] = ()
    monthly_tasks: Tuple[MonthlyTaskRecord, ...] = ()

    @classmethod
    def from_rows(
        cls,
        clients: Optional[Iterable[Row]],
        staffs: Optional[Iterable[Row]],
        monthly_tasks: Optional[Iterable[Row]],
    ) -> "DataSnapshot":
        return cls(
            clients=tuple(Client.from_dict(row) for row in clients or []),
            staffs=tuple(Staff.from_dict(row) for row in staffs or []),
            monthly_tasks=tuple(MonthlyTaskRecord.from_dict(row) for row in monthly_tasks or []),
        )


async def load_snapshot(source: DataSource) -> DataSnapshot:
    """
    Fetch all three collections in parallel and ingest them.

    Aggregation starts only after every fetch has resolved. A fetch
    failure propagates unchanged; a None result counts as empty.
    """
    clients, staffs, monthly_tasks = await asyncio.gather(
        source.get_clients(),
        source.get_staffs(),
        source.get_monthly_tasks(),
    )
    snapshot = DataSnapshot.from_rows(clients, staffs, monthly_tasks)
    logger.info(
        f"Loaded: {len(snapshot.clients)} clients, {len(snapshot.staffs)} staffs, "
        f"{len(snapshot.monthly_tasks)} monthly task records"
    )
    return snapshot
