"""
Data access for the progress panel.

The persistence layer itself lives elsewhere; this package defines the
contract it must meet and loads consistent snapshots from it.
"""

from .repository import DataSnapshot, DataSource, InMemoryDataSource, load_snapshot

__all__ = [
    "DataSnapshot",
    "DataSource",
    "InMemoryDataSource",
    "load_snapshot",
]
