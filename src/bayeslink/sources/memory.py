"""Data source over records already in memory."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from bayeslink.models.records import Record

__all__ = ["InMemoryDataSource"]


class InMemoryDataSource:
    """Serves a fixed list of records; re-iterable.

    Parameters
    ----------
    records : Iterable[Record]
        Records to serve.
    name : str, optional
        Label used in audit logs.
    """

    def __init__(self, records: Iterable[Record], name: str = "memory") -> None:
        self.name = name
        self._records = list(records)

    @classmethod
    def from_mappings(
        cls,
        rows: Iterable[Mapping[str, Any]],
        identity: Iterable[str],
        name: str = "memory",
    ) -> InMemoryDataSource:
        """Build records from plain mappings (see :meth:`Record.from_mapping`)."""
        identity = list(identity)
        return cls((Record.from_mapping(row, identity) for row in rows), name=name)

    def records(self) -> Iterator[Record]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)
