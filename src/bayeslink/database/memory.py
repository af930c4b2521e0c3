"""Exhaustive in-memory record database."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bayeslink.database.base import RecordDatabase
from bayeslink.models.records import Record
from bayeslink.scoring.matcher import Candidate

if TYPE_CHECKING:
    from bayeslink.config.configuration import Configuration

__all__ = ["InMemoryDatabase"]


class InMemoryDatabase(RecordDatabase):
    """Compares every query against every stored record.

    A stored record is a candidate when it scores above zero on at least
    one lookup property, or unconditionally when there are no lookup
    properties. Results do not depend on indexing order.
    """

    def __init__(self, config: Configuration) -> None:
        super().__init__(config)
        self._records: dict[str, Record] = {}

    def index(self, record: Record) -> None:
        self._records[record.rid] = record

    def __len__(self) -> int:
        return len(self._records)

    def find_candidates(self, record: Record, *, exclude_self: bool = True) -> list[Candidate]:
        candidates: list[Candidate] = []
        for rid, other in self._records.items():
            if exclude_self and rid == record.rid:
                continue
            evidence = self.evidence(record, other)
            if self._lookup and not self._has_lookup_agreement(evidence):
                continue
            candidates.append(Candidate(record=other, evidence=evidence))
        return candidates
