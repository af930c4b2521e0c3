"""Abstract record database contract.

A record database stores records and, given a query record, returns the
stored records worth comparing with it together with their evidence
vectors. Implementations differ only in how they pick those candidates.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from bayeslink.models.records import Record
from bayeslink.scoring.evidence import Evidence, compute_evidence
from bayeslink.scoring.matcher import Candidate

if TYPE_CHECKING:
    from bayeslink.config.configuration import Configuration

__all__ = ["RecordDatabase"]


class RecordDatabase(ABC):
    """Base class for record databases.

    Attributes
    ----------
    config : Configuration
        Supplies the matched properties (for evidence) and the lookup
        properties (for retrieval).
    """

    def __init__(self, config: Configuration) -> None:
        self.config = config
        self._matched = config.matched_properties
        self._lookup = config.lookup_properties

    def __enter__(self) -> RecordDatabase:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @abstractmethod
    def index(self, record: Record) -> None:
        """Store *record*. Re-indexing the same rid replaces it."""

    @abstractmethod
    def find_candidates(self, record: Record, *, exclude_self: bool = True) -> list[Candidate]:
        """Return candidates for *record*, each at most once.

        Parameters
        ----------
        record : Record
            Query record.
        exclude_self : bool, optional
            Skip the stored record with the query's rid. Deduplication
            stores the query itself; in record linkage the query comes from
            the other group and an equal rid is a different record.
        """

    @abstractmethod
    def __len__(self) -> int:
        """Number of stored records."""

    def commit(self) -> None:
        """Make indexed records visible to queries."""

    def close(self) -> None:
        """Release backend resources."""

    def evidence(self, query: Record, other: Record) -> Evidence:
        """Evidence vector of a stored record against the query."""
        return compute_evidence(self._matched, query, other)

    def _has_lookup_agreement(self, evidence: Evidence) -> bool:
        """Whether any lookup property scored above zero."""
        return any(evidence.get(p.name, 0.0) > 0.0 for p in self._lookup)
