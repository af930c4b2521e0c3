"""Processor settings and run statistics dataclasses."""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class ProcessorSettings:
    """Settings for the linkage processor.

    Attributes
    ----------
    index_retries : int
        Extra attempts for an index write that fails with ``BackendError``.
        Queries are never retried.
    emit_non_matches : bool
        Also yield pairs classified as non-matches.
    """

    index_retries: int = 2
    emit_non_matches: bool = False

    def __post_init__(self) -> None:
        """Validate."""
        if self.index_retries < 0:
            raise ValueError(f"index_retries must be >= 0, got {self.index_retries}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class ProcessorStats:
    """Counters collected during one processor run.

    Attributes
    ----------
    records_seen : int
        Records read from the sources.
    records_indexed : int
        Records stored in the database.
    records_queried : int
        Records looked up in the database.
    records_failed : int
        Malformed records reported and skipped.
    candidates : int
        Candidate pairs classified.
    matches : int
        Pairs classified as matches.
    possible_matches : int
        Pairs classified as possible matches.
    index_retries : int
        Index writes retried after a backend failure.
    cancelled : bool
        Whether the run stopped on a cancellation request.
    """

    records_seen: int = 0
    records_indexed: int = 0
    records_queried: int = 0
    records_failed: int = 0
    candidates: int = 0
    matches: int = 0
    possible_matches: int = 0
    index_retries: int = 0
    cancelled: bool = False

    def counters(self) -> dict[str, int]:
        """Integer counters, for ``stage_finished`` events."""
        return {k: v for k, v in asdict(self).items() if not isinstance(v, bool)}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)
