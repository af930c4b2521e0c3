"""Linkage processor: drives deduplication and record linkage runs.

Deduplication:
    Every record is indexed, then queried against the records indexed
    before it, so each unordered pair is visited exactly once.

Record linkage:
    All of group 2 is indexed and committed (phase barrier), then every
    record of group 1 is queried. Records are never compared within a group.

Per record the state advances ``UNPROCESSED → INDEXED → QUERIED →
CLASSIFIED`` (group-1 records in linkage mode skip ``INDEXED``).
Malformed records are reported through the audit logger and skipped; they
never produce a classification.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterable, Iterator
from enum import StrEnum

from bayeslink.audit.logger import AuditLogger
from bayeslink.config.configuration import Configuration, Deduplication, RecordLinkage
from bayeslink.database.base import RecordDatabase
from bayeslink.engine.config import ProcessorSettings, ProcessorStats
from bayeslink.errors import BackendError, ConfigurationError, RecordError
from bayeslink.models.records import Record
from bayeslink.scoring.matcher import ClassificationResult, Matcher, Verdict
from bayeslink.sources.base import DataSource

__all__ = ["RecordState", "LinkageProcessor"]

STAGE_INDEXING = "indexing"
STAGE_MATCHING = "matching"


class RecordState(StrEnum):
    """Processing state of one record."""

    UNPROCESSED = "unprocessed"
    INDEXED = "indexed"
    QUERIED = "queried"
    CLASSIFIED = "classified"


class LinkageProcessor:
    """Runs a configuration's records through database and matcher.

    Attributes
    ----------
    config : Configuration
        Matching configuration.
    settings : ProcessorSettings
        Retry and output settings.
    stats : ProcessorStats
        Counters of the current (or last) run.

    Examples
    --------
        >>> processor = LinkageProcessor(config)
        >>> matches = [r for r in processor.run() if r.verdict == Verdict.MATCH]
    """

    def __init__(
        self,
        config: Configuration,
        database: RecordDatabase | None = None,
        settings: ProcessorSettings | None = None,
        logger: AuditLogger | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        """Initialise the processor.

        Parameters
        ----------
        config : Configuration
            Matching configuration.
        database : RecordDatabase | None, optional
            Database to use. If None, one is created from the configuration
            for each run and closed afterwards.
        settings : ProcessorSettings | None, optional
            Processor settings. If None, uses defaults.
        logger : AuditLogger | None, optional
            Audit logger. If None, no logging.
        cancel : threading.Event | None, optional
            Checked once per record; when set the run stops early.
        """
        self.config = config
        self.settings = settings or ProcessorSettings()
        self.logger = logger
        self.cancel = cancel
        self.matcher = Matcher(config)
        self.stats = ProcessorStats()
        self._database = database
        self._states: dict[tuple[int, str], RecordState] = {}

    def state_of(self, rid: str, group: int = 0) -> RecordState:
        """Return the processing state of record *rid* in the current run.

        Rids are unique only within a group, so linkage callers name the
        group (1 or 2); deduplication records live in group 0.
        """
        return self._states.get((group, rid), RecordState.UNPROCESSED)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run(self) -> Iterator[ClassificationResult]:
        """Process the configuration's data sources according to its mode.

        Raises
        ------
        ConfigurationError
            If the configuration has no data sources.
        """
        mode = self.config.mode
        if isinstance(mode, Deduplication):
            return self.deduplicate(mode.sources)
        if isinstance(mode, RecordLinkage):
            return self.link(mode.group1, mode.group2)
        raise ConfigurationError("Configuration has no data sources")

    def deduplicate(self, sources: Iterable[DataSource]) -> Iterator[ClassificationResult]:
        """Find duplicates within one pool of sources.

        Yields
        ------
        ClassificationResult
            Matches and possible matches (and non-matches if enabled).
        """
        self._reset()
        database = self._open_database()
        start = time.perf_counter()
        seen: set[str] = set()
        try:
            self._stage_started(STAGE_MATCHING)
            for record in self._records(sources):
                if self._cancelled():
                    break
                if not self._accept(record, seen, 0):
                    continue
                self._index(database, record, 0)
                database.commit()
                yield from self._query(database, record, 0)
            self._stage_finished(STAGE_MATCHING, start)
        finally:
            self._close_database(database)

    def link(
        self,
        group1: Iterable[DataSource],
        group2: Iterable[DataSource],
    ) -> Iterator[ClassificationResult]:
        """Link group 1 records against group 2 records.

        Yields
        ------
        ClassificationResult
            Pairs with ``record_a`` from group 1 and ``record_b`` from
            group 2.
        """
        self._reset()
        database = self._open_database()
        try:
            start = time.perf_counter()
            self._stage_started(STAGE_INDEXING)
            seen: set[str] = set()
            for record in self._records(group2):
                if self._cancelled():
                    return
                if self._accept(record, seen, 2):
                    self._index(database, record, 2)
            # phase barrier: no query before group 2 is fully visible
            database.commit()
            self._stage_finished(STAGE_INDEXING, start)

            start = time.perf_counter()
            self._stage_started(STAGE_MATCHING)
            seen = set()
            for record in self._records(group1):
                if self._cancelled():
                    return
                if self._accept(record, seen, 1):
                    yield from self._query(database, record, 1)
            self._stage_finished(STAGE_MATCHING, start)
        finally:
            self._close_database(database)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        self.stats = ProcessorStats()
        self._states = {}

    def _open_database(self) -> RecordDatabase:
        if self._database is not None:
            return self._database
        return self.config.create_database()

    def _close_database(self, database: RecordDatabase) -> None:
        # caller-supplied databases stay open
        if database is not self._database:
            database.close()

    def _records(self, sources: Iterable[DataSource]) -> Iterator[Record]:
        for source in sources:
            for record in source.records():
                self.stats.records_seen += 1
                yield record

    def _cancelled(self) -> bool:
        if self.cancel is None or not self.cancel.is_set():
            return False
        self.stats.cancelled = True
        if self.logger:
            self.logger.run_cancelled(self.stats.counters())
        return True

    def _accept(self, record: Record, seen: set[str], group: int) -> bool:
        """Validate *record*; report and reject it if malformed."""
        try:
            self._validate(record, seen)
        except RecordError as e:
            self.stats.records_failed += 1
            if self.logger:
                self.logger.error(type(e).__name__, str(e), rid=e.rid)
            return False
        seen.add(record.rid)
        self._states[group, record.rid] = RecordState.UNPROCESSED
        return True

    def _validate(self, record: Record, seen: set[str]) -> None:
        if record.errors:
            raise RecordError("; ".join(record.errors), rid=record.rid or None)
        if not record.rid:
            raise RecordError("Record has no identity value")
        if record.rid in seen:
            raise RecordError(f"Duplicate record id: {record.rid!r}", rid=record.rid)
        for name, values in record.values.items():
            if not all(isinstance(v, str) for v in values):
                raise RecordError(f"Non-string value for property {name!r}", rid=record.rid)

    def _index(self, database: RecordDatabase, record: Record, group: int) -> None:
        """Index with bounded retries; index writes are idempotent."""
        attempt = 0
        while True:
            try:
                database.index(record)
                break
            except BackendError as e:
                if attempt >= self.settings.index_retries:
                    raise
                attempt += 1
                self.stats.index_retries += 1
                if self.logger:
                    self.logger.index_retry(record.rid, attempt, str(e))
        self.stats.records_indexed += 1
        self._states[group, record.rid] = RecordState.INDEXED

    def _query(
        self, database: RecordDatabase, record: Record, group: int
    ) -> Iterator[ClassificationResult]:
        # group-1 queries run against group 2, where an equal rid is another record
        linked = group == 1
        candidates = database.find_candidates(record, exclude_self=not linked)
        self.stats.records_queried += 1
        self._states[group, record.rid] = RecordState.QUERIED

        results = [
            self.matcher.classify_pair(record, candidate, linked=linked) for candidate in candidates
        ]
        self._states[group, record.rid] = RecordState.CLASSIFIED

        for result in results:
            self.stats.candidates += 1
            if result.verdict is Verdict.MATCH:
                self.stats.matches += 1
            elif result.verdict is Verdict.POSSIBLE_MATCH:
                self.stats.possible_matches += 1
            elif not self.settings.emit_non_matches:
                continue

            if self.logger and result.verdict is not Verdict.NON_MATCH:
                self.logger.pair_classified(result)
            yield result

    def _stage_started(self, stage: str) -> None:
        if self.logger:
            self.logger.stage_started(stage)

    def _stage_finished(self, stage: str, start: float) -> None:
        if self.logger:
            self.logger.stage_finished(
                stage=stage,
                duration_seconds=time.perf_counter() - start,
                counters=self.stats.counters(),
            )
