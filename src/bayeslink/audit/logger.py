"""Append-only JSONL audit log for matching runs.

Each call writes one JSON object per line and flushes immediately, so a
crashed run still leaves a readable log. The configuration loader, the
linkage processor and the CLI are handed a logger explicitly; ``None``
means silent and there is no module-level logger.
"""

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from bayeslink.audit.models import LogEvent, severity
from bayeslink.utils import get_iso_timestamp

if TYPE_CHECKING:
    from bayeslink.scoring.matcher import ClassificationResult

__all__ = ["AuditLogger"]


class AuditLogger:
    """Writes structured run events to a JSONL file.

    Attributes
    ----------
    run_id : str
        Identifier stamped on every event.
    log_path : Path
        Destination file, opened in append mode.
    min_level : str
        Events below this level ("DEBUG" < "INFO" < "WARN" < "ERROR") are
        dropped.
    current_stage : str | None
        Stage attached to events that do not name one ("indexing" or
        "matching" during a processor run).
    """

    def __init__(self, run_id: str, log_path: Path, min_level: str = "INFO") -> None:
        """Open the log file.

        Parameters
        ----------
        run_id : str
            Identifier stamped on every event.
        log_path : Path
            Destination file; parent directories are created.
        min_level : str, optional
            Lowest level written, by default "INFO".

        Raises
        ------
        ValueError
            If ``min_level`` is not a known level.
        """
        self._floor = severity(min_level)
        self.run_id = run_id
        self.log_path = Path(log_path)
        self.min_level = min_level
        self.current_stage: str | None = None

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.log_path.open("a", encoding="utf-8")

    def __enter__(self) -> "AuditLogger":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Flush and close the file; safe to call twice."""
        if not self._file.closed:
            self._file.flush()
            self._file.close()

    def set_stage(self, stage: str | None) -> None:
        """Attach *stage* to subsequent events (None clears it)."""
        self.current_stage = stage

    def enabled_for(self, level: str) -> bool:
        """Return whether events at *level* are written."""
        return severity(level) >= self._floor

    # ------------------------------------------------------------------
    # Generic event
    # ------------------------------------------------------------------

    def event(
        self,
        event_type: str,
        data: dict[str, Any] | None = None,
        level: str = "INFO",
        stage: str | None = None,
        rid: str | None = None,
    ) -> None:
        """Write one event.

        Parameters
        ----------
        event_type : str
            Event name, e.g. "pair_classified".
        data : dict[str, Any] | None, optional
            JSON-serialisable payload.
        level : str, optional
            Severity; events below ``min_level`` are dropped.
        stage : str | None, optional
            Overrides ``current_stage``.
        rid : str | None, optional
            Record the event is about, if any.
        """
        if not self.enabled_for(level):
            return

        record = LogEvent(
            ts=get_iso_timestamp(),
            run_id=self.run_id,
            level=level,
            event=event_type,
            data=data if data is not None else {},
            stage=stage if stage is not None else self.current_stage,
            rid=rid,
        )
        json.dump(record.to_dict(), self._file, ensure_ascii=False, separators=(",", ":"))
        self._file.write("\n")
        self._file.flush()

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def run_started(self, command: list[str], parameters: dict[str, Any]) -> None:
        """Record the command line and run parameters."""
        self.event("run_started", data={"command": command, "parameters": parameters})

    def run_finished(
        self,
        status: str,
        duration_seconds: float,
        records_processed: int | None = None,
    ) -> None:
        """Record the outcome of a run.

        Parameters
        ----------
        status : str
            "success" or "failed".
        duration_seconds : float
            Wall-clock duration of the run.
        records_processed : int | None, optional
            Records read from the data sources.
        """
        data: dict[str, Any] = {"status": status, "duration_seconds": duration_seconds}
        if records_processed is not None:
            data["records_processed"] = records_processed
        self.event("run_finished", data=data)

    def configuration_loaded(self, summary: dict[str, Any]) -> None:
        """Record the thresholds, properties and lookup properties in use."""
        self.event("configuration_loaded", data=summary)

    def run_cancelled(self, counters: dict[str, int]) -> None:
        """Record that a cancellation request stopped the run early."""
        self.event("run_cancelled", data=counters, level="WARN")

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def stage_started(self, stage: str) -> None:
        """Make *stage* current and record its start."""
        self.set_stage(stage)
        self.event("stage_started", stage=stage)

    def stage_finished(
        self,
        stage: str,
        duration_seconds: float,
        counters: dict[str, int] | None = None,
    ) -> None:
        """Record the end of *stage* with the processor counters so far."""
        data: dict[str, Any] = {"duration_seconds": duration_seconds}
        if counters:
            data["counters"] = counters
        self.event("stage_finished", data=data, stage=stage)

    # ------------------------------------------------------------------
    # Matching events
    # ------------------------------------------------------------------

    def pair_classified(self, result: "ClassificationResult") -> None:
        """Record a classified pair at DEBUG level, keyed by the query record."""
        if not self.enabled_for("DEBUG"):
            return
        self.event(
            "pair_classified",
            data={
                "pair_id": result.pair_id,
                "probability": result.probability,
                "verdict": result.verdict.value,
            },
            level="DEBUG",
            rid=result.record_a.rid,
        )

    def index_retry(self, rid: str, attempt: int, message: str) -> None:
        """Record a retried index write."""
        self.event("index_retry", data={"attempt": attempt, "error": message}, level="WARN", rid=rid)

    def error(
        self,
        exception_class: str,
        message: str,
        stage: str | None = None,
        rid: str | None = None,
        traceback: str | None = None,
    ) -> None:
        """Record an error.

        Parameters
        ----------
        exception_class : str
            Name of the exception class, e.g. "RecordError".
        message : str
            Exception message.
        stage : str | None, optional
            Overrides ``current_stage``.
        rid : str | None, optional
            Offending record, for per-record failures.
        traceback : str | None, optional
            Formatted traceback, when the caller wants one kept.
        """
        data: dict[str, Any] = {"exception_class": exception_class, "message": message}
        if traceback is not None:
            data["traceback"] = traceback
        self.event("error", data=data, stage=stage, level="ERROR", rid=rid)
