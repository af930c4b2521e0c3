"""Event envelope written by the audit logger."""

from dataclasses import asdict, dataclass
from typing import Any

__all__ = ["LEVELS", "LogEvent", "severity"]

# Lowest to highest
LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARN", "ERROR")


def severity(level: str) -> int:
    """Rank of *level* in ``LEVELS``; raises ValueError for unknown names."""
    try:
        return LEVELS.index(level)
    except ValueError:
        raise ValueError(f"Unknown log level: {level!r}. Valid levels: {', '.join(LEVELS)}") from None


@dataclass(frozen=True, slots=True)
class LogEvent:
    """One line of the audit log.

    ``stage`` is "indexing" or "matching" while the processor runs, and
    ``rid`` names the record a per-record event (a rejected record, an
    index retry, a classified pair) is about.
    """

    ts: str
    run_id: str
    level: str
    event: str
    data: dict[str, Any]
    stage: str | None = None
    rid: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
