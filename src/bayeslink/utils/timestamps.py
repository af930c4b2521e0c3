"""UTC timestamps for audit events and run identifiers."""

from datetime import UTC, datetime

__all__ = ["get_iso_timestamp"]


def get_iso_timestamp() -> str:
    """Current UTC time as ISO8601 with microseconds and a ``Z`` suffix."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")
