"""Run identifiers for audit logs."""

import secrets

from bayeslink.utils import get_iso_timestamp

__all__ = ["generate_run_id"]


def generate_run_id() -> str:
    """Return ``<UTC timestamp>__<8 hex chars>``, unique per call."""
    return f"{get_iso_timestamp()}__{secrets.token_hex(4)}"
