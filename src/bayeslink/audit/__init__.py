"""JSONL audit logging for matching runs.

Main Components
---------------
- AuditLogger: writes run, stage, pair and error events
- generate_run_id: run identifier factory
"""

from bayeslink.audit.helpers import generate_run_id
from bayeslink.audit.logger import AuditLogger
from bayeslink.audit.models import LEVELS, LogEvent, severity

__all__ = [
    "AuditLogger",
    "LEVELS",
    "LogEvent",
    "generate_run_id",
    "severity",
]
