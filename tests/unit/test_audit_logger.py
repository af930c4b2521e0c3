"""Tests for audit logger module."""

import json
from pathlib import Path

import jsonschema
import pytest

from bayeslink.audit import AuditLogger, generate_run_id
from bayeslink.config import Configuration
from bayeslink.models import Record
from bayeslink.scoring import Candidate, Matcher


@pytest.fixture
def logger(tmp_path: Path) -> AuditLogger:
    """Create a logger that auto-closes after test."""
    lg = AuditLogger(run_id="test_run", log_path=tmp_path / "events.jsonl")
    yield lg
    lg.close()


def _read_events(path: Path) -> list[dict]:
    """Read all JSONL events from file."""
    with path.open() as f:
        return [json.loads(line) for line in f if line.strip()]


@pytest.mark.unit
def test_logger_event_writes_valid_jsonl(logger: AuditLogger) -> None:
    """Test event() writes a valid JSONL line with correct envelope."""
    logger.event("pair_classified", data={"pair_id": "1|2"}, level="INFO", rid="2")

    (evt,) = _read_events(logger.log_path)

    assert evt["run_id"] == "test_run"
    assert evt["event"] == "pair_classified"
    assert evt["level"] == "INFO"
    assert evt["data"] == {"pair_id": "1|2"}
    assert evt["rid"] == "2"
    assert evt["ts"].endswith("Z")


@pytest.mark.unit
def test_logger_stage_context(logger: AuditLogger) -> None:
    """Test stage_started() sets the stage inherited by later events."""
    logger.stage_started("indexing")
    logger.event("ev1")
    logger.event("ev2", stage="override")
    logger.set_stage(None)
    logger.event("ev3")

    events = _read_events(logger.log_path)

    assert [e["stage"] for e in events] == ["indexing", "indexing", "override", None]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("method", "kwargs", "expected_event", "expected_level"),
    [
        ("run_started", {"command": ["bayeslink"], "parameters": {"k": 1}}, "run_started", "INFO"),
        ("run_finished", {"status": "success", "duration_seconds": 1.5}, "run_finished", "INFO"),
        ("stage_started", {"stage": "matching"}, "stage_started", "INFO"),
        (
            "stage_finished",
            {"stage": "matching", "duration_seconds": 2.0, "counters": {"matches": 5}},
            "stage_finished",
            "INFO",
        ),
        ("error", {"exception_class": "RecordError", "message": "bad"}, "error", "ERROR"),
        ("configuration_loaded", {"summary": {"threshold": 0.9}}, "configuration_loaded", "INFO"),
        ("run_cancelled", {"counters": {"records_seen": 3}}, "run_cancelled", "WARN"),
        ("index_retry", {"rid": "r1", "attempt": 1, "message": "locked"}, "index_retry", "WARN"),
    ],
)
def test_logger_convenience_methods(
    logger: AuditLogger,
    method: str,
    kwargs: dict,
    expected_event: str,
    expected_level: str,
) -> None:
    """Test all convenience methods produce correct event type and level."""
    getattr(logger, method)(**kwargs)

    events = _read_events(logger.log_path)

    assert len(events) == 1
    assert events[0]["event"] == expected_event
    assert events[0]["level"] == expected_level


@pytest.mark.unit
def test_logger_error_carries_rid(logger: AuditLogger) -> None:
    """Test record-specific errors name the record."""
    logger.error("RecordError", "Duplicate record id", rid="r7")

    (evt,) = _read_events(logger.log_path)

    assert evt["rid"] == "r7"
    assert evt["data"] == {"exception_class": "RecordError", "message": "Duplicate record id"}


@pytest.mark.unit
def test_logger_level_filtering(tmp_path: Path) -> None:
    """Test events below min_level are dropped."""
    log_path = tmp_path / "events.jsonl"

    with AuditLogger(run_id="r1", log_path=log_path, min_level="WARN") as lg:
        assert not lg.enabled_for("INFO")
        assert lg.enabled_for("ERROR")
        lg.event("debug", level="DEBUG")
        lg.event("info")
        lg.event("warn", level="WARN")
        lg.error("BackendError", "boom")

    assert [e["event"] for e in _read_events(log_path)] == ["warn", "error"]


@pytest.mark.unit
def test_logger_rejects_unknown_level(tmp_path: Path) -> None:
    """Test an unknown min_level is refused."""
    with pytest.raises(ValueError, match="Unknown log level"):
        AuditLogger(run_id="r1", log_path=tmp_path / "e.jsonl", min_level="TRACE")


@pytest.mark.unit
def test_logger_close_and_context_manager(tmp_path: Path) -> None:
    """Test close() flushes and context manager auto-closes."""
    log_path = tmp_path / "events.jsonl"

    with AuditLogger(run_id="r1", log_path=log_path) as lg:
        lg.event("inside")

    # Second logger can append to same file
    with AuditLogger(run_id="r2", log_path=log_path) as lg2:
        lg2.event("second")

    events = _read_events(log_path)
    assert [e["run_id"] for e in events] == ["r1", "r2"]


@pytest.mark.unit
def test_logger_creates_parent_directories(tmp_path: Path) -> None:
    """Test logger creates nested parent directories."""
    nested = tmp_path / "a" / "b" / "events.jsonl"
    lg = AuditLogger(run_id="test", log_path=nested)
    lg.event("test")
    lg.close()

    assert nested.exists()
    assert len(_read_events(nested)) == 1


@pytest.mark.unit
def test_generate_run_id_format_and_uniqueness() -> None:
    """Test run ID has correct format and successive calls are unique."""
    rid1 = generate_run_id()
    rid2 = generate_run_id()

    # Format: ISO8601__hex8
    parts = rid1.split("__")
    assert len(parts) == 2
    assert parts[0].endswith("Z")
    assert len(parts[1]) == 8

    assert rid1 != rid2


_EVENT_SCHEMA = {
    "type": "object",
    "required": ["ts", "run_id", "level", "event", "data", "stage", "rid"],
    "additionalProperties": False,
    "properties": {
        "ts": {"type": "string", "pattern": "Z$"},
        "run_id": {"type": "string", "minLength": 1},
        "level": {"enum": ["DEBUG", "INFO", "WARN", "ERROR"]},
        "event": {"type": "string", "minLength": 1},
        "data": {"type": "object"},
        "stage": {"type": ["string", "null"]},
        "rid": {"type": ["string", "null"]},
    },
}


@pytest.mark.unit
def test_generated_events_validate(tmp_path: Path) -> None:
    """Test every event envelope the logger writes validates against the schema."""
    log_path = tmp_path / "events.jsonl"
    with AuditLogger(run_id=generate_run_id(), log_path=log_path, min_level="DEBUG") as lg:
        lg.run_started(command=["bayeslink", "run"], parameters={"config": "c.json"})
        lg.stage_started("matching")
        lg.event("pair_classified", data={"pair_id": "1|2"}, level="DEBUG", rid="2")
        lg.error("RecordError", "Record has no identity value")
        lg.stage_finished("matching", duration_seconds=0.1, counters={"matches": 1})
        lg.run_finished(status="success", duration_seconds=0.2, records_processed=2)

    events = _read_events(log_path)
    assert len(events) == 6
    for event in events:
        jsonschema.validate(instance=event, schema=_EVENT_SCHEMA)


@pytest.mark.unit
def test_pair_classified_is_debug_only(tmp_path: Path, people_config: Configuration) -> None:
    """Test classified pairs are written only when DEBUG is enabled."""
    a = Record.from_mapping({"ID": "1", "NAME": "Ada Lovelace", "MBOX_HASH": "bb22"}, ["ID"])
    b = Record.from_mapping({"ID": "2", "NAME": "Ada Lovelace", "MBOX_HASH": "bb22"}, ["ID"])
    candidate = Candidate(record=a, evidence={"NAME": 1.0, "MBOX_HASH": 1.0})
    result = Matcher(people_config).classify_pair(b, candidate)

    quiet = tmp_path / "info.jsonl"
    with AuditLogger(run_id="r1", log_path=quiet) as lg:
        lg.pair_classified(result)
    verbose = tmp_path / "debug.jsonl"
    with AuditLogger(run_id="r1", log_path=verbose, min_level="DEBUG") as lg:
        lg.pair_classified(result)

    assert _read_events(quiet) == []
    (evt,) = _read_events(verbose)
    assert evt["rid"] == "2"
    assert evt["data"]["pair_id"] == result.pair_id
    assert evt["data"]["verdict"] == result.verdict.value
