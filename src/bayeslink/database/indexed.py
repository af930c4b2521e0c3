"""Indexed record database backed by SQLite.

Records are stored as JSON; an inverted index maps
``(property, value) → rid`` for the lookup properties only. Queries retrieve
the union of records sharing at least one lookup-property value with the
query, and compute evidence for those alone.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from bayeslink.database.base import RecordDatabase
from bayeslink.errors import BackendError
from bayeslink.models.records import Record
from bayeslink.scoring.matcher import Candidate

if TYPE_CHECKING:
    from bayeslink.config.configuration import Configuration

__all__ = ["IndexedDatabase"]

# SQLite's default limit on host parameters is 999 on older builds
_FETCH_CHUNK = 500

_SCHEMA = """
CREATE TABLE IF NOT EXISTS records (
    rid TEXT PRIMARY KEY,
    values_json TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS postings (
    property TEXT NOT NULL,
    value TEXT NOT NULL,
    rid TEXT NOT NULL,
    PRIMARY KEY (property, value, rid)
);

CREATE INDEX IF NOT EXISTS idx_postings_rid ON postings(rid);
"""


class IndexedDatabase(RecordDatabase):
    """Inverted-index record database.

    Attributes
    ----------
    path : Path | None
        SQLite file; None keeps the index in memory for this process only.

    Notes
    -----
    All access goes through one connection guarded by a lock, so writes
    are serialised. Queries must follow ``commit()`` of the records they
    should see; the linkage processor enforces that ordering.
    """

    def __init__(
        self,
        config: Configuration,
        path: str | Path | None = None,
        overwrite: bool = False,
    ) -> None:
        """Open (and optionally wipe) the index.

        Parameters
        ----------
        config : Configuration
            Matching configuration.
        path : str | Path | None, optional
            Index file. None for an ephemeral in-memory index.
        overwrite : bool, optional
            Drop any existing index contents. Irreversible.

        Raises
        ------
        BackendError
            If the index cannot be opened or initialised.
        """
        super().__init__(config)
        self.path = Path(path) if path is not None else None
        self._lock = threading.Lock()

        try:
            if self.path is not None:
                self.path.parent.mkdir(parents=True, exist_ok=True)
            target = str(self.path) if self.path is not None else ":memory:"
            self._conn = sqlite3.connect(target, check_same_thread=False)
        except (OSError, sqlite3.Error) as e:
            raise BackendError(f"Cannot open index {self.path or ':memory:'}: {e}") from e

        try:
            with self._transaction() as conn:
                if overwrite:
                    conn.executescript("DROP TABLE IF EXISTS postings; DROP TABLE IF EXISTS records;")
                conn.executescript(_SCHEMA)
        except BackendError:
            self._conn.close()
            raise

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Serialised access; commits on success, maps SQLite errors."""
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except sqlite3.Error as e:
                self._conn.rollback()
                raise BackendError(f"Index operation failed: {e}") from e

    def index(self, record: Record) -> None:
        """Store *record* and its lookup-property postings.

        Idempotent: re-indexing a rid replaces its record and postings.

        Raises
        ------
        BackendError
            If the write fails.
        """
        values_json = json.dumps({k: list(v) for k, v in record.values.items()}, ensure_ascii=False)
        postings = [
            (prop.name, value, record.rid)
            for prop in self._lookup
            for value in record.get(prop.name)
            if value
        ]
        with self._transaction() as conn:
            conn.execute("DELETE FROM postings WHERE rid = ?", (record.rid,))
            conn.execute(
                "INSERT OR REPLACE INTO records (rid, values_json) VALUES (?, ?)",
                (record.rid, values_json),
            )
            conn.executemany(
                "INSERT OR IGNORE INTO postings (property, value, rid) VALUES (?, ?, ?)",
                postings,
            )

    def commit(self) -> None:
        with self._transaction():
            pass

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __len__(self) -> int:
        with self._transaction() as conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM records").fetchone()
        return int(count)

    def _candidate_rids(self, record: Record, exclude_self: bool) -> list[str]:
        """Rids sharing a lookup-property value with *record*, or all rids."""
        with self._transaction() as conn:
            if not self._lookup:
                rows = conn.execute("SELECT rid FROM records ORDER BY rid").fetchall()
                return [rid for (rid,) in rows if not (exclude_self and rid == record.rid)]

            found: dict[str, None] = {}
            for prop in self._lookup:
                for value in record.get(prop.name):
                    rows = conn.execute(
                        "SELECT rid FROM postings WHERE property = ? AND value = ? ORDER BY rid",
                        (prop.name, value),
                    ).fetchall()
                    for (rid,) in rows:
                        if not (exclude_self and rid == record.rid):
                            found[rid] = None
        return list(found)

    def _fetch(self, rids: list[str]) -> list[Record]:
        records: dict[str, Record] = {}
        with self._transaction() as conn:
            for start in range(0, len(rids), _FETCH_CHUNK):
                chunk = rids[start : start + _FETCH_CHUNK]
                placeholders = ",".join("?" * len(chunk))
                rows = conn.execute(
                    f"SELECT rid, values_json FROM records WHERE rid IN ({placeholders})",  # noqa: S608
                    chunk,
                ).fetchall()
                for rid, values_json in rows:
                    values = {k: tuple(v) for k, v in json.loads(values_json).items()}
                    records[rid] = Record(rid=rid, values=values)
        return [records[rid] for rid in rids if rid in records]

    def find_candidates(self, record: Record, *, exclude_self: bool = True) -> list[Candidate]:
        """Retrieve by shared lookup values, then compute evidence.

        Raises
        ------
        BackendError
            If the index cannot be read.
        """
        return [
            Candidate(record=other, evidence=self.evidence(record, other))
            for other in self._fetch(self._candidate_rids(record, exclude_self))
        ]
