"""Data source protocol.

A data source yields records lazily. The linkage processor consumes each
source once per run and never rewinds it.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol, runtime_checkable

from bayeslink.models.records import Record

__all__ = ["DataSource"]


@runtime_checkable
class DataSource(Protocol):
    """Structural protocol every data source must satisfy.

    Attributes
    ----------
    name : str
        Label used in audit logs.
    """

    name: str

    def records(self) -> Iterator[Record]:
        """Yield the source's records."""
        ...
