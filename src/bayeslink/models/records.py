"""Record model: an identified, multi-valued mapping of property values."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

__all__ = ["Record", "RID_SEPARATOR"]

# Joins the values of several identity properties into one record id
RID_SEPARATOR = "|"


def _as_values(raw: Any) -> tuple[str, ...]:
    """Normalise a scalar or sequence into a tuple of non-empty strings."""
    if raw is None:
        return ()
    if isinstance(raw, str):
        items: Iterable[Any] = (raw,)
    elif isinstance(raw, Iterable):
        items = raw
    else:
        items = (raw,)
    return tuple(str(item) for item in items if item is not None and str(item) != "")


@dataclass(frozen=True, slots=True)
class Record:
    """An immutable record.

    Attributes
    ----------
    rid : str
        Record identifier, derived from identity property values.
    values : Mapping[str, tuple[str, ...]]
        Property name → zero or more values, in insertion order.
    errors : tuple[str, ...]
        Problems a data source hit while reading this record (e.g. a line
        that is not valid JSON). The linkage processor reports and skips
        records that carry any.
    """

    rid: str
    values: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    errors: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def __hash__(self) -> int:
        return hash(self.rid)

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        identity: Iterable[str],
        *,
        properties: Iterable[str] | None = None,
    ) -> Record:
        """Build a record from loosely typed field data.

        Parameters
        ----------
        data : Mapping[str, Any]
            Field name → scalar, sequence or None.
        identity : Iterable[str]
            Identity property names, in order; their values form the rid.
        properties : Iterable[str] | None, optional
            Keep only these field names. All fields are kept when None.

        Returns
        -------
        Record
            The record. Its rid is empty when no identity value is present;
            the linkage processor rejects such records.
        """
        keep = set(properties) if properties is not None else None
        values = {
            name: _as_values(raw)
            for name, raw in data.items()
            if keep is None or name in keep
        }
        rid = RID_SEPARATOR.join(v for name in identity for v in values.get(name, ()))
        return cls(rid=rid, values={k: v for k, v in values.items() if v})

    def get(self, name: str) -> tuple[str, ...]:
        """Return the values of *name*, or an empty tuple."""
        return self.values.get(name, ())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"rid": self.rid, "values": {k: list(v) for k, v in self.values.items()}}
