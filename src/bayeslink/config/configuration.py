"""Configuration model and builder.

A ``ConfigurationBuilder`` collects properties, thresholds, data sources and
database settings; ``build()`` validates them, computes the lookup
properties once and returns an immutable ``Configuration``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from bayeslink.errors import (
    ConfigurationError,
    DuplicatePropertyNameError,
    InvalidGroupError,
    UnknownPropertyError,
)
from bayeslink.models.properties import Property
from bayeslink.scoring.lookup import find_lookup_properties

if TYPE_CHECKING:
    from bayeslink.database.base import RecordDatabase
    from bayeslink.sources.base import DataSource

__all__ = [
    "DatabaseBackend",
    "DatabaseSettings",
    "Deduplication",
    "RecordLinkage",
    "Mode",
    "Configuration",
    "ConfigurationBuilder",
]


class DatabaseBackend(StrEnum):
    """Record database implementations."""

    IN_MEMORY = "in-memory"
    INDEXED = "indexed"


@dataclass(frozen=True)
class DatabaseSettings:
    """Record database settings.

    Attributes
    ----------
    backend : DatabaseBackend
        Exhaustive in-memory scan or indexed lookup.
    path : str | None
        Index file for the indexed backend. None keeps the index in memory.
    overwrite : bool
        Discard existing index contents when the database is created.
    """

    backend: DatabaseBackend = DatabaseBackend.IN_MEMORY
    path: str | None = None
    overwrite: bool = False

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "backend", DatabaseBackend(self.backend))
        except ValueError as e:
            valid = ", ".join(b.value for b in DatabaseBackend)
            raise ConfigurationError(
                f"Unknown database backend: {self.backend!r}. Valid backends: {valid}"
            ) from e

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["backend"] = self.backend.value
        return data


@dataclass(frozen=True)
class Deduplication:
    """Deduplication mode: one pool of data sources."""

    sources: tuple[DataSource, ...]


@dataclass(frozen=True)
class RecordLinkage:
    """Record linkage mode: group 1 is queried against group 2."""

    group1: tuple[DataSource, ...]
    group2: tuple[DataSource, ...]


Mode = Deduplication | RecordLinkage


@dataclass(frozen=True)
class Configuration:
    """Immutable matching configuration.

    Build instances with :class:`ConfigurationBuilder`.

    Attributes
    ----------
    properties : Mapping[str, Property]
        Name → property, in declaration order.
    threshold : float
        Probability at or above which a pair is a match.
    threshold_maybe : float
        Lower bound of the possible-match band; 0 disables the band.
    mode : Deduplication | RecordLinkage | None
        Data sources; None for an engine used without configured sources.
    database : DatabaseSettings
        Record database settings.
    lookup_properties : tuple[Property, ...]
        Properties the database indexes, computed at build time.
    """

    properties: Mapping[str, Property]
    threshold: float
    threshold_maybe: float
    mode: Mode | None
    database: DatabaseSettings
    lookup_properties: tuple[Property, ...]

    def is_deduplication_mode(self) -> bool:
        """Return True iff the deduplication pool is non-empty."""
        return isinstance(self.mode, Deduplication) and bool(self.mode.sources)

    @property
    def property_list(self) -> list[Property]:
        """All properties in declaration order."""
        return list(self.properties.values())

    @property
    def identity_properties(self) -> list[Property]:
        """Properties that identify records rather than being compared."""
        return [p for p in self.properties.values() if p.is_identity()]

    @property
    def matched_properties(self) -> list[Property]:
        """Properties that are compared."""
        return [p for p in self.properties.values() if p.is_matched()]

    def get_property(self, name: str) -> Property:
        """Return the property called *name*.

        Raises
        ------
        UnknownPropertyError
            If there is no such property.
        """
        try:
            return self.properties[name]
        except KeyError:
            raise UnknownPropertyError(name) from None

    def get_data_sources(self, group: int = 0) -> tuple[DataSource, ...]:
        """Return the sources of *group* (0 in deduplication mode, 1 or 2 in linkage).

        Raises
        ------
        InvalidGroupError
            If *group* is not 0, 1 or 2.
        """
        if group not in (0, 1, 2):
            raise InvalidGroupError(group)
        if group == 0:
            return self.mode.sources if isinstance(self.mode, Deduplication) else ()
        if not isinstance(self.mode, RecordLinkage):
            return ()
        return self.mode.group1 if group == 1 else self.mode.group2

    def create_database(self, overwrite: bool | None = None) -> RecordDatabase:
        """Create the record database selected by the database settings.

        Parameters
        ----------
        overwrite : bool | None, optional
            Discard existing index contents (indexed backend only; this is
            irreversible). Defaults to ``database.overwrite``.

        Returns
        -------
        RecordDatabase
            A new, empty-or-reopened database.
        """
        from bayeslink.database import IndexedDatabase, InMemoryDatabase

        if self.database.backend is DatabaseBackend.IN_MEMORY:
            return InMemoryDatabase(self)

        if overwrite is None:
            overwrite = self.database.overwrite
        return IndexedDatabase(self, path=self.database.path, overwrite=overwrite)

    def to_dict(self) -> dict[str, Any]:
        """Summarise the configuration for logs and manifests."""
        return {
            "threshold": self.threshold,
            "threshold_maybe": self.threshold_maybe,
            "mode": type(self.mode).__name__ if self.mode is not None else None,
            "database": self.database.to_dict(),
            "properties": [p.name for p in self.properties.values()],
            "lookup_properties": [p.name for p in self.lookup_properties],
        }


class ConfigurationBuilder:
    """Mutable collector that produces an immutable :class:`Configuration`.

    Examples
    --------
        >>> from bayeslink.comparators import ExactComparator
        >>> builder = ConfigurationBuilder(threshold=0.85)
        >>> _ = builder.set_properties([Property("EMAIL", ExactComparator(), 0.1, 0.9)])
        >>> config = builder.build()
        >>> [p.name for p in config.lookup_properties]
        ['EMAIL']
    """

    def __init__(
        self,
        threshold: float = 0.0,
        threshold_maybe: float = 0.0,
        database: DatabaseSettings | None = None,
    ) -> None:
        self.threshold = threshold
        self.threshold_maybe = threshold_maybe
        self.database = database or DatabaseSettings()
        self._properties: dict[str, Property] = {}
        self._pool: list[DataSource] = []
        self._group1: list[DataSource] = []
        self._group2: list[DataSource] = []

    @property
    def properties(self) -> list[Property]:
        """Properties set so far, in order."""
        return list(self._properties.values())

    def set_properties(self, properties: Iterable[Property]) -> ConfigurationBuilder:
        """Replace the property set.

        The replacement is atomic: on error the previous set is kept.

        Raises
        ------
        DuplicatePropertyNameError
            If two properties share a name.
        """
        replacement: dict[str, Property] = {}
        for prop in properties:
            if prop.name in replacement:
                raise DuplicatePropertyNameError(prop.name)
            replacement[prop.name] = prop
        self._properties = replacement
        return self

    def add_data_source(self, group: int, source: DataSource) -> ConfigurationBuilder:
        """Register a data source.

        Parameters
        ----------
        group : int
            0 for the deduplication pool, 1 or 2 for a linkage group.
        source : DataSource
            The source.

        Raises
        ------
        InvalidGroupError
            If *group* is not 0, 1 or 2.
        ConfigurationError
            If deduplication and linkage sources are mixed.
        """
        if isinstance(group, bool) or group not in (0, 1, 2):
            raise InvalidGroupError(group)

        if group == 0:
            if self._group1 or self._group2:
                raise ConfigurationError(
                    "Cannot add a deduplication source (group 0) to a record linkage configuration"
                )
            self._pool.append(source)
            return self

        if self._pool:
            raise ConfigurationError(
                f"Cannot add a record linkage source (group {group}) "
                "to a deduplication configuration"
            )
        (self._group1 if group == 1 else self._group2).append(source)
        return self

    def _mode(self) -> Mode | None:
        if self._pool:
            return Deduplication(tuple(self._pool))
        if self._group1 or self._group2:
            if not (self._group1 and self._group2):
                raise ConfigurationError("Record linkage needs sources in both group 1 and group 2")
            return RecordLinkage(tuple(self._group1), tuple(self._group2))
        return None

    def build(self) -> Configuration:
        """Validate and freeze the configuration.

        Returns
        -------
        Configuration
            Immutable configuration with its lookup properties computed.

        Raises
        ------
        ConfigurationError
            If thresholds are out of range or the mode is incomplete.
        UnreachableThresholdError
            If the properties can never reach ``threshold``.
        """
        if not 0.0 <= self.threshold <= 1.0:
            raise ConfigurationError(f"threshold must be in [0, 1], got {self.threshold}")
        if not 0.0 <= self.threshold_maybe <= self.threshold:
            raise ConfigurationError(
                f"threshold_maybe must be in [0, threshold={self.threshold}], "
                f"got {self.threshold_maybe}"
            )

        mode = self._mode()
        lookups = find_lookup_properties(
            self._properties.values(), self.threshold, self.threshold_maybe
        )
        return Configuration(
            properties=MappingProxyType(dict(self._properties)),
            threshold=self.threshold,
            threshold_maybe=self.threshold_maybe,
            mode=mode,
            database=self.database,
            lookup_properties=lookups,
        )
