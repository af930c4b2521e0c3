"""Pytest configuration and fixtures for test suite."""

import sys
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import pytest

# Add src directory to path for imports
SRC_PATH = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_PATH))

from bayeslink.comparators import ExactComparator, LevenshteinComparator  # noqa: E402
from bayeslink.config import (  # noqa: E402
    Configuration,
    ConfigurationBuilder,
    DatabaseSettings,
)
from bayeslink.models import Property, PropertyRole  # noqa: E402
from bayeslink.sources import InMemoryDataSource  # noqa: E402

IDENTITY = ["ID"]


def people_properties() -> list[Property]:
    """Identity ID, fuzzy NAME (0.2-0.88) and exact MBOX_HASH (0.48-0.6)."""
    return [
        Property("ID", role=PropertyRole.IDENTITY),
        Property("NAME", LevenshteinComparator(), low=0.2, high=0.88),
        Property("MBOX_HASH", ExactComparator(), low=0.48, high=0.6),
    ]


@pytest.fixture
def people_props() -> list[Property]:
    """Fresh list of the people properties."""
    return people_properties()


@pytest.fixture
def people_config() -> Configuration:
    """Configuration without sources: threshold 0.89, no possible-match band."""
    return ConfigurationBuilder(threshold=0.89).set_properties(people_properties()).build()


@pytest.fixture
def config_factory() -> Callable[..., Configuration]:
    """Factory building configurations over the people properties.

    Keyword arguments: ``threshold``, ``threshold_maybe``, ``database``,
    ``dedup`` (rows for group 0), ``group1`` and ``group2`` (rows for
    linkage), ``properties`` (override the property list).
    """

    def _make(
        threshold: float = 0.89,
        threshold_maybe: float = 0.0,
        database: DatabaseSettings | None = None,
        dedup: Iterable[dict[str, Any]] | None = None,
        group1: Iterable[dict[str, Any]] | None = None,
        group2: Iterable[dict[str, Any]] | None = None,
        properties: list[Property] | None = None,
    ) -> Configuration:
        builder = ConfigurationBuilder(
            threshold=threshold, threshold_maybe=threshold_maybe, database=database
        )
        builder.set_properties(properties if properties is not None else people_properties())
        if dedup is not None:
            builder.add_data_source(0, InMemoryDataSource.from_mappings(dedup, IDENTITY))
        if group1 is not None:
            builder.add_data_source(1, InMemoryDataSource.from_mappings(group1, IDENTITY, "g1"))
        if group2 is not None:
            builder.add_data_source(2, InMemoryDataSource.from_mappings(group2, IDENTITY, "g2"))
        return builder.build()

    return _make


@pytest.fixture
def people_rows() -> list[dict[str, Any]]:
    """Five people; 1/2 and 3/4 are duplicates, 5 is unique."""
    return [
        {"ID": "1", "NAME": "Jonathan Random Hacker", "MBOX_HASH": "aa11"},
        {"ID": "2", "NAME": "Jonathan Random Hackr", "MBOX_HASH": "aa11"},
        {"ID": "3", "NAME": "Ada Lovelace", "MBOX_HASH": "bb22"},
        {"ID": "4", "NAME": "Ada Lovelace", "MBOX_HASH": "bb22"},
        {"ID": "5", "NAME": "Grace Hopper", "MBOX_HASH": "cc33"},
    ]
