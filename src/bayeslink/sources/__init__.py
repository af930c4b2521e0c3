"""Data sources: thin adapters yielding records."""

from bayeslink.sources.base import DataSource
from bayeslink.sources.factory import SOURCE_REGISTRY, SourceConfig, create_source
from bayeslink.sources.files import CsvDataSource, JsonlDataSource
from bayeslink.sources.memory import InMemoryDataSource

__all__ = [
    # Protocol
    "DataSource",
    # Sources
    "InMemoryDataSource",
    "CsvDataSource",
    "JsonlDataSource",
    # Factory
    "SOURCE_REGISTRY",
    "SourceConfig",
    "create_source",
]
