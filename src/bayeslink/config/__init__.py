"""Configuration: the builder, the immutable model and the JSON loader."""

from bayeslink.config.configuration import (
    Configuration,
    ConfigurationBuilder,
    DatabaseBackend,
    DatabaseSettings,
    Deduplication,
    Mode,
    RecordLinkage,
)
from bayeslink.config.loader import CONFIG_SCHEMA, load_configuration

__all__ = [
    "CONFIG_SCHEMA",
    "Configuration",
    "ConfigurationBuilder",
    "DatabaseBackend",
    "DatabaseSettings",
    "Deduplication",
    "Mode",
    "RecordLinkage",
    "load_configuration",
]
