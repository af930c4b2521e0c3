"""Probabilistic entity resolution: deduplication and record linkage.

This package provides:
- Comparators (bayeslink.comparators): pluggable field similarity functions
- Models (bayeslink.models): properties and records
- Configuration (bayeslink.config): builder, immutable model, JSON loader
- Scoring (bayeslink.scoring): Bayesian combination, lookup selection, matcher
- Databases (bayeslink.database): in-memory and indexed candidate retrieval
- Sources (bayeslink.sources): record readers
- Engine (bayeslink.engine): the linkage processor
- Audit (bayeslink.audit): structured JSONL logging
- CLI (bayeslink.cli): command-line interface
"""

__version__ = "0.1.0"
__license__ = "MIT"

from bayeslink.config import Configuration, ConfigurationBuilder, load_configuration
from bayeslink.engine import LinkageProcessor, ProcessorSettings
from bayeslink.errors import (
    BackendError,
    BayesLinkError,
    ComparatorContractError,
    ConfigurationError,
    RecordError,
    UnknownPropertyError,
)
from bayeslink.models import Property, PropertyRole, Record
from bayeslink.scoring import ClassificationResult, Matcher, Verdict, bayes

__all__ = [
    "__version__",
    "__license__",
    # Configuration
    "Configuration",
    "ConfigurationBuilder",
    "load_configuration",
    # Models
    "Property",
    "PropertyRole",
    "Record",
    # Scoring
    "bayes",
    "Matcher",
    "Verdict",
    "ClassificationResult",
    # Engine
    "LinkageProcessor",
    "ProcessorSettings",
    # Errors
    "BayesLinkError",
    "ConfigurationError",
    "UnknownPropertyError",
    "BackendError",
    "ComparatorContractError",
    "RecordError",
]
