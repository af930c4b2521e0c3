"""JSON configuration loader.

Reads a configuration document, validates it against ``CONFIG_SCHEMA`` with
jsonschema and feeds a :class:`ConfigurationBuilder`.

Document layout::

    {
      "schema": {
        "threshold": 0.89,
        "threshold_maybe": 0.8,
        "database": {"backend": "indexed", "path": "index.sqlite"},
        "properties": [
          {"name": "ID", "role": "identity"},
          {"name": "NAME", "comparator": "levenshtein", "low": 0.2, "high": 0.88}
        ]
      },
      "sources": [{"type": "csv", "path": "people.csv", "group": 0}]
    }
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import jsonschema

from bayeslink.audit.logger import AuditLogger
from bayeslink.comparators import COMPARATOR_REGISTRY, create_comparator
from bayeslink.config.configuration import (
    Configuration,
    ConfigurationBuilder,
    DatabaseBackend,
    DatabaseSettings,
)
from bayeslink.errors import ConfigurationError
from bayeslink.models.properties import Property, PropertyRole
from bayeslink.sources.factory import SOURCE_REGISTRY, SourceConfig, create_source

__all__ = ["CONFIG_SCHEMA", "load_configuration", "validate_document"]

_PROBABILITY = {"type": "number", "minimum": 0, "maximum": 1}

CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["schema"],
    "additionalProperties": False,
    "properties": {
        "schema": {
            "type": "object",
            "required": ["threshold", "properties"],
            "additionalProperties": False,
            "properties": {
                "threshold": _PROBABILITY,
                "threshold_maybe": _PROBABILITY,
                "database": {
                    "type": "object",
                    "additionalProperties": False,
                    "properties": {
                        "backend": {"enum": [b.value for b in DatabaseBackend]},
                        "path": {"type": ["string", "null"]},
                        "overwrite": {"type": "boolean"},
                    },
                },
                "properties": {
                    "type": "array",
                    "minItems": 1,
                    "items": {
                        "type": "object",
                        "required": ["name"],
                        "additionalProperties": False,
                        "properties": {
                            "name": {"type": "string", "minLength": 1},
                            "role": {"enum": [r.value for r in PropertyRole]},
                            "comparator": {"enum": sorted(COMPARATOR_REGISTRY)},
                            "comparator_params": {"type": "object"},
                            "low": _PROBABILITY,
                            "high": _PROBABILITY,
                        },
                    },
                },
            },
        },
        "sources": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["type", "path"],
                "properties": {
                    "type": {"enum": sorted(SOURCE_REGISTRY)},
                    "path": {"type": "string", "minLength": 1},
                    "group": {"enum": [0, 1, 2]},
                },
            },
        },
    },
}


def validate_document(document: Any) -> None:
    """Validate a configuration document against ``CONFIG_SCHEMA``.

    Raises
    ------
    ConfigurationError
        Listing every violation with its JSON path.
    """
    validator = jsonschema.Draft202012Validator(CONFIG_SCHEMA)
    errors = sorted(validator.iter_errors(document), key=lambda e: list(e.absolute_path))
    if errors:
        details = "; ".join(f"{e.json_path}: {e.message}" for e in errors)
        raise ConfigurationError(f"Invalid configuration: {details}")


def _build_property(spec: Mapping[str, Any]) -> Property:
    role = PropertyRole(spec.get("role", PropertyRole.MATCHED.value))
    comparator = None
    if "comparator" in spec:
        comparator = create_comparator(spec["comparator"], spec.get("comparator_params"))
    elif role is PropertyRole.MATCHED:
        raise ConfigurationError(f"Matched property {spec['name']!r} needs a comparator")

    return Property(
        name=spec["name"],
        comparator=comparator,
        low=spec.get("low", 0.0),
        high=spec.get("high", 0.0),
        role=role,
    )


def _read_document(source: str | Path | Mapping[str, Any]) -> tuple[Any, Path | None]:
    if isinstance(source, Mapping):
        return source, None

    path = Path(source)
    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f), path.parent
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Malformed JSON in {path}: {e}") from e


def load_configuration(
    source: str | Path | Mapping[str, Any],
    logger: AuditLogger | None = None,
) -> Configuration:
    """Load and build a configuration.

    Parameters
    ----------
    source : str | Path | Mapping[str, Any]
        Path to a JSON document, or the already-parsed document. Relative
        source paths resolve against the document's directory (or the
        working directory for a mapping).
    logger : AuditLogger | None, optional
        Receives a ``configuration_loaded`` event.

    Returns
    -------
    Configuration
        Built configuration.

    Raises
    ------
    ConfigurationError
        For schema violations, unknown comparators or sources, bad
        property bounds, duplicate names, mixed groups or an unreachable
        threshold.
    """
    document, base_dir = _read_document(source)
    validate_document(document)

    schema = document["schema"]
    db_spec = dict(schema.get("database", {}))
    if db_spec.get("path") and base_dir is not None and not Path(db_spec["path"]).is_absolute():
        db_spec["path"] = str(base_dir / db_spec["path"])
    database = DatabaseSettings(**db_spec)
    builder = ConfigurationBuilder(
        threshold=schema["threshold"],
        threshold_maybe=schema.get("threshold_maybe", 0.0),
        database=database,
    )
    builder.set_properties(_build_property(spec) for spec in schema["properties"])

    identity = [p.name for p in builder.properties if p.is_identity()]
    for entry in document.get("sources", []):
        params = {k: v for k, v in entry.items() if k not in ("type", "path", "group")}
        source_config = SourceConfig(
            type=entry["type"],
            path=entry["path"],
            group=entry.get("group", 0),
            params=params,
        )
        builder.add_data_source(
            source_config.group, create_source(source_config, identity, base_dir)
        )

    config = builder.build()

    if logger:
        logger.configuration_loaded(config.to_dict())

    return config
