"""Core data models: properties and records."""

from bayeslink.models.properties import Property, PropertyRole
from bayeslink.models.records import RID_SEPARATOR, Record

__all__ = [
    "Property",
    "PropertyRole",
    "Record",
    "RID_SEPARATOR",
]
