"""Record databases: candidate retrieval and evidence computation."""

from bayeslink.database.base import RecordDatabase
from bayeslink.database.indexed import IndexedDatabase
from bayeslink.database.memory import InMemoryDatabase

__all__ = [
    "RecordDatabase",
    "InMemoryDatabase",
    "IndexedDatabase",
]
