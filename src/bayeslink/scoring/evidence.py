"""Evidence vectors: per-property similarity of a record pair."""

from collections.abc import Iterable

from bayeslink.models.properties import Property
from bayeslink.models.records import Record

__all__ = ["Evidence", "compute_evidence"]

# Matched property name → similarity in [0, 1]
Evidence = dict[str, float]


def compute_evidence(properties: Iterable[Property], record_a: Record, record_b: Record) -> Evidence:
    """Compare two records on every matched property.

    Properties without values on either side contribute no entry.

    Raises
    ------
    ComparatorContractError
        If a comparator breaks the [0, 1] contract.
    """
    evidence: Evidence = {}
    for prop in properties:
        if not prop.is_matched():
            continue
        sim = prop.similarity(record_a.get(prop.name), record_b.get(prop.name))
        if sim is not None:
            evidence[prop.name] = sim
    return evidence
