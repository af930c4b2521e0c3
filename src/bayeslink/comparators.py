"""Field comparators.

Each comparator maps two non-empty field values to a similarity score in
[0, 1]. Comparators are pure and deterministic; missing values are handled
by the caller, never here.

Architecture
------------
* ``Comparator``: structural protocol (one attribute + one method).
* Concrete comparators are plain classes, parameterised at construction.
* ``COMPARATOR_REGISTRY`` maps configuration names to classes, the same
  registry idiom used for data sources.
"""

from __future__ import annotations

import math
from typing import Any, Protocol, runtime_checkable

from rapidfuzz.distance import JaroWinkler, Levenshtein

from bayeslink.errors import ComparatorContractError, ConfigurationError

__all__ = [
    "Comparator",
    "ExactComparator",
    "LevenshteinComparator",
    "JaroWinklerComparator",
    "JaccardComparator",
    "NumericComparator",
    "COMPARATOR_REGISTRY",
    "create_comparator",
    "checked_compare",
]


# ============================================================================
# Protocol
# ============================================================================


@runtime_checkable
class Comparator(Protocol):
    """Structural protocol every comparator must satisfy.

    Attributes
    ----------
    name : str
        Stable identifier used in configuration files and logs.
    """

    name: str

    def compare(self, value_a: str, value_b: str) -> float:
        """Return the similarity of two non-empty values, in [0, 1]."""
        ...


def checked_compare(comparator: Comparator, value_a: str, value_b: str) -> float:
    """Run *comparator* and enforce the [0, 1] contract.

    Raises
    ------
    ComparatorContractError
        If the score is NaN or outside [0, 1]. Scores are never clamped.
    """
    score = comparator.compare(value_a, value_b)
    if math.isnan(score) or not 0.0 <= score <= 1.0:
        raise ComparatorContractError(
            f"Comparator {comparator.name!r} returned {score!r} for "
            f"({value_a!r}, {value_b!r}); scores must be in [0, 1]"
        )
    return float(score)


# ============================================================================
# Comparators
# ============================================================================


class ExactComparator:
    """1.0 for identical values, 0.0 otherwise."""

    name: str = "exact"

    def compare(self, value_a: str, value_b: str) -> float:
        return 1.0 if value_a == value_b else 0.0


class LevenshteinComparator:
    """Normalised edit-distance similarity: ``1 - distance / max(len)``."""

    name: str = "levenshtein"

    def compare(self, value_a: str, value_b: str) -> float:
        return Levenshtein.normalized_similarity(value_a, value_b)


class JaroWinklerComparator:
    """Jaro-Winkler similarity, favouring shared prefixes.

    Attributes
    ----------
    prefix_weight : float
        Winkler prefix scaling factor (at most 0.25 keeps scores in [0, 1]).
    """

    name: str = "jaro-winkler"

    def __init__(self, prefix_weight: float = 0.1) -> None:
        if not 0.0 <= prefix_weight <= 0.25:
            raise ConfigurationError(f"prefix_weight must be in [0, 0.25], got {prefix_weight}")
        self.prefix_weight = prefix_weight

    def compare(self, value_a: str, value_b: str) -> float:
        return JaroWinkler.normalized_similarity(value_a, value_b, prefix_weight=self.prefix_weight)


class JaccardComparator:
    """Jaccard similarity of whitespace-separated token sets.

    Notes
    -----
    Jaccard = |A ∩ B| / |A ∪ B|. Two values without tokens (e.g. only
    whitespace) are treated as agreeing and score 1.0.
    """

    name: str = "jaccard"

    def __init__(self, lowercase: bool = True) -> None:
        self.lowercase = lowercase

    def _tokens(self, value: str) -> set[str]:
        if self.lowercase:
            value = value.lower()
        return set(value.split())

    def compare(self, value_a: str, value_b: str) -> float:
        set_a = self._tokens(value_a)
        set_b = self._tokens(value_b)
        if not set_a and not set_b:
            return 1.0
        if not set_a or not set_b:
            return 0.0
        return len(set_a & set_b) / len(set_a | set_b)


class NumericComparator:
    """Ratio of the smaller to the larger of two numbers.

    Values that do not parse as finite numbers, and numbers of opposite
    sign, score 0.0. Ratios below ``min_ratio`` score 0.0.

    Attributes
    ----------
    min_ratio : float
        Ratios below this are treated as no similarity at all.
    """

    name: str = "numeric"

    def __init__(self, min_ratio: float = 0.0) -> None:
        if not 0.0 <= min_ratio <= 1.0:
            raise ConfigurationError(f"min_ratio must be in [0, 1], got {min_ratio}")
        self.min_ratio = min_ratio

    @staticmethod
    def _parse(value: str) -> float | None:
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return number if math.isfinite(number) else None

    def compare(self, value_a: str, value_b: str) -> float:
        a = self._parse(value_a)
        b = self._parse(value_b)
        if a is None or b is None:
            return 0.0
        if a == b:
            return 1.0
        if (a < 0) != (b < 0):
            return 0.0

        ratio = min(abs(a), abs(b)) / max(abs(a), abs(b))
        return ratio if ratio >= self.min_ratio else 0.0


# ============================================================================
# Registry
# ============================================================================

# name → class returning a Comparator
COMPARATOR_REGISTRY: dict[str, type] = {
    ExactComparator.name: ExactComparator,
    LevenshteinComparator.name: LevenshteinComparator,
    JaroWinklerComparator.name: JaroWinklerComparator,
    JaccardComparator.name: JaccardComparator,
    NumericComparator.name: NumericComparator,
}


def create_comparator(name: str, params: dict[str, Any] | None = None) -> Comparator:
    """Instantiate a comparator by registry name.

    Parameters
    ----------
    name : str
        Key in ``COMPARATOR_REGISTRY``.
    params : dict[str, Any] | None, optional
        Keyword arguments forwarded to the comparator constructor.

    Returns
    -------
    Comparator
        Ready-to-use comparator instance.

    Raises
    ------
    ConfigurationError
        If ``name`` is not in the registry or the parameters are rejected.
    """
    cls = COMPARATOR_REGISTRY.get(name)
    if cls is None:
        valid = ", ".join(sorted(COMPARATOR_REGISTRY))
        raise ConfigurationError(f"Unknown comparator: {name!r}. Valid comparators: {valid}")
    try:
        return cls(**(params or {}))  # type: ignore[no-any-return]
    except TypeError as e:
        raise ConfigurationError(f"Invalid parameters for comparator {name!r}: {e}") from e
