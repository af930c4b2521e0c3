"""Property model: a field name bound to a comparator and probabilities."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from bayeslink.comparators import Comparator, checked_compare
from bayeslink.errors import ConfigurationError

__all__ = ["PropertyRole", "Property"]


class PropertyRole(StrEnum):
    """How a property takes part in matching.

    Attributes
    ----------
    IDENTITY : str
        Labels a record; never compared.
    IGNORED : str
        Carried along but never compared or indexed.
    MATCHED : str
        Compared and combined into the match probability.
    """

    IDENTITY = "identity"
    IGNORED = "ignored"
    MATCHED = "matched"


@dataclass(frozen=True, slots=True)
class Property:
    """A record field with its comparator and probability bounds.

    Attributes
    ----------
    name : str
        Unique property name.
    comparator : Comparator | None
        Similarity function; required for MATCHED properties.
    low : float
        Match probability at the lowest similarity (0.0).
    high : float
        Match probability at the highest similarity (1.0).
    role : PropertyRole
        Identity, ignored or matched.

    Raises
    ------
    ConfigurationError
        If the bounds are outside [0, 1], ``low > high``, the name is
        empty, or a MATCHED property has no comparator.
    """

    name: str
    comparator: Comparator | None = None
    low: float = 0.0
    high: float = 0.0
    role: PropertyRole = PropertyRole.MATCHED

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigurationError("Property name must be a non-empty string")
        if not 0.0 <= self.low <= 1.0:
            raise ConfigurationError(f"Property {self.name!r}: low must be in [0, 1], got {self.low}")
        if not 0.0 <= self.high <= 1.0:
            raise ConfigurationError(
                f"Property {self.name!r}: high must be in [0, 1], got {self.high}"
            )
        if self.low > self.high:
            raise ConfigurationError(
                f"Property {self.name!r}: low ({self.low}) must not exceed high ({self.high})"
            )
        if self.role is PropertyRole.MATCHED and self.comparator is None:
            raise ConfigurationError(f"Matched property {self.name!r} needs a comparator")

    def is_identity(self) -> bool:
        """Return whether this property identifies records."""
        return self.role is PropertyRole.IDENTITY

    def is_ignored(self) -> bool:
        """Return whether this property is excluded from matching."""
        return self.role is PropertyRole.IGNORED

    def is_matched(self) -> bool:
        """Return whether this property is compared."""
        return self.role is PropertyRole.MATCHED

    def probability(self, similarity: float) -> float:
        """Map a similarity in [0, 1] to a match probability.

        Notes
        -----
        Linear interpolation: ``low + (high - low) * similarity``.
        """
        return self.low + (self.high - self.low) * similarity

    def similarity(self, values_a: Iterable[str], values_b: Iterable[str]) -> float | None:
        """Best similarity over all value pairs of two multi-valued fields.

        Returns
        -------
        float | None
            Highest comparator score, or None when either side has no
            values (no evidence).

        Raises
        ------
        ComparatorContractError
            If the comparator returns a score outside [0, 1].
        """
        if self.comparator is None:
            return None

        values_b = tuple(values_b)
        best: float | None = None
        for value_a in values_a:
            for value_b in values_b:
                score = checked_compare(self.comparator, value_a, value_b)
                if best is None or score > best:
                    best = score
                if best == 1.0:
                    return best
        return best
