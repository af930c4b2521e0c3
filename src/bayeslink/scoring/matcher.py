"""Match classification.

Turns an evidence vector into a match probability and a three-way verdict.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from bayeslink.models.records import Record
from bayeslink.scoring.bayes import NEUTRAL_PRIOR, combine
from bayeslink.scoring.evidence import Evidence

if TYPE_CHECKING:
    from bayeslink.config.configuration import Configuration

__all__ = ["Verdict", "Candidate", "ClassificationResult", "Matcher"]


class Verdict(StrEnum):
    """Three-way classification outcomes.

    Attributes
    ----------
    MATCH : str
        probability >= threshold.
    POSSIBLE_MATCH : str
        threshold_maybe > 0 and threshold_maybe <= probability < threshold.
    NON_MATCH : str
        Everything else.
    """

    MATCH = "match"
    POSSIBLE_MATCH = "possible_match"
    NON_MATCH = "non_match"


@dataclass(frozen=True, slots=True)
class Candidate:
    """A stored record returned for a query, with its evidence vector."""

    record: Record
    evidence: Evidence


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Classified record pair.

    Attributes
    ----------
    record_a : Record
        Query record.
    record_b : Record
        Candidate record.
    probability : float
        Combined match probability (0.0-1.0).
    verdict : Verdict
        Match, possible match or non-match.
    evidence : dict[str, float]
        Per-property probabilities that went into the combination.
    linked : bool
        True for record linkage, where ``record_a`` comes from group 1 and
        ``record_b`` from group 2 and the two may share a rid.
    """

    record_a: Record
    record_b: Record
    probability: float
    verdict: Verdict
    evidence: dict[str, float] = field(default_factory=dict)
    linked: bool = False

    @property
    def pair_id(self) -> str:
        """Pair identifier, "rid_a|rid_b".

        Deduplication pairs are unordered, so the rids are sorted. Linkage
        pairs keep the group-1 rid first, since rids are only unique within
        a group.
        """
        if self.linked:
            return f"{self.record_a.rid}|{self.record_b.rid}"
        rid_a, rid_b = sorted((self.record_a.rid, self.record_b.rid))
        return f"{rid_a}|{rid_b}"

    def to_dict(self, round_decimals: int = 6) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "pair_id": self.pair_id,
            "rid_a": self.record_a.rid,
            "rid_b": self.record_b.rid,
            "probability": round(self.probability, round_decimals),
            "verdict": self.verdict.value,
            "evidence": {k: round(v, round_decimals) for k, v in self.evidence.items()},
        }


class Matcher:
    """Bayesian classifier bound to one configuration.

    Attributes
    ----------
    config : Configuration
        Source of property probabilities and thresholds.
    """

    __slots__ = ("config",)

    def __init__(self, config: Configuration) -> None:
        self.config = config

    def probabilities(self, evidence: Evidence) -> dict[str, float]:
        """Map each similarity in *evidence* to its property's probability.

        Raises
        ------
        UnknownPropertyError
            If the evidence names a property the configuration lacks.
        """
        return {
            name: self.config.get_property(name).probability(sim) for name, sim in evidence.items()
        }

    def verdict(self, probability: float) -> Verdict:
        """Classify a combined probability against the thresholds."""
        if probability >= self.config.threshold:
            return Verdict.MATCH
        if self.config.threshold_maybe > 0.0 and probability >= self.config.threshold_maybe:
            return Verdict.POSSIBLE_MATCH
        return Verdict.NON_MATCH

    def classify(self, evidence: Evidence) -> tuple[float, Verdict]:
        """Combine an evidence vector into ``(probability, verdict)``.

        Notes
        -----
        The fold starts from the neutral prior 0.5; evidence order does not
        change the result.
        """
        prob = combine(self.probabilities(evidence).values(), NEUTRAL_PRIOR)
        return prob, self.verdict(prob)

    def classify_pair(
        self, record_a: Record, candidate: Candidate, *, linked: bool = False
    ) -> ClassificationResult:
        """Classify *record_a* against a retrieved candidate.

        *linked* marks a record-linkage pair (see ``ClassificationResult``).
        """
        probabilities = self.probabilities(candidate.evidence)
        prob = combine(probabilities.values(), NEUTRAL_PRIOR)
        return ClassificationResult(
            record_a=record_a,
            record_b=candidate.record,
            probability=prob,
            verdict=self.verdict(prob),
            evidence=probabilities,
            linked=linked,
        )
