"""Scoring: Bayesian combination, lookup-property selection, classification."""

from bayeslink.scoring.bayes import NEUTRAL_PRIOR, bayes, combine
from bayeslink.scoring.evidence import Evidence, compute_evidence
from bayeslink.scoring.lookup import find_lookup_properties, rank_candidates
from bayeslink.scoring.matcher import Candidate, ClassificationResult, Matcher, Verdict

__all__ = [
    # Combination
    "NEUTRAL_PRIOR",
    "bayes",
    "combine",
    # Evidence
    "Evidence",
    "compute_evidence",
    # Lookup selection
    "find_lookup_properties",
    "rank_candidates",
    # Classification
    "Candidate",
    "ClassificationResult",
    "Matcher",
    "Verdict",
]
