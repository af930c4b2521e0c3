"""Lookup-property selection.

Chooses which matched properties the record database indexes. A property's
``high`` probability is the most evidence it can ever contribute, so
properties are ranked by it and folded from the neutral prior. Properties
ranked above the point where the possible-match band first becomes
reachable cannot, on their own, lift a pair into that band; every pair able
to reach it therefore agrees on at least one property from that point on.
"""

from collections.abc import Iterable

from bayeslink.errors import UnreachableThresholdError
from bayeslink.models.properties import Property
from bayeslink.scoring.bayes import NEUTRAL_PRIOR, bayes

__all__ = ["rank_candidates", "find_lookup_properties"]


def rank_candidates(properties: Iterable[Property]) -> list[Property]:
    """Matched properties sorted by ``high`` descending, then name."""
    candidates = [p for p in properties if p.is_matched()]
    candidates.sort(key=lambda p: (-p.high, p.name))
    return candidates


def find_lookup_properties(
    properties: Iterable[Property],
    threshold: float,
    threshold_maybe: float = 0.0,
) -> tuple[Property, ...]:
    """Compute the lookup properties for a property set.

    Parameters
    ----------
    properties : Iterable[Property]
        All configured properties; only matched ones are considered.
    threshold : float
        Match threshold.
    threshold_maybe : float, optional
        Possible-match threshold; 0 disables the band.

    Returns
    -------
    tuple[Property, ...]
        Ranked candidates from the first one at which the fold reaches the
        possible-match limit through the end of the ranking. Properties
        with ``high == 0`` can never provide positive evidence and are never
        included. Empty when no point of the fold reaches the limit, in
        which case retrieval must be exhaustive.

    Raises
    ------
    UnreachableThresholdError
        If even the maximal evidence of every property stays below
        ``threshold``.
    """
    candidates = [p for p in rank_candidates(properties) if p.high > 0.0]
    limit = threshold_maybe if threshold_maybe > 0.0 else threshold

    last = -1
    prob = NEUTRAL_PRIOR
    for ix, prop in enumerate(candidates):
        prob = bayes(prob, prop.high)
        if prob >= limit and last == -1:
            last = ix
        if prob >= threshold:
            break

    if prob < threshold:
        raise UnreachableThresholdError(prob, threshold)

    if last == -1:
        return ()
    return tuple(candidates[last:])
