"""Bayesian combination of independent match probabilities.

Each piece of evidence states "probability these two records denote the
same entity". Independent pieces combine by multiplying their odds.
"""

from collections.abc import Iterable

__all__ = ["NEUTRAL_PRIOR", "bayes", "combine"]

# Maximum uncertainty: odds of 1
NEUTRAL_PRIOR = 0.5


def bayes(prior: float, probability: float) -> float:
    """Combine a prior probability with one more piece of evidence.

    Parameters
    ----------
    prior : float
        Current probability (0.0-1.0).
    probability : float
        Evidence probability (0.0-1.0).

    Returns
    -------
    float
        Posterior probability (0.0-1.0).

    Notes
    -----
    odds(result) = odds(prior) * odds(probability), computed as
    ``p1*p2 / (p1*p2 + (1-p1)*(1-p2))`` so that certain evidence (0 or 1)
    saturates without dividing by zero: certain evidence wins over any
    uncertain prior.

    When both sides are certain and contradict each other (one is 0, the
    other 1) the formula is 0/0. Returning either 0 or 1 would let argument
    order decide the outcome and break ``bayes(a, b) == bayes(b, a)``;
    0.5 keeps the function symmetric and lets later evidence in a fold
    decide instead.
    """
    agree = prior * probability
    disagree = (1.0 - prior) * (1.0 - probability)
    total = agree + disagree
    if total == 0.0:
        return NEUTRAL_PRIOR
    return agree / total


def combine(probabilities: Iterable[float], prior: float = NEUTRAL_PRIOR) -> float:
    """Fold :func:`bayes` over *probabilities*, starting from *prior*."""
    result = prior
    for probability in probabilities:
        result = bayes(result, probability)
    return result
