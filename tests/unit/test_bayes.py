"""Tests for Bayesian combination."""

import itertools

import pytest

from bayeslink.scoring.bayes import NEUTRAL_PRIOR, bayes, combine


@pytest.mark.unit
@pytest.mark.parametrize(
    "prior,probability,expected",
    [
        (0.5, 0.5, 0.5),
        (0.5, 0.9, 0.9),
        (0.9, 0.5, 0.9),
        (0.88, 0.6, 0.9166666666666666),
        (0.5, 1.0, 1.0),
        (0.5, 0.0, 0.0),
    ],
)
def test_bayes_known_values(prior: float, probability: float, expected: float) -> None:
    """Test bayes() against hand-computed posteriors."""
    assert bayes(prior, probability) == pytest.approx(expected)


@pytest.mark.unit
def test_bayes_neutral_element() -> None:
    """Test 0.5 carries no information in either position."""
    for p in (0.0, 0.1, 0.37, 0.5, 0.99, 1.0):
        assert bayes(p, 0.5) == pytest.approx(p)
        assert bayes(0.5, p) == pytest.approx(p)


@pytest.mark.unit
def test_bayes_commutative() -> None:
    """Test argument order does not matter."""
    values = (0.05, 0.2, 0.5, 0.7, 0.95)
    for a, b in itertools.product(values, repeat=2):
        assert bayes(a, b) == pytest.approx(bayes(b, a))


@pytest.mark.unit
def test_bayes_contradictory_certainties_are_neutral() -> None:
    """Test certain agreement against certain disagreement yields 0.5."""
    assert bayes(0.0, 1.0) == 0.5
    assert bayes(1.0, 0.0) == 0.5


@pytest.mark.unit
def test_bayes_stays_in_unit_interval() -> None:
    """Test results never leave [0, 1]."""
    values = (0.0, 0.001, 0.3, 0.5, 0.8, 0.999, 1.0)
    for a, b in itertools.product(values, repeat=2):
        assert 0.0 <= bayes(a, b) <= 1.0


@pytest.mark.unit
def test_combine_is_order_independent() -> None:
    """Test folding a permutation of the same evidence gives the same result."""
    evidence = [0.88, 0.6, 0.3, 0.75]
    expected = combine(evidence)
    for perm in itertools.permutations(evidence):
        assert combine(perm) == pytest.approx(expected)


@pytest.mark.unit
def test_combine_empty_returns_prior() -> None:
    """Test no evidence leaves the prior unchanged."""
    assert combine([]) == NEUTRAL_PRIOR
    assert combine([], prior=0.7) == 0.7


@pytest.mark.unit
@pytest.mark.parametrize("prior", [0.01, 0.2, 0.5, 0.8, 0.99])
def test_bayes_non_decreasing_in_evidence(prior: float) -> None:
    """Test stronger evidence never lowers the posterior for a fixed prior."""
    evidence = [0.0, 0.05, 0.2, 0.5, 0.5, 0.7, 0.95, 1.0]

    posteriors = [bayes(prior, x) for x in evidence]

    assert all(lo <= hi for lo, hi in itertools.pairwise(posteriors))
    assert posteriors[0] == 0.0
    assert posteriors[-1] == 1.0
