"""Tests for property and record models."""

import dataclasses

import pytest

from bayeslink.comparators import ExactComparator, LevenshteinComparator
from bayeslink.errors import ConfigurationError
from bayeslink.models import Property, PropertyRole, Record

# ---------------------------------------------------------------------------
# Property
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_property_roles() -> None:
    """Test role predicates."""
    ident = Property("ID", role=PropertyRole.IDENTITY)
    ignored = Property("NOTE", role=PropertyRole.IGNORED)
    matched = Property("NAME", ExactComparator(), 0.2, 0.9)

    assert ident.is_identity() and not ident.is_matched()
    assert ignored.is_ignored() and not ignored.is_matched()
    assert matched.is_matched() and not matched.is_identity()


@pytest.mark.unit
@pytest.mark.parametrize(
    "kwargs,message",
    [
        ({"name": "", "comparator": ExactComparator()}, "non-empty"),
        ({"name": "X", "comparator": ExactComparator(), "low": -0.1, "high": 0.5}, "low"),
        ({"name": "X", "comparator": ExactComparator(), "low": 0.1, "high": 1.5}, "high"),
        ({"name": "X", "comparator": ExactComparator(), "low": 0.8, "high": 0.3}, "exceed"),
        ({"name": "X", "low": 0.1, "high": 0.9}, "comparator"),
    ],
)
def test_property_validation(kwargs: dict, message: str) -> None:
    """Test invalid bounds, names and missing comparators are rejected."""
    with pytest.raises(ConfigurationError, match=message):
        Property(**kwargs)


@pytest.mark.unit
def test_property_is_immutable() -> None:
    """Test properties cannot be modified after construction."""
    prop = Property("NAME", ExactComparator(), 0.2, 0.9)

    with pytest.raises(dataclasses.FrozenInstanceError):
        prop.high = 0.95  # type: ignore[misc]


@pytest.mark.unit
def test_property_probability_interpolates() -> None:
    """Test similarity 0 maps to low, 1 to high, linearly in between."""
    prop = Property("NAME", LevenshteinComparator(), low=0.2, high=0.88)

    assert prop.probability(0.0) == pytest.approx(0.2)
    assert prop.probability(1.0) == pytest.approx(0.88)
    assert prop.probability(0.5) == pytest.approx(0.54)


@pytest.mark.unit
def test_property_similarity_takes_best_value_pair() -> None:
    """Test multi-valued fields use the best-scoring combination."""
    prop = Property("EMAIL", ExactComparator(), 0.1, 0.9)

    assert prop.similarity(("a@x", "b@x"), ("c@x", "b@x")) == 1.0
    assert prop.similarity(("a@x",), ("c@x",)) == 0.0


@pytest.mark.unit
def test_property_similarity_missing_values_is_no_evidence() -> None:
    """Test an empty side yields None rather than a score."""
    prop = Property("EMAIL", ExactComparator(), 0.1, 0.9)

    assert prop.similarity((), ("a@x",)) is None
    assert prop.similarity(("a@x",), ()) is None


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_record_from_mapping_normalizes_values() -> None:
    """Test scalars, lists and empties become tuples of strings."""
    record = Record.from_mapping(
        {"ID": 7, "NAME": "Ada", "EMAIL": ["a@x", "", None, "b@x"], "NOTE": "", "AGE": None},
        ["ID"],
    )

    assert record.rid == "7"
    assert record.get("NAME") == ("Ada",)
    assert record.get("EMAIL") == ("a@x", "b@x")
    assert "NOTE" not in record.values
    assert record.get("AGE") == ()


@pytest.mark.unit
def test_record_rid_joins_identity_values() -> None:
    """Test several identity properties join with the separator."""
    record = Record.from_mapping({"SRC": "crm", "ID": "42"}, ["SRC", "ID"])

    assert record.rid == "crm|42"


@pytest.mark.unit
def test_record_without_identity_has_empty_rid() -> None:
    """Test missing identity values leave the rid empty."""
    assert Record.from_mapping({"NAME": "Ada"}, ["ID"]).rid == ""


@pytest.mark.unit
def test_record_from_mapping_keeps_selected_properties() -> None:
    """Test the properties filter drops other fields."""
    record = Record.from_mapping(
        {"ID": "1", "NAME": "Ada", "X": "y"}, ["ID"], properties=["ID", "NAME"]
    )

    assert set(record.values) == {"ID", "NAME"}


@pytest.mark.unit
def test_record_values_are_read_only() -> None:
    """Test record values cannot be mutated in place."""
    record = Record(rid="1", values={"NAME": ("Ada",)})

    with pytest.raises(TypeError):
        record.values["NAME"] = ("Grace",)  # type: ignore[index]


@pytest.mark.unit
def test_record_hash_and_to_dict() -> None:
    """Test records hash by rid and serialise to plain data."""
    record = Record(rid="1", values={"NAME": ("Ada",)})

    assert hash(record) == hash("1")
    assert record == Record(rid="1", values={"NAME": ("Ada",)})
    assert record.to_dict() == {"rid": "1", "values": {"NAME": ["Ada"]}}
