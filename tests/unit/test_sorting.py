"""Tests for identifier-aware ordering."""

import pytest

from portal.features.mapping import map_bylaw, map_policy
from portal.features.sorting import compare_identifiers, identifier_segments, sort_by_identifier, sort_documents


def test_dotted_identifiers_sort_numerically() -> None:
    """Test that segments compare as integers, not text."""
    ids = ["2.1", "1.10.1", "1.10", "1.2"]

    assert sort_by_identifier(ids, key=lambda x: x) == ["1.2", "1.10", "1.10.1", "2.1"]


@pytest.mark.parametrize(
    ("a", "b", "expected"),
    [
        ("1.2", "1.10", -1),
        ("1.10", "1.2", 1),
        ("1.10", "1.10.1", -1),
        ("2", "10", -1),
        ("1.0", "1", 1),
    ],
)
def test_compare_identifiers(a: str, b: str, expected: int) -> None:
    """Test three-way comparison of dotted identifiers."""
    assert compare_identifiers(a, b) == expected


def test_equal_numeric_identifiers_fall_back_to_text() -> None:
    """Test that numerically equal ids still have a deterministic order."""
    assert compare_identifiers("1.1", "1.1") == 0
    assert compare_identifiers("1.01", "1.1") == -compare_identifiers("1.1", "1.01")
    assert compare_identifiers("1.01", "1.1") != 0


def test_identifier_segments_read_leading_integers() -> None:
    """Test that non-numeric segments degrade to 0 and suffixes are ignored."""
    assert identifier_segments("3a.2") == [3, 2]
    assert identifier_segments("x.1") == [0, 1]
    assert identifier_segments(None) == [0]
    assert identifier_segments(12) == [12]


def test_sort_documents_orders_policies_and_bylaws() -> None:
    """Test that policies sort by dotted id and bylaws by number."""
    policies = [map_policy({"id": str(i), "policy_id": pid}) for i, pid in enumerate(["1.10", "1.2", "1.1"])]
    bylaws = [map_bylaw({"id": str(i), "bylaw_number": n}) for i, n in enumerate([10, 2, 1])]

    assert [d.display_id for d in sort_documents(policies)] == ["1.1", "1.2", "1.10"]
    assert [d.display_id for d in sort_documents(bylaws)] == ["1", "2", "10"]
