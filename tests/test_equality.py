"""
Unit tests for structural equality and asymmetric matchers.
"""

from dataclasses import dataclass

import pytest

from mockingbird.assertions import (
    AnyMatcher,
    Anything,
    ArrayContaining,
    ObjectContaining,
    PredicateMatcher,
    StringMatching,
    UNDEFINED,
    equals,
    matches_subset,
    same_value,
)


@dataclass
class Point:
    x: int
    y: int


class TestEquals:
    """Test recursive structural equality."""

    @pytest.mark.parametrize(
        "value",
        [1, "a", None, UNDEFINED, [1, [2]], {"a": {"b": 1}}, Point(1, 2), float("nan")],
    )
    def test_reflexive(self, value):
        assert equals(value, value)

    @pytest.mark.parametrize(
        "a, b",
        [
            ({"a": 1, "b": [1, 2]}, {"b": [1, 2], "a": 1}),
            ([1, {"x": 2}], [1, {"x": 2}]),
            (Point(1, 2), Point(1, 2)),
            ((1, 2), [1, 2]),
        ],
    )
    def test_equal_pairs_are_symmetric(self, a, b):
        assert equals(a, b)
        assert equals(b, a)

    @pytest.mark.parametrize(
        "a, b",
        [
            ({"a": 1}, {"a": 1, "b": 2}),
            ([1, 2], [1, 2, 3]),
            ([1, 2], [2, 1]),
            (True, 1),
            (0, False),
            ("1", 1),
            (None, UNDEFINED),
            (Point(1, 2), Point(1, 3)),
        ],
    )
    def test_unequal_pairs(self, a, b):
        assert not equals(a, b)
        assert not equals(b, a)

    def test_strict_distinguishes_list_and_tuple(self):
        assert equals([1, 2], (1, 2))
        assert not equals([1, 2], (1, 2), strict=True)
        assert equals({"a": [1]}, {"a": [1]}, strict=True)

    def test_different_classes_with_same_fields_differ(self):
        @dataclass
        class Other:
            x: int
            y: int

        assert not equals(Point(1, 2), Other(1, 2))


class TestSameValue:
    """Test the identity-or-primitive rule used by to_be."""

    def test_primitives_compare_by_value(self):
        assert same_value(1, 1)
        assert same_value("ab", "a" + "b")
        assert same_value(float("nan"), float("nan"))

    def test_objects_compare_by_identity(self):
        a = {"x": 1}
        assert same_value(a, a)
        assert not same_value(a, {"x": 1})


class TestAsymmetricMatchers:
    """Test the asymmetric matchers inside equality."""

    def test_any(self):
        assert equals(5, AnyMatcher(int))
        assert equals("s", AnyMatcher(str))
        assert not equals(True, AnyMatcher(int))
        assert equals(True, AnyMatcher(bool))
        assert not equals(None, AnyMatcher(object))

    def test_any_requires_type(self):
        with pytest.raises(TypeError):
            AnyMatcher("int")

    def test_anything(self):
        assert equals(0, Anything())
        assert not equals(None, Anything())
        assert not equals(UNDEFINED, Anything())

    def test_object_containing(self):
        received = {"id": 7, "name": "x", "tags": ["a"]}
        assert equals(received, ObjectContaining({"id": AnyMatcher(int)}))
        assert not equals(received, ObjectContaining({"id": 8}))
        assert not equals(received, ObjectContaining({"missing": 1}))

    def test_object_containing_on_attributes(self):
        assert equals(Point(1, 2), ObjectContaining({"x": 1}))

    def test_string_matching(self):
        assert equals("order-123", StringMatching(r"order-\d+"))
        assert not equals(123, StringMatching(r"\d+"))

    def test_array_containing(self):
        assert equals([1, 2, 3], ArrayContaining([3, 1]))
        assert not equals([1, 2], ArrayContaining([4]))
        assert not equals("123", ArrayContaining(["1"]))

    def test_nested_in_structures_and_on_either_side(self):
        expected = {"user": {"id": AnyMatcher(int), "email": StringMatching("@")}}
        received = {"user": {"id": 1, "email": "a@b.c"}}
        assert equals(received, expected)
        assert equals(expected, received)

    def test_predicate(self):
        even = PredicateMatcher(lambda v: v % 2 == 0, "Even")
        assert equals(4, even)
        assert not equals(3, even)
        assert repr(even) == "Even"


class TestMatchesSubset:
    """Test partial matching used by to_match_object."""

    def test_nested_subset(self):
        received = {"a": 1, "b": {"c": 2, "d": 3}}
        assert matches_subset(received, {"b": {"c": 2}})
        assert not matches_subset(received, {"b": {"c": 3}})

    def test_sequences_must_match_length(self):
        assert matches_subset({"items": [{"id": 1, "x": 0}]}, {"items": [{"id": 1}]})
        assert not matches_subset({"items": [1, 2]}, {"items": [1]})

    def test_primitive_received_never_matches_mapping(self):
        assert not matches_subset(5, {"a": 1})
