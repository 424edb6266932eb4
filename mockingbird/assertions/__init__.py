"""Mockingbird assertion engine.

This module provides ``expect`` and its matchers, structural equality
and the asymmetric matchers usable inside it.

Matcher Categories:
    - Equality: to_be, to_equal, to_strict_equal, to_match_object
    - Presence: to_be_truthy, to_be_null, to_be_undefined, to_have_property
    - Numbers: to_be_greater_than, to_be_close_to
    - Collections: to_contain, to_contain_equal, to_have_length
    - Exceptions: to_throw
    - Mocks: to_have_been_called, to_have_been_called_with, to_have_returned

Example:
    >>> from mockingbird.assertions import Expect
    >>> expect = Expect(lambda: None)
    >>> expect({"a": 1, "b": 2}).to_equal(expect.object_containing({"a": 1}))
    >>> expect([1, 2, 3]).not_.to_contain(4)
"""

# Base matcher types
from .base import MatcherContext, MatcherResult

# Asymmetric matchers
from .asymmetric import (
    AnyMatcher,
    Anything,
    ArrayContaining,
    AsymmetricMatcher,
    ObjectContaining,
    PredicateMatcher,
    StringMatching,
)

# Structural equality
from .equality import equals, is_asymmetric, matches_subset, same_value

# Entry point
from .expect import AsyncExpectation, Expect, Expectation
from .matchers import BUILTIN_MATCHERS
from .utils import UNDEFINED

__all__ = [
    # Base
    "MatcherContext",
    "MatcherResult",
    # Asymmetric
    "AnyMatcher",
    "Anything",
    "ArrayContaining",
    "AsymmetricMatcher",
    "ObjectContaining",
    "PredicateMatcher",
    "StringMatching",
    # Equality
    "equals",
    "is_asymmetric",
    "matches_subset",
    "same_value",
    # Entry point
    "AsyncExpectation",
    "BUILTIN_MATCHERS",
    "Expect",
    "Expectation",
    "UNDEFINED",
]
