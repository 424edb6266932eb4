"""Asymmetric matchers: placeholders that match by predicate inside structural equality.

Example:
    >>> expect({"id": 7, "name": "x"}).to_equal(
    ...     expect.object_containing({"id": expect.any(int)})
    ... )
"""

import numbers
import re
from typing import Any, Callable, Iterable, Union

from .equality import equals
from .utils import UNDEFINED, compile_pattern, format_value, lookup_key


class AsymmetricMatcher:
    """Base class for all asymmetric matchers.

    Structural equality recognises instances through the class-level
    ``_is_asymmetric_matcher`` tag and calls ``asymmetric_match`` instead
    of comparing them as data.
    """

    _is_asymmetric_matcher = True

    def asymmetric_match(self, actual: Any) -> bool:
        raise NotImplementedError("Subclasses must implement asymmetric_match()")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PredicateMatcher(AsymmetricMatcher):
    """Matches whatever `predicate` accepts."""

    def __init__(self, predicate: Callable[[Any], bool], description: str = "Predicate"):
        self.predicate = predicate
        self.description = description

    def asymmetric_match(self, actual: Any) -> bool:
        return bool(self.predicate(actual))

    def __repr__(self) -> str:
        return self.description


class AnyMatcher(AsymmetricMatcher):
    """Matches any instance of `expected_type`.

    Booleans only match ``bool`` itself, and ``object`` matches anything
    but ``None``/undefined.
    """

    def __init__(self, expected_type: type):
        if not isinstance(expected_type, type):
            raise TypeError(
                "any() expects to be passed a type, "
                f"got {format_value(expected_type)}"
            )
        self.expected_type = expected_type

    def asymmetric_match(self, actual: Any) -> bool:
        if self.expected_type is object:
            return actual is not None and actual is not UNDEFINED
        if isinstance(actual, bool) and self.expected_type is not bool:
            if issubclass(self.expected_type, numbers.Number):
                return False
        return isinstance(actual, self.expected_type)

    def __repr__(self) -> str:
        return f"Any<{self.expected_type.__name__}>"


class Anything(AsymmetricMatcher):
    """Matches anything but ``None`` and undefined."""

    def asymmetric_match(self, actual: Any) -> bool:
        return actual is not None and actual is not UNDEFINED

    def __repr__(self) -> str:
        return "Anything"


class ObjectContaining(AsymmetricMatcher):
    """Matches a mapping or object having at least the keys of `subset` with equal values."""

    def __init__(self, subset: dict):
        if not isinstance(subset, dict):
            raise TypeError("object_containing() expects a dict")
        self.subset = subset

    def asymmetric_match(self, actual: Any) -> bool:
        for key, expected in self.subset.items():
            found, value = lookup_key(actual, key)
            if not found or not equals(value, expected):
                return False
        return True

    def __repr__(self) -> str:
        return f"ObjectContaining {format_value(self.subset)}"


class StringMatching(AsymmetricMatcher):
    """Matches a string the pattern is found in."""

    def __init__(self, pattern: Union[str, "re.Pattern[str]"]):
        self.pattern = compile_pattern(pattern)

    def asymmetric_match(self, actual: Any) -> bool:
        return isinstance(actual, str) and self.pattern.search(actual) is not None

    def __repr__(self) -> str:
        return f"StringMatching {format_value(self.pattern)}"


class ArrayContaining(AsymmetricMatcher):
    """Matches a list or tuple containing an equal element for every item."""

    def __init__(self, items: Iterable[Any]):
        self.items = list(items)

    def asymmetric_match(self, actual: Any) -> bool:
        if not isinstance(actual, (list, tuple)):
            return False
        return all(any(equals(a, item) for a in actual) for item in self.items)

    def __repr__(self) -> str:
        return f"ArrayContaining {format_value(self.items)}"
