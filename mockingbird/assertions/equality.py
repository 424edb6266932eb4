"""Structural equality used by to_equal, mock call matching and asymmetric matchers.

Lists and tuples are both ordered sequences, mappings compare by key set
and values, other objects compare by type and instance attributes.
Any value tagged as an asymmetric matcher is asked to match instead of
being recursed into.
"""

import math
import numbers
from collections.abc import Mapping
from typing import Any

from .utils import UNDEFINED, lookup_key

_PRIMITIVES = (str, bytes, numbers.Number, type(None))


def is_asymmetric(value: Any) -> bool:
    """True for values carrying an asymmetric_match predicate."""
    return getattr(type(value), "_is_asymmetric_matcher", False) is True


def is_primitive(value: Any) -> bool:
    return value is UNDEFINED or isinstance(value, _PRIMITIVES)


def _is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


def same_primitive(a: Any, b: Any) -> bool:
    """Value comparison for primitives; bools never equal numbers, NaN equals NaN."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, numbers.Number) and isinstance(b, numbers.Number):
        if _is_nan(a) and _is_nan(b):
            return True
        return a == b
    if isinstance(a, (str, bytes)) or isinstance(b, (str, bytes)):
        return type(a) is type(b) and a == b
    return a is b


def same_value(a: Any, b: Any) -> bool:
    """Identity for objects, value for primitives (the to_be rule)."""
    if a is b:
        return True
    if is_primitive(a) and is_primitive(b):
        return same_primitive(a, b)
    return False


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def equals(a: Any, b: Any, strict: bool = False) -> bool:
    """Recursive structural equality.

    Args:
        a: Received value
        b: Expected value (may contain asymmetric matchers)
        strict: Also require matching container types (list vs tuple)

    Returns:
        True if the values are structurally equal
    """
    if is_asymmetric(b):
        return b.asymmetric_match(a)
    if is_asymmetric(a):
        return a.asymmetric_match(b)

    if a is b:
        return True
    if is_primitive(a) or is_primitive(b):
        return is_primitive(a) and is_primitive(b) and same_primitive(a, b)

    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if strict and type(a) is not type(b):
            return False
        if set(a.keys()) != set(b.keys()):
            return False
        return all(equals(a[key], b[key], strict) for key in a)

    if _is_sequence(a) and _is_sequence(b):
        if strict and type(a) is not type(b):
            return False
        if len(a) != len(b):
            return False
        return all(equals(x, y, strict) for x, y in zip(a, b))

    if isinstance(a, (set, frozenset)) and isinstance(b, (set, frozenset)):
        return a == b

    if type(a) is not type(b):
        return False
    if hasattr(a, "__dict__") and hasattr(b, "__dict__"):
        return equals(vars(a), vars(b), strict)
    return a == b


def matches_subset(received: Any, subset: Any) -> bool:
    """Partial recursive match: every key in `subset` must be present and match.

    Sequences in the subset must match element-wise with the same length;
    leaves fall back to structural equality.
    """
    if is_asymmetric(subset):
        return subset.asymmetric_match(received)

    if isinstance(subset, Mapping):
        if is_primitive(received):
            return False
        for key, expected in subset.items():
            found, actual = lookup_key(received, key)
            if not found or not matches_subset(actual, expected):
                return False
        return True

    if _is_sequence(subset):
        if not _is_sequence(received) or len(received) != len(subset):
            return False
        return all(matches_subset(r, s) for r, s in zip(received, subset))

    return equals(received, subset)
