"""Shared utility functions for matchers."""

import re
from collections.abc import Mapping
from typing import Any, List, Sequence, Tuple, Union


class _Undefined:
    """Sentinel for a value that was never provided (a missing key or attribute)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


def format_value(value: Any) -> str:
    """Render a value for a failure message.

    Example:
        >>> format_value("a")
        "'a'"
        >>> format_value(UNDEFINED)
        'undefined'
    """
    if isinstance(value, re.Pattern):
        return f"/{value.pattern}/"
    if isinstance(value, type):
        return value.__name__
    try:
        return repr(value)
    except Exception:
        return object.__repr__(value)


def format_args(args: Sequence[Any]) -> str:
    return "(" + ", ".join(format_value(a) for a in args) + ")"


def compile_pattern(pattern: Union[str, "re.Pattern[str]"]) -> "re.Pattern[str]":
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern)


def split_path(path: Union[str, Sequence[Any]]) -> List[Any]:
    """Split a dotted property path ("a.b.0") or pass a key list through."""
    if isinstance(path, str):
        return path.split(".")
    return list(path)


def lookup_path(obj: Any, path: Union[str, Sequence[Any]]) -> Tuple[bool, Any]:
    """Walk a property path through mappings, sequences and attributes.

    Args:
        obj: Object to start from
        path: Dotted string or list of keys

    Returns:
        (found, value) where value is UNDEFINED when not found

    Example:
        >>> lookup_path({"a": {"b": [10, 20]}}, "a.b.1")
        (True, 20)
        >>> lookup_path({"a": 1}, "a.c")
        (False, undefined)
    """
    current = obj
    for key in split_path(path):
        found, current = lookup_key(current, key)
        if not found:
            return False, UNDEFINED
    return True, current


def lookup_key(obj: Any, key: Any) -> Tuple[bool, Any]:
    if obj is None or obj is UNDEFINED:
        return False, UNDEFINED

    if isinstance(obj, Mapping):
        if key in obj:
            return True, obj[key]
        return False, UNDEFINED

    if isinstance(obj, (list, tuple, str)):
        index = key
        if isinstance(key, str):
            if not key.isdigit():
                return False, UNDEFINED
            index = int(key)
        if isinstance(index, int) and 0 <= index < len(obj):
            return True, obj[index]
        return False, UNDEFINED

    if isinstance(key, str) and hasattr(obj, key):
        return True, getattr(obj, key)
    return False, UNDEFINED
