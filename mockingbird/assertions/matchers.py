"""Built-in matchers.

Each matcher takes a MatcherContext, the received value and its own
arguments, and reports whether the positive form holds. Negation is
applied by the caller, so messages use ``ctx.not_`` to read correctly
either way.
"""

import re
from collections.abc import Collection, Iterable, Mapping
from typing import Any, Callable, Dict, Optional, Union

from ..errors import MockError
from ..mocks import MockFunction, RejectedValue, as_mock, call_args
from .base import MatcherContext, MatcherResult
from .equality import equals, matches_subset, same_value
from .utils import UNDEFINED, compile_pattern, format_args, format_value, lookup_path

MatcherFn = Callable[..., MatcherResult]

BUILTIN_MATCHERS: Dict[str, MatcherFn] = {}


def matcher(fn: MatcherFn) -> MatcherFn:
    """Register `fn` under its own name."""
    BUILTIN_MATCHERS[fn.__name__] = fn
    return fn


def _result(passed: bool, message: Union[str, Callable[[], str]]) -> MatcherResult:
    return MatcherResult(passed=bool(passed), message=message)


# =============================================================================
# Equality
# =============================================================================

@matcher
def to_be(ctx: MatcherContext, received: Any, expected: Any) -> MatcherResult:
    return _result(
        same_value(received, expected),
        lambda: f"Expected {format_value(received)} {ctx.not_}to be {format_value(expected)}",
    )


@matcher
def to_equal(ctx: MatcherContext, received: Any, expected: Any) -> MatcherResult:
    return _result(
        equals(received, expected),
        lambda: f"Expected {format_value(received)} {ctx.not_}to equal {format_value(expected)}",
    )


@matcher
def to_strict_equal(ctx: MatcherContext, received: Any, expected: Any) -> MatcherResult:
    return _result(
        equals(received, expected, strict=True),
        lambda: f"Expected {format_value(received)} {ctx.not_}to strictly equal {format_value(expected)}",
    )


# =============================================================================
# Truthiness and presence
# =============================================================================

@matcher
def to_be_truthy(ctx: MatcherContext, received: Any) -> MatcherResult:
    return _result(bool(received), lambda: f"Expected {format_value(received)} {ctx.not_}to be truthy")


@matcher
def to_be_falsy(ctx: MatcherContext, received: Any) -> MatcherResult:
    return _result(not received, lambda: f"Expected {format_value(received)} {ctx.not_}to be falsy")


@matcher
def to_be_null(ctx: MatcherContext, received: Any) -> MatcherResult:
    return _result(received is None, lambda: f"Expected {format_value(received)} {ctx.not_}to be None")


@matcher
def to_be_undefined(ctx: MatcherContext, received: Any) -> MatcherResult:
    return _result(
        received is UNDEFINED,
        lambda: f"Expected {format_value(received)} {ctx.not_}to be undefined",
    )


@matcher
def to_be_defined(ctx: MatcherContext, received: Any) -> MatcherResult:
    return _result(received is not UNDEFINED, lambda: f"Expected value {ctx.not_}to be defined")


@matcher
def to_be_nan(ctx: MatcherContext, received: Any) -> MatcherResult:
    return _result(
        isinstance(received, float) and received != received,
        lambda: f"Expected {format_value(received)} {ctx.not_}to be NaN",
    )


# =============================================================================
# Numbers
# =============================================================================

@matcher
def to_be_greater_than(ctx: MatcherContext, received: Any, n: Any) -> MatcherResult:
    return _result(received > n, lambda: f"Expected {format_value(received)} {ctx.not_}to be > {n}")


@matcher
def to_be_greater_than_or_equal(ctx: MatcherContext, received: Any, n: Any) -> MatcherResult:
    return _result(received >= n, lambda: f"Expected {format_value(received)} {ctx.not_}to be >= {n}")


@matcher
def to_be_less_than(ctx: MatcherContext, received: Any, n: Any) -> MatcherResult:
    return _result(received < n, lambda: f"Expected {format_value(received)} {ctx.not_}to be < {n}")


@matcher
def to_be_less_than_or_equal(ctx: MatcherContext, received: Any, n: Any) -> MatcherResult:
    return _result(received <= n, lambda: f"Expected {format_value(received)} {ctx.not_}to be <= {n}")


@matcher
def to_be_close_to(ctx: MatcherContext, received: Any, expected: float, precision: int = 2) -> MatcherResult:
    tolerance = 10 ** -precision / 2
    return _result(
        abs(received - expected) < tolerance,
        lambda: (
            f"Expected {format_value(received)} {ctx.not_}to be close to "
            f"{format_value(expected)} (precision {precision})"
        ),
    )


# =============================================================================
# Strings and collections
# =============================================================================

@matcher
def to_match(ctx: MatcherContext, received: Any, pattern: Union[str, "re.Pattern[str]"]) -> MatcherResult:
    regex = compile_pattern(pattern)
    return _result(
        isinstance(received, str) and regex.search(received) is not None,
        lambda: f"Expected {format_value(received)} {ctx.not_}to match {format_value(regex)}",
    )


@matcher
def to_contain(ctx: MatcherContext, received: Any, item: Any) -> MatcherResult:
    if isinstance(received, str):
        passed = isinstance(item, str) and item in received
        return _result(passed, lambda: f"Expected string {ctx.not_}to contain {format_value(item)}")
    if isinstance(received, Collection) and not isinstance(received, Mapping):
        return _result(
            any(same_value(element, item) for element in received),
            lambda: f"Expected {format_value(received)} {ctx.not_}to contain {format_value(item)}",
        )
    return _result(False, "Expected value to be a list or string")


@matcher
def to_contain_equal(ctx: MatcherContext, received: Any, item: Any) -> MatcherResult:
    passed = (
        isinstance(received, Iterable)
        and not isinstance(received, (str, Mapping))
        and any(equals(element, item) for element in received)
    )
    return _result(
        passed,
        lambda: f"Expected {format_value(received)} {ctx.not_}to contain an element equal to {format_value(item)}",
    )


@matcher
def to_have_length(ctx: MatcherContext, received: Any, length: int) -> MatcherResult:
    try:
        actual = len(received)
    except TypeError:
        return _result(False, f"Expected {format_value(received)} to have a length")
    return _result(
        actual == length,
        lambda: f"Expected length {ctx.not_}to be {length} but got {actual}",
    )


@matcher
def to_have_property(ctx: MatcherContext, received: Any, path: Any, value: Any = UNDEFINED) -> MatcherResult:
    found, actual = lookup_path(received, path)
    if value is UNDEFINED:
        return _result(found, lambda: f"Expected {format_value(received)} {ctx.not_}to have property {path!r}")
    return _result(
        found and equals(actual, value),
        lambda: (
            f"Expected property {path!r} {ctx.not_}to equal {format_value(value)}, "
            f"received {format_value(actual)}"
        ),
    )


@matcher
def to_match_object(ctx: MatcherContext, received: Any, subset: Any) -> MatcherResult:
    return _result(
        matches_subset(received, subset),
        lambda: f"Expected {format_value(received)} {ctx.not_}to match object {format_value(subset)}",
    )


@matcher
def to_be_instance_of(ctx: MatcherContext, received: Any, expected_type: type) -> MatcherResult:
    return _result(
        isinstance(received, expected_type),
        lambda: (
            f"Expected {format_value(received)} {ctx.not_}to be an instance of "
            f"{getattr(expected_type, '__name__', expected_type)}"
        ),
    )


# =============================================================================
# Exceptions
# =============================================================================

def _error_message(error: BaseException) -> str:
    if isinstance(error, RejectedValue):
        return str(error.value)
    return str(error)


def _error_matches(error: BaseException, expected: Any) -> bool:
    if expected is None:
        return True
    if isinstance(expected, str):
        return expected in _error_message(error)
    if isinstance(expected, re.Pattern):
        return expected.search(_error_message(error)) is not None
    if isinstance(expected, type) and issubclass(expected, BaseException):
        return isinstance(error, expected)
    if isinstance(expected, BaseException):
        return _error_message(error) == str(expected)
    raise TypeError(f"to_throw() cannot match against {format_value(expected)}")


@matcher
def to_throw(ctx: MatcherContext, received: Any, expected: Any = None) -> MatcherResult:
    """Call `received` (or, behind ``.rejects``, inspect it) and check what it raised."""
    thrown: Optional[BaseException] = None
    if ctx.rejected:
        thrown = received if isinstance(received, BaseException) else RejectedValue(received)
    else:
        if not callable(received):
            raise TypeError(f"Received value must be a function, got {format_value(received)}")
        try:
            received()
        except Exception as e:
            thrown = e

    if thrown is None:
        return _result(False, "Expected function to throw but it did not")

    if ctx.is_not and expected is None:
        return _result(True, f"Expected function not to throw but it threw {format_value(thrown)}")

    return _result(
        _error_matches(thrown, expected),
        lambda: (
            f"Expected error {ctx.not_}to match {format_value(expected)}, "
            f"but got {_error_message(thrown)!r}"
        ),
    )


# =============================================================================
# Mock functions
# =============================================================================

def _require_mock(received: Any) -> MockFunction:
    mock_fn = as_mock(received)
    if mock_fn is None:
        raise MockError(f"Received value must be a mock function, got {format_value(received)}")
    return mock_fn


@matcher
def to_have_been_called(ctx: MatcherContext, received: Any) -> MatcherResult:
    mock_fn = _require_mock(received)
    count = len(mock_fn.mock.calls)
    return _result(
        count > 0,
        lambda: f"Expected {mock_fn.get_mock_name()} {ctx.not_}to have been called, called {count} times",
    )


@matcher
def to_have_been_called_times(ctx: MatcherContext, received: Any, times: int) -> MatcherResult:
    mock_fn = _require_mock(received)
    count = len(mock_fn.mock.calls)
    return _result(
        count == times,
        lambda: (
            f"Expected {mock_fn.get_mock_name()} {ctx.not_}to be called {times} times "
            f"but was called {count} times"
        ),
    )


@matcher
def to_have_been_called_with(ctx: MatcherContext, received: Any, *args: Any, **kwargs: Any) -> MatcherResult:
    mock_fn = _require_mock(received)
    expected = call_args(args, kwargs)
    calls = mock_fn.mock.calls
    return _result(
        any(equals(call, expected) for call in calls),
        lambda: (
            f"Expected {mock_fn.get_mock_name()} {ctx.not_}to have been called with "
            f"{format_args(expected)}; calls were {[format_args(c) for c in calls]}"
        ),
    )


@matcher
def to_have_been_last_called_with(ctx: MatcherContext, received: Any, *args: Any, **kwargs: Any) -> MatcherResult:
    mock_fn = _require_mock(received)
    expected = call_args(args, kwargs)
    last = mock_fn.mock.last_call
    if last is None:
        return _result(False, "Expected mock to have been called at least once")
    return _result(
        equals(last, expected),
        lambda: f"Expected last call {ctx.not_}to be {format_args(expected)} but was {format_args(last)}",
    )


@matcher
def to_have_been_nth_called_with(
    ctx: MatcherContext, received: Any, nth: int, *args: Any, **kwargs: Any
) -> MatcherResult:
    mock_fn = _require_mock(received)
    expected = call_args(args, kwargs)
    calls = mock_fn.mock.calls
    if nth < 1 or nth > len(calls):
        return _result(
            False,
            f"Expected mock to have been called at least {nth} times but was called {len(calls)} times",
        )
    call = calls[nth - 1]
    return _result(
        equals(call, expected),
        lambda: f"Expected call {nth} {ctx.not_}to be {format_args(expected)} but was {format_args(call)}",
    )


@matcher
def to_have_returned(ctx: MatcherContext, received: Any) -> MatcherResult:
    mock_fn = _require_mock(received)
    return _result(
        any(r.outcome == "return" for r in mock_fn.mock.results),
        lambda: f"Expected {mock_fn.get_mock_name()} {ctx.not_}to have returned",
    )


@matcher
def to_have_returned_times(ctx: MatcherContext, received: Any, times: int) -> MatcherResult:
    mock_fn = _require_mock(received)
    count = sum(1 for r in mock_fn.mock.results if r.outcome == "return")
    return _result(
        count == times,
        lambda: f"Expected {mock_fn.get_mock_name()} {ctx.not_}to have returned {times} times, returned {count}",
    )


@matcher
def to_have_returned_with(ctx: MatcherContext, received: Any, value: Any) -> MatcherResult:
    mock_fn = _require_mock(received)
    return _result(
        any(r.outcome == "return" and equals(r.value, value) for r in mock_fn.mock.results),
        lambda: f"Expected {mock_fn.get_mock_name()} {ctx.not_}to have returned {format_value(value)}",
    )


# =============================================================================
# Snapshots
# =============================================================================

@matcher
def to_match_snapshot(ctx: MatcherContext, received: Any, *args: Any) -> MatcherResult:
    # No persistence backend: every snapshot comparison passes
    return _result(True, "Snapshot matched")
