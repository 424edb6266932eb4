"""The ``expect`` entry point handed to snippets."""

import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Mapping, Optional

from ..errors import AssertionFailure
from ..mocks import RejectedValue
from .asymmetric import (
    AnyMatcher,
    Anything,
    ArrayContaining,
    AsymmetricMatcher,
    ObjectContaining,
    PredicateMatcher,
    StringMatching,
)
from .base import MatcherContext, coerce_result
from .matchers import BUILTIN_MATCHERS
from .utils import format_value

if TYPE_CHECKING:
    from ..registry import Test

logger = logging.getLogger(__name__)


class Expect:
    """Callable assertion entry point with the asymmetric-matcher factories attached.

    Args:
        current_test: Returns the test whose assertion counter matcher calls feed

    Example:
        >>> expect(2 + 2).to_be(4)
        >>> expect([1, 2]).not_.to_contain(3)
        >>> await expect(fetch_user(1)).resolves.to_equal({"id": 1})
    """

    def __init__(self, current_test: Callable[[], Optional["Test"]]):
        self._current_test = current_test
        self.custom_matchers: Dict[str, Callable[..., Any]] = {}

    def __call__(self, received: Any) -> "Expectation":
        return Expectation(self, received)

    # ------------------------------------------------------------------
    # Extension and bookkeeping
    # ------------------------------------------------------------------

    def extend(self, matchers: Mapping[str, Callable[..., Any]]) -> None:
        """Register custom matchers ``fn(received, *args) -> {"pass", "message"}``."""
        for name, fn in matchers.items():
            if not callable(fn):
                raise TypeError(f"Custom matcher '{name}' must be callable")
            self.custom_matchers[name] = fn
            logger.debug(f"Registered custom matcher: {name}")

    def assertions(self, n: int) -> None:
        """Require the current test to make exactly `n` matcher calls."""
        test = self._current_test()
        if test is not None:
            test.assertions_expected = n

    def has_assertions(self) -> None:
        """Require the current test to make at least one matcher call."""
        test = self._current_test()
        if test is not None:
            test.assertions_required = True

    def count_assertion(self) -> None:
        test = self._current_test()
        if test is not None:
            test.assertions_count += 1

    def lookup(self, name: str) -> Callable[..., Any]:
        if name in self.custom_matchers:
            return self.custom_matchers[name]
        if name in BUILTIN_MATCHERS:
            return BUILTIN_MATCHERS[name]
        raise AttributeError(f"Unknown matcher: {name}")

    def evaluate(
        self,
        name: str,
        received: Any,
        args: tuple,
        kwargs: dict,
        is_not: bool,
        rejected: bool = False,
    ) -> None:
        """Run one matcher and raise AssertionFailure if its (possibly negated) outcome fails."""
        if name in self.custom_matchers:
            raw = self.custom_matchers[name](received, *args, **kwargs)
            if inspect.isawaitable(raw):
                raise AssertionFailure(f"Custom matcher '{name}' must be synchronous")
            result = coerce_result(raw, name)
        else:
            ctx = MatcherContext(is_not=is_not, rejected=rejected)
            result = BUILTIN_MATCHERS[name](ctx, received, *args, **kwargs)

        if result.passed == is_not:
            raise AssertionFailure(result.render() or f"{name} failed")

    # ------------------------------------------------------------------
    # Asymmetric matcher factories
    # ------------------------------------------------------------------

    def any(self, expected_type: type) -> AsymmetricMatcher:
        return AnyMatcher(expected_type)

    def anything(self) -> AsymmetricMatcher:
        return Anything()

    def object_containing(self, subset: dict) -> AsymmetricMatcher:
        return ObjectContaining(subset)

    def string_matching(self, pattern: Any) -> AsymmetricMatcher:
        return StringMatching(pattern)

    def array_containing(self, items: Iterable[Any]) -> AsymmetricMatcher:
        return ArrayContaining(items)

    def matching(self, predicate: Callable[[Any], bool], description: str = "Predicate") -> AsymmetricMatcher:
        return PredicateMatcher(predicate, description)


class Expectation:
    """Matchers bound to one received value."""

    def __init__(self, expect: Expect, received: Any, is_not: bool = False):
        self._expect = expect
        self.received = received
        self.is_not = is_not

    @property
    def not_(self) -> "Expectation":
        return Expectation(self._expect, self.received, not self.is_not)

    @property
    def resolves(self) -> "AsyncExpectation":
        return AsyncExpectation(self._expect, self.received, rejects=False, is_not=self.is_not)

    @property
    def rejects(self) -> "AsyncExpectation":
        return AsyncExpectation(self._expect, self.received, rejects=True, is_not=self.is_not)

    def __getattr__(self, name: str) -> Callable[..., None]:
        if name.startswith("_"):
            raise AttributeError(name)
        self._expect.lookup(name)

        def run_matcher(*args: Any, **kwargs: Any) -> None:
            self._expect.count_assertion()
            self._expect.evaluate(name, self.received, args, kwargs, self.is_not)

        run_matcher.__name__ = name
        return run_matcher


class AsyncExpectation:
    """``.resolves`` / ``.rejects``: await the received value, then run a matcher on the outcome."""

    def __init__(self, expect: Expect, received: Any, rejects: bool, is_not: bool = False):
        self._expect = expect
        self.received = received
        self.rejects = rejects
        self.is_not = is_not

    @property
    def not_(self) -> "AsyncExpectation":
        return AsyncExpectation(self._expect, self.received, self.rejects, not self.is_not)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)
        self._expect.lookup(name)

        async def run_matcher(*args: Any, **kwargs: Any) -> None:
            self._expect.count_assertion()
            value, raised = await self._settle()

            if self.rejects and not raised:
                raise AssertionFailure("Promise resolved but expected rejection")
            if not self.rejects and raised:
                raise AssertionFailure(
                    f"Promise rejected but expected resolution: {format_value(value)}"
                )

            self._expect.evaluate(
                name, value, args, kwargs, self.is_not, rejected=self.rejects and name == "to_throw"
            )

        run_matcher.__name__ = name
        return run_matcher

    async def _settle(self) -> "tuple[Any, bool]":
        if not inspect.isawaitable(self.received):
            raise AssertionFailure(
                f"Received value must be an awaitable, got {format_value(self.received)}"
            )
        if inspect.iscoroutine(self.received) and (
            inspect.getcoroutinestate(self.received) == inspect.CORO_CLOSED
        ):
            raise AssertionFailure("Received awaitable was already awaited")
        try:
            return await self.received, False
        except RejectedValue as e:
            return e.value, True
        except Exception as e:
            return e, True
