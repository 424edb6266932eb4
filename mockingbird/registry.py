"""
Suite registry: builds the suite/test tree from describe/test calls.

The tree is built synchronously while the snippet body runs. A suite's
`parent` is a non-owning back-reference used only for hook resolution;
ownership flows from `roots` through `suites` to children.
"""

import inspect
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional

from .errors import RegistrationError
from .hooks import HookKind, HookSet
from .models import TestStatus

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex[:9]


@dataclass(eq=False)
class Test:
    """A registered test and, once run, its outcome.

    Attributes:
        description: Name shown in results
        body: Zero-argument callable, or one taking `done` for callback style
        status: pending until the runner reaches it
        assertions_expected: Set by expect.assertions(n)
        assertions_required: Set by expect.has_assertions()
        assertions_count: Matcher calls made while this test was current
        skip: Never run; status stays pending
    """

    __test__ = False

    description: str
    body: Optional[Callable[..., Any]] = None
    id: str = field(default_factory=_new_id)
    status: TestStatus = TestStatus.PENDING
    logs: List[str] = field(default_factory=list)
    duration: float = 0.0
    error: Optional[str] = None
    assertions_expected: Optional[int] = None
    assertions_required: bool = False
    assertions_count: int = 0
    skip: bool = False


@dataclass(eq=False)
class Suite:
    """A describe block."""

    description: str
    parent: Optional["Suite"] = field(default=None, repr=False)
    id: str = field(default_factory=_new_id)
    tests: List[Test] = field(default_factory=list)
    suites: List["Suite"] = field(default_factory=list)
    hooks: HookSet = field(default_factory=HookSet)
    skip: bool = False

    @property
    def skipped(self) -> bool:
        suite: Optional[Suite] = self
        while suite is not None:
            if suite.skip:
                return True
            suite = suite.parent
        return False


class SuiteRegistry:
    """Registration state for one run: root suites, the active container, top-level hooks."""

    def __init__(self, report: Callable[[str], None], implicit_suite_name: str = "Root"):
        """
        Initialize SuiteRegistry.

        Args:
            report: Sink for registration error messages
            implicit_suite_name: Description of the suite grouping top-level tests
        """
        self._report = report
        self.implicit_suite_name = implicit_suite_name
        self.roots: List[Suite] = []
        self.active: Optional[Suite] = None
        self.root_hooks = HookSet()
        self._implicit_root: Optional[Suite] = None

    def describe(self, description: str, builder: Callable[[], Any], skip: bool = False) -> Suite:
        """Create a suite, make it active and run `builder` to populate it.

        A failing builder is reported and the partially built suite is kept.
        """
        suite = Suite(description=str(description), parent=self.active, skip=skip)
        if self.active is not None:
            self.active.suites.append(suite)
        else:
            self.roots.append(suite)

        previous = self.active
        self.active = suite
        try:
            self._build(suite, builder)
        except RegistrationError as e:
            logger.debug(f"Registration failed: {e}", exc_info=e.__cause__)
            self._report(str(e))
        finally:
            self.active = previous

        return suite

    def _build(self, suite: Suite, builder: Callable[[], Any]) -> None:
        try:
            result = builder()
        except Exception as e:
            raise RegistrationError(f"Error in describe block '{suite.description}': {e}") from e

        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise RegistrationError(
                f"Error in describe block '{suite.description}': "
                f"describe builders must be synchronous"
            )

    def test(self, description: str, body: Optional[Callable[..., Any]] = None, skip: bool = False) -> Test:
        """Append a test to the active suite, or to the implicit root suite."""
        container = self.active
        if container is None:
            container = self._implicit_suite()

        test = Test(
            description=str(description),
            body=body,
            skip=skip or body is None or container.skipped,
        )
        container.tests.append(test)
        return test

    def _implicit_suite(self) -> Suite:
        if self._implicit_root is None:
            self._implicit_root = Suite(description=self.implicit_suite_name)
            self.roots.append(self._implicit_root)
        return self._implicit_root

    def add_hook(self, kind: HookKind, hook: Callable[[], Any]) -> Callable[[], Any]:
        """Attach a hook to the active suite, or to the run when no suite is active.

        Returns the hook so the bindings also work as decorators.
        """
        target = self.active.hooks if self.active is not None else self.root_hooks
        target.add(kind, hook)
        return hook


# =============================================================================
# Snippet-facing registration callables
# =============================================================================

def _row_args(row: Any) -> tuple:
    if isinstance(row, (list, tuple)):
        return tuple(row)
    return (row,)


def _format_title(title: str, row: Any) -> str:
    try:
        if isinstance(row, dict):
            return title % row
        return title % _row_args(row)
    except (TypeError, ValueError, KeyError):
        return f"{title} {row!r}"


def _bind_row(fn: Callable[..., Any], row: Any) -> Callable[[], Any]:
    if isinstance(row, dict):
        return lambda: fn(**row)
    args = _row_args(row)
    return lambda: fn(*args)


class TestRegistrar:
    """The ``test`` / ``it`` binding: callable, plus ``.skip``, ``.todo`` and ``.each``."""

    __test__ = False

    def __init__(self, registry: SuiteRegistry):
        self._registry = registry

    def __call__(self, description: str, body: Callable[..., Any]) -> None:
        self._registry.test(description, body)

    def skip(self, description: str, body: Optional[Callable[..., Any]] = None) -> None:
        self._registry.test(description, body, skip=True)

    def todo(self, description: str) -> None:
        self._registry.test(description, None, skip=True)

    def each(self, table: Iterable[Any]) -> Callable[[str, Callable[..., Any]], None]:
        """Register one test per row; `%` placeholders in the title take the row values.

        Example:
            >>> test.each([(1, 1, 2), (2, 3, 5)])("add(%d, %d) == %d", check_add)
        """
        rows = list(table)

        def register(title: str, body: Callable[..., Any]) -> None:
            for row in rows:
                self._registry.test(_format_title(title, row), _bind_row(body, row))

        return register


class DescribeRegistrar:
    """The ``describe`` binding: callable, plus ``.skip`` and ``.each``."""

    def __init__(self, registry: SuiteRegistry):
        self._registry = registry

    def __call__(self, description: str, builder: Callable[[], Any]) -> None:
        self._registry.describe(description, builder)

    def skip(self, description: str, builder: Callable[[], Any]) -> None:
        self._registry.describe(description, builder, skip=True)

    def each(self, table: Iterable[Any]) -> Callable[[str, Callable[..., Any]], None]:
        rows = list(table)

        def register(title: str, builder: Callable[..., Any]) -> None:
            for row in rows:
                self._registry.describe(_format_title(title, row), _bind_row(builder, row))

        return register
