"""
Mock functions, spies and module mocks.

Every MockFunction keeps an ordered call log and result log. Each call
appends exactly one entry to each, call first. Keyword arguments are
logged as a trailing dict, so ``fn(1, b=2)`` is recorded as ``(1, {"b": 2})``.
"""

import importlib
import inspect
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from .errors import MockError

logger = logging.getLogger(__name__)


class RejectedValue(Exception):
    """Carries a non-exception value an awaitable was rejected with."""

    def __init__(self, value: Any):
        super().__init__(str(value))
        self.value = value


def raise_value(value: Any):
    """Raise `value` as-is if it is an exception, otherwise wrapped in RejectedValue."""
    if isinstance(value, BaseException):
        raise value
    if isinstance(value, type) and issubclass(value, BaseException):
        raise value()
    raise RejectedValue(value)


def call_args(args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Tuple[Any, ...]:
    """The call-log entry for one invocation."""
    if kwargs:
        return tuple(args) + (dict(kwargs),)
    return tuple(args)


@dataclass(eq=False)
class MockResult:
    """One result-log entry.

    Attributes:
        outcome: "return", "throw", or "incomplete" while the call is running
        value: Returned value or raised exception
    """

    outcome: str = "incomplete"
    value: Any = None


@dataclass
class MockState:
    """Call bookkeeping exposed as ``mock_fn.mock``."""

    calls: List[Tuple[Any, ...]] = field(default_factory=list)
    results: List[MockResult] = field(default_factory=list)
    contexts: List[Any] = field(default_factory=list)

    @property
    def last_call(self) -> Optional[Tuple[Any, ...]]:
        return self.calls[-1] if self.calls else None


class MockFunction:
    """An invocable test double.

    Implementation priority per call: the next queued one-shot
    implementation, then the persistent one, then the default passed at
    construction. With none of them the call returns ``None``.

    Example:
        >>> fetch_user = MockFunction()
        >>> fetch_user.mock_return_value_once("alice").mock_return_value("bob")
        >>> fetch_user(1), fetch_user(2)
        ('alice', 'bob')
        >>> fetch_user.mock.calls
        [(1,), (2,)]
    """

    def __init__(self, default: Optional[Callable[..., Any]] = None, name: str = "jest.fn()"):
        self.mock = MockState()
        self._default = default
        self._impl: Optional[Callable[..., Any]] = None
        self._once: Deque[Callable[..., Any]] = deque()
        self._name = name
        self._restore: Optional[Callable[[], None]] = None
        self._binds_instances = False

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._invoke(None, args, kwargs)

    def __get__(self, instance: Any, owner: Any = None):
        # Only spies installed on a class behave like methods
        if instance is None or not self._binds_instances:
            return self
        return BoundMock(self, instance)

    def __repr__(self) -> str:
        return f"<MockFunction {self._name}>"

    def _invoke(self, context: Any, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Any:
        result = MockResult()
        self.mock.calls.append(call_args(args, kwargs))
        self.mock.contexts.append(context)
        self.mock.results.append(result)

        impl = self._resolve_implementation()
        if impl is None:
            result.outcome, result.value = "return", None
            return None

        impl_args = args if context is None else (context, *args)
        try:
            value = impl(*impl_args, **kwargs)
        except Exception as e:
            result.outcome, result.value = "throw", e
            raise
        result.outcome, result.value = "return", value
        return value

    def _resolve_implementation(self) -> Optional[Callable[..., Any]]:
        if self._once:
            return self._once.popleft()
        if self._impl is not None:
            return self._impl
        return self._default

    # ------------------------------------------------------------------
    # Persistent implementations
    # ------------------------------------------------------------------

    def mock_implementation(self, fn: Callable[..., Any]) -> "MockFunction":
        self._impl = fn
        return self

    def mock_return_value(self, value: Any) -> "MockFunction":
        return self.mock_implementation(lambda *args, **kwargs: value)

    def mock_resolved_value(self, value: Any) -> "MockFunction":
        return self.mock_implementation(_resolving(value))

    def mock_rejected_value(self, value: Any) -> "MockFunction":
        return self.mock_implementation(_rejecting(value))

    # ------------------------------------------------------------------
    # One-shot implementations, consumed FIFO
    # ------------------------------------------------------------------

    def mock_implementation_once(self, fn: Callable[..., Any]) -> "MockFunction":
        self._once.append(fn)
        return self

    def mock_return_value_once(self, value: Any) -> "MockFunction":
        return self.mock_implementation_once(lambda *args, **kwargs: value)

    def mock_resolved_value_once(self, value: Any) -> "MockFunction":
        return self.mock_implementation_once(_resolving(value))

    def mock_rejected_value_once(self, value: Any) -> "MockFunction":
        return self.mock_implementation_once(_rejecting(value))

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def mock_clear(self) -> "MockFunction":
        """Empty the call and result logs; implementations are kept."""
        self.mock.calls = []
        self.mock.results = []
        self.mock.contexts = []
        return self

    def mock_reset(self) -> "MockFunction":
        """mock_clear, plus drop persistent and queued implementations."""
        self.mock_clear()
        self._impl = None
        self._once.clear()
        return self

    def mock_restore(self) -> "MockFunction":
        """mock_reset, plus reinstall the original method for spies."""
        self.mock_reset()
        if self._restore is not None:
            self._restore()
        return self

    def mock_name(self, name: str) -> "MockFunction":
        self._name = name
        return self

    def get_mock_name(self) -> str:
        return self._name

    @property
    def is_spy(self) -> bool:
        return self._restore is not None


class BoundMock:
    """A class-level spy accessed through an instance."""

    def __init__(self, mock_fn: MockFunction, instance: Any):
        self._mock_fn = mock_fn
        self._instance = instance

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._mock_fn._invoke(self._instance, args, kwargs)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._mock_fn, name)


def _resolving(value: Any) -> Callable[..., Any]:
    async def resolved(*args, **kwargs):
        return value

    return resolved


def _rejecting(value: Any) -> Callable[..., Any]:
    async def rejected(*args, **kwargs):
        raise_value(value)

    return rejected


def as_mock(value: Any) -> Optional[MockFunction]:
    """Return the MockFunction behind `value`, or None if it is not a mock."""
    if isinstance(value, MockFunction):
        return value
    if isinstance(value, BoundMock):
        return value._mock_fn
    return None


class AutoModule:
    """Lazily populated module mock.

    Members are created as mock functions on first read and then reused.
    Access is explicit through ``get`` or indexing.

    Example:
        >>> api = AutoModule("api", MockFunction)
        >>> api["get_user"] is api.get("get_user")
        True
    """

    def __init__(self, name: str, factory: Callable[[], MockFunction]):
        self.name = name
        self._factory = factory
        self._members: Dict[str, MockFunction] = {}

    def get(self, member: str) -> MockFunction:
        if member not in self._members:
            self._members[member] = self._factory()
            self._members[member].mock_name(f"{self.name}.{member}")
        return self._members[member]

    __getitem__ = get

    @property
    def default(self) -> MockFunction:
        return self.get("default")

    def __contains__(self, member: str) -> bool:
        return member in self._members

    def members(self) -> List[str]:
        return list(self._members)

    def __repr__(self) -> str:
        return f"<AutoModule {self.name} members={self.members()}>"


class MockRegistry:
    """Run-scoped mock bookkeeping behind the ``jest`` mock namespace."""

    def __init__(self):
        self.created: List[MockFunction] = []
        self.modules: Dict[str, Any] = {}
        self._auto_modules: Dict[str, AutoModule] = {}

    def fn(self, default: Optional[Callable[..., Any]] = None) -> MockFunction:
        """Create a mock function tracked by this run."""
        mock_fn = MockFunction(default)
        self.created.append(mock_fn)
        return mock_fn

    def spy_on(self, obj: Any, method_name: str) -> MockFunction:
        """Replace ``obj.method_name`` with a mock that calls through to the original.

        Raises:
            MockError: If the attribute is missing or not callable
        """
        original = getattr(obj, method_name, None)
        if obj is None or not callable(original):
            raise MockError(f"Cannot spy on {method_name} property of object")

        owns_attribute = method_name in getattr(obj, "__dict__", {})
        raw = inspect.getattr_static(obj, method_name) if owns_attribute else None

        if inspect.isclass(obj) or inspect.ismodule(obj):
            owner = obj.__name__
        else:
            owner = type(obj).__name__

        spy = self.fn(original)
        spy.mock_name(f"{owner}.{method_name}")
        if inspect.isclass(obj) and inspect.isfunction(raw):
            spy._binds_instances = True

        def restore():
            if owns_attribute:
                setattr(obj, method_name, raw)
            else:
                delattr(obj, method_name)

        spy._restore = restore
        setattr(obj, method_name, spy)
        logger.debug(f"Installed spy {spy.get_mock_name()}")
        return spy

    def clear_all(self) -> None:
        for mock_fn in self.created:
            mock_fn.mock_clear()

    def reset_all(self) -> None:
        for mock_fn in self.created:
            mock_fn.mock_reset()

    def restore_all(self) -> None:
        for mock_fn in self.created:
            if mock_fn.is_spy:
                mock_fn.mock_restore()

    # ------------------------------------------------------------------
    # Module mocks
    # ------------------------------------------------------------------

    def mock_module(self, name: str, factory: Optional[Callable[[], Any]] = None) -> None:
        """Register what ``require(name)`` returns: factory() or an AutoModule."""
        if factory is not None:
            self.modules[name] = factory()
        else:
            self.modules[name] = AutoModule(name, self.fn)
        logger.debug(f"Registered module mock: {name}")

    def unmock(self, name: str) -> None:
        self.modules.pop(name, None)
        self._auto_modules.pop(name, None)

    def require(self, name: str) -> Any:
        """The registered module mock, or an AutoModule cached per name."""
        if name in self.modules:
            return self.modules[name]
        if name not in self._auto_modules:
            self._auto_modules[name] = AutoModule(name, self.fn)
        return self._auto_modules[name]

    def require_actual(self, name: str) -> Any:
        return importlib.import_module(name)
