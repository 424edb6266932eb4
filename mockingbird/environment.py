"""
Per-run environment.

One Environment is built for every execute() call and owns all mutable
run state: the suite registry, the current test, log lines, custom
matchers, created mocks and the virtual clock. Nothing leaks between runs.
"""

import json
import logging
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import httpx

from .assertions import UNDEFINED, Expect
from .clock import TimerApi, TimeSource, VirtualClock
from .errors import MockError
from .hooks import HookKind
from .mocks import MockFunction, MockRegistry
from .models import RunResult, SuiteResult, TestResult
from .registry import DescribeRegistrar, Suite, SuiteRegistry, Test, TestRegistrar
from .settings import MockingbirdSettings, get_settings

logger = logging.getLogger(__name__)


class SnippetConsole:
    """The ``console`` binding: every level writes to the run's log sink."""

    def __init__(self, env: "Environment"):
        self._env = env

    def log(self, *args: Any) -> None:
        self._env.log(*args)

    error = warn = info = debug = log


class JestNamespace:
    """The ``jest`` binding: mock factory, module mocks and fake-timer controls."""

    def __init__(self, env: "Environment"):
        self._env = env

    # Mocks
    def fn(self, implementation: Optional[Callable[..., Any]] = None) -> MockFunction:
        return self._env.mocks.fn(implementation)

    def spy_on(self, obj: Any, method_name: str) -> MockFunction:
        return self._env.mocks.spy_on(obj, method_name)

    def is_mock_function(self, value: Any) -> bool:
        return isinstance(value, MockFunction)

    def clear_all_mocks(self) -> None:
        self._env.mocks.clear_all()

    def reset_all_mocks(self) -> None:
        self._env.mocks.reset_all()

    def restore_all_mocks(self) -> None:
        self._env.mocks.restore_all()

    # Module mocks
    def mock(self, module_name: str, factory: Optional[Callable[[], Any]] = None) -> None:
        self._env.mocks.mock_module(module_name, factory)

    def unmock(self, module_name: str) -> None:
        self._env.mocks.unmock(module_name)

    def require_actual(self, module_name: str) -> Any:
        return self._env.mocks.require_actual(module_name)

    # Fake timers
    def use_fake_timers(self) -> None:
        self._env.clock.install()

    def use_real_timers(self) -> None:
        self._env.clock.uninstall()

    def advance_timers_by_time(self, ms: float) -> None:
        self._env.clock.advance_by_time(ms)

    def advance_timers_to_next_timer(self, steps: int = 1) -> None:
        self._env.clock.advance_to_next_timer(steps)

    def run_only_pending_timers(self) -> None:
        self._env.clock.run_only_pending_timers()

    def run_all_timers(self) -> None:
        self._env.clock.run_all_timers()

    def get_timer_count(self) -> int:
        return self._env.clock.get_timer_count()

    def clear_all_timers(self) -> None:
        self._env.clock.clear_all_timers()

    def set_system_time(self, value: Any) -> None:
        self._env.clock.set_system_time(value)

    def now(self) -> float:
        return self._env.clock.now


class Fetch:
    """Single global network interception point.

    Calls go to ``global_.fetch`` when a snippet installed one, then to
    the host-supplied fetch, and finally to a real HTTP request.
    """

    def __init__(self, global_: SimpleNamespace, fallback: Optional[Callable[..., Any]] = None):
        self._global = global_
        self._fallback = fallback

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        override = getattr(self._global, "fetch", None)
        if override is not None:
            return override(*args, **kwargs)
        if self._fallback is not None:
            return self._fallback(*args, **kwargs)
        return _http_fetch(*args, **kwargs)


async def _http_fetch(url: str, method: str = "GET", **kwargs: Any) -> httpx.Response:
    if not isinstance(url, str):
        raise MockError(f"fetch() expects a URL string, got {url!r}")
    async with httpx.AsyncClient(timeout=30.0) as client:
        return await client.request(method, url, **kwargs)


class Environment:
    """Mutable state of a single run and the bindings handed to the snippet."""

    def __init__(self, settings: Optional[MockingbirdSettings] = None):
        self.settings = settings or get_settings()
        self.logs: List[str] = []
        self.current_test: Optional[Test] = None

        self.registry = SuiteRegistry(
            report=self.log_line,
            implicit_suite_name=self.settings.implicit_suite_name,
        )
        self.clock = VirtualClock(report=self.log_line, loop_limit=self.settings.timer_loop_limit)
        self.timers = TimerApi(self.clock)
        self.mocks = MockRegistry()
        self.expect = Expect(lambda: self.current_test)
        self.global_ = SimpleNamespace()
        self.global_.global_ = self.global_

    # ------------------------------------------------------------------
    # Logging sink
    # ------------------------------------------------------------------

    def format_log_arg(self, value: Any) -> str:
        if isinstance(value, (dict, list)):
            try:
                return json.dumps(value, indent=self.settings.console_indent, default=str)
            except (TypeError, ValueError):
                return repr(value)
        return str(value)

    def log(self, *args: Any) -> None:
        """console.log: join the arguments and record them against the current test."""
        self.log_line(" ".join(self.format_log_arg(a) for a in args))

    def log_line(self, message: str) -> None:
        if self.current_test is not None:
            self.current_test.logs.append(message)
        else:
            self.logs.append(message)
        logger.debug(f"[snippet] {message}")

    # ------------------------------------------------------------------
    # Bindings
    # ------------------------------------------------------------------

    def bindings(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Build the global namespace for the snippet body.

        Args:
            extra: Host-supplied values; they extend or override the defaults

        Returns:
            Mapping of binding name to value
        """
        extra = dict(extra or {})
        registry = self.registry
        test = TestRegistrar(registry)

        namespace: Dict[str, Any] = {
            "describe": DescribeRegistrar(registry),
            "test": test,
            "it": test,
            "before_each": lambda fn: registry.add_hook(HookKind.BEFORE_EACH, fn),
            "after_each": lambda fn: registry.add_hook(HookKind.AFTER_EACH, fn),
            "before_all": lambda fn: registry.add_hook(HookKind.BEFORE_ALL, fn),
            "after_all": lambda fn: registry.add_hook(HookKind.AFTER_ALL, fn),
            "expect": self.expect,
            "jest": JestNamespace(self),
            "require": self.mocks.require,
            "console": SnippetConsole(self),
            "set_timeout": self.timers.set_timeout,
            "clear_timeout": self.timers.clear_timeout,
            "set_interval": self.timers.set_interval,
            "clear_interval": self.timers.clear_interval,
            "Date": TimeSource(self.clock),
            "global_": self.global_,
            "undefined": UNDEFINED,
        }
        namespace["fetch"] = Fetch(self.global_, fallback=extra.pop("fetch", None))
        namespace.update(extra)
        return namespace

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def result(self) -> RunResult:
        return RunResult(
            suites=[_suite_result(suite) for suite in self.registry.roots],
            logs=list(self.logs),
        )


def _test_result(test: Test) -> TestResult:
    return TestResult(
        id=test.id,
        description=test.description,
        status=test.status,
        error=test.error,
        duration=test.duration,
        logs=list(test.logs),
        assertions_expected=test.assertions_expected,
        assertions_count=test.assertions_count,
    )


def _suite_result(suite: Suite) -> SuiteResult:
    return SuiteResult(
        id=suite.id,
        description=suite.description,
        tests=[_test_result(t) for t in suite.tests],
        suites=[_suite_result(s) for s in suite.suites],
    )
