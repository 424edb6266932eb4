"""
Mockingbird Runner - executes a snippet body and then its registered tests.

Pipeline: Build environment → Run body (registration) → Walk suite tree → Collect results

Tests and hooks run strictly one after another on a single event loop.
There is no per-test timeout: a body that never settles stalls the run.
"""

import asyncio
import inspect
import logging
import time
import traceback
from typing import Any, Callable, Dict, List, Optional

from .environment import Environment
from .errors import ConfigurationError, HookError
from .hooks import Hook, resolve_after_each, resolve_before_each, run_hook
from .mocks import RejectedValue
from .models import RunResult, TestStatus
from .registry import Suite, Test
from .settings import MockingbirdSettings

logger = logging.getLogger(__name__)


def error_message(error: BaseException) -> str:
    """The message recorded for a failed test.

    The exception text is kept verbatim; an exception with an empty message
    is recorded by its class name instead.
    """
    if isinstance(error, RejectedValue):
        return str(error.value)
    return str(error) or type(error).__name__


def takes_done(body: Callable[..., Any]) -> bool:
    """Whether a test body is callback style (declares a required positional parameter)."""
    try:
        signature = inspect.signature(body)
    except (TypeError, ValueError):
        return False
    positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    return any(
        p.kind in positional and p.default is inspect.Parameter.empty
        for p in signature.parameters.values()
    )


class Runner:
    """Walks one environment's suite tree and records outcomes on its tests."""

    def __init__(self, env: Environment):
        self.env = env

    async def run(self) -> None:
        registry = self.env.registry
        logger.info(f"Running {len(registry.roots)} root suites")

        await self._run_hooks(registry.root_hooks.before_all)
        for suite in registry.roots:
            await self.run_suite(suite)
        await self._run_hooks(registry.root_hooks.after_all)

    async def run_suite(self, suite: Suite) -> None:
        """before_all, own tests, child suites, after_all."""
        if suite.skip:
            logger.debug(f"Skipping suite: {suite.description}")
            return

        await self._run_hooks(suite.hooks.before_all)

        for test in suite.tests:
            if test.skip:
                continue
            await self.run_test(test, suite)

        for child in suite.suites:
            await self.run_suite(child)

        await self._run_hooks(suite.hooks.after_all)

    async def run_test(self, test: Test, suite: Suite) -> None:
        """Run one test with its resolved before/after-each hooks and record the outcome."""
        env = self.env
        env.current_test = test
        test.status = TestStatus.RUNNING
        test.logs = []
        start = time.perf_counter()

        try:
            await self._run_hooks(resolve_before_each(suite, env.registry.root_hooks))
            await self._call_body(test)
            test.status = TestStatus.PASS

            await self._run_hooks(resolve_after_each(suite, env.registry.root_hooks))
            self._check_assertion_count(test)
        except Exception as e:
            test.status = TestStatus.FAIL
            test.error = error_message(e)
            logger.debug(f"Test failed: {test.description}\n{traceback.format_exc()}")

        test.duration = (time.perf_counter() - start) * 1000
        env.current_test = None
        logger.debug(f"{test.status.value}: {test.description} ({test.duration:.1f}ms)")

    async def _call_body(self, test: Test) -> None:
        body = test.body
        if body is None:
            return

        if not takes_done(body):
            result = body()
            if inspect.isawaitable(result):
                await result
            return

        finished = asyncio.get_running_loop().create_future()

        def done(error: Any = None) -> None:
            if finished.done():
                return
            if error is None:
                finished.set_result(None)
            elif isinstance(error, BaseException):
                finished.set_exception(error)
            else:
                finished.set_exception(RejectedValue(error))

        result = body(done)
        if inspect.isawaitable(result):
            await result
        await finished

    def _check_assertion_count(self, test: Test) -> None:
        expected = test.assertions_expected
        if expected is not None and test.assertions_count != expected:
            raise AssertionError(
                f"Expected {expected} assertions to be called "
                f"but received {test.assertions_count}"
            )
        if test.assertions_required and test.assertions_count == 0:
            raise AssertionError(
                "Expected at least one assertion to be called but received none"
            )

    async def _run_hooks(self, hooks: List[Hook]) -> None:
        for hook in hooks:
            try:
                await run_hook(hook)
            except HookError as e:
                logger.debug(f"{e}", exc_info=e.__cause__)
                self.env.log_line(str(e))


def _accepted_bindings(body: Callable[..., Any], namespace: Dict[str, Any]) -> Dict[str, Any]:
    """The subset of `namespace` the body declares, or all of it for **kwargs bodies."""
    try:
        parameters = inspect.signature(body).parameters.values()
    except (TypeError, ValueError):
        return {}
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in parameters):
        return dict(namespace)
    return {p.name: namespace[p.name] for p in parameters if p.name in namespace}


async def execute(
    body: Callable[..., Any],
    bindings: Optional[Dict[str, Any]] = None,
    settings: Optional[MockingbirdSettings] = None,
) -> RunResult:
    """
    Run a snippet body to register tests, then run them.

    Args:
        body: Callable (sync or async) receiving the bindings it names as parameters
        bindings: Host-supplied bindings extending or overriding the defaults
        settings: Settings override (defaults to get_settings())

    Returns:
        RunResult with the suite tree and run-level logs

    Raises:
        ConfigurationError: If body is not callable
    """
    if not callable(body):
        raise ConfigurationError(f"Snippet body must be callable, got {type(body).__name__}")

    env = Environment(settings)
    namespace = env.bindings(bindings)

    try:
        result = body(**_accepted_bindings(body, namespace))
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.debug(f"Snippet body raised:\n{traceback.format_exc()}")
        env.log_line(f"Runtime Error: {error_message(e)}")

    await Runner(env).run()
    result = env.result()
    logger.info(
        f"Run complete: {result.passed} passed, {result.failed} failed, "
        f"{result.pending} pending"
    )
    return result


def run(
    body: Callable[..., Any],
    bindings: Optional[Dict[str, Any]] = None,
    settings: Optional[MockingbirdSettings] = None,
) -> RunResult:
    """Synchronous wrapper around execute() for callers without an event loop."""
    return asyncio.run(execute(body, bindings, settings))
