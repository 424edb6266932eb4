"""
Mockingbird - an in-process Jest-style test engine for Python snippets.

A snippet registers suites and tests through `describe`/`test`, arranges
state in hooks, and asserts with `expect(...)` matchers. Mock functions,
spies, module mocks and a virtual clock keep tests deterministic, and
every run produces a structured RunResult.

Example:
    >>> from mockingbird import run
    >>> def body(describe, test, expect):
    ...     describe("math", lambda: test("adds", lambda: expect(1 + 1).to_be(2)))
    >>> run(body).passed
    1
"""

from .assertions import UNDEFINED
from .environment import Environment
from .loader import compile_snippet, run_source
from .models import RunResult
from .runner import execute, run
from .settings import MockingbirdSettings, get_settings, reload_settings

__version__ = "0.1.0"
__all__ = [
    "execute",
    "run",
    "run_source",
    "compile_snippet",
    "Environment",
    "RunResult",
    "UNDEFINED",
    "MockingbirdSettings",
    "get_settings",
    "reload_settings",
]
