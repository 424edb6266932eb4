"""
Snippet loader - turns snippet source text into an executable body.

This is the host side of the engine boundary: the engine itself only
ever sees the returned callable. Snippet source runs with the bindings
as its globals, and top-level ``await`` is allowed.
"""

import ast
import inspect
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .models import RunResult
from .runner import execute
from .settings import MockingbirdSettings

logger = logging.getLogger(__name__)


def compile_snippet(source: str, filename: str = "<snippet>") -> Callable[..., Any]:
    """
    Compile snippet source into a body accepting the bindings as keyword arguments.

    Args:
        source: Python source of the snippet
        filename: Name used in tracebacks

    Returns:
        Async callable ``body(**bindings)``

    Raises:
        SyntaxError: If the source does not compile
    """
    code = compile(source, filename, "exec", flags=ast.PyCF_ALLOW_TOP_LEVEL_AWAIT)

    async def body(**bindings: Any) -> None:
        scope: Dict[str, Any] = {"__name__": "__snippet__", "__file__": filename}
        scope.update(bindings)
        result = eval(code, scope)
        if inspect.isawaitable(result):
            await result

    return body


def load_snippet(path: Path) -> Callable[..., Any]:
    """Read and compile a snippet file.

    Raises:
        FileNotFoundError: If the file does not exist
        SyntaxError: If the source does not compile
    """
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    logger.debug(f"Loading snippet: {path}")
    return compile_snippet(path.read_text(encoding="utf-8"), str(path))


async def run_source(
    source: str,
    bindings: Optional[Dict[str, Any]] = None,
    settings: Optional[MockingbirdSettings] = None,
    filename: str = "<snippet>",
) -> RunResult:
    """Compile and execute snippet source; a compile error becomes a run-level log line."""
    try:
        body = compile_snippet(source, filename)
    except SyntaxError as e:
        logger.debug(f"Snippet failed to compile: {e}")
        return RunResult(logs=[f"Execution Error: {e.msg} (line {e.lineno})"])
    return await execute(body, bindings, settings)
