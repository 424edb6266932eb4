"""
Lifecycle hooks: storage per suite and resolution along the suite ancestry.
"""

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from .errors import HookError

if TYPE_CHECKING:
    from .registry import Suite

logger = logging.getLogger(__name__)

Hook = Callable[[], Any]


class HookKind(str, Enum):
    """The four lifecycle hook lists a suite carries."""
    BEFORE_ALL = "before_all"
    AFTER_ALL = "after_all"
    BEFORE_EACH = "before_each"
    AFTER_EACH = "after_each"


@dataclass
class HookSet:
    """Hooks declared directly on one suite (or at the top level of a run)."""

    before_all: List[Hook] = field(default_factory=list)
    after_all: List[Hook] = field(default_factory=list)
    before_each: List[Hook] = field(default_factory=list)
    after_each: List[Hook] = field(default_factory=list)

    def add(self, kind: HookKind, hook: Hook) -> None:
        if not callable(hook):
            raise TypeError(f"{kind.value} expects a function, got {hook!r}")
        getattr(self, kind.value).append(hook)

    def get(self, kind: HookKind) -> List[Hook]:
        return getattr(self, kind.value)


def _ancestry(suite: Optional["Suite"]) -> List["Suite"]:
    """Suites from `suite` up to its root, leaf first."""
    chain = []
    while suite is not None:
        chain.append(suite)
        suite = suite.parent
    return chain


def resolve_before_each(suite: "Suite", root_hooks: Optional[HookSet] = None) -> List[Hook]:
    """before_each hooks for a test in `suite`, ancestors before descendants."""
    hooks: List[Hook] = list(root_hooks.before_each) if root_hooks else []
    for ancestor in reversed(_ancestry(suite)):
        hooks.extend(ancestor.hooks.before_each)
    return hooks


def resolve_after_each(suite: "Suite", root_hooks: Optional[HookSet] = None) -> List[Hook]:
    """after_each hooks for a test in `suite`, descendants before ancestors."""
    hooks: List[Hook] = []
    for ancestor in _ancestry(suite):
        hooks.extend(ancestor.hooks.after_each)
    if root_hooks:
        hooks.extend(root_hooks.after_each)
    return hooks


async def run_hook(hook: Hook) -> None:
    """Call one hook, awaiting it if it returns an awaitable.

    Raises:
        HookError: Wrapping whatever the hook raised
    """
    try:
        result = hook()
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        raise HookError(f"Error in hook: {e}") from e
