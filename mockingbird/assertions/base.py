"""Base matcher types for Mockingbird."""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field

from ..errors import AssertionFailure


class MatcherResult(BaseModel):
    """Outcome of one matcher evaluation.

    Custom matchers registered through ``expect.extend`` may return this
    model or a plain mapping with the same keys.

    Attributes:
        passed: Whether the positive form of the matcher holds (key: "pass")
        message: Failure text, or a zero-argument callable producing it

    Example:
        >>> MatcherResult.model_validate({"pass": True, "message": "ok"})
        >>> MatcherResult(passed=False, message=lambda: "expected an even number")
    """

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    passed: bool = Field(alias="pass")
    message: Union[str, Callable[[], str]] = ""

    def render(self) -> str:
        if callable(self.message):
            return str(self.message())
        return self.message


@dataclass(frozen=True)
class MatcherContext:
    """What a built-in matcher knows about how it was invoked.

    Attributes:
        is_not: The matcher was reached through ``.not_``
        rejected: The received value is the error a ``.rejects`` awaitable raised
    """

    is_not: bool = False
    rejected: bool = False

    @property
    def not_(self) -> str:
        """Prefix for failure messages ("not " when negated)."""
        return "not " if self.is_not else ""


def coerce_result(raw: Any, matcher_name: str) -> MatcherResult:
    """Normalize whatever a custom matcher returned into a MatcherResult.

    Raises:
        AssertionFailure: If the return value has no "pass" entry
    """
    if isinstance(raw, MatcherResult):
        return raw
    if isinstance(raw, Mapping) and "pass" in raw:
        data = dict(raw)
        data["pass"] = bool(data["pass"])
        return MatcherResult.model_validate(data)
    if isinstance(raw, tuple) and len(raw) == 2:
        return MatcherResult(passed=bool(raw[0]), message=raw[1])
    raise AssertionFailure(
        f"Custom matcher '{matcher_name}' must return a mapping with "
        f"'pass' and 'message', got {raw!r}"
    )
