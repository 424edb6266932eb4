"""
Result models for Mockingbird runs.

These Pydantic models are the stable contract consumed by presentation
layers. `to_dict()` emits the camelCase field names hosts depend on
(assertionsExpected, assertionsCount) and omits optional fields that
were never set.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TestStatus(str, Enum):
    """Lifecycle of a test."""
    __test__ = False

    PENDING = "pending"   # Registered, not run (or skipped)
    RUNNING = "running"
    PASS = "pass"
    FAIL = "fail"


class TestResult(BaseModel):
    """Outcome of a single test.

    Attributes:
        id: Identifier unique within the run
        description: Test name
        status: Final status
        error: Failure message (fail only)
        duration: Milliseconds spent in hooks plus body
        logs: console output captured while the test was current
        assertions_expected: Count declared by expect.assertions(n)
        assertions_count: Matcher calls made by the test
    """

    __test__ = False

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Identifier unique within the run")
    description: str = Field(..., description="Test name")
    status: TestStatus = Field(default=TestStatus.PENDING, description="Final status")
    error: Optional[str] = Field(None, description="Failure message")
    duration: float = Field(default=0.0, description="Elapsed milliseconds")
    logs: List[str] = Field(default_factory=list, description="Captured console lines")
    assertions_expected: Optional[int] = Field(
        None, alias="assertionsExpected", description="Declared assertion count"
    )
    assertions_count: int = Field(
        default=0, alias="assertionsCount", description="Matcher calls made"
    )


class SuiteResult(BaseModel):
    """Outcome of a describe block and everything nested in it."""

    id: str = Field(..., description="Identifier unique within the run")
    description: str = Field(..., description="Suite name")
    tests: List[TestResult] = Field(default_factory=list, description="Tests in registration order")
    suites: List["SuiteResult"] = Field(default_factory=list, description="Child suites in registration order")

    def iter_tests(self):
        """Yield every test in this suite and its descendants, depth first."""
        yield from self.tests
        for child in self.suites:
            yield from child.iter_tests()


class RunResult(BaseModel):
    """Everything a run produced: the suite tree and run-level log lines."""

    suites: List[SuiteResult] = Field(default_factory=list, description="Root suites in run order")
    logs: List[str] = Field(default_factory=list, description="Log lines not tied to a test")

    def iter_tests(self):
        for suite in self.suites:
            yield from suite.iter_tests()

    @property
    def total(self) -> int:
        return sum(1 for _ in self.iter_tests())

    @property
    def passed(self) -> int:
        return sum(1 for t in self.iter_tests() if t.status == TestStatus.PASS)

    @property
    def failed(self) -> int:
        return sum(1 for t in self.iter_tests() if t.status == TestStatus.FAIL)

    @property
    def pending(self) -> int:
        return sum(1 for t in self.iter_tests() if t.status == TestStatus.PENDING)

    @property
    def success(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the host-facing dictionary shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return self.model_dump_json(indent=indent, by_alias=True, exclude_none=True)
