"""
Console output formatting for Mockingbird runs.

Renders a RunResult as a Rich tree: one branch per suite, one leaf per
test with its status symbol, duration, failure message and captured logs.
"""

from typing import Optional

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from .models import RunResult, SuiteResult, TestResult, TestStatus


class ResultFormatter:
    """Rich formatter for run results."""

    def __init__(self, console: Optional[Console] = None, show_logs: bool = True):
        """Initialize formatter with Rich console."""
        self.console = console or Console()
        self.show_logs = show_logs

        self.colors = {
            TestStatus.PASS: "green",
            TestStatus.FAIL: "red",
            TestStatus.PENDING: "yellow",
            TestStatus.RUNNING: "cyan",
        }
        self.symbols = {
            TestStatus.PASS: "✓",
            TestStatus.FAIL: "✗",
            TestStatus.PENDING: "○",
            TestStatus.RUNNING: "…",
        }

    def render(self, result: RunResult) -> Tree:
        """Build the tree for a whole run."""
        root = Tree(Text("Test results", style="bold blue"))
        for suite in result.suites:
            self._add_suite(root, suite)
        return root

    def _add_suite(self, parent: Tree, suite: SuiteResult) -> None:
        branch = parent.add(Text(suite.description, style="bold"))
        for test in suite.tests:
            self._add_test(branch, test)
        for child in suite.suites:
            self._add_suite(branch, child)

    def _add_test(self, parent: Tree, test: TestResult) -> None:
        color = self.colors[test.status]
        label = Text()
        label.append(f"{self.symbols[test.status]} ", style=color)
        label.append(test.description)
        if test.status in (TestStatus.PASS, TestStatus.FAIL):
            label.append(f" ({test.duration:.0f}ms)", style="dim")

        node = parent.add(label)
        if test.error:
            node.add(Text(test.error, style="red"))
        if self.show_logs:
            for line in test.logs:
                node.add(Text(line, style="dim"))

    def summary(self, result: RunResult) -> Text:
        text = Text()
        text.append(f"{result.passed} passed", style="green")
        text.append(", ")
        text.append(f"{result.failed} failed", style="red" if result.failed else "dim")
        if result.pending:
            text.append(", ")
            text.append(f"{result.pending} pending", style="yellow")
        text.append(f", {result.total} total")
        return text

    def print_result(self, result: RunResult) -> None:
        self.console.print(self.render(result))
        if result.logs:
            self.console.print("\n[dim]Logs:[/dim]")
            for line in result.logs:
                self.console.print(Text(f"  {line}", style="dim"))
        self.console.print()
        self.console.print(self.summary(result))
