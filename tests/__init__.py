"""
Mockingbird Test Suite

- Unit tests for the clock, mocks, equality and matchers
- Runner tests executing whole snippet bodies
- CLI tests through typer's CliRunner
"""
