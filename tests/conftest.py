"""
Pytest configuration and fixtures for Mockingbird tests.
"""

import pytest

from mockingbird.assertions import Expect
from mockingbird.clock import VirtualClock
from mockingbird.environment import Environment
from mockingbird.mocks import MockRegistry
from mockingbird.runner import execute
from mockingbird.settings import MockingbirdSettings


@pytest.fixture
def settings():
    """Settings with defaults, independent of the process environment."""
    return MockingbirdSettings(_env_file=None)


@pytest.fixture
def env(settings):
    """A fresh run environment."""
    return Environment(settings)


@pytest.fixture
def expect():
    """An expect() with no current test."""
    return Expect(lambda: None)


@pytest.fixture
def mocks():
    return MockRegistry()


@pytest.fixture
def clock():
    """An installed virtual clock whose callback errors are collected."""
    errors = []
    c = VirtualClock(report=errors.append)
    c.install()
    c.errors = errors
    return c


@pytest.fixture
def run_snippet(settings):
    """Execute a snippet body with test settings."""

    async def _run(body, bindings=None):
        return await execute(body, bindings, settings)

    return _run

