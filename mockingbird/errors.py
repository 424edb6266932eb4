"""
Mockingbird errors.

Failures are localized: an AssertionFailure fails one test, while
HookError and RegistrationError are only ever logged by the runner.
"""


class MockingbirdError(Exception):
    """Base exception for all Mockingbird errors."""
    pass


class AssertionFailure(MockingbirdError, AssertionError):
    """A matcher did not pass."""
    pass


class HookError(MockingbirdError):
    """A lifecycle hook raised."""
    pass


class RegistrationError(MockingbirdError):
    """A describe builder raised while the suite tree was being built."""
    pass


class MockError(MockingbirdError, TypeError):
    """Misuse of the mock subsystem (spying on a non-function, mock matcher on a plain value)."""
    pass


class TimerLoopError(MockingbirdError):
    """run_all_timers gave up because timers kept rescheduling themselves."""
    pass


class ConfigurationError(MockingbirdError):
    """Errors in configuration."""
    pass
