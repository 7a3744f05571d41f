"""
backends.py

Exceptions raised by discovery backends. A BackendError means a whole
backend contributed nothing to the current scrape; it is never fatal.
"""


class BackendError(Exception):
    """Base class for all discovery backend failures."""


class BackendUnavailableError(BackendError):
    """Raised when a backend's base directory or executable is missing."""


class CliTimeoutError(BackendError, TimeoutError):
    """Raised when the sensor-report command exceeds its timeout."""


class CliExecutionError(BackendError):
    """Raised when the sensor-report command exits with a non-zero status."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class CliOutputError(BackendError, ValueError):
    """Raised when the sensor-report output is not a decodable JSON object."""
