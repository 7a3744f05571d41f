"""
factory_exceptions.py

Errors raised by BackendFactory while turning backend entries such as
``{"type": "sensors_cli", "timeout": 2.0}`` into discovery backends.
build_all() logs and skips an entry that raises one of these, so one bad
backend entry never stops the others.
"""

from typing import Any, Optional

from .config_exceptions import ConfigurationError


class FactoryError(ConfigurationError):
    """
    Base class for backend construction errors.

    ``backend_type`` and ``field`` are kept as attributes and appended to the
    message, so a log line names the offending entry without string parsing.
    """
    def __init__(
        self,
        message: str,
        *,
        backend_type: Optional[str] = None,
        field: Optional[str] = None,
        config: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.backend_type = backend_type
        self.field = field
        self.config = config
        self.__cause__ = cause

    def __str__(self) -> str:
        context = [
            f"{name}={value}"
            for name, value in (("backend_type", self.backend_type), ("field", self.field))
            if value
        ]
        base = super().__str__()
        return f"{base} ({', '.join(context)})" if context else base


class UnknownBackendTypeError(FactoryError):
    """A backend entry names a type with no registered backend, e.g. "ipmi"."""

    def __init__(self, unknown_type: str, known_types: list[str]) -> None:
        self.known_types = sorted(known_types)
        msg = f"Unknown backend type '{unknown_type}'. Known types: {', '.join(self.known_types) or 'none'}"
        super().__init__(msg, backend_type=unknown_type)


class InvalidBackendConfigError(FactoryError):
    """
    A backend entry is malformed or its backend refused the values, e.g. a
    missing ``type``, ``timeout: "soon"`` or a non-positive sensors_cli timeout.
    """
