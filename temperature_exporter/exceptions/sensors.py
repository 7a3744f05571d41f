"""
sensors.py

Exceptions raised while reading a single sensor pseudo-file.

Every class derives from SensorReadError so the merge engine can skip an
unreadable sensor with one except clause. The not-found and permission
variants also derive from the matching builtin OSError subclass, so code
that only knows about the filesystem still catches them:

    # Sensor level (broad):
    except SensorReadError: ...

    # Filesystem level:
    except FileNotFoundError: ...
"""


class SensorReadError(Exception):
    """Raised when a sensor read fails."""


class SensorNotFoundError(SensorReadError, FileNotFoundError):
    """Raised when a sensor pseudo-file does not exist."""


class SensorPermissionError(SensorReadError, PermissionError):
    """Raised when a sensor pseudo-file cannot be opened for reading."""


class SensorEmptyError(SensorReadError):
    """Raised when a sensor pseudo-file holds no line before EOF."""


class SensorValueError(SensorReadError, ValueError):
    """Raised when a sensor produces a non-numeric value."""
