from .config_exceptions import (
    ConfigurationError,
    InvalidConfigValueError,
    ConfigFileNotFoundError,
)
from .factory_exceptions import FactoryError, UnknownBackendTypeError, InvalidBackendConfigError
from .sensors import (
    SensorReadError,
    SensorNotFoundError,
    SensorPermissionError,
    SensorEmptyError,
    SensorValueError,
)
from .backends import (
    BackendError,
    BackendUnavailableError,
    CliTimeoutError,
    CliExecutionError,
    CliOutputError,
)

__all__ = [
    "ConfigurationError",
    "InvalidConfigValueError",
    "ConfigFileNotFoundError",
    "FactoryError",
    "UnknownBackendTypeError",
    "InvalidBackendConfigError",
    "SensorReadError",
    "SensorNotFoundError",
    "SensorPermissionError",
    "SensorEmptyError",
    "SensorValueError",
    "BackendError",
    "BackendUnavailableError",
    "CliTimeoutError",
    "CliExecutionError",
    "CliOutputError",
]
