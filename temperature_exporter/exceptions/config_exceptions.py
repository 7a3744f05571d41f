"""
config_exceptions.py

Errors raised while assembling the exporter configuration from defaults,
the JSON config file and command-line flags. They stop start-up: the
exporter never serves with a half-valid configuration.

    ConfigurationError
    ├── InvalidConfigValueError   bad listen address, duration, namespace...
    ├── ConfigFileNotFoundError   CONFIG_PATH names a file that is missing
    └── FactoryError              see factory_exceptions.py
"""


class ConfigurationError(Exception):
    """Base class for exporter configuration errors."""


class InvalidConfigValueError(ConfigurationError, ValueError):
    """
    A configuration value failed validation, e.g. ``listen`` without a port,
    ``read_timeout: "soon"`` or a metrics path not starting with "/".
    """


class ConfigFileNotFoundError(ConfigurationError, FileNotFoundError):
    """The config file named by CONFIG_PATH is missing or unreadable."""
