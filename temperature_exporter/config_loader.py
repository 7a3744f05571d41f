"""
config_loader.py

Load configuration from built-in defaults, an optional JSON config file and
command-line overrides (highest precedence). The loader validates every
value and exposes the merged configuration via as_dict().

If no config file can be located, the defaults are used. A CONFIG_PATH
environment variable that points to a missing file is an error.

Classes:
    ConfigLoader

Usage:
    loader = ConfigLoader(logger, overrides={"listen": ":9200"})
    config = loader.as_dict()
    backends = loader.backends_config()
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

from temperature_exporter.exceptions import ConfigFileNotFoundError, InvalidConfigValueError

ETC_CONFIG_PATH = Path("/etc/temperature_exporter/config.json")
DEFAULT_CONFIG_FILENAME = "config.json"

DEFAULTS: Dict[str, Any] = {
    "listen": ":9102",
    "metrics_path": "/metrics",
    "hwmon_path": "/sys/class/hwmon",
    "thermal_path": "/sys/class/thermal",
    "enable_hwmon": True,
    "enable_thermal": True,
    "enable_sensors_cli": True,
    "sensors_cli_path": "sensors",
    "sensors_timeout": 2.0,
    "namespace": "temp_exporter",
    "read_timeout": 5.0,
    "shutdown_timeout": 10.0,
    "log_requests": False,
    "log_level": "INFO",
    "log_dir": None,
}

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, None: 1.0}
_NAMESPACE_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_duration(value: Any) -> float:
    """
    Convert a duration to seconds. Accepts numbers (seconds) and strings
    such as "2s", "500ms", "1.5m" or "10".

    Raises:
        ValueError: The value is not a recognised duration.
    """
    if isinstance(value, bool):
        raise ValueError(f"not a duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = _DURATION_RE.match(value)
        if match:
            return float(match.group(1)) * _DURATION_UNITS[match.group(2)]
    raise ValueError(f"not a duration: {value!r}")


def _safe_log(logger, level: str, msg: str) -> None:
    """
    Log a message using the provided logger while safely handling missing or
    nonstandard logger implementations.
    """
    if logger is None:
        return
    fn = getattr(logger, level.lower(), None)
    if callable(fn):
        fn(msg)


def _load_json_config(path: Path, logger=None) -> Dict[str, Any]:
    """
    Load JSON configuration from the given file path.

    Raises:
        ConfigFileNotFoundError: The file cannot be opened.
        InvalidConfigValueError: The file is not a JSON object.
    """
    try:
        with open(path, "r") as file:
            data = json.load(file)
    except OSError as e:
        _safe_log(logger, "error", f"ConfigLoader: failed reading {path}: {e}")
        raise ConfigFileNotFoundError(f"cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        _safe_log(logger, "error", f"ConfigLoader: invalid JSON in {path}: {e}")
        raise InvalidConfigValueError(f"invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise InvalidConfigValueError(f"config file {path} must contain a JSON object")
    return data


class ConfigLoader:
    """
    Load and validate exporter configuration.

    JSON keys (all optional, defaults in DEFAULTS):
      - listen (str, "[host]:port")
      - metrics_path (str, starts with "/")
      - hwmon_path, thermal_path, sensors_cli_path (str)
      - enable_hwmon, enable_thermal, enable_sensors_cli, log_requests (bool)
      - sensors_timeout, read_timeout, shutdown_timeout (duration > 0)
      - namespace (str, metric name prefix)
      - log_level (str), log_dir (str or null)
    """

    def __init__(self, logger, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize the loader, locate and load a JSON config file if one
        exists, apply overrides and validate the result.

        Args:
            logger (Logger): Logger instance for diagnostic output.
            overrides (dict, optional): Values taking precedence over the
                file, typically from command-line flags. None values are
                ignored.
        """
        self.logger = logger

        self.config_path = self._resolve_config_path()
        if self.config_path is None:
            _safe_log(self.logger, "info", "ConfigLoader: no config file found, using defaults")
            self.config: Dict[str, Any] = {}
        else:
            self.config = _load_json_config(self.config_path, self.logger)

        unknown = sorted(set(self.config) - set(DEFAULTS))
        if unknown:
            _safe_log(self.logger, "warning", f"ConfigLoader: ignoring unknown keys: {unknown}")

        merged = dict(DEFAULTS)
        merged.update({k: v for k, v in self.config.items() if k in DEFAULTS})
        merged.update({k: v for k, v in (overrides or {}).items() if v is not None})
        self._raw = merged

        self.listen = self._get_listen()
        self.metrics_path = self._get_metrics_path()
        self.hwmon_path = self._get_str("hwmon_path")
        self.thermal_path = self._get_str("thermal_path")
        self.sensors_cli_path = self._get_str("sensors_cli_path")
        self.enable_hwmon = self._get_bool("enable_hwmon")
        self.enable_thermal = self._get_bool("enable_thermal")
        self.enable_sensors_cli = self._get_bool("enable_sensors_cli")
        self.log_requests = self._get_bool("log_requests")
        self.sensors_timeout = self._get_duration("sensors_timeout")
        self.read_timeout = self._get_duration("read_timeout")
        self.shutdown_timeout = self._get_duration("shutdown_timeout")
        self.namespace = self._get_namespace()
        self.log_level = self._get_log_level()
        self.log_dir = self._get_log_dir()

    def as_dict(self) -> Dict[str, Any]:
        """Return the validated configuration dictionary."""
        return {key: getattr(self, key) for key in DEFAULTS}

    def backends_config(self) -> list[Dict[str, Any]]:
        """
        Return backend configurations in merge order (hwmon, thermal,
        sensors_cli), each carrying its enabled flag.
        """
        return [
            {"type": "hwmon", "enabled": self.enable_hwmon, "base_path": self.hwmon_path},
            {"type": "thermal", "enabled": self.enable_thermal, "base_path": self.thermal_path},
            {
                "type": "sensors_cli",
                "enabled": self.enable_sensors_cli,
                "path": self.sensors_cli_path,
                "timeout": self.sensors_timeout,
            },
        ]

    def _invalid(self, key: str, reason: str) -> InvalidConfigValueError:
        msg = f"Invalid {key}: {self._raw.get(key)!r} ({reason})"
        _safe_log(self.logger, "error", msg)
        return InvalidConfigValueError(msg)

    def _resolve_config_path(self) -> Optional[Path]:
        env_path = os.getenv("CONFIG_PATH")
        if env_path:
            path = Path(env_path).expanduser().resolve()
            if path.is_file():
                _safe_log(self.logger, "info", f"ConfigLoader: using config from CONFIG_PATH env var: {path}")
                return path
            raise ConfigFileNotFoundError(f"CONFIG_PATH set but file does not exist: {path}")

        if ETC_CONFIG_PATH.is_file():
            _safe_log(self.logger, "info", f"ConfigLoader: using config from {ETC_CONFIG_PATH}")
            return ETC_CONFIG_PATH

        local_path = Path.cwd() / DEFAULT_CONFIG_FILENAME
        if local_path.is_file():
            _safe_log(self.logger, "warning", f"ConfigLoader: using local dev config at {local_path} (NOT /etc)")
            return local_path

        return None

    def _get_str(self, key: str) -> str:
        value = self._raw[key]
        if not isinstance(value, str) or not value.strip():
            raise self._invalid(key, "must be a non-empty string")
        return value

    def _get_bool(self, key: str) -> bool:
        value = self._raw[key]
        if not isinstance(value, bool):
            raise self._invalid(key, "must be true or false")
        return value

    def _get_duration(self, key: str) -> float:
        try:
            seconds = parse_duration(self._raw[key])
        except ValueError as e:
            raise self._invalid(key, str(e)) from e
        if seconds <= 0:
            raise self._invalid(key, "must be > 0")
        return seconds

    def _get_listen(self) -> str:
        value = self._get_str("listen")
        host, sep, port = value.rpartition(":")
        if not sep or not port.isdigit() or not 0 <= int(port) <= 65535:
            raise self._invalid("listen", "expected [host]:port")
        return value

    def _get_metrics_path(self) -> str:
        value = self._get_str("metrics_path")
        if not value.startswith("/"):
            raise self._invalid("metrics_path", "must start with '/'")
        return value

    def _get_namespace(self) -> str:
        value = self._raw["namespace"]
        if not isinstance(value, str) or (value and not _NAMESPACE_RE.match(value)):
            raise self._invalid("namespace", "must be a valid metric name prefix")
        return value

    def _get_log_level(self) -> str:
        value = str(self._raw["log_level"]).upper()
        if value not in _LOG_LEVELS:
            raise self._invalid("log_level", f"expected one of {sorted(_LOG_LEVELS)}")
        return value

    def _get_log_dir(self) -> Optional[str]:
        value = self._raw["log_dir"]
        if value is None:
            return None
        if not isinstance(value, str):
            raise self._invalid("log_dir", "must be a string or null")
        return value or None
