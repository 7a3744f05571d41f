"""
factory.py

Provides the BackendFactory. The factory constructs discovery backends from
configuration data, validating the backend type and passing each backend
only the parameters it accepts.
"""

import logging
from typing import Any

from temperature_exporter import PACKAGE_LOGGER_NAME
from temperature_exporter.exceptions import FactoryError, InvalidBackendConfigError, UnknownBackendTypeError
from temperature_exporter.inputs.sensors import hwmon, thermal, sensors_cli
from temperature_exporter.inputs.sensors.base import BaseBackend

logger = logging.getLogger(f"{PACKAGE_LOGGER_NAME}.{__name__.split('.')[-1]}")


class BackendFactory:
    """
    Construct discovery backends from configuration.

    The factory maintains a registry mapping backend type strings to backend
    classes, validates configuration data, and instantiates backends with
    only the parameters they accept.
    """
    def __init__(self, registry: dict[str, type[BaseBackend]] | None = None):
        if registry is None:
            self._registry = {
                "hwmon": hwmon.HwmonBackend,
                "thermal": thermal.ThermalZoneBackend,
                "sensors_cli": sensors_cli.SensorsCliBackend,
            }
        else:
            self._registry = registry

    def register(self, backend_type: str, backend_class: type[BaseBackend]):
        """
        Register or override a backend class for a given backend type.

        Args:
            backend_type (str): Backend type identifier used in configuration.
            backend_class (type[BaseBackend]): Class implementing the backend.
        """
        if not isinstance(backend_type, str):
            raise InvalidBackendConfigError("backend_type must be a string")

        backend_type = backend_type.strip().lower()
        if not backend_type:
            raise InvalidBackendConfigError("backend_type cannot be empty or whitespace")

        if not isinstance(backend_class, type) or not issubclass(backend_class, BaseBackend):
            raise InvalidBackendConfigError("backend_class must be a subclass of BaseBackend")

        old_backend = self._registry.get(backend_type)
        if old_backend is not None:
            logger.warning(
                f"Overriding backend for '{backend_type}': "
                f"{old_backend.__name__} → {backend_class.__name__}"
            )

        self._registry[backend_type] = backend_class

    def build(self, backend_config: dict[str, Any]) -> BaseBackend:
        """
        Build a single backend from a configuration dictionary.

        Keys the backend class does not list in ACCEPTED_KWARGS are dropped;
        the rest are cast with the class's COERCERS before instantiation.
        """
        if not isinstance(backend_config, dict):
            raise InvalidBackendConfigError("backend configuration must be a dict")

        backend_type = backend_config.get("type")
        if not isinstance(backend_type, str) or not backend_type.strip():
            raise InvalidBackendConfigError("Missing or invalid 'type' in backend configuration")
        backend_type = backend_type.strip().lower()

        backend_class = self._registry.get(backend_type)
        if backend_class is None:
            raise UnknownBackendTypeError(
                unknown_type=backend_type,
                known_types=list(self._registry.keys()),
            )

        accepted_kwargs = getattr(backend_class, "ACCEPTED_KWARGS", set())
        coercers = getattr(backend_class, "COERCERS", {})

        filtered_kwargs: dict[str, object] = {
            key: value for key, value in backend_config.items() if key in accepted_kwargs
        }

        for field_name, cast in coercers.items():
            if field_name in filtered_kwargs:
                try:
                    filtered_kwargs[field_name] = cast(filtered_kwargs[field_name])
                except (TypeError, ValueError) as e:
                    raise InvalidBackendConfigError(
                        f"Invalid type for '{field_name}' in {backend_class.__name__}: "
                        f"expected {getattr(cast, '__name__', str(cast))}",
                        backend_type=backend_type,
                        field=field_name,
                        cause=e,
                    ) from e

        try:
            return backend_class(**filtered_kwargs)
        except Exception as e:
            raise InvalidBackendConfigError(
                f"Failed to instantiate {backend_class.__name__}: {e}",
                backend_type=backend_type,
                cause=e,
            ) from e

    def build_all(self, configs: list[dict[str, Any]]) -> list[BaseBackend]:
        """
        Build backends from a list of backend configurations, preserving
        order. Entries with ``"enabled": false`` are skipped. Entries that
        fail validation or construction are logged and skipped.

        Returns:
            list[BaseBackend]: Successfully built backends.
        """
        if not isinstance(configs, list):
            raise InvalidBackendConfigError("build_all expects a list of backend configs")

        backends: list[BaseBackend] = []

        for idx, backend_cfg in enumerate(configs):
            if isinstance(backend_cfg, dict) and backend_cfg.get("enabled", True) is False:
                logger.info("Backend '%s' disabled by configuration", backend_cfg.get("type"))
                continue
            try:
                backends.append(self.build(backend_cfg))
            except FactoryError as e:
                logger.warning(
                    "Skipping backend (index=%s, type=%s): %s",
                    idx, e.backend_type, str(e)
                )
                continue

        return backends
