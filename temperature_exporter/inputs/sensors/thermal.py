"""
thermal.py

Discovery backend for kernel thermal zones (/sys/class/thermal). Each
thermal_zone<N> directory contributes at most one reading.
"""

import os

from temperature_exporter.exceptions import BackendUnavailableError, BackendError, SensorReadError
from temperature_exporter.inputs.line_reader import read_first_line
from temperature_exporter.inputs.sensors.base import SysfsBackend
from temperature_exporter.inputs.sensors.models import MILLIDEGREE_SCALE, RawSensorDescriptor, SensorSource

DEFAULT_THERMAL_PATH = "/sys/class/thermal"
ZONE_PREFIX = "thermal_zone"
THERMAL_CHIP = "thermal"


class ThermalZoneBackend(SysfsBackend):
    """
    Thermal-zone discovery backend.

    Zones are reported under the fixed chip "thermal", with the zone type
    (e.g. "x86_pkg_temp") as the sensor and the zone directory name as the
    label, so zones sharing a type remain distinct series.
    """

    ACCEPTED_KWARGS = {"base_path"}
    COERCERS = {"base_path": str}

    def __init__(self, *, base_path: str = DEFAULT_THERMAL_PATH):
        self.base_path = base_path

    @property
    def source(self) -> SensorSource:
        return SensorSource.THERMAL_ZONE

    def discover(self) -> list[RawSensorDescriptor]:
        try:
            with os.scandir(self.base_path) as it:
                zones = sorted(
                    (entry for entry in it if entry.is_dir() and entry.name.startswith(ZONE_PREFIX)),
                    key=lambda entry: entry.name,
                )
        except FileNotFoundError as e:
            raise BackendUnavailableError(f"thermal path does not exist: {self.base_path}") from e
        except OSError as e:
            raise BackendError(f"cannot list thermal path {self.base_path}: {e}") from e

        descriptors = []
        for zone in zones:
            temp_path = os.path.join(zone.path, "temp")
            if not os.path.exists(temp_path):
                continue
            try:
                zone_type = read_first_line(os.path.join(zone.path, "type"))
            except SensorReadError:
                zone_type = ""
            descriptors.append(RawSensorDescriptor(
                source=self.source,
                chip=THERMAL_CHIP,
                sensor_name=zone_type,
                label=zone.name,
                source_path=temp_path,
                scale_factor=MILLIDEGREE_SCALE,
            ))
        return descriptors
