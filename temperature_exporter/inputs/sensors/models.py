"""
models.py

Value types shared by the discovery backends, the merge engine and the
exposition adapter.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, NamedTuple

# hwmon and thermal zones both report millidegrees Celsius.
MILLIDEGREE_SCALE = 0.001


class SensorSource(Enum):
    """Backend that produced a reading."""

    HWMON = "hwmon"
    THERMAL_ZONE = "thermal"
    CLI_BACKEND = "sensors_cli"


class ReadingKey(NamedTuple):
    """Identity of one temperature time series."""

    chip: str
    sensor: str
    label: str


@dataclass(frozen=True)
class RawSensorDescriptor:
    """
    A located but not yet read sysfs temperature input.

    The value behind ``source_path`` is read at scrape time and multiplied by
    ``scale_factor`` to obtain degrees Celsius.
    """
    source: SensorSource
    chip: str
    sensor_name: str
    label: str
    source_path: str | os.PathLike
    scale_factor: float = MILLIDEGREE_SCALE

    @property
    def key(self) -> ReadingKey:
        return ReadingKey(self.chip, self.sensor_name, self.label)


@dataclass(frozen=True)
class CliReading:
    """A reading reported by the sensor-report command, already in Celsius."""
    chip: str
    section_name: str
    label: str
    value_celsius: float
    source: SensorSource = SensorSource.CLI_BACKEND

    @property
    def key(self) -> ReadingKey:
        return ReadingKey(self.chip, self.section_name, self.label)


@dataclass(frozen=True)
class ScrapeResult:
    """
    Published outcome of one scrape: the merged gauge set and the scrape
    duration. Instances are immutable and replaced as a whole.
    """
    readings: Mapping[ReadingKey, float] = field(default_factory=lambda: MappingProxyType({}))
    duration_seconds: float = 0.0

    def __post_init__(self) -> None:
        if not isinstance(self.readings, MappingProxyType):
            object.__setattr__(self, "readings", MappingProxyType(dict(self.readings)))
