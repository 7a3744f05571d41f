"""
hwmon.py

Discovery backend for the kernel hwmon tree (/sys/class/hwmon). Each chip
directory may expose several temp<N>_input files in millidegrees Celsius.
"""

import logging
import os
import re

from temperature_exporter import PACKAGE_LOGGER_NAME
from temperature_exporter.exceptions import BackendUnavailableError, BackendError, SensorReadError
from temperature_exporter.inputs.line_reader import read_first_line
from temperature_exporter.inputs.sensors.base import SysfsBackend
from temperature_exporter.inputs.sensors.models import MILLIDEGREE_SCALE, RawSensorDescriptor, SensorSource

logger = logging.getLogger(f"{PACKAGE_LOGGER_NAME}.{__name__.split('.')[-1]}")

DEFAULT_HWMON_PATH = "/sys/class/hwmon"

TEMP_INPUT_RE = re.compile(r"^temp(\d+)_input$")


def _read_optional(path: str) -> str:
    """Return the first line of ``path``, or "" if it is missing or unreadable."""
    try:
        return read_first_line(path)
    except SensorReadError:
        return ""


class HwmonBackend(SysfsBackend):
    """
    hwmon discovery backend.

    Parameters
    ----------
    base_path : str
        Directory holding one sub-directory per chip, e.g. "/sys/class/hwmon".
    """

    # Factory uses these for validation + filtering.
    ACCEPTED_KWARGS = {"base_path"}
    COERCERS = {"base_path": str}

    def __init__(self, *, base_path: str = DEFAULT_HWMON_PATH):
        self.base_path = base_path

    @property
    def source(self) -> SensorSource:
        return SensorSource.HWMON

    # --- Internals ----------------------------------------------------------

    def _list_chip_dirs(self) -> list[os.DirEntry]:
        try:
            with os.scandir(self.base_path) as it:
                entries = [entry for entry in it if entry.is_dir()]
        except FileNotFoundError as e:
            raise BackendUnavailableError(f"hwmon path does not exist: {self.base_path}") from e
        except OSError as e:
            raise BackendError(f"cannot list hwmon path {self.base_path}: {e}") from e
        return sorted(entries, key=lambda entry: entry.name)

    @staticmethod
    def _chip_name(chip_dir: os.DirEntry) -> str:
        name = _read_optional(os.path.join(chip_dir.path, "name"))
        return name or chip_dir.name

    @staticmethod
    def _sensor_label(chip_path: str, index: str) -> str:
        # temp<N>_label wins; temp<N>_type (Tctl, Tdie, ...) is only a fallback.
        label = _read_optional(os.path.join(chip_path, f"temp{index}_label"))
        if label:
            return label
        return _read_optional(os.path.join(chip_path, f"temp{index}_type"))

    def _discover_chip(self, chip_dir: os.DirEntry) -> list[RawSensorDescriptor]:
        chip_name = self._chip_name(chip_dir)
        try:
            with os.scandir(chip_dir.path) as it:
                file_names = sorted(entry.name for entry in it)
        except OSError as e:
            logger.debug(f"Skipping unreadable hwmon chip {chip_dir.path}: {e}")
            return []

        descriptors = []
        for file_name in file_names:
            match = TEMP_INPUT_RE.match(file_name)
            if match is None:
                continue
            descriptors.append(RawSensorDescriptor(
                source=self.source,
                chip=chip_name,
                # The sensor label repeats the chip name; series under one chip
                # are told apart by the label only.
                sensor_name=chip_name,
                label=self._sensor_label(chip_dir.path, match.group(1)),
                source_path=os.path.join(chip_dir.path, file_name),
                scale_factor=MILLIDEGREE_SCALE,
            ))
        return descriptors

    # --- Public API ---------------------------------------------------------

    def discover(self) -> list[RawSensorDescriptor]:
        """
        Locate every temp<N>_input file under the hwmon tree.

        Returns:
            list[RawSensorDescriptor]: One descriptor per input, chips in
            directory-name order.

        Raises:
            BackendUnavailableError: The base path does not exist.
            BackendError: The base path cannot be listed.
        """
        descriptors: list[RawSensorDescriptor] = []
        for chip_dir in self._list_chip_dirs():
            descriptors.extend(self._discover_chip(chip_dir))
        return descriptors
