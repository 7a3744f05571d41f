"""
base.py

Defines the abstract discovery backend contracts.

SysfsBackend implementations only locate pseudo-files and return
RawSensorDescriptor objects; the merge engine reads them later.
ReportingBackend implementations return fully resolved CliReading objects.
"""


from abc import ABC, abstractmethod

from temperature_exporter.inputs.sensors.models import CliReading, RawSensorDescriptor, SensorSource


class BaseBackend(ABC):
    """
    Abstract base class for all discovery backends.

    Concrete subclasses must implement:
      - source:     the SensorSource tag of the readings produced
      - discover(): locate sensors and return them as a list
    """

    @property
    @abstractmethod
    def source(self) -> SensorSource:
        """Backend tag, e.g. SensorSource.HWMON."""

    @abstractmethod
    def discover(self) -> list:
        """
        Discover sensors. Raises a BackendError when the backend as a whole
        is unusable for this scrape.
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(source={self.source.value})"


class SysfsBackend(BaseBackend, ABC):
    """Backend that locates sysfs pseudo-files without reading them."""

    @abstractmethod
    def discover(self) -> list[RawSensorDescriptor]:
        """Return one descriptor per temperature input found."""


class ReportingBackend(BaseBackend, ABC):
    """Backend that reports values already converted to Celsius."""

    @abstractmethod
    def discover(self) -> list[CliReading]:
        """Return one reading per temperature input reported."""
