from .factory import BackendFactory
from .models import SensorSource, RawSensorDescriptor, CliReading, ReadingKey, ScrapeResult

__all__ = [
    "BackendFactory",
    "SensorSource",
    "RawSensorDescriptor",
    "CliReading",
    "ReadingKey",
    "ScrapeResult",
]
