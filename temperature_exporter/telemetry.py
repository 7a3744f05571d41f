"""
telemetry.py

Provides the TemperatureCollector class, the merge engine behind every
scrape. On each scrape it runs the enabled discovery backends, reads the
located sysfs inputs, converts them to Celsius and merges them with the
lm-sensors readings into one gauge set keyed by (chip, sensor, label).

The collector implements the prometheus_client custom collector protocol,
so registering it with a CollectorRegistry is enough to serve it.
"""

import logging
import threading
import time
from collections.abc import Iterator
from typing import Callable

from prometheus_client.core import Metric

from temperature_exporter import PACKAGE_LOGGER_NAME
from temperature_exporter.exceptions import SensorReadError
from temperature_exporter.inputs.line_reader import parse_sensor_value, read_first_line
from temperature_exporter.inputs.sensors.base import BaseBackend, ReportingBackend, SysfsBackend
from temperature_exporter.inputs.sensors.models import (
    RawSensorDescriptor,
    ReadingKey,
    ScrapeResult,
)
from temperature_exporter.outputs.exposition import DEFAULT_NAMESPACE, build_metric_families

logger = logging.getLogger(f"{PACKAGE_LOGGER_NAME}.telemetry")


class TemperatureCollector:
    """
    Merge readings from all discovery backends into one gauge set per scrape.

    Sysfs backends run first, in the order given, and their descriptors are
    read in discovery order. Reporting backends run last, so their readings
    overwrite any sysfs reading with the same key. Scrapes are serialised by
    a lock and publish their result as a single immutable ScrapeResult.
    """
    def __init__(
        self,
        *,
        backends: list[BaseBackend] | None = None,
        namespace: str = DEFAULT_NAMESPACE,
        clock: Callable[[], float] = time.perf_counter,
    ):
        """
        Initialize the collector.

        Args:
            backends (list[BaseBackend], optional): Discovery backends.
            namespace (str): Metric name prefix.
            clock (callable): Monotonic clock used to time scrapes.
        """
        self._backends = backends or []
        self._namespace = namespace
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot = ScrapeResult()
        self._cli_warned = False

    @property
    def backends(self) -> list[BaseBackend]:
        return list(self._backends)

    @property
    def snapshot(self) -> ScrapeResult:
        """The most recently published scrape result."""
        return self._snapshot

    def _discover_descriptors(self) -> list[RawSensorDescriptor]:
        descriptors: list[RawSensorDescriptor] = []
        for backend in self._backends:
            if not isinstance(backend, SysfsBackend):
                continue
            try:
                descriptors.extend(backend.discover())
            except Exception as e:
                logger.warning(f"{backend.source.value} discovery failed: {e}")
        return descriptors

    @staticmethod
    def _read_descriptor(descriptor: RawSensorDescriptor) -> float | None:
        """
        Read one descriptor and return its value in Celsius, or None when the
        sensor is unreadable or not numeric.
        """
        try:
            raw = read_first_line(descriptor.source_path)
            value = parse_sensor_value(raw, descriptor.source_path)
        except SensorReadError as e:
            logger.debug(f"Skipping {descriptor.source_path}: {e}")
            return None
        return value * descriptor.scale_factor

    def _merge_reporting(self, working: dict[ReadingKey, float]) -> None:
        for backend in self._backends:
            if not isinstance(backend, ReportingBackend):
                continue
            try:
                readings = backend.discover()
            except Exception as e:
                if not self._cli_warned:
                    logger.warning(
                        f"{backend.source.value} backend failed: {e} "
                        "(disable it or install lm-sensors); further failures will not be logged"
                    )
                    self._cli_warned = True
                continue
            for reading in readings:
                working[reading.key] = reading.value_celsius

    def scrape(self) -> ScrapeResult:
        """
        Run one full discovery-and-read cycle and publish its result.

        Never raises because of a backend or sensor failure; an unusable
        backend or sensor is simply missing from the result.
        """
        with self._lock:
            start = self._clock()

            descriptors = self._discover_descriptors()

            working: dict[ReadingKey, float] = {}
            for descriptor in descriptors:
                value = self._read_descriptor(descriptor)
                if value is not None:
                    working[descriptor.key] = value

            self._merge_reporting(working)

            elapsed = max(0.0, self._clock() - start)
            self._snapshot = ScrapeResult(readings=working, duration_seconds=elapsed)
            logger.debug(f"Scrape finished: {len(working)} readings in {elapsed:.4f}s")
            return self._snapshot

    # --- prometheus_client collector protocol -------------------------------

    def collect(self) -> Iterator[Metric]:
        result = self.scrape()
        yield from build_metric_families(result, self._namespace)

    def describe(self) -> Iterator[Metric]:
        # Lets the registry learn metric names without triggering a scrape.
        yield from build_metric_families(ScrapeResult(), self._namespace)
