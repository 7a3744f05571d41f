"""
exposition.py

Renders a ScrapeResult as prometheus_client metric families. Serialisation
to the text exposition format is left to prometheus_client.
"""

from prometheus_client.core import GaugeMetricFamily, Metric

from temperature_exporter.inputs.sensors.models import ScrapeResult

DEFAULT_NAMESPACE = "temp_exporter"
TEMPERATURE_LABELS = ["chip", "sensor", "label"]


def metric_name(namespace: str, name: str) -> str:
    return f"{namespace}_{name}" if namespace else name


def build_metric_families(result: ScrapeResult, namespace: str = DEFAULT_NAMESPACE) -> list[Metric]:
    """
    Build the temperature and scrape-duration gauges for one scrape.

    Args:
        result: Published scrape snapshot.
        namespace: Metric name prefix.

    Returns:
        [<namespace>_temperature_celsius, <namespace>_scrape_duration_seconds]
    """
    temperature = GaugeMetricFamily(
        metric_name(namespace, "temperature_celsius"),
        "Temperature in degrees Celsius read from system sensors (hwmon, thermal, lm-sensors).",
        labels=TEMPERATURE_LABELS,
    )
    for key, value in result.readings.items():
        temperature.add_metric([key.chip, key.sensor, key.label], value)

    duration = GaugeMetricFamily(
        metric_name(namespace, "scrape_duration_seconds"),
        "Duration of the last temperature collection.",
        value=result.duration_seconds,
    )
    return [temperature, duration]
