import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from temperature_exporter.exceptions import (
    BackendUnavailableError,
    CliExecutionError,
    CliOutputError,
    CliTimeoutError,
)
from temperature_exporter.inputs.sensors.models import CliReading, ReadingKey
from temperature_exporter.inputs.sensors.sensors_cli import SensorsCliBackend, parse_sensors_report


def completed(stdout: str | bytes) -> MagicMock:
    result = MagicMock()
    result.stdout = stdout.encode() if isinstance(stdout, str) else stdout
    return result


# ---------- Parsing ----------

def test_single_reading():
    report = {"coretemp-isa-0000": {"Core 0": {"temp2_input": 39.0, "temp2_label": "Core 0"}}}
    (reading,) = parse_sensors_report(report)
    assert reading.key == ReadingKey("coretemp-isa-0000", "Core 0", "Core 0")
    assert reading.value_celsius == 39.0


def test_integer_values_accepted():
    (reading,) = parse_sensors_report({"chip": {"Composite": {"temp1_input": 35}}})
    assert reading.value_celsius == 35.0
    assert isinstance(reading.value_celsius, float)


def test_missing_or_non_string_label_is_empty():
    report = {"chip": {
        "a": {"temp1_input": 30.0},
        "b": {"temp2_input": 31.0, "temp2_label": 7},
    }}
    assert [r.label for r in parse_sensors_report(report)] == ["", ""]


def test_label_must_match_index():
    report = {"chip": {"a": {"temp1_input": 30.0, "temp2_label": "other"}}}
    (reading,) = parse_sensors_report(report)
    assert reading.label == ""


def test_non_numeric_values_ignored():
    report = {"chip": {"a": {
        "temp1_input": "N/A",
        "temp2_input": None,
        "temp3_input": True,
        "temp4_input": 40.5,
    }}}
    assert [r.value_celsius for r in parse_sensors_report(report)] == [40.5]


def test_unexpected_shapes_skipped():
    report = {
        "plain": "string",
        "chip": {
            "Adapter": "ISA adapter",
            "list": [1, 2],
            "fan1": {"fan1_input": 1200.0, "temp1_max": 90.0},
            "Tctl": {"temp1_input": 48.1},
        },
    }
    assert parse_sensors_report(report) == [CliReading("chip", "Tctl", "", 48.1)]


def test_several_inputs_in_one_section():
    report = {"nvme-pci-0400": {"Composite": {
        "temp1_input": 35.85, "temp1_label": "Composite",
        "temp2_input": 38.85, "temp2_label": "Sensor 1",
    }}}
    labels = sorted(r.label for r in parse_sensors_report(report))
    assert labels == ["Composite", "Sensor 1"]


# ---------- Command execution ----------

@patch("temperature_exporter.inputs.sensors.sensors_cli.subprocess.run")
def test_discover_runs_command_with_json_flag(mock_run):
    mock_run.return_value = completed(json.dumps({"k10temp-pci-00c3": {"Tctl": {"temp1_input": 45.25}}}))

    readings = SensorsCliBackend(path="/usr/bin/sensors", timeout=3.0).discover()

    assert readings == [CliReading("k10temp-pci-00c3", "Tctl", "", 45.25)]
    args, kwargs = mock_run.call_args
    assert args[0] == ["/usr/bin/sensors", "-j"]
    assert kwargs["timeout"] == 3.0
    assert kwargs["check"] is True


@patch("temperature_exporter.inputs.sensors.sensors_cli.subprocess.run")
def test_timeout_raises(mock_run):
    mock_run.side_effect = subprocess.TimeoutExpired(cmd=["sensors", "-j"], timeout=2.0)
    with pytest.raises(CliTimeoutError):
        SensorsCliBackend().discover()


@patch("temperature_exporter.inputs.sensors.sensors_cli.subprocess.run")
def test_non_zero_exit_raises(mock_run):
    mock_run.side_effect = subprocess.CalledProcessError(1, ["sensors", "-j"], stderr=b"No sensors found!")
    with pytest.raises(CliExecutionError) as exc_info:
        SensorsCliBackend().discover()
    assert exc_info.value.returncode == 1
    assert "No sensors found" in exc_info.value.stderr


@patch("temperature_exporter.inputs.sensors.sensors_cli.subprocess.run")
def test_missing_executable_raises_unavailable(mock_run):
    mock_run.side_effect = FileNotFoundError("sensors")
    with pytest.raises(BackendUnavailableError):
        SensorsCliBackend().discover()


@patch("temperature_exporter.inputs.sensors.sensors_cli.subprocess.run")
def test_invalid_json_raises(mock_run):
    mock_run.return_value = completed("{not json")
    with pytest.raises(CliOutputError):
        SensorsCliBackend().discover()


@patch("temperature_exporter.inputs.sensors.sensors_cli.subprocess.run")
def test_non_object_json_raises(mock_run):
    mock_run.return_value = completed("[1, 2, 3]")
    with pytest.raises(CliOutputError):
        SensorsCliBackend().discover()


@patch("temperature_exporter.inputs.sensors.sensors_cli.subprocess.run")
def test_invalid_utf8_tolerated(mock_run):
    mock_run.return_value = completed(b'{"chip": {"Tctl\xc2": {"temp1_input": 40.0}}}')
    (reading,) = SensorsCliBackend().discover()
    assert reading.value_celsius == 40.0


def test_non_positive_timeout_rejected():
    with pytest.raises(ValueError):
        SensorsCliBackend(timeout=0)
