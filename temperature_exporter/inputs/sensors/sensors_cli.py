"""
sensors_cli.py

Reporting backend for the lm-sensors command line tool. Runs `sensors -j`
and flattens its nested JSON report:

    {
        "coretemp-isa-0000": {
            "Adapter": "ISA adapter",
            "Core 0": {"temp2_input": 39.0, "temp2_label": "Core 0"}
        }
    }

Values are already in degrees Celsius.
"""

import json
import re
import subprocess
from collections.abc import Mapping
from typing import Any

from temperature_exporter.exceptions import (
    BackendUnavailableError,
    BackendError,
    CliExecutionError,
    CliOutputError,
    CliTimeoutError,
)
from temperature_exporter.inputs.sensors.base import ReportingBackend
from temperature_exporter.inputs.sensors.models import CliReading, SensorSource

DEFAULT_SENSORS_CLI_PATH = "sensors"
DEFAULT_SENSORS_TIMEOUT = 2.0
JSON_OUTPUT_FLAG = "-j"

TEMP_INPUT_RE = re.compile(r"^temp(\d+)_input$")


def _as_number(value: Any) -> float | None:
    # JSON booleans decode to bool, which is an int subclass.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def parse_sensors_report(report: Mapping[str, Any]) -> list[CliReading]:
    """
    Flatten a decoded `sensors -j` report into CliReading objects.

    Anything that does not have the expected chip -> section -> field shape
    is skipped, as are non-numeric temp<N>_input values and non-string
    labels.
    """
    readings = []
    for chip, sections in report.items():
        if not isinstance(sections, Mapping):
            continue
        for section, fields in sections.items():
            if not isinstance(fields, Mapping):
                continue
            for field_name, raw_value in fields.items():
                match = TEMP_INPUT_RE.match(field_name)
                if match is None:
                    continue
                value = _as_number(raw_value)
                if value is None:
                    continue
                label = fields.get(f"temp{match.group(1)}_label")
                readings.append(CliReading(
                    chip=chip,
                    section_name=section,
                    label=label if isinstance(label, str) else "",
                    value_celsius=value,
                ))
    return readings


class SensorsCliBackend(ReportingBackend):
    """
    lm-sensors backend.

    Parameters
    ----------
    path : str
        Executable name or path of the `sensors` command.
    timeout : float
        Seconds to wait for the command before giving up.
    """

    ACCEPTED_KWARGS = {"path", "timeout"}
    COERCERS = {"path": str, "timeout": float}

    def __init__(self, *, path: str = DEFAULT_SENSORS_CLI_PATH, timeout: float = DEFAULT_SENSORS_TIMEOUT):
        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        self.path = path
        self.timeout = timeout

    @property
    def source(self) -> SensorSource:
        return SensorSource.CLI_BACKEND

    def _run(self) -> str:
        try:
            result = subprocess.run(
                [self.path, JSON_OUTPUT_FLAG],
                capture_output=True,
                timeout=self.timeout,
                check=True,
            )
        except subprocess.TimeoutExpired as e:
            raise CliTimeoutError(f"'{self.path} {JSON_OUTPUT_FLAG}' timed out after {self.timeout}s") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
            raise CliExecutionError(
                f"'{self.path} {JSON_OUTPUT_FLAG}' exited with status {e.returncode}: {stderr}",
                returncode=e.returncode,
                stderr=stderr,
            ) from e
        except FileNotFoundError as e:
            raise BackendUnavailableError(f"sensors command not found: {self.path}") from e
        except OSError as e:
            raise BackendError(f"cannot run {self.path}: {e}") from e
        return result.stdout.decode("utf-8", errors="replace")

    def discover(self) -> list[CliReading]:
        """
        Run the sensors command and return every numeric temp<N>_input it
        reports.

        Raises:
            CliTimeoutError: The command did not finish within ``timeout``.
            CliExecutionError: The command exited with a non-zero status.
            BackendUnavailableError: The command could not be found.
            CliOutputError: The output is not a JSON object.
        """
        output = self._run()
        try:
            report = json.loads(output)
        except json.JSONDecodeError as e:
            raise CliOutputError(f"invalid JSON from {self.path}: {e}") from e
        if not isinstance(report, dict):
            raise CliOutputError(f"expected a JSON object from {self.path}, got {type(report).__name__}")
        return parse_sensors_report(report)
