"""
line_reader.py

Reads the first line of a small sysfs-style pseudo-file and parses numeric
sensor values. Every discovery backend and the merge engine go through
read_first_line().
"""

import os
import re

from temperature_exporter.exceptions import (
    SensorEmptyError,
    SensorNotFoundError,
    SensorPermissionError,
    SensorReadError,
    SensorValueError,
)

# Pseudo-files hold a single short value; some drivers expose streams, so
# never read past this many characters.
MAX_LINE_LENGTH = 256

# Plain decimal only: no underscores, hex, inf or nan.
NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


def read_first_line(path: str | os.PathLike) -> str:
    """
    Return the first line of ``path`` with surrounding whitespace removed.

    Raises:
        SensorNotFoundError: The path does not exist.
        SensorPermissionError: The path exists but cannot be opened.
        SensorEmptyError: The file holds no data before EOF.
        SensorReadError: Any other OS-level read failure.
    """
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as file:
            line = file.readline(MAX_LINE_LENGTH)
    except FileNotFoundError as e:
        raise SensorNotFoundError(f"{path}: no such file") from e
    except PermissionError as e:
        raise SensorPermissionError(f"{path}: permission denied") from e
    except OSError as e:
        raise SensorReadError(f"{path}: {e}") from e

    if not line:
        raise SensorEmptyError(f"{path}: empty file")
    return line.strip()


def parse_sensor_value(raw: str, path: str | os.PathLike = "") -> float:
    """
    Convert a raw pseudo-file value to float.

    Raises:
        SensorValueError: ``raw`` is not a plain decimal number.
    """
    if not NUMBER_RE.fullmatch(raw):
        raise SensorValueError(f"{path}: non-numeric value {raw!r}")
    return float(raw)
