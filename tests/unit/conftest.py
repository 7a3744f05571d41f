"""
conftest.py

Fixtures that build fake sysfs trees under tmp_path, so discovery and
scrape tests never touch the real /sys or need lm-sensors installed.
"""

import os
from pathlib import Path

import pytest


def _write_files(directory: Path, files: dict[str, str]) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for file_name, content in files.items():
        (directory / file_name).write_text(content)


@pytest.fixture
def hwmon_root(tmp_path) -> Path:
    root = tmp_path / "hwmon"
    root.mkdir()
    return root


@pytest.fixture
def thermal_root(tmp_path) -> Path:
    root = tmp_path / "thermal"
    root.mkdir()
    return root


@pytest.fixture
def make_chip(hwmon_root):
    """Create hwmon/<dir_name>/ holding ``files``; ``name`` writes the name file."""
    def _make(dir_name: str, files: dict[str, str], *, name: str | None = None) -> Path:
        chip_dir = hwmon_root / dir_name
        contents = dict(files)
        if name is not None:
            contents["name"] = f"{name}\n"
        _write_files(chip_dir, contents)
        return chip_dir
    return _make


@pytest.fixture
def make_zone(thermal_root):
    """Create thermal/<dir_name>/ with optional type and temp files."""
    def _make(dir_name: str, *, zone_type: str | None = None, temp: str | None = None) -> Path:
        files = {}
        if zone_type is not None:
            files["type"] = f"{zone_type}\n"
        if temp is not None:
            files["temp"] = f"{temp}\n"
        zone_dir = thermal_root / dir_name
        _write_files(zone_dir, files)
        return zone_dir
    return _make


@pytest.fixture
def deny_scandir(monkeypatch):
    """
    Make os.scandir raise PermissionError for the given directories. Tests
    may run as root, where chmod alone does not block listing.
    """
    denied: set[str] = set()
    real_scandir = os.scandir

    def fake_scandir(path="."):
        if os.fspath(path) in denied:
            raise PermissionError(13, "Permission denied", os.fspath(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", fake_scandir)

    def _deny(path) -> None:
        denied.add(os.fspath(path))
    return _deny
