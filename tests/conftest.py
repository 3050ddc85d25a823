"""
Shared pytest fixtures for dusted tests.

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments.
"""

import sys
from pathlib import Path

import pytest

# Ensure dusted package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import dusted.settings


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Drop cached settings and DUSTED_* variables around every test."""
    for name in list(dusted.settings.DustedSettings.model_fields):
        monkeypatch.delenv(f"DUSTED_{name.upper()}", raising=False)
    dusted.settings._settings_cache = None
    yield
    dusted.settings._settings_cache = None
