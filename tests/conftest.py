"""Shared fixtures."""
import pytest

from math_preview.config import Config
from math_preview.core.adaptor import adaptor
from math_preview.core.extensions import BASE_EXTENSIONS


@pytest.fixture(autouse=True)
def baseline_engine():
    """Restore the process-wide engine to the baseline extension set after each test."""
    yield
    if adaptor.extensions != BASE_EXTENSIONS:
        adaptor.reconfigure(BASE_EXTENSIONS)


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Config with defaults and no settings file or environment overrides."""
    for var in (
        "MATH_PREVIEW_SETTINGS",
        "MATH_PREVIEW_EXTENSIONS",
        "MATH_PREVIEW_SCALE",
        "MATH_PREVIEW_THEME",
    ):
        monkeypatch.delenv(var, raising=False)
    return Config(settings_path=tmp_path / "settings.yaml")
