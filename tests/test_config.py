"""Tests for configuration loading."""
import pytest

from math_preview.config import Config
from math_preview.core.models import RenderOptions


@pytest.fixture
def settings_file(tmp_path, monkeypatch):
    """Point MATH_PREVIEW_SETTINGS at a temp file and clear other overrides."""
    path = tmp_path / "settings.yaml"
    monkeypatch.setenv("MATH_PREVIEW_SETTINGS", str(path))
    for var in ("MATH_PREVIEW_EXTENSIONS", "MATH_PREVIEW_SCALE", "MATH_PREVIEW_THEME"):
        monkeypatch.delenv(var, raising=False)
    return path


def test_defaults_without_settings_file(settings_file):
    config = Config.load()

    assert config.math_extensions == []
    assert config.math_scale == 1.0
    assert config.math_theme == "light"
    assert config.render_options() == RenderOptions(scale=1.0, color_theme="light")


def test_settings_file(settings_file):
    settings_file.write_text(
        "math:\n"
        "  extensions: [physics, braket]\n"
        "  scale: 1.25\n"
        "  theme: dark\n",
        encoding="utf-8",
    )

    config = Config.load()

    assert config.math_extensions == ["physics", "braket"]
    assert config.math_scale == 1.25
    assert config.math_theme == "dark"


def test_env_overrides_settings_file(settings_file, monkeypatch):
    settings_file.write_text("math:\n  scale: 2\n  theme: dark\n", encoding="utf-8")
    monkeypatch.setenv("MATH_PREVIEW_EXTENSIONS", "mathtools, bogus-ext,")
    monkeypatch.setenv("MATH_PREVIEW_SCALE", "0.8")
    monkeypatch.setenv("MATH_PREVIEW_THEME", "Light")

    config = Config.load()

    assert config.math_extensions == ["mathtools", "bogus-ext"]
    assert config.math_scale == 0.8
    assert config.math_theme == "light"


@pytest.mark.parametrize("value", ["abc", "0", "-1"])
def test_invalid_scale_keeps_default(settings_file, monkeypatch, value):
    monkeypatch.setenv("MATH_PREVIEW_SCALE", value)
    assert Config.load().math_scale == 1.0


def test_invalid_theme_keeps_default(settings_file, monkeypatch):
    monkeypatch.setenv("MATH_PREVIEW_THEME", "solarized")
    assert Config.load().math_theme == "light"


def test_malformed_settings_file_is_ignored(settings_file):
    settings_file.write_text("math: [unclosed\n", encoding="utf-8")
    assert Config.load().math_scale == 1.0


def test_non_mapping_settings_file_is_ignored(settings_file):
    settings_file.write_text("- just\n- a list\n", encoding="utf-8")
    assert Config.load().math_extensions == []


def test_reload_updates_in_place(settings_file):
    config = Config.load()
    settings_file.write_text("math:\n  theme: dark\n  extensions: [upgreek]\n", encoding="utf-8")

    config.reload()

    assert config.math_theme == "dark"
    assert config.math_extensions == ["upgreek"]
    assert config.render_options().color_theme == "dark"
