"""Configuration management with settings file and environment variable overrides."""
from dataclasses import dataclass, field, fields
from pathlib import Path
import logging
import os

import yaml

from math_preview.core.models import RenderOptions

logger = logging.getLogger(__name__)

THEMES = ("light", "dark")


@dataclass
class Config:
    """Configuration for the math preview server."""

    # Optional TeX extensions on top of the baseline set (unknown names are ignored)
    math_extensions: list = field(default_factory=list)

    # Rendering scale, 1.0 = 100% font size
    math_scale: float = 1.0

    # "light" renders black glyphs, "dark" renders white glyphs
    math_theme: str = "light"

    # Settings file (YAML). Missing file is fine, defaults apply.
    settings_path: Path = field(
        default_factory=lambda: Path.home() / ".config/math-preview/settings.yaml"
    )

    # Versioning
    version: str = "0.1.0"

    @classmethod
    def load(cls) -> "Config":
        """Load config from the settings file, then apply environment overrides."""
        config = cls()

        if val := os.environ.get("MATH_PREVIEW_SETTINGS"):
            config.settings_path = Path(val).expanduser()

        config._apply_settings_file()

        # Override extensions from env (comma separated)
        if (val := os.environ.get("MATH_PREVIEW_EXTENSIONS")) is not None:
            config.math_extensions = [ext.strip() for ext in val.split(",") if ext.strip()]

        # Override scale from env
        if val := os.environ.get("MATH_PREVIEW_SCALE"):
            config.math_scale = _parse_scale(val, config.math_scale)

        # Override theme from env
        if val := os.environ.get("MATH_PREVIEW_THEME"):
            config.math_theme = _parse_theme(val, config.math_theme)

        return config

    def _apply_settings_file(self) -> None:
        if not self.settings_path.exists():
            return

        try:
            data = yaml.safe_load(self.settings_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse settings file {self.settings_path}: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Settings file {self.settings_path} is not a mapping, ignoring")
            return

        math = data.get("math") or {}
        if not isinstance(math, dict):
            logger.warning("'math' section in settings is not a mapping, ignoring")
            return

        extensions = math.get("extensions")
        if isinstance(extensions, list):
            self.math_extensions = [str(ext) for ext in extensions]
        elif extensions is not None:
            logger.warning(f"'math.extensions' must be a list, got: {extensions!r}")

        if "scale" in math:
            self.math_scale = _parse_scale(math["scale"], self.math_scale)
        if "theme" in math:
            self.math_theme = _parse_theme(math["theme"], self.math_theme)

    def reload(self) -> None:
        """Refresh this config in place from the settings file and environment."""
        fresh = type(self).load()
        for f in fields(self):
            setattr(self, f.name, getattr(fresh, f.name))

    def render_options(self) -> RenderOptions:
        """Snapshot the current rendering options."""
        return RenderOptions(scale=self.math_scale, color_theme=self.math_theme)


def _parse_scale(value, default: float) -> float:
    try:
        scale = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid math scale {value!r}, keeping {default}")
        return default
    if scale <= 0:
        logger.warning(f"Math scale must be positive, got {scale}, keeping {default}")
        return default
    return scale


def _parse_theme(value, default: str) -> str:
    theme = str(value).strip().lower()
    if theme not in THEMES:
        logger.warning(f"Unknown math theme {value!r}, keeping {default}")
        return default
    return theme
