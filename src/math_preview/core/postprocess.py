"""Theme styling injected into rendered SVG."""
import logging

from lxml import etree

from math_preview.core.models import RenderOptions
from math_preview.core.svg_output import SvgAdaptor

logger = logging.getLogger(__name__)

THEME_COLORS = {
    "light": "#000000",
    "dark": "#ffffff",
}

_DEFS_TAG = "<defs>"


def theme_color(theme: str) -> str:
    """Foreground color for a theme; anything but "light" renders white."""
    return THEME_COLORS["light"] if theme == "light" else THEME_COLORS["dark"]


def format_percent(scale: float) -> str:
    """scale * 100 in plain decimal notation, without trailing zeros."""
    return f"{100 * scale:.10f}".rstrip("0").rstrip(".")


def theme_css(opts: RenderOptions) -> str:
    return f"svg {{font-size: {format_percent(opts.scale)}%;}} * {{ color: {theme_color(opts.color_theme)} }}"


def style_svg(node: etree._Element, opts: RenderOptions, adaptor: SvgAdaptor) -> str:
    """
    Serialize node and insert a theme <style> block right after the first <defs>.

    Markup without a <defs> tag is returned unstyled.
    """
    markup = adaptor.serialize(node)
    index = markup.find(_DEFS_TAG)
    if index == -1:
        logger.debug("No <defs> in rendered SVG, skipping theme styles")
        return markup

    index += len(_DEFS_TAG)
    return f"{markup[:index]}<style>{theme_css(opts)}</style>{markup[index:]}"
