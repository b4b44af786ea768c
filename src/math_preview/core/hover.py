"""Hover content: typeset math into Markdown with an embedded SVG image."""
from typing import Optional, TYPE_CHECKING
import logging

from math_preview.core import adaptor as conversion
from math_preview.core.encoder import svg_to_data_url
from math_preview.core.engine import TypesetError
from math_preview.core.math_range import MathRangeDetector, TextDocument, math_range
from math_preview.core.models import Hover, MarkupContent, MarkupKind, Position
from math_preview.core.postprocess import style_svg

if TYPE_CHECKING:
    from math_preview.config import Config

logger = logging.getLogger(__name__)

ERROR_LABEL = "**LaTeX Error**:\n"
UNKNOWN_ERROR = "Unknown error"


def math_hover(
    doc: TextDocument,
    pos: Position,
    config: "Config",
    detector: MathRangeDetector = math_range
) -> Optional[Hover]:
    """
    Build the hover for the math span under pos.

    Returns:
        Hover anchored to the math range, or None if pos is not inside math
    """
    found = detector(doc, pos)
    if found is None:
        return None

    contents = typeset_to_markdown(found.math, config)
    return Hover(contents=contents, range=found.range)


def typeset_to_markdown(tex: str, config: "Config") -> MarkupContent:
    """
    Render math as a Markdown image, or as Markdown error text on failure.

    Never raises: a malformed formula still yields displayable content.
    """
    opts = config.render_options()
    active = conversion.adaptor
    try:
        node = active.convert(tex)
        svg = style_svg(node, opts, active.svg_adaptor)
        data_url = svg_to_data_url(svg)
    except TypesetError as e:
        logger.debug(f"Math rejected: {e}")
        return _error_content(str(e))
    except Exception as e:
        logger.warning(f"Math rendering failed: {e}", exc_info=True)
        return _error_content(str(e))

    return MarkupContent(kind=MarkupKind.MARKDOWN, value=f"![equation]({data_url})")


def _error_content(message: str) -> MarkupContent:
    return MarkupContent(kind=MarkupKind.MARKDOWN, value=ERROR_LABEL + (message or UNKNOWN_ERROR))
