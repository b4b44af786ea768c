"""Math preview tool implementations."""
import logging

from math_preview.config import Config
from math_preview.core.adaptor import adaptor, load_math_extensions
from math_preview.core.extensions import BASE_EXTENSIONS, SUPPORTED_EXTENSIONS
from math_preview.core.hover import math_hover as build_hover
from math_preview.core.hover import typeset_to_markdown
from math_preview.core.math_range import TextDocument
from math_preview.core.models import Position

logger = logging.getLogger(__name__)


def register(mcp, config: Config):
    """Register math preview tools with MCP server."""

    @mcp.tool()
    async def math_hover(
        text: str,
        line: int,
        character: int,
        uri: str = "untitled:document"
    ) -> dict:
        """
        Hover preview for the math under a cursor position.

        Finds the $...$ or $$...$$ span containing the position, typesets it
        and returns Markdown with an embedded SVG image. Malformed math yields
        a "**LaTeX Error**" message instead of an image.

        Args:
            text: Full document text
            line: Zero-based line of the cursor
            character: Zero-based character offset within the line
            uri: Document URI (informational)

        Returns:
            Dictionary with:
            - hover (dict | None): {"contents": {"kind", "value"}, "range": {...}},
              or None when the position is not inside math

        Example:
            {
                "text": "Energy: $E = mc^2$",
                "line": 0,
                "character": 10
            }
        """
        doc = TextDocument(uri=uri, text=text)
        try:
            hover = build_hover(doc, Position(line=line, character=character), config)
        except Exception as e:
            logger.error(f"Hover failed for {uri}: {e}", exc_info=True)
            return {"error": str(e)}

        return {"hover": hover.to_dict() if hover else None}

    @mcp.tool()
    async def render_math(math: str) -> dict:
        """
        Typeset a TeX math expression directly.

        Args:
            math: TeX math source without delimiters, e.g. "x^2 + y^2 = z^2"

        Returns:
            Dictionary with:
            - contents (dict): {"kind": "markdown", "value": "![equation](data:...)"}
        """
        return {"contents": typeset_to_markdown(math, config).to_dict()}

    @mcp.tool()
    async def reload_math_config() -> dict:
        """
        Re-read settings (file + environment) and rebuild the math engine.

        Returns:
            Dictionary with the active extensions, scale and theme.
        """
        try:
            config.reload()
            load_math_extensions(config)
        except Exception as e:
            logger.error(f"Reload failed: {e}", exc_info=True)
            return {"error": str(e)}

        return {
            "extensions": list(adaptor.extensions),
            "scale": config.math_scale,
            "theme": config.math_theme,
        }

    @mcp.tool()
    async def get_math_extensions() -> dict:
        """
        List TeX extensions.

        Returns:
            Dictionary with:
            - baseline (list): Always-enabled extensions
            - supported (list): Extensions that may be enabled in settings
            - active (list): Extensions of the current engine
        """
        return {
            "baseline": list(BASE_EXTENSIONS),
            "supported": list(SUPPORTED_EXTENSIONS),
            "active": list(adaptor.extensions),
        }
