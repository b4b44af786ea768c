"""Process-wide conversion state: the active engine and the SVG rendering context.

Rebuilding an engine per call is wasteful, so one engine is kept and
replaced wholesale whenever the extension set changes.
"""
from typing import Iterable, TYPE_CHECKING
import logging

from lxml import etree

from math_preview.core.engine import MathEngine, build_engine
from math_preview.core.extensions import BASE_EXTENSIONS, resolve_extensions
from math_preview.core.svg_output import SvgAdaptor

if TYPE_CHECKING:
    from math_preview.config import Config

logger = logging.getLogger(__name__)

# Fixed conversion parameters (px)
EM = 18
EX = 9
CONTAINER_WIDTH = 80 * 18


class ConversionAdaptor:
    """Owns the single live engine and the headless rendering context."""

    def __init__(self, extensions: Iterable[str] = BASE_EXTENSIONS):
        self.svg_adaptor = SvgAdaptor()
        self.engine: MathEngine = build_engine(extensions)

    @property
    def extensions(self) -> tuple[str, ...]:
        return self.engine.extensions

    def reconfigure(self, extensions: Iterable[str]) -> None:
        """Build a new engine and swap it in; in-flight conversions keep theirs."""
        engine = build_engine(extensions)
        self.engine = engine
        logger.info(f"Math engine rebuilt with extensions: {', '.join(engine.extensions)}")

    def convert(self, math: str) -> etree._Element:
        """
        Typeset math in display mode with the active engine.

        Raises:
            TypesetError: If the engine rejects the source
        """
        engine = self.engine
        return engine.convert(
            math, self.svg_adaptor,
            display=True, em=EM, ex=EX, container_width=CONTAINER_WIDTH,
        )


adaptor = ConversionAdaptor()


def load_math_extensions(config: "Config") -> None:
    """Recompute the effective extension set from config and rebuild the engine."""
    adaptor.reconfigure(resolve_extensions(config.math_extensions))
