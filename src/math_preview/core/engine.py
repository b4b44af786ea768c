"""Typesetting engine and its factory."""
from typing import Callable, Iterable, NoReturn
import logging

from lxml import etree

from math_preview.core.svg_output import SvgAdaptor, SvgOutput
from math_preview.core.tex_input import TexError, TexInput

logger = logging.getLogger(__name__)


class TypesetError(Exception):
    """Raised when math source cannot be parsed or typeset."""


ErrorFormatter = Callable[["MathEngine", Exception], NoReturn]


def raise_typeset_error(engine: "MathEngine", error: Exception) -> NoReturn:
    """Default error hook: surface the failure as a TypesetError."""
    raise TypesetError(str(error).strip()) from error


class MathEngine:
    """TeX input + SVG output pair bound to one extension set."""

    def __init__(
        self,
        tex: TexInput,
        svg: SvgOutput,
        format_error: ErrorFormatter = raise_typeset_error
    ):
        self.tex = tex
        self.svg = svg
        self.format_error = format_error

    @property
    def extensions(self) -> tuple[str, ...]:
        return self.tex.packages

    def convert(
        self,
        math: str,
        adaptor: SvgAdaptor,
        display: bool = True,
        em: float = 18,
        ex: float = 9,
        container_width: float = 80 * 18
    ) -> etree._Element:
        """
        Lay out and render math to an SVG element.

        Raises:
            TypesetError: Via format_error, if the source is rejected
        """
        try:
            expanded = self.tex.expand(math)
            if not expanded.strip():
                raise TexError("Empty math expression")
            return self.svg.render(
                expanded, adaptor,
                display=display, em=em, ex=ex, container_width=container_width,
            )
        except (TexError, ValueError) as e:
            self.format_error(self, e)


def build_engine(extensions: Iterable[str]) -> MathEngine:
    """
    Build a fresh engine for the given extension set.

    Pure factory: touches no process-wide state.
    """
    return MathEngine(
        tex=TexInput(extensions),
        svg=SvgOutput(font_cache="local"),
        format_error=raise_typeset_error,
    )
