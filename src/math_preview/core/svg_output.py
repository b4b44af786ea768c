"""SVG output stage: TeX math rendered to an lxml SVG tree.

Single-line math goes through matplotlib's mathtext, using Figure() directly
(not pyplot) so no GUI backend or global figure state is involved.
Environments (pmatrix, cases, aligned, ...) and row breaks need a layout
engine mathtext lacks, so they are rendered with ziamath. Neither needs a
TeX installation.
"""
import io
import logging
import re

import matplotlib
import ziamath as zm
from matplotlib.backends.backend_svg import FigureCanvasSVG
from matplotlib.figure import Figure
from lxml import etree

logger = logging.getLogger(__name__)

# CSS reference pixel density used to convert between pt, px and ex
PX_PER_INCH = 96
PT_PER_INCH = 72

# Fixed salt so generated ids are stable across renders
SVG_HASH_SALT = "math-preview"

_LENGTH_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*(pt|px)?\s*$")
_LAYOUT_RE = re.compile(r"\\begin\s*\{|\\\\|(?<!\\)&")
_BLACK = ("#000000", "#000", "black")


class SvgAdaptor:
    """
    Headless rendering context: parses and serializes SVG documents.

    Holds no per-document state, so one instance serves the whole process.
    """

    def __init__(self):
        self.parser = etree.XMLParser(
            resolve_entities=False,
            no_network=True,
            load_dtd=False,
            remove_comments=False,
        )

    def parse(self, data: bytes) -> etree._Element:
        return etree.fromstring(data, self.parser)

    def serialize(self, node: etree._Element) -> str:
        return etree.tostring(node, encoding="unicode")


def needs_layout_engine(tex: str) -> bool:
    """True for environments, row breaks and alignment cells."""
    return _LAYOUT_RE.search(tex) is not None


class SvgOutput:
    """
    Render TeX math to SVG.

    Glyph outlines are written as paths into each document itself (font
    cache "local"), so nothing is shared between renders or engines. Every
    document gets a <defs> section for theme styles.
    """

    def __init__(self, font_cache: str = "local", fontset: str = "cm"):
        if font_cache != "local":
            raise ValueError(f"Unsupported font cache mode: {font_cache}")
        self.font_cache = font_cache
        self.fontset = fontset

    def render(
        self,
        tex: str,
        adaptor: SvgAdaptor,
        display: bool = True,
        em: float = 18,
        ex: float = 9,
        container_width: float = 80 * 18
    ) -> etree._Element:
        """
        Typeset one expression.

        Args:
            tex: Expanded TeX math (without $ delimiters)
            adaptor: Rendering context used to parse the SVG
            display: Display (block) mode centres the expression
            em: Font size in px
            ex: x-height in px, used as the unit for the image size
            container_width: Layout width in px (does not crop the image)

        Returns:
            Root <svg> element

        Raises:
            ValueError: If the expression cannot be parsed
        """
        if needs_layout_engine(tex):
            data = self._render_ziamath(tex, em)
        else:
            data = self._render_mathtext(tex, display, em, container_width)

        node = adaptor.parse(data)
        self._ensure_defs(node)
        self._use_current_color(node)
        self._size_in_ex(node, ex)
        return node

    def _render_mathtext(self, tex: str, display: bool, em: float, container_width: float) -> bytes:
        rc = {
            "svg.fonttype": "path",
            "svg.hashsalt": SVG_HASH_SALT,
            "mathtext.fontset": self.fontset,
            "text.usetex": False,
        }
        with matplotlib.rc_context(rc):
            fig = Figure(
                figsize=(container_width / PX_PER_INCH, 4 * em / PX_PER_INCH),
                dpi=PX_PER_INCH,
            )
            fig.patch.set_alpha(0)
            FigureCanvasSVG(fig)

            # Text splits on newlines, which would break the $...$ pair
            tex = re.sub(r"\s*\n\s*", " ", tex)

            x, ha = (0.5, "center") if display else (0.0, "left")
            fig.text(
                x, 0.5, f"${tex}$",
                fontsize=em * PT_PER_INCH / PX_PER_INCH,
                ha=ha, va="center",
                color="#000000",
            )

            buf = io.BytesIO()
            fig.savefig(
                buf, format="svg", bbox_inches="tight", pad_inches=0.02,
                transparent=True, metadata={"Date": None},
            )
        return buf.getvalue()

    @staticmethod
    def _render_ziamath(tex: str, em: float) -> bytes:
        try:
            svg = zm.Latex(tex, size=em).svg()
        except Exception as e:
            # latex2mathml/ziamath raise assorted types; report them as parse errors
            raise ValueError(str(e) or f"{type(e).__name__} while typesetting") from e
        return svg.encode("utf-8")

    @staticmethod
    def _ensure_defs(node: etree._Element) -> None:
        """Insert an empty <defs> as the first child when the document has none."""
        namespace = etree.QName(node).namespace
        tag = f"{{{namespace}}}defs" if namespace else "defs"
        if node.find(tag) is not None:
            return
        defs = etree.SubElement(node, tag)
        # Empty text keeps the explicit <defs></defs> pair when serialized
        defs.text = ""
        node.insert(0, defs)

    @staticmethod
    def _use_current_color(node: etree._Element) -> None:
        """Make glyphs follow the CSS color property."""
        node.set("fill", "currentColor")
        for el in node.iter(tag=etree.Element):
            style = el.get("style")
            if style and "#000000" in style:
                el.set("style", style.replace("#000000", "currentColor"))
            for attr in ("fill", "stroke"):
                if el.get(attr, "").strip().lower() in _BLACK:
                    el.set(attr, "currentColor")

    @staticmethod
    def _size_in_ex(node: etree._Element, ex: float) -> None:
        """Express width/height in ex so a CSS font-size scales the image."""
        for attr in ("width", "height"):
            value = node.get(attr)
            match = _LENGTH_RE.match(value or "")
            if not match:
                continue
            px = float(match.group(1))
            if match.group(2) == "pt":
                px = px * PX_PER_INCH / PT_PER_INCH
            node.set(attr, f"{px / ex:.3f}ex")
