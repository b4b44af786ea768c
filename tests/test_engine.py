"""Tests for the typesetting engine, its factory and the conversion adaptor."""
import pytest
from lxml import etree

from math_preview.config import Config
from math_preview.core.adaptor import ConversionAdaptor, adaptor, load_math_extensions
from math_preview.core.engine import TypesetError, build_engine
from math_preview.core.extensions import BASE_EXTENSIONS, resolve_extensions
from math_preview.core.models import RenderOptions
from math_preview.core.postprocess import style_svg
from math_preview.core.svg_output import SvgAdaptor, SvgOutput, needs_layout_engine

SVG_NS = "{http://www.w3.org/2000/svg}"


# ---------------------------------------------------------------------------
# Engine factory
# ---------------------------------------------------------------------------


def test_build_engine_binds_extensions():
    engine = build_engine(BASE_EXTENSIONS + ("physics",))
    assert engine.extensions == BASE_EXTENSIONS + ("physics",)
    assert engine.svg.font_cache == "local"


def test_build_engine_returns_fresh_instances():
    first = build_engine(BASE_EXTENSIONS)
    second = build_engine(BASE_EXTENSIONS)
    assert first is not second
    assert first.tex is not second.tex
    assert first.svg is not second.svg


def test_convert_produces_svg_with_defs():
    node = build_engine(BASE_EXTENSIONS).convert("x^2 + y^2 = z^2", SvgAdaptor())

    assert node.tag == f"{SVG_NS}svg"
    assert node.find(f"{SVG_NS}defs") is not None
    assert node.get("fill") == "currentColor"
    assert node.get("width").endswith("ex")
    assert node.get("height").endswith("ex")


def test_unbalanced_source_raises_typeset_error():
    with pytest.raises(TypesetError) as exc_info:
        build_engine(BASE_EXTENSIONS).convert(r"\frac{1}{", SvgAdaptor())
    assert str(exc_info.value)


def test_unknown_command_raises_typeset_error():
    with pytest.raises(TypesetError, match="notacommand"):
        build_engine(BASE_EXTENSIONS).convert(r"\notacommand{x}", SvgAdaptor())


def test_empty_source_raises_typeset_error():
    with pytest.raises(TypesetError, match="Empty math expression"):
        build_engine(BASE_EXTENSIONS).convert("   ", SvgAdaptor())


def test_format_error_hook_is_used():
    engine = build_engine(BASE_EXTENSIONS)
    seen = []

    def hook(failing_engine, error):
        seen.append((failing_engine, error))
        raise TypesetError("custom")

    engine.format_error = hook
    with pytest.raises(TypesetError, match="custom"):
        engine.convert(r"\frac{1}{", SvgAdaptor())

    assert seen[0][0] is engine
    assert isinstance(seen[0][1], ValueError)


def test_extensions_restrict_input():
    svg_adaptor = SvgAdaptor()
    with pytest.raises(TypesetError):
        build_engine(BASE_EXTENSIONS).convert(r"\ket{\psi}", svg_adaptor)

    node = build_engine(resolve_extensions(["braket"])).convert(r"\ket{\psi}", svg_adaptor)
    assert node.tag == f"{SVG_NS}svg"


# ---------------------------------------------------------------------------
# AMS environments and row breaks
# ---------------------------------------------------------------------------

AMS_ENVIRONMENTS = [
    r"\begin{pmatrix} a & b \\ c & d \end{pmatrix}",
    r"f(x) = \begin{cases} x & x > 0 \\ -x & x \leq 0 \end{cases}",
    r"\begin{aligned} a &= b + c \\ d &= e \end{aligned}",
]


@pytest.mark.parametrize("math", AMS_ENVIRONMENTS)
def test_ams_environments_render_with_defs(math):
    svg_adaptor = SvgAdaptor()
    node = build_engine(BASE_EXTENSIONS).convert(math, svg_adaptor)

    assert node.tag == f"{SVG_NS}svg"
    assert node.find(f"{SVG_NS}defs") is not None
    markup = style_svg(node, RenderOptions(color_theme="dark"), svg_adaptor)
    assert "<style>svg {font-size: 100%;} * { color: #ffffff }</style>" in markup


def test_layout_engine_routing():
    assert needs_layout_engine(r"\begin{matrix} 1 \end{matrix}")
    assert needs_layout_engine(r"a \\ b")
    assert needs_layout_engine("a & b")
    assert not needs_layout_engine(r"\frac{1}{2} + \& x")
    assert not needs_layout_engine("x^2 + y^2")


def test_missing_defs_is_inserted_first():
    svg_adaptor = SvgAdaptor()
    node = svg_adaptor.parse(b'<svg xmlns="http://www.w3.org/2000/svg"><g/></svg>')

    SvgOutput._ensure_defs(node)
    SvgOutput._ensure_defs(node)

    assert svg_adaptor.serialize(node) == (
        '<svg xmlns="http://www.w3.org/2000/svg"><defs></defs><g/></svg>'
    )


# ---------------------------------------------------------------------------
# Conversion adaptor
# ---------------------------------------------------------------------------


def test_adaptor_starts_with_baseline():
    assert ConversionAdaptor().extensions == BASE_EXTENSIONS


def test_reconfigure_replaces_engine_not_context():
    conv = ConversionAdaptor()
    old_engine = conv.engine
    context = conv.svg_adaptor

    conv.reconfigure(resolve_extensions(["physics"]))

    assert conv.engine is not old_engine
    assert conv.svg_adaptor is context
    assert old_engine.extensions == BASE_EXTENSIONS
    assert conv.extensions == BASE_EXTENSIONS + ("physics",)


def test_captured_engine_keeps_working_after_reconfigure():
    conv = ConversionAdaptor()
    captured = conv.engine
    conv.reconfigure(resolve_extensions(["braket"]))

    node = captured.convert("a + b", conv.svg_adaptor)
    assert node.tag == f"{SVG_NS}svg"
    with pytest.raises(TypesetError):
        captured.convert(r"\ket{a}", conv.svg_adaptor)


def test_reconfigure_is_idempotent():
    conv = ConversionAdaptor()
    extensions = resolve_extensions(["physics"])

    conv.reconfigure(extensions)
    first = etree.tostring(conv.convert(r"\abs{x} + \frac{a}{b}"))
    conv.reconfigure(extensions)
    second = etree.tostring(conv.convert(r"\abs{x} + \frac{a}{b}"))

    assert first == second


def test_load_math_extensions_filters_config(tmp_path):
    config = Config(settings_path=tmp_path / "none.yaml", math_extensions=["mathtools", "bogus-ext"])

    load_math_extensions(config)

    assert adaptor.extensions == BASE_EXTENSIONS + ("mathtools",)
