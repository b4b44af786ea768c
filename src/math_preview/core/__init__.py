"""Core modules for math typesetting and hover content."""
from .models import Hover, MarkupContent, MarkupKind, Position, Range, RenderOptions
from .extensions import BASE_EXTENSIONS, SUPPORTED_EXTENSIONS, resolve_extensions
from .engine import MathEngine, TypesetError, build_engine
from .adaptor import ConversionAdaptor, load_math_extensions
from .math_range import MathRange, TextDocument, math_range
from .hover import math_hover, typeset_to_markdown

__all__ = [
    "Hover",
    "MarkupContent",
    "MarkupKind",
    "Position",
    "Range",
    "RenderOptions",
    "BASE_EXTENSIONS",
    "SUPPORTED_EXTENSIONS",
    "resolve_extensions",
    "MathEngine",
    "TypesetError",
    "build_engine",
    "ConversionAdaptor",
    "load_math_extensions",
    "MathRange",
    "TextDocument",
    "math_range",
    "math_hover",
    "typeset_to_markdown",
]
