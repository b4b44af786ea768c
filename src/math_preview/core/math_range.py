"""Locate the Markdown math span ($...$ or $$...$$) under a cursor position."""
from dataclasses import dataclass
from typing import Callable, Optional
import re

from math_preview.core.models import Position, Range

# $$...$$ may span lines; a dollar after an odd run of backslashes is escaped
# $...$ stays on one line and may not start/end with a space
DISPLAY_MATH_RE = re.compile(r"(?<!\\)\$\$((?:\\.|[^\\])+?)\$\$", re.DOTALL)
INLINE_MATH_RE = re.compile(r"(?<![\\$])\$(?![\s$])((?:\\.|[^$\\\n])+?)(?<!\s)\$(?!\$)")


@dataclass
class TextDocument:
    """Minimal text document with line/character <-> offset mapping."""
    uri: str
    text: str

    def __post_init__(self):
        self._line_offsets = [0]
        for match in re.finditer("\n", self.text):
            self._line_offsets.append(match.end())

    def offset_at(self, position: Position) -> int:
        if position.line < 0:
            return 0
        if position.line >= len(self._line_offsets):
            return len(self.text)
        start = self._line_offsets[position.line]
        if position.line + 1 < len(self._line_offsets):
            end = self._line_offsets[position.line + 1] - 1
        else:
            end = len(self.text)
        return min(start + max(position.character, 0), end)

    def position_at(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self.text)))
        line = 0
        for i, line_start in enumerate(self._line_offsets):
            if line_start > offset:
                break
            line = i
        return Position(line=line, character=offset - self._line_offsets[line])


@dataclass(frozen=True)
class MathRange:
    """Math source found in a document and the range it occupies (delimiters included)."""
    math: str
    range: Range


MathRangeDetector = Callable[[TextDocument, Position], Optional[MathRange]]


def math_range(doc: TextDocument, pos: Position) -> Optional[MathRange]:
    """
    Find the math span containing pos.

    Display math takes precedence; inline math is searched outside display spans.

    Returns:
        MathRange or None if pos is not inside math
    """
    offset = doc.offset_at(pos)
    text = doc.text

    display_spans = []
    for match in DISPLAY_MATH_RE.finditer(text):
        if match.start() <= offset <= match.end():
            return _to_range(doc, match)
        display_spans.append((match.start(), match.end()))

    for match in INLINE_MATH_RE.finditer(text):
        if any(start <= match.start() < end for start, end in display_spans):
            continue
        if match.start() <= offset <= match.end():
            return _to_range(doc, match)

    return None


def _to_range(doc: TextDocument, match: re.Match) -> MathRange:
    return MathRange(
        math=match.group(1).strip(),
        range=Range(start=doc.position_at(match.start()), end=doc.position_at(match.end())),
    )
