"""Data models for hover requests and rendered content."""
from dataclasses import dataclass
from enum import Enum


class MarkupKind(Enum):
    """Rich-text formats understood by hover clients."""
    PLAINTEXT = "plaintext"
    MARKDOWN = "markdown"


@dataclass(frozen=True)
class Position:
    """Zero-based line/character position in a document."""
    line: int
    character: int

    def to_dict(self) -> dict:
        return {"line": self.line, "character": self.character}


@dataclass(frozen=True)
class Range:
    """Half-open document range."""
    start: Position
    end: Position

    def to_dict(self) -> dict:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}


@dataclass(frozen=True)
class MarkupContent:
    """Hover body."""
    kind: MarkupKind
    value: str

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "value": self.value}


@dataclass(frozen=True)
class Hover:
    """Hover payload anchored to the math range it was computed from."""
    contents: MarkupContent
    range: Range

    def to_dict(self) -> dict:
        return {"contents": self.contents.to_dict(), "range": self.range.to_dict()}


@dataclass(frozen=True)
class RenderOptions:
    """Per-call rendering options snapshotted from configuration."""
    scale: float = 1.0
    color_theme: str = "light"  # "light" or "dark"
