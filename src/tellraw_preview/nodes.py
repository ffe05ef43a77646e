"""Syntax node types, commands, and source position helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tellraw_preview.errors import ParsePositionError


class NodeType(Enum):
    LITERAL = "literal"  # bareword
    STRING = "string"  # "..." or '...', quotes included
    SELECTOR = "selector"  # @s, @a[tag=x]
    OBJECT = "object"  # {key: value, ...}
    ARRAY = "array"  # [value, ...]
    COMMENT = "comment"  # # to end of line


@dataclass(frozen=True, slots=True)
class Literal:
    """A bareword token."""

    content: str
    position: int

    type = NodeType.LITERAL


@dataclass(frozen=True, slots=True)
class StringLiteral:
    """Quoted string; content keeps its delimiting quotes."""

    content: str
    position: int

    type = NodeType.STRING


@dataclass(frozen=True, slots=True)
class Selector:
    """Target selector with its optional attribute list."""

    content: str
    position: int

    type = NodeType.SELECTOR


@dataclass(frozen=True, slots=True)
class Object:
    """Compound value. Children alternate key, value, key, value..."""

    content: str
    position: int
    children: tuple[SyntaxNode, ...] = ()

    type = NodeType.OBJECT

    def pairs(self) -> list[tuple[SyntaxNode, SyntaxNode]]:
        """Return the (key, value) node pairs in source order."""
        it = iter(self.children)
        return list(zip(it, it))


@dataclass(frozen=True, slots=True)
class Array:
    """List value."""

    content: str
    position: int
    children: tuple[SyntaxNode, ...] = ()

    type = NodeType.ARRAY


@dataclass(frozen=True, slots=True)
class Comment:
    """A whole-line comment, '#' included."""

    content: str
    position: int

    type = NodeType.COMMENT


SyntaxNode = Literal | StringLiteral | Selector | Object | Array | Comment


@dataclass(frozen=True, slots=True)
class Command:
    """One command: a line, or a group of lines joined by backslash continuations.

    `raw_text` is the trimmed source span, escapes included. `position` and
    `end` are absolute offsets of that span. `error` is set when tokenizing
    stopped early; `nodes` then holds what was parsed before the failure.
    """

    raw_text: str
    nodes: tuple[SyntaxNode, ...]
    position: int = 0
    end: int = 0
    macro: bool = False
    error: ParsePositionError | None = None

    @property
    def is_blank(self) -> bool:
        return not self.raw_text


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int


def locate(source: str, offset: int) -> Position:
    """Convert an absolute offset into a line/column Position."""
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return Position(line, offset - line_start + 1, offset)
