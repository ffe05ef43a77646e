"""Inline previews of chat component messages in Minecraft function files."""

from __future__ import annotations

from tellraw_preview.components import ChatComponent, parse_chat_component
from tellraw_preview.errors import (
    InvalidComponentShapeError,
    MalformedJsonError,
    MessageError,
    ParsePositionError,
)
from tellraw_preview.interpret import interpret, interpret_translation
from tellraw_preview.lexer import tokenize_document
from tellraw_preview.nodes import Command, NodeType, SyntaxNode
from tellraw_preview.patterns import DEFAULT_CATALOG, MatchResult, Template, match_command, parse_template
from tellraw_preview.preview import (
    CommandPreview,
    PreviewFailure,
    PreviewText,
    preview_document,
    preview_line,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CATALOG",
    "ChatComponent",
    "Command",
    "CommandPreview",
    "InvalidComponentShapeError",
    "MalformedJsonError",
    "MatchResult",
    "MessageError",
    "NodeType",
    "ParsePositionError",
    "PreviewFailure",
    "PreviewText",
    "SyntaxNode",
    "Template",
    "interpret",
    "interpret_translation",
    "match_command",
    "parse_chat_component",
    "parse_template",
    "preview_document",
    "preview_line",
    "tokenize_document",
]
