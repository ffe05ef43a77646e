"""End-to-end preview pipeline: command text in, display text or error out."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from tellraw_preview.components import parse_chat_component
from tellraw_preview.errors import MessageError, ParsePositionError
from tellraw_preview.interpret import interpret
from tellraw_preview.lexer import tokenize_document
from tellraw_preview.nodes import Array, Command, Object, StringLiteral, SyntaxNode
from tellraw_preview.patterns import (
    DEFAULT_CATALOG,
    MESSAGE_ARGUMENT,
    MatchResult,
    Template,
    match_command,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PreviewText:
    """The flattened message text."""

    text: str


@dataclass(frozen=True, slots=True)
class PreviewFailure:
    """Why no preview could be produced for a message-bearing command."""

    error: str
    exception: MessageError | ParsePositionError | None = None


PreviewResult = PreviewText | PreviewFailure


@dataclass(frozen=True, slots=True)
class CommandPreview:
    """A preview result tied to the command it came from."""

    command: Command
    result: PreviewResult

    @property
    def ok(self) -> bool:
        return isinstance(self.result, PreviewText)


def preview_message(raw_message: str) -> PreviewResult:
    """Parse and flatten one captured message argument."""
    try:
        component = parse_chat_component(raw_message)
    except MessageError as exc:
        logger.debug("message %r rejected: %s", raw_message, exc)
        return PreviewFailure(str(exc), exc)
    return PreviewText(interpret(component))


def preview_command(
    command: Command,
    catalog: Sequence[Template] = DEFAULT_CATALOG,
) -> PreviewResult | None:
    """Preview a tokenized command; None when it carries no message.

    A command whose tokenizing stopped early is matched with the unparsed
    tail as its last node, so an unbalanced message is still reported.
    When only the nodes read before the failure match, the tokenizer error
    itself is the failure: trailing text never passes silently.
    """
    if command.error is None:
        match = match_command(command, catalog)
    else:
        match = _match_recovered(command, command.error.offset, catalog)
        if match is None:
            prefix = match_command(command, catalog)
            if prefix is not None and MESSAGE_ARGUMENT in prefix.captures:
                logger.debug("trailing text after message at offset %d", command.error.offset)
                return PreviewFailure(str(command.error), command.error)
    if match is None or MESSAGE_ARGUMENT not in match.captures:
        return None
    return preview_message(match[MESSAGE_ARGUMENT])


def preview_line(
    raw_line: str,
    catalog: Sequence[Template] = DEFAULT_CATALOG,
) -> PreviewResult | None:
    """Preview the first command in raw_line; None when it carries no message."""
    for command in tokenize_document(raw_line):
        if not command.is_blank:
            return preview_command(command, catalog)
    return None


def preview_document(
    source: str,
    catalog: Sequence[Template] = DEFAULT_CATALOG,
) -> list[CommandPreview]:
    """Preview every message-bearing command in a document."""
    previews: list[CommandPreview] = []
    for command in tokenize_document(source):
        result = preview_command(command, catalog)
        if result is not None:
            previews.append(CommandPreview(command, result))
    return previews


def _with_unparsed_tail(command: Command, offset: int) -> Command | None:
    tail = command.raw_text[offset - command.position :]
    node: SyntaxNode
    if tail.startswith("{"):
        node = Object(tail, offset)
    elif tail.startswith("["):
        node = Array(tail, offset)
    elif tail[:1] in ("\"", "'"):
        node = StringLiteral(tail, offset)
    else:
        return None
    return Command(
        command.raw_text,
        command.nodes + (node,),
        command.position,
        command.end,
        command.macro,
    )


def _match_recovered(
    command: Command, offset: int, catalog: Sequence[Template]
) -> MatchResult | None:
    recovered = _with_unparsed_tail(command, offset)
    if recovered is None:
        return None
    return match_command(recovered, catalog)
