"""Command tokenizer: splits function source into Commands of syntax nodes."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import TypeVar

from tellraw_preview.errors import ParsePositionError
from tellraw_preview.nodes import (
    Array,
    Command,
    Comment,
    Literal,
    Object,
    Selector,
    StringLiteral,
    SyntaxNode,
)
from tellraw_preview.reader import Reader

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Objects, arrays and selector argument lists open one level each
MAX_NESTING_DEPTH = 64

# Backslash, optional trailing blanks, newline, then the next line's indent
CONTINUATION = re.compile(r"\\[ \t]*\r?\n[ \t]*")

_BLANK = re.compile(r"[ \t]")
_SELECTOR_TYPE = re.compile(r"[aeprsn]")
_KEY_CHAR = re.compile(r"[A-Za-z0-9_.+\-]")
_NAMESPACED_KEY_CHAR = re.compile(r"[A-Za-z0-9_.+\-:/]")

_WHITESPACE = frozenset(" \t\r\n")
# Characters that end a top-level bareword
_WORD_STOP = _WHITESPACE | frozenset("{}[]=")
# Inside objects, arrays and selector arguments a comma also ends a word
_VALUE_STOP = _WORD_STOP | frozenset(",")
_QUOTES = ("\"", "'")


def strip_continuations(text: str) -> str:
    """Remove backslash-newline continuations and the indent that follows them."""
    return CONTINUATION.sub("", text)


class CommandLexer:
    """Tokenize command source into a list of Command objects."""

    def __init__(self, source: str, max_depth: int = MAX_NESTING_DEPTH) -> None:
        self._source = source
        self._reader = Reader(source)
        self._max_depth = max_depth
        self._depth = 0

    def tokenize(self) -> list[Command]:
        """Tokenize the full source and return one Command per command line."""
        commands: list[Command] = []
        while not self._reader.at_end:
            commands.append(self._command())
        return commands

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _span(self, start: int) -> str:
        return strip_continuations(self._source[start : self._reader.pos])

    def _at_newline(self) -> bool:
        r = self._reader
        return r.check("\n") or (r.check("\r") and r.check("\n", 1))

    def _at_continuation(self) -> bool:
        return CONTINUATION.match(self._source, self._reader.pos) is not None

    def _newline(self) -> str:
        return self._reader.expect_one_of(["\n", "\r\n"])

    def _continuation(self) -> None:
        r = self._reader
        r.expect("\\")
        r.regex(_BLANK, 0)
        self._newline()
        r.regex(_BLANK, 0)

    def _space(self) -> None:
        """Skip blanks and line continuations, never a genuine newline."""
        r = self._reader
        while True:
            r.regex(_BLANK, 0)
            if r.attempt(self._continuation) is None:
                return

    def _skip_line(self) -> None:
        """Move past the rest of the line, honouring continuations."""
        r = self._reader
        while not r.at_end:
            if self._at_continuation():
                self._continuation()
            elif self._at_newline():
                return
            else:
                r.advance()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _command(self) -> Command:
        r = self._reader
        r.regex(_BLANK, 0)
        start = r.pos

        if r.check("#"):
            return self._comment(start)

        macro = r.check("$")
        if macro:
            r.advance()

        nodes: list[SyntaxNode] = []
        error: ParsePositionError | None = None
        try:
            self._space()
            while not r.at_end and not self._at_newline():
                nodes.append(self._token())
                self._space()
        except ParsePositionError as exc:
            logger.debug("command at offset %d stopped early: %s", start, exc.message)
            error = exc
            self._skip_line()

        return self._finish(start, tuple(nodes), macro=macro, error=error)

    def _finish(
        self,
        start: int,
        nodes: tuple[SyntaxNode, ...],
        macro: bool = False,
        error: ParsePositionError | None = None,
    ) -> Command:
        r = self._reader
        raw = self._source[start : r.pos]
        stripped = raw.strip()
        position = start + (len(raw) - len(raw.lstrip())) if stripped else start
        end = position + len(stripped)
        if self._at_newline():
            self._newline()
        return Command(stripped, nodes, position, end, macro, error)

    def _comment(self, start: int) -> Command:
        r = self._reader
        r.take_until(lambda ch: ch == "\n")
        text = self._source[start : r.pos].rstrip("\r")
        if r.check("\n"):
            r.advance()
        return Command(text, (Comment(text, start),), start, start + len(text))

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def _nested(self, parser: Callable[[], T]) -> T:
        """Run parser one nesting level deeper."""
        if self._depth >= self._max_depth:
            raise self._reader.error(f"nesting depth limit ({self._max_depth}) exceeded")
        self._depth += 1
        try:
            return parser()
        finally:
            self._depth -= 1

    def _token(self) -> SyntaxNode:
        r = self._reader
        try:
            return r.alternative(
                self._object,
                self._array,
                self._string,
                self._selector,
                self._word,
            )
        except ParsePositionError:
            raise r.error(f"unexpected {r.peek()!r}") from None

    def _value(self) -> SyntaxNode:
        """A nested value inside an object, array or selector argument."""
        return self._reader.alternative(
            self._object,
            self._array,
            self._string,
            self._selector,
            self._value_word,
        )

    def _bareword(self, stop: frozenset[str]) -> Literal:
        r = self._reader
        start = r.pos
        if r.peek() in _QUOTES:
            raise r.error("unterminated string")
        while not r.at_end and r.peek() not in stop:
            if self._at_continuation():
                break
            r.advance()
        if r.pos == start:
            raise r.error(f"expected a word, got {r.peek()!r}")
        return Literal(self._span(start), start)

    def _word(self) -> Literal:
        return self._bareword(_WORD_STOP)

    def _value_word(self) -> Literal:
        return self._bareword(_VALUE_STOP)

    def _string(self) -> StringLiteral:
        r = self._reader
        start = r.pos
        quote = r.expect_one_of(_QUOTES)
        while not r.at_end:
            if self._at_continuation():
                self._continuation()
                continue
            if self._at_newline():
                break
            ch = r.advance()
            if ch == "\\":
                # Escaped character, including the delimiter itself
                if not self._at_newline():
                    r.advance()
                continue
            if ch == quote:
                return StringLiteral(self._span(start), start)
        raise r.error("unterminated string", start)

    def _selector(self) -> Selector:
        r = self._reader
        start = r.pos
        r.expect("@")
        r.expect_match(_SELECTOR_TYPE)
        if r.check("["):
            self._selector_arguments()
        if not r.at_end and r.peek() not in _VALUE_STOP and not self._at_continuation():
            raise r.error("unexpected character after selector")
        return Selector(self._span(start), start)

    def _selector_arguments(self) -> None:
        r = self._reader

        def argument() -> None:
            self._space()
            self._bareword(_VALUE_STOP)
            self._space()
            r.expect("=")
            self._space()
            # tag= and name= may be empty
            r.attempt(self._value)
            self._space()

        r.expect("[")
        self._space()
        self._nested(lambda: r.repeating(argument, lambda: r.expect(",")))
        self._space()
        r.expect("]")

    def _array(self) -> Array:
        r = self._reader
        start = r.pos
        r.expect("[")

        def element() -> SyntaxNode:
            self._space()
            node = self._value()
            self._space()
            return node

        children = self._nested(lambda: r.repeating(element, lambda: r.expect(",")))
        self._space()
        r.expect("]")
        return Array(self._span(start), start, tuple(children))

    def _object(self) -> Object:
        r = self._reader
        start = r.pos
        r.expect("{")

        def entry() -> tuple[SyntaxNode, SyntaxNode]:
            self._space()
            key = r.alternative(self._namespaced_entry_key, self._plain_entry_key)
            self._space()
            value = self._value()
            self._space()
            return key, value

        entries = self._nested(lambda: r.repeating(entry, lambda: r.expect(",")))
        self._space()
        r.expect("}")
        children = tuple(node for pair in entries for node in pair)
        return Object(self._span(start), start, children)

    def _plain_entry_key(self) -> SyntaxNode:
        """`key:` or `key=`, with a bareword or quoted key."""
        r = self._reader
        key = r.alternative(self._key_word, self._string)
        self._space()
        r.expect_one_of([":", "="])
        return key

    def _namespaced_entry_key(self) -> SyntaxNode:
        """`namespace:path=` as used by advancement selector arguments."""
        r = self._reader
        start = r.pos
        r.regex(_NAMESPACED_KEY_CHAR)
        key = Literal(self._span(start), start)
        self._space()
        r.expect("=")
        return key

    def _key_word(self) -> Literal:
        r = self._reader
        start = r.pos
        r.regex(_KEY_CHAR)
        return Literal(self._span(start), start)


def tokenize_document(source: str) -> list[Command]:
    """Convenience function: tokenize source text and return its commands."""
    return CommandLexer(source).tokenize()
