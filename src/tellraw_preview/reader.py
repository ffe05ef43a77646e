"""Backtracking character reader with checkpoint/recover/commit semantics."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TypeVar

from tellraw_preview.errors import ParsePositionError

T = TypeVar("T")

# Returned by peek() and advance() past the end of input
EOF = ""


@dataclass(slots=True)
class Checkpoint:
    """A saved cursor. Either recover() back to it or commit() past it."""

    reader: Reader
    index: int

    def recover(self) -> str:
        """Reset the cursor to the checkpoint; return the abandoned span."""
        attempted = self.reader.source[self.index : self.reader.pos]
        self.reader.pos = self.index
        return attempted

    def commit(self) -> str:
        """Keep the cursor; return the span consumed since the checkpoint."""
        return self.reader.source[self.index : self.reader.pos]


class Reader:
    """Cursor over a fixed string, with backtracking combinators.

    Every failure raises ParsePositionError tagged with the offset where it
    happened. Combinators catch only that error kind; anything else is a bug
    and propagates.
    """

    def __init__(self, source: str, pos: int = 0) -> None:
        self.source = source
        self.pos = pos

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if 0 <= idx < len(self.source):
            return self.source[idx]
        return EOF

    def advance(self) -> str:
        if self.at_end:
            return EOF
        ch = self.source[self.pos]
        self.pos += 1
        return ch

    def check(self, ch: str, offset: int = 0) -> bool:
        return self.peek(offset) == ch

    def checkpoint(self) -> Checkpoint:
        return Checkpoint(self, self.pos)

    def error(self, message: str, offset: int | None = None) -> ParsePositionError:
        if offset is None:
            offset = self.pos
        return ParsePositionError(message, offset, self.source)

    # ------------------------------------------------------------------
    # Combinators
    # ------------------------------------------------------------------

    def attempt(self, parser: Callable[[], T]) -> T | None:
        """Run parser; on failure restore the cursor and return None."""
        cp = self.checkpoint()
        try:
            return parser()
        except ParsePositionError:
            cp.recover()
            return None

    def expect(self, text: str) -> str:
        """Consume text literally or fail without moving."""
        cp = self.checkpoint()
        for ch in text:
            if not self.check(ch):
                consumed = cp.recover()
                raise self.error(f"expected {text!r}, got {consumed + self.peek()!r}")
            self.advance()
        return cp.commit()

    def expect_one_of(self, choices: Iterable[str]) -> str:
        choices = list(choices)
        for text in choices:
            result = self.attempt(lambda: self.expect(text))
            if result is not None:
                return result
        options = ", ".join(repr(c) for c in choices)
        raise self.error(f"expected one of {options}, got {self.peek()!r}")

    def expect_match(self, pattern: re.Pattern[str]) -> str:
        """Consume exactly one character matching pattern."""
        ch = self.peek()
        if ch == EOF or not pattern.fullmatch(ch):
            raise self.error(f"expected {pattern.pattern}, got {ch!r}")
        return self.advance()

    def alternative(self, *parsers: Callable[[], T]) -> T:
        """Return the result of the first parser that succeeds from here."""
        cp = self.checkpoint()
        for parser in parsers:
            try:
                return parser()
            except ParsePositionError:
                cp.recover()
        raise self.error("no alternative matched")

    def repeating(
        self,
        content: Callable[[], T],
        separator: Callable[[], object],
    ) -> list[T]:
        """Greedily parse content (separator content)*.

        Stops quietly at the first failing content or separator; whatever
        was parsed up to that point is kept.
        """
        results: list[T] = []
        while not self.at_end:
            start = self.pos
            cp = self.checkpoint()
            try:
                results.append(content())
            except ParsePositionError:
                cp.recover()
                break
            if self.attempt(lambda: separator() or True) is None:
                break
            if self.pos == start:
                break
        return results

    def take_while(self, predicate: Callable[[str], bool]) -> str:
        cp = self.checkpoint()
        while not self.at_end and predicate(self.peek()):
            self.advance()
        return cp.commit()

    def take_until(self, predicate: Callable[[str], bool]) -> str:
        return self.take_while(lambda ch: not predicate(ch))

    def regex(self, pattern: re.Pattern[str] | str, min_length: int = 1) -> str:
        """Consume characters while each one matches pattern."""
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        start = self.pos
        result = self.take_while(lambda ch: pattern.fullmatch(ch) is not None)
        if len(result) < min_length:
            self.pos = start
            raise self.error(
                f"expected at least {min_length} of {pattern.pattern}, got {len(result)}"
            )
        return result
