"""Error types with formatted source context."""

from __future__ import annotations

from tellraw_preview.nodes import locate


class ParsePositionError(Exception):
    """Raised by the reader when a parse attempt fails at an offset."""

    def __init__(self, message: str, offset: int, source: str = "") -> None:
        self.message = message
        self.offset = offset
        self.source = source
        super().__init__(f"{message} (at offset {offset})")

    def format(self, filename: str = "input.mcfunction") -> str:
        position = locate(self.source, self.offset)
        lines = self.source.splitlines(keepends=True)
        line_idx = position.line - 1
        col = position.column

        # Build the source line (strip trailing newline for display)
        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\n").rstrip("\r")
        else:
            source_line = ""

        pad = " " * (col - 1)

        line_num = str(position.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{position.line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}^"
        )


class MessageError(Exception):
    """Base for errors reported against a captured message argument."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MalformedJsonError(MessageError):
    """The message argument is not valid JSON after unescaping."""

    def __init__(self, message: str, offset: int | None = None) -> None:
        self.offset = offset
        super().__init__(message)

    def __str__(self) -> str:
        if self.offset is None:
            return f"malformed JSON: {self.message}"
        return f"malformed JSON: {self.message} (at offset {self.offset})"


class InvalidComponentShapeError(MessageError):
    """The JSON value matches none of the chat component shapes."""

    def __init__(self, message: str, path: tuple[str | int, ...] = ()) -> None:
        self.path = path
        super().__init__(message)

    @property
    def location(self) -> str:
        parts = ["$"]
        for key in self.path:
            if isinstance(key, int):
                parts.append(f"[{key}]")
            else:
                parts.append(f".{key}")
        return "".join(parts)

    def __str__(self) -> str:
        return f"invalid chat component at {self.location}: {self.message}"
