"""--debug syntax tree dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from tellraw_preview.nodes import Array, Command, Object, SyntaxNode


def dump_commands(commands: list[Command], *, file: TextIO | None = None) -> None:
    """Print a human-readable tree of tokenized commands to *file* (default stderr)."""
    out = file if file is not None else sys.stderr
    for command in commands:
        _dump_command(command, 0, out)


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_command(command: Command, depth: int, f: TextIO) -> None:
    if command.is_blank:
        f.write(f"{_indent(depth)}Command @{command.position} (blank)\n")
        return
    marker = " macro" if command.macro else ""
    f.write(f"{_indent(depth)}Command @{command.position}{marker} {command.raw_text!r}\n")
    for node in command.nodes:
        _dump_node(node, depth + 1, f)
    if command.error is not None:
        f.write(f"{_indent(depth + 1)}! stopped: {command.error}\n")


def _dump_node(node: SyntaxNode, depth: int, f: TextIO) -> None:
    name = type(node).__name__
    if isinstance(node, Object):
        f.write(f"{_indent(depth)}{name} @{node.position}\n")
        for key, value in node.pairs():
            f.write(f"{_indent(depth + 1)}Key({key.content!r})\n")
            _dump_node(value, depth + 2, f)
    elif isinstance(node, Array):
        f.write(f"{_indent(depth)}{name} @{node.position}\n")
        for child in node.children:
            _dump_node(child, depth + 1, f)
    else:
        f.write(f"{_indent(depth)}{name}({node.content!r}) @{node.position}\n")
