"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from tellraw_preview.lexer import tokenize_document
from tellraw_preview.nodes import Command, NodeType, SyntaxNode


@pytest.fixture
def lex():
    """Return a helper that tokenizes one command and returns its nodes."""

    def _lex(source: str) -> tuple[SyntaxNode, ...]:
        commands = tokenize_document(source)
        assert len(commands) == 1, f"Expected 1 command, got {len(commands)}"
        return commands[0].nodes

    return _lex


@pytest.fixture
def commands():
    """Return a helper that tokenizes a document and returns its commands."""

    def _commands(source: str) -> list[Command]:
        return tokenize_document(source)

    return _commands


def assert_types(nodes: tuple[SyntaxNode, ...], expected: list[NodeType]) -> None:
    """Assert that the node types match the expected list."""
    actual = [n.type for n in nodes]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_contents(nodes: tuple[SyntaxNode, ...], expected: list[str]) -> None:
    """Assert that the node contents match the expected list."""
    actual = [n.content for n in nodes]
    assert actual == expected, f"Expected {expected}, got {actual}"


def shape(nodes: tuple[SyntaxNode, ...]) -> list[tuple]:
    """Node types and contents, recursively, without positions."""
    result = []
    for n in nodes:
        children = getattr(n, "children", ())
        result.append((n.type, n.content, shape(children)))
    return result
