"""Command templates and the positional pattern matcher."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from tellraw_preview.nodes import Command, NodeType, SyntaxNode

MESSAGE_ARGUMENT = "message"

ALL_TYPES = frozenset(NodeType)
MESSAGE_TYPES = frozenset({NodeType.ARRAY, NodeType.OBJECT, NodeType.STRING})


@dataclass(frozen=True, slots=True)
class Literal:
    """Matches a literal node with exactly this content."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class Argument:
    """Captures any node whose type is allowed, under `name`."""

    name: str
    allowed: frozenset[NodeType] = ALL_TYPES

    def __str__(self) -> str:
        if self.allowed == ALL_TYPES:
            return f"<{self.name}>"
        types = "|".join(sorted(t.value for t in self.allowed))
        return f"<{self.name}:{types}>"


Pattern = Literal | Argument


@dataclass(frozen=True, slots=True)
class Template:
    """An ordered sequence of patterns describing one command shape."""

    patterns: tuple[Pattern, ...]

    def __post_init__(self) -> None:
        if not self.patterns:
            raise ValueError("template must contain at least one pattern")
        names = [p.name for p in self.patterns if isinstance(p, Argument)]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate argument name(s) in template: {', '.join(duplicates)}")

    def __len__(self) -> int:
        return len(self.patterns)

    def __str__(self) -> str:
        return " ".join(str(p) for p in self.patterns)


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Captured argument contents from a successful template match."""

    template: Template
    captures: dict[str, str] = field(default_factory=dict)
    nodes: tuple[SyntaxNode, ...] = ()

    def __getitem__(self, name: str) -> str:
        return self.captures[name]


# <name> or <name:type|type>
_ARGUMENT = re.compile(r"<([A-Za-z_][A-Za-z0-9_\-]*)(?::([a-z|]+))?>")


def parse_template(text: str) -> Template:
    """Build a Template from its compact form.

    `tellraw <target:selector> <message:array|object|string>` yields a
    literal `tellraw`, a selector-only argument named `target` and an
    argument named `message` accepting arrays, objects and strings.
    `<name>` without a type list accepts every node type.
    """
    patterns: list[Pattern] = []
    for word in text.split():
        if not word.startswith("<"):
            patterns.append(Literal(word))
            continue
        m = _ARGUMENT.fullmatch(word)
        if m is None:
            raise ValueError(f"invalid argument pattern {word!r} in template {text!r}")
        name, types = m.group(1), m.group(2)
        if types is None:
            patterns.append(Argument(name))
            continue
        allowed: set[NodeType] = set()
        for type_name in types.split("|"):
            try:
                allowed.add(NodeType(type_name))
            except ValueError:
                raise ValueError(
                    f"unknown node type {type_name!r} in template {text!r}"
                ) from None
        patterns.append(Argument(name, frozenset(allowed)))
    return Template(tuple(patterns))


DEFAULT_CATALOG: tuple[Template, ...] = tuple(
    parse_template(t)
    for t in (
        "tellraw <target:selector> <message:array|object|string>",
        "title <target:selector> <position:literal> <message:array|object|string>",
        "bossbar add <id:literal> <message:array|object|string>",
        "bossbar set <id:literal> name <message:array|object|string>",
    )
)


def match_template(template: Template, nodes: Sequence[SyntaxNode]) -> MatchResult | None:
    """Match nodes against one template, position by position."""
    if len(nodes) != len(template):
        return None
    captures: dict[str, str] = {}
    for pattern, node in zip(template.patterns, nodes):
        if isinstance(pattern, Literal):
            if node.type is not NodeType.LITERAL or node.content != pattern.text:
                return None
        elif node.type in pattern.allowed:
            captures[pattern.name] = node.content
        else:
            return None
    return MatchResult(template, captures, tuple(nodes))


def _candidates(nodes: tuple[SyntaxNode, ...], unwrap_execute: bool) -> list[tuple[SyntaxNode, ...]]:
    """The full node list, then each tail following `run` in an execute chain."""
    candidates = [nodes]
    if not unwrap_execute or not nodes:
        return candidates
    head = nodes[0]
    if head.type is not NodeType.LITERAL or head.content != "execute":
        return candidates
    for i, node in enumerate(nodes):
        if node.type is NodeType.LITERAL and node.content == "run":
            candidates.append(nodes[i + 1 :])
    return candidates


def match_command(
    command: Command,
    catalog: Sequence[Template] = DEFAULT_CATALOG,
    unwrap_execute: bool = True,
) -> MatchResult | None:
    """Return the first catalog template matching command, or None."""
    for nodes in _candidates(command.nodes, unwrap_execute):
        for template in catalog:
            result = match_template(template, nodes)
            if result is not None:
                return result
    return None
