"""Flatten chat component trees into preview text."""

from __future__ import annotations

import re

from tellraw_preview.components import (
    ChatComponent,
    KeybindComponent,
    NbtComponent,
    PlainComponent,
    ScoreboardComponent,
    SelectorComponent,
    SequenceComponent,
    TextComponent,
    TranslatableComponent,
)

# %s, or %N$s with N a positive integer
_PLACEHOLDER = re.compile(r"%s|%([1-9][0-9]*)\$s")


def interpret(component: ChatComponent) -> str:
    """Render a component as the plain text it would display."""
    if isinstance(component, PlainComponent):
        return component.text
    if isinstance(component, SequenceComponent):
        return "".join(interpret(item) for item in component.items)

    if isinstance(component, TextComponent):
        text = component.text
    elif isinstance(component, SelectorComponent):
        # Entities are not resolved at preview time; echo the selector
        text = component.selector
    elif isinstance(component, KeybindComponent):
        text = f"<{component.keybind}>"
    elif isinstance(component, TranslatableComponent):
        text = interpret_translation(component)
    elif isinstance(component, ScoreboardComponent):
        text = f"<{component.name}->{component.objective}>"
    elif isinstance(component, NbtComponent):
        text = component.path
    else:
        raise TypeError(f"not a chat component: {type(component).__name__}")

    if component.extra:
        text += "".join(interpret(child) for child in component.extra)
    return text


def interpret_translation(component: TranslatableComponent) -> str:
    """Substitute `with` arguments into the translate string.

    Bare `%s` markers take arguments in order; `%N$s` takes argument N
    without moving that order. A marker with no argument is left as
    `%N$s`, N being the index it asked for. `translate` is used as the
    text itself; it is never looked up, so `fallback` plays no part.
    """
    args = [interpret(arg) for arg in component.with_ or ()]
    text = component.translate
    parts: list[str] = []
    cursor = 0
    next_arg = 0

    for m in _PLACEHOLDER.finditer(text):
        if m.group(1) is None:
            index = next_arg
            next_arg += 1
        else:
            index = int(m.group(1)) - 1
        parts.append(text[cursor : m.start()])
        parts.append(args[index] if index < len(args) else f"%{index + 1}$s")
        cursor = m.end()

    parts.append(text[cursor:])
    return "".join(parts)
