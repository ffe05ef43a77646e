"""Chat component models and JSON message parsing."""

from __future__ import annotations

import json
import re
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from tellraw_preview.errors import InvalidComponentShapeError, MalformedJsonError


class _Model(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True, extra="forbid")


class PlainComponent(_Model):
    """A bare JSON string."""

    text: str


class SequenceComponent(_Model):
    """A JSON array of components, concatenated when flattened."""

    items: tuple[ChatComponent, ...] = ()


class _ObjectComponent(_Model):
    extra: tuple[ChatComponent, ...] | None = None


class TextComponent(_ObjectComponent):
    text: str


class SelectorComponent(_ObjectComponent):
    selector: str
    separator: ChatComponent | None = None


class KeybindComponent(_ObjectComponent):
    keybind: str


class TranslatableComponent(_ObjectComponent):
    translate: str
    with_: tuple[ChatComponent, ...] | None = None
    fallback: ChatComponent | None = None


class ScoreboardComponent(_ObjectComponent):
    name: str
    objective: str


class NbtComponent(_ObjectComponent):
    path: str
    source: Literal["block", "entity", "storage"]
    source_ref: str
    interpret: bool | None = None
    separator: ChatComponent | None = None


ChatComponent = Union[
    PlainComponent,
    SequenceComponent,
    TextComponent,
    SelectorComponent,
    KeybindComponent,
    TranslatableComponent,
    ScoreboardComponent,
    NbtComponent,
]

for _cls in (
    PlainComponent,
    SequenceComponent,
    TextComponent,
    SelectorComponent,
    KeybindComponent,
    TranslatableComponent,
    ScoreboardComponent,
    NbtComponent,
):
    _cls.model_rebuild()


# kind key -> value accepted for the optional "type" field
_KINDS: dict[str, str] = {
    "text": "text",
    "selector": "selector",
    "keybind": "keybind",
    "translate": "translatable",
    "score": "score",
    "nbt": "nbt",
}
_NBT_SOURCES = ("block", "entity", "storage")

# Keys and indexes from the root; bounds recursion in build and interpret
MAX_PATH_LENGTH = 128

_CONTINUATION = re.compile(r"\\[ \t]*\r?\n")
_CONTROL = re.compile(r"[\t\r\n]")


def unescape_message(raw: str) -> str:
    """Drop line continuations and bare control characters from a message."""
    return _CONTROL.sub("", _CONTINUATION.sub("", raw))


def parse_chat_component(raw: str) -> ChatComponent:
    """Parse a raw message argument into a chat component tree.

    Raises MalformedJsonError when the text is not JSON and
    InvalidComponentShapeError when the JSON is not a component.
    """
    text = unescape_message(raw)
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedJsonError(exc.msg, exc.pos) from None
    except RecursionError:
        raise MalformedJsonError("nesting too deep to decode") from None
    return build_component(value)


def build_component(value: Any, path: tuple[str | int, ...] = ()) -> ChatComponent:
    """Validate a decoded JSON value and build its component tree."""
    if len(path) > MAX_PATH_LENGTH:
        raise InvalidComponentShapeError(
            f"component nested deeper than {MAX_PATH_LENGTH} levels", path
        )
    if isinstance(value, str):
        return PlainComponent(text=value)
    if isinstance(value, list):
        items = tuple(build_component(v, path + (i,)) for i, v in enumerate(value))
        return SequenceComponent(items=items)
    if isinstance(value, dict):
        return _build_object(value, path)
    raise InvalidComponentShapeError(
        f"expected a string, array or object, got {_json_type(value)}", path
    )


def _build_object(value: dict[str, Any], path: tuple[str | int, ...]) -> ChatComponent:
    kinds = [k for k in _KINDS if k in value]
    if not kinds:
        expected = ", ".join(repr(k) for k in _KINDS)
        raise InvalidComponentShapeError(f"object needs one of {expected}", path)
    if len(kinds) > 1:
        found = ", ".join(repr(k) for k in kinds)
        raise InvalidComponentShapeError(f"object has more than one kind: {found}", path)
    kind = kinds[0]

    declared = value.get("type")
    if declared is not None and declared != _KINDS[kind]:
        raise InvalidComponentShapeError(
            f"type {declared!r} does not match {kind!r} component", path + ("type",)
        )

    fields: dict[str, Any] = {}
    if "extra" in value:
        fields["extra"] = _build_list(value["extra"], path + ("extra",))

    if kind == "text":
        fields["text"] = value["text"]
        model: type[_Model] = TextComponent
    elif kind == "selector":
        fields["selector"] = value["selector"]
        fields["separator"] = _build_optional(value, "separator", path)
        model = SelectorComponent
    elif kind == "keybind":
        fields["keybind"] = value["keybind"]
        model = KeybindComponent
    elif kind == "translate":
        fields["translate"] = value["translate"]
        if "with" in value:
            fields["with_"] = _build_list(value["with"], path + ("with",))
        fields["fallback"] = _build_optional(value, "fallback", path)
        model = TranslatableComponent
    elif kind == "score":
        score = value["score"]
        if not isinstance(score, dict):
            raise InvalidComponentShapeError(
                f"expected an object, got {_json_type(score)}", path + ("score",)
            )
        path = path + ("score",)
        fields["name"] = score.get("name")
        fields["objective"] = score.get("objective")
        model = ScoreboardComponent
    else:
        fields.update(_nbt_fields(value, path))
        model = NbtComponent

    fields = {k: v for k, v in fields.items() if v is not None}
    try:
        return model.model_validate(fields)
    except ValidationError as exc:
        err = exc.errors()[0]
        loc = tuple(_public_name(part) for part in err["loc"])
        raise InvalidComponentShapeError(err["msg"], path + loc) from None


def _nbt_fields(value: dict[str, Any], path: tuple[str | int, ...]) -> dict[str, Any]:
    sources = [s for s in _NBT_SOURCES if s in value]
    if len(sources) != 1:
        names = ", ".join(repr(s) for s in _NBT_SOURCES)
        raise InvalidComponentShapeError(f"nbt component needs exactly one of {names}", path)
    source = sources[0]
    declared = value.get("source")
    if declared is not None and declared != source:
        raise InvalidComponentShapeError(
            f"source {declared!r} does not match {source!r}", path + ("source",)
        )
    return {
        "path": value["nbt"],
        "source": source,
        "source_ref": value[source],
        "interpret": value.get("interpret"),
        "separator": _build_optional(value, "separator", path),
    }


def _build_optional(
    value: dict[str, Any], key: str, path: tuple[str | int, ...]
) -> ChatComponent | None:
    if key not in value:
        return None
    return build_component(value[key], path + (key,))


def _build_list(value: Any, path: tuple[str | int, ...]) -> tuple[ChatComponent, ...]:
    if not isinstance(value, list):
        raise InvalidComponentShapeError(f"expected an array, got {_json_type(value)}", path)
    return tuple(build_component(v, path + (i,)) for i, v in enumerate(value))


_PUBLIC_NAMES = {"with_": "with", "path": "nbt", "source_ref": "source"}


def _public_name(part: str | int) -> str | int:
    if isinstance(part, str):
        return _PUBLIC_NAMES.get(part, part)
    return part


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"
