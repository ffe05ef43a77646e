"""End-to-end tests for the preview pipeline."""

from __future__ import annotations

from tellraw_preview.errors import (
    InvalidComponentShapeError,
    MalformedJsonError,
    MessageError,
    ParsePositionError,
)
from tellraw_preview.lexer import MAX_NESTING_DEPTH
from tellraw_preview.nodes import locate
from tellraw_preview.patterns import parse_template
from tellraw_preview.preview import (
    PreviewFailure,
    PreviewText,
    preview_document,
    preview_line,
    preview_message,
)


class TestPreviewMessage:
    def test_text(self):
        assert preview_message('{"text":"Hi"}') == PreviewText("Hi")

    def test_malformed(self):
        result = preview_message('{"text":')
        assert isinstance(result, PreviewFailure)
        assert isinstance(result.exception, MalformedJsonError)
        assert result.error.startswith("malformed JSON")


class TestPreviewLine:
    def test_tellraw(self):
        assert preview_line('tellraw @s {"text": "Hello World"}') == PreviewText("Hello World")

    def test_plain_string_message(self):
        assert preview_line('tellraw @a "plain"') == PreviewText("plain")

    def test_escaped_quotes_in_message(self):
        assert preview_line(r'tellraw @a "say \"hi\""') == PreviewText('say "hi"')

    def test_array_message(self):
        line = 'tellraw @a ["", {"translate":"%s and %s","with":["A","B"]}]'
        assert preview_line(line) == PreviewText("A and B")

    def test_title(self):
        assert preview_line('title @a actionbar {"keybind":"key.jump"}') == PreviewText(
            "<key.jump>"
        )

    def test_bossbar(self):
        assert preview_line('bossbar add ns:b {"text":"Boss"}') == PreviewText("Boss")
        assert preview_line('bossbar set ns:b name "Renamed"') == PreviewText("Renamed")

    def test_execute_run(self):
        line = 'execute as @a at @s run tellraw @s {"score":{"name":"@s","objective":"kills"}}'
        assert preview_line(line) == PreviewText("<@s->kills>")

    def test_macro_line(self):
        assert preview_line('$tellraw @s {"text":"$(name)"}') == PreviewText("$(name)")

    def test_empty_selector_argument(self):
        assert preview_line('tellraw @a[tag=] "hi"') == PreviewText("hi")

    def test_no_message(self):
        assert preview_line("say hello world") is None
        assert preview_line("give @s diamond 1") is None

    def test_blank_and_comment(self):
        assert preview_line("") is None
        assert preview_line("   ") is None
        assert preview_line('# tellraw @s "hi"') is None

    def test_leading_blank_lines(self):
        assert preview_line('\n\ntellraw @s "hi"') == PreviewText("hi")

    def test_unbalanced_object(self):
        result = preview_line('tellraw @s {"text": "oops"')
        assert isinstance(result, PreviewFailure)
        assert isinstance(result.exception, MalformedJsonError)
        assert "malformed JSON" in result.error

    def test_unterminated_string(self):
        result = preview_line('tellraw @s "oops')
        assert isinstance(result, PreviewFailure)
        assert isinstance(result.exception, MalformedJsonError)

    def test_unbalanced_non_message_command(self):
        assert preview_line("say {") is None

    def test_invalid_shape(self):
        result = preview_line('tellraw @s {"color":"red"}')
        assert isinstance(result, PreviewFailure)
        assert isinstance(result.exception, InvalidComponentShapeError)
        assert result.error.startswith("invalid chat component at $:")

    def test_single_quoted_message_is_not_json(self):
        result = preview_line("tellraw @s 'hi'")
        assert isinstance(result, PreviewFailure)

    def test_custom_catalog(self):
        catalog = [parse_template("say <message:string>")]
        assert preview_line('say "custom"', catalog) == PreviewText("custom")
        assert preview_line('tellraw @s "hi"', catalog) is None

    def test_continued_message(self):
        line = 'tellraw @s {\\\n    "text": "Hi", \\\n    "color": "red"\\\n}'
        assert preview_line(line) == PreviewText("Hi")


class TestTrailingText:
    def test_stray_closing_brace(self):
        result = preview_line('tellraw @s {"text":"a"}}')
        assert isinstance(result, PreviewFailure)
        assert isinstance(result.exception, ParsePositionError)
        assert result.error == "unexpected '}' (at offset 23)"

    def test_broken_second_argument(self):
        result = preview_line('tellraw @s {"text":"a"} {"text":"b"')
        assert isinstance(result, PreviewFailure)
        assert result.exception.offset == 24

    def test_trailing_text_after_non_message_command(self):
        assert preview_line("say hi }") is None

    def test_document_keeps_later_previews(self):
        previews = preview_document('tellraw @s "a"]\ntellraw @s "b"')
        assert [p.ok for p in previews] == [False, True]
        assert previews[1].result == PreviewText("b")


class TestDeepNesting:
    def test_deep_unbalanced_array(self):
        result = preview_line("tellraw @s " + "[" * 1000)
        assert isinstance(result, PreviewFailure)
        assert isinstance(result.exception, MessageError)

    def test_deep_unbalanced_object(self):
        result = preview_line("tellraw @s " + '{"a":' * 1000)
        assert isinstance(result, PreviewFailure)
        assert isinstance(result.exception, MalformedJsonError)

    def test_deep_balanced_message(self):
        result = preview_line("tellraw @s " + "[" * 1000 + '"x"' + "]" * 1000)
        assert isinstance(result, PreviewFailure)

    def test_message_deeper_than_tokenizer_limit(self):
        depth = MAX_NESTING_DEPTH + 10
        line = "tellraw @s " + "[" * depth + '"x"' + "]" * depth
        assert preview_line(line) == PreviewText("x")

    def test_document_continues(self):
        source = "tellraw @s " + "[" * 1000 + '\ntellraw @s "after"'
        previews = preview_document(source)
        assert not previews[0].ok
        assert previews[1].result == PreviewText("after")


SOURCE = (
    "# greet\n"
    'tellraw @a {"text":"Welcome"}\n'
    "say nothing to see\n"
    'bossbar add ns:b {"text": "oops"\n'
    "\n"
    'execute as @a run title @s actionbar ["", {"text":"A"}, "B"]\n'
)


class TestPreviewDocument:
    def test_only_message_commands(self):
        previews = preview_document(SOURCE)
        assert [p.command.raw_text.split()[0] for p in previews] == [
            "tellraw",
            "bossbar",
            "execute",
        ]

    def test_results(self):
        previews = preview_document(SOURCE)
        assert previews[0].result == PreviewText("Welcome")
        assert previews[0].ok
        assert isinstance(previews[1].result, PreviewFailure)
        assert not previews[1].ok
        assert previews[2].result == PreviewText("AB")

    def test_lines(self):
        previews = preview_document(SOURCE)
        lines = [locate(SOURCE, p.command.position).line for p in previews]
        assert lines == [2, 4, 6]

    def test_offsets_cover_command(self):
        for p in preview_document(SOURCE):
            assert SOURCE[p.command.position : p.command.end] == p.command.raw_text

    def test_empty_document(self):
        assert preview_document("") == []
