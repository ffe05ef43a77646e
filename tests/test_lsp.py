"""Tests for the LSP server: diagnostics and inlay hints."""

from __future__ import annotations

import pytest
from lsprotocol.types import (
    DiagnosticSeverity,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentItem,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.workspace import Workspace

from tellraw_preview.lsp import _inlay_hints, _validate

URI = "file:///load.mcfunction"


@pytest.fixture
def lsp_env():
    """Create a LanguageServer with an initialized workspace and captured diagnostics."""
    ls = LanguageServer("test", "v0", text_document_sync_kind=TextDocumentSyncKind.Full)
    ws = Workspace(None)
    ls.protocol._workspace = ws

    published: list[PublishDiagnosticsParams] = []
    ls.text_document_publish_diagnostics = lambda params: published.append(params)

    def put(source: str, uri: str = URI) -> None:
        ws.put_text_document(
            TextDocumentItem(uri=uri, language_id="mcfunction", version=0, text=source)
        )

    return ls, published, put


# ---------------------------------------------------------------------------
# Failed previews → Warning diagnostics
# ---------------------------------------------------------------------------


class TestDiagnostics:
    def test_malformed_message(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put('say hi\n  tellraw @a {"text": "oops"\n')
        _validate(ls, URI)

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Warning
        assert d.source == "tellraw-preview"
        assert "malformed JSON" in d.message
        # Command starts on line 2 column 3 (1-based) → line 1 character 2
        assert d.range.start == Position(line=1, character=2)
        assert d.range.end == Position(line=1, character=28)

    def test_invalid_shape(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put('tellraw @a {"color":"red"}')
        _validate(ls, URI)

        (d,) = published[0].diagnostics
        assert "invalid chat component" in d.message

    def test_clean_document(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put('# hello\ntellraw @a {"text":"Hi"}\nsay }{')
        _validate(ls, URI)

        assert len(published) == 1
        assert published[0].uri == URI
        assert published[0].diagnostics == []


# ---------------------------------------------------------------------------
# Successful previews → inlay hints
# ---------------------------------------------------------------------------


class TestInlayHints:
    def test_hint_at_command_end(self, lsp_env) -> None:
        ls, _, put = lsp_env
        put('say hi\ntellraw @a {"text":"Hi"}  \n')
        (hint,) = _inlay_hints(ls, URI)
        assert hint.label == "=> Hi"
        assert hint.position == Position(line=1, character=24)
        assert hint.padding_left

    def test_failures_have_no_hint(self, lsp_env) -> None:
        ls, _, put = lsp_env
        put('tellraw @a {"text": "oops"')
        assert _inlay_hints(ls, URI) == []

    def test_continued_command_hint_on_last_line(self, lsp_env) -> None:
        ls, _, put = lsp_env
        put('tellraw @a {\\\n  "text": "Hi"\\\n}')
        (hint,) = _inlay_hints(ls, URI)
        assert hint.position == Position(line=2, character=1)

    def test_visible_range_filter(self, lsp_env) -> None:
        ls, _, put = lsp_env
        put('tellraw @a "one"\ntellraw @a "two"\ntellraw @a "three"')
        visible = Range(start=Position(line=1, character=0), end=Position(line=2, character=0))
        hints = _inlay_hints(ls, URI, visible)
        assert [h.label for h in hints] == ["=> two", "=> three"]


@pytest.fixture
def workspace_env(tmp_path):
    """Like lsp_env, but rooted at tmp_path so tellraw_preview.toml is found."""
    ls = LanguageServer("test", "v0", text_document_sync_kind=TextDocumentSyncKind.Full)
    ws = Workspace(tmp_path.as_uri())
    ls.protocol._workspace = ws

    published: list[PublishDiagnosticsParams] = []
    ls.text_document_publish_diagnostics = lambda params: published.append(params)

    def setup(config: str, source: str) -> None:
        (tmp_path / "tellraw_preview.toml").write_text(config)
        ws.put_text_document(
            TextDocumentItem(uri=URI, language_id="mcfunction", version=0, text=source)
        )

    return ls, published, setup


class TestWorkspaceConfig:
    def test_templates_from_workspace(self, workspace_env) -> None:
        ls, _, setup = workspace_env
        setup('[catalog]\ntemplates = ["say <message:string>"]\n', 'say "hi"')
        (hint,) = _inlay_hints(ls, URI)
        assert hint.label == "=> hi"

    def test_prefix_from_workspace(self, workspace_env) -> None:
        ls, _, setup = workspace_env
        setup('[preview]\nprefix = " -> "\n', 'tellraw @a "hi"')
        (hint,) = _inlay_hints(ls, URI)
        assert hint.label == "-> hi"

    def test_blank_prefix_shows_text_only(self, workspace_env) -> None:
        ls, _, setup = workspace_env
        setup('[preview]\nprefix = " "\n', 'tellraw @a "hi"')
        (hint,) = _inlay_hints(ls, URI)
        assert hint.label == "hi"

    def test_show_errors_false(self, workspace_env) -> None:
        ls, published, setup = workspace_env
        setup("[preview]\nshow_errors = false\n", 'tellraw @a {"text": "oops"')
        _validate(ls, URI)

        assert len(published) == 1
        assert published[0].diagnostics == []

    def test_broken_config_falls_back(self, workspace_env) -> None:
        ls, published, setup = workspace_env
        setup("[preview\n", 'tellraw @a {"text": "oops"\ntellraw @a "ok"')
        _validate(ls, URI)

        assert len(published[0].diagnostics) == 1
        (hint,) = _inlay_hints(ls, URI)
        assert hint.label == "=> ok"


class TestTrailingText:
    def test_stray_brace_is_diagnosed(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put('tellraw @a {"text":"a"}}')
        _validate(ls, URI)

        (d,) = published[0].diagnostics
        assert d.message == "unexpected '}' (at offset 23)"
        assert _inlay_hints(ls, URI) == []
