"""Minimal LSP server: message previews as inlay hints, failures as diagnostics."""

from __future__ import annotations

import argparse
import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_INLAY_HINT,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    InlayHint,
    InlayHintParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from tellraw_preview.cli import (
    DEFAULT_PREFIX,
    catalog_from_config,
    load_config,
    preview_settings,
)
from tellraw_preview.nodes import locate
from tellraw_preview.patterns import DEFAULT_CATALOG, Template
from tellraw_preview.preview import CommandPreview, PreviewFailure, PreviewText, preview_document

logger = logging.getLogger(__name__)

server = LanguageServer(
    "tellraw-preview-lsp", "0.1.0", text_document_sync_kind=TextDocumentSyncKind.Full
)


@dataclass(frozen=True, slots=True)
class WorkspaceSettings:
    """Preview settings from tellraw_preview.toml in the workspace root."""

    prefix: str = DEFAULT_PREFIX
    show_errors: bool = True
    catalog: tuple[Template, ...] = DEFAULT_CATALOG


def _settings(ls: LanguageServer) -> WorkspaceSettings:
    root = ls.workspace.root_path
    if not root:
        return WorkspaceSettings()
    try:
        config = load_config(None, Path(root))
        prefix, show_errors = preview_settings(config)
        return WorkspaceSettings(prefix, show_errors, catalog_from_config(config))
    except (argparse.ArgumentTypeError, tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("ignoring workspace config: %s", exc)
        return WorkspaceSettings()


def _previews(
    ls: LanguageServer, uri: str, settings: WorkspaceSettings
) -> tuple[str, list[CommandPreview]]:
    source = ls.workspace.get_text_document(uri).source
    return source, preview_document(source, settings.catalog)


def _range(source: str, start: int, end: int) -> Range:
    """LSP range (0-based) for an absolute offset span."""
    a = locate(source, start)
    b = locate(source, end)
    return Range(
        start=Position(line=a.line - 1, character=a.column - 1),
        end=Position(line=b.line - 1, character=b.column - 1),
    )


def _validate(ls: LanguageServer, uri: str) -> None:
    """Preview the document and publish a diagnostic per failed message."""
    settings = _settings(ls)
    source, previews = _previews(ls, uri, settings)
    diagnostics: list[Diagnostic] = []

    for item in previews:
        if not settings.show_errors or not isinstance(item.result, PreviewFailure):
            continue
        diagnostics.append(
            Diagnostic(
                range=_range(source, item.command.position, item.command.end),
                message=item.result.error,
                severity=DiagnosticSeverity.Warning,
                source="tellraw-preview",
            )
        )

    logger.debug("%s: %d preview(s), %d failure(s)", uri, len(previews), len(diagnostics))
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


def _inlay_hints(ls: LanguageServer, uri: str, visible: Range | None = None) -> list[InlayHint]:
    """One hint per successful preview, after the command's last character."""
    settings = _settings(ls)
    source, previews = _previews(ls, uri, settings)
    # padding_left supplies the space the CLI prefix carries
    marker = settings.prefix.strip()
    hints: list[InlayHint] = []

    for item in previews:
        if not isinstance(item.result, PreviewText):
            continue
        at = _range(source, item.command.end, item.command.end).end
        if visible is not None and not (visible.start.line <= at.line <= visible.end.line):
            continue
        hints.append(
            InlayHint(
                position=at,
                label=f"{marker} {item.result.text}" if marker else item.result.text,
                padding_left=True,
            )
        )
    return hints


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_INLAY_HINT)
def inlay_hint(ls: LanguageServer, params: InlayHintParams) -> list[InlayHint]:
    return _inlay_hints(ls, params.text_document.uri, params.range)


def main() -> None:
    server.start_io()
