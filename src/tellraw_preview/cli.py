"""Command-line interface for tellraw-preview."""

from __future__ import annotations

import argparse
import logging
import sys
import tomllib
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tellraw_preview.patterns import DEFAULT_CATALOG, Template, parse_template

CONFIG_NAME = "tellraw_preview.toml"
DEFAULT_PREFIX = " => "


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    prefix: str
    show_errors: bool
    catalog: tuple[Template, ...]
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="tellraw-preview",
        description="Preview the text of chat component messages in function files",
    )
    p.add_argument("input", help="Input .mcfunction file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    p.add_argument(
        "--prefix",
        default=None,
        help=f"Text placed before each preview (default: {DEFAULT_PREFIX.strip()!r})",
    )
    p.add_argument(
        "--template",
        action="append",
        default=[],
        metavar="TEMPLATE",
        help="Extra command template, e.g. 'say <message:string>' (repeatable)",
    )
    p.add_argument("--no-errors", action="store_true", help="Do not report failed previews")
    p.add_argument("--debug", action="store_true", help="Dump syntax nodes to stderr")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def catalog_from_config(
    config: dict[str, Any], extra: Sequence[str] = ()
) -> tuple[Template, ...]:
    """Default catalog followed by config templates, then CLI templates.

    Raises argparse.ArgumentTypeError for templates that do not parse.
    """
    sources: list[str] = []
    cfg_catalog = config.get("catalog")
    if isinstance(cfg_catalog, dict):
        cfg_templates = cfg_catalog.get("templates")
        if isinstance(cfg_templates, list):
            sources.extend(str(t) for t in cfg_templates)
    sources.extend(extra)

    templates = list(DEFAULT_CATALOG)
    for text in sources:
        try:
            templates.append(parse_template(text))
        except ValueError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from None
    return tuple(templates)


def preview_settings(config: dict[str, Any]) -> tuple[str, bool]:
    """Return (prefix, show_errors) from the [preview] table, with defaults."""
    prefix = DEFAULT_PREFIX
    show_errors = True
    cfg_preview = config.get("preview")
    if isinstance(cfg_preview, dict):
        cfg_prefix = cfg_preview.get("prefix")
        if isinstance(cfg_prefix, str):
            prefix = cfg_prefix
        cfg_show = cfg_preview.get("show_errors")
        if isinstance(cfg_show, bool):
            show_errors = cfg_show
    return prefix, show_errors


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: built-in defaults < config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    prefix, show_errors = preview_settings(config)
    if args.prefix is not None:
        prefix = args.prefix
    if args.no_errors:
        show_errors = False

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        prefix=prefix,
        show_errors=show_errors,
        catalog=catalog_from_config(config, args.template),
        debug=args.debug,
    )


def preview_file(options: CliOptions) -> tuple[str, int]:
    """Read and preview a function file.

    Returns the report text and the number of failed previews.
    """
    from tellraw_preview.debug import dump_commands
    from tellraw_preview.lexer import tokenize_document
    from tellraw_preview.nodes import locate
    from tellraw_preview.preview import PreviewText, preview_document

    source = options.input_file.read_text(encoding="utf-8")

    if options.debug:
        dump_commands(tokenize_document(source))

    lines: list[str] = []
    failures = 0
    for item in preview_document(source, options.catalog):
        pos = locate(source, item.command.position)
        if isinstance(item.result, PreviewText):
            lines.append(f"{pos.line}:{pos.column}:{options.prefix}{item.result.text}")
        else:
            failures += 1
            if options.show_errors:
                lines.append(f"{pos.line}:{pos.column}: error: {item.result.error}")

    report = "".join(f"{line}\n" for line in lines)
    return report, failures


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        options = resolve_options(args)
    except (argparse.ArgumentTypeError, tomllib.TOMLDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        report, failures = preview_file(options)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.output_file:
        options.output_file.write_text(report, encoding="utf-8")
    else:
        sys.stdout.write(report)

    return 1 if failures else 0
