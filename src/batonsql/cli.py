"""Command-line linter: ``batonsql-lint FILE...``."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from batonsql import __version__
from batonsql.service.engine import DocumentReport, ValidationEngine
from batonsql.settings import Settings

logger = logging.getLogger("batonsql.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batonsql-lint",
        description="Lint SQL embedded in Baton SQL connector YAML files.",
    )
    parser.add_argument("files", nargs="+", type=Path, metavar="FILE")
    parser.add_argument(
        "--force",
        action="store_true",
        help="lint files whose names do not match the configured file pattern",
    )
    parser.add_argument("--log-level", default=None, help="override LOG_LEVEL")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def format_report(path: Path, report: DocumentReport) -> list[str]:
    """``path:line:col: [rule] message`` lines, 1-based like compilers print them."""
    lines = []
    for error in report.errors:
        line = error.span.line if error.span else 1
        column = error.span.column if error.span else 1
        lines.append(f"{path}:{line}:{column}: [{error.code}] {error.message}")
    for diagnostic in report.diagnostics:
        start = diagnostic.range.start
        rule = diagnostic.rule or diagnostic.source
        lines.append(
            f"{path}:{start.line + 1}:{start.character + 1}: [{rule}] {diagnostic.message}"
        )
    return lines


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    if args.log_level:
        settings.log_level = args.log_level
    logging.basicConfig(level=settings.log_level.upper())

    engine = ValidationEngine(settings=settings)
    found = 0
    for path in args.files:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            print(f"{path}: cannot read file: {exc}", file=sys.stderr)
            found += 1
            continue
        report = engine.validate_document(str(path), text, force=args.force)
        if report.skipped:
            logger.info("Skipped %s (file name does not match %s)", path, settings.file_pattern)
            continue
        for line in format_report(path, report):
            print(line)
        found += len(report.errors) + len(report.diagnostics)
    return 1 if found else 0


if __name__ == "__main__":
    sys.exit(main())
