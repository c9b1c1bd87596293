#!/usr/bin/env python3
"""
scaf-docs CLI: check that every scaf code sample in the docs parses.

Usage:
    python cli/scaf_docs.py                       # all pages under the docs dir
    python cli/scaf_docs.py src/content/docs/dsl  # a directory
    python cli/scaf_docs.py page.mdx other.md     # specific pages
    python cli/scaf_docs.py --snippet example.scaf
    python cli/scaf_docs.py --snippet body.scaf --strategy scope-wrap
    echo 'test "x" { assert (1 == 1) }' | python cli/scaf_docs.py --snippet -

Options:
    --config PATH        Config file (default: configs/scaf_docs.yaml)
    --tool PATH          scaf executable (overrides config and SCAF_BIN)
    --timeout SECONDS    Per-check timeout (must be positive)
    --strategy NAME      With --snippet: check with one wrap only (no ladder)
    --json               Print a JSON report instead of text
    --verbose / -v       Show per-document progress and debug logs

Exit status is 1 when any document (or the snippet) fails validation.
Documents are validated independently; each one stops at its first bad block.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure src/ is importable
_SCRIPT_DIR = Path(__file__).resolve().parent
_SRC_DIR = _SCRIPT_DIR.parent / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from docs_config import load_config
from doc_walker import iter_doc_files, run_documents
from scaf_checker import ScafChecker
from snippet_validator import attempt, validate_snippet
from snippet_wrapper import STRATEGIES, get_strategy

logger = logging.getLogger("scaf_docs")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scaf-docs",
        description="Validate scaf code blocks in Markdown/MDX documentation",
        epilog="Set SCAF_BIN to use a scaf binary that is not on PATH.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help="Files or directories to scan (default: configured docs_dir)",
    )
    parser.add_argument(
        "--snippet",
        type=str,
        default=None,
        help='Validate a single snippet file, or "-" to read from stdin',
    )
    parser.add_argument(
        "--strategy",
        choices=[s.name for s in STRATEGIES],
        default=None,
        help="With --snippet: check using only this wrap strategy",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Config file (default: configs/scaf_docs.yaml)",
    )
    parser.add_argument(
        "--tool",
        type=str,
        default=None,
        help="scaf executable to run",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-check timeout in seconds",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print a JSON report",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show per-document progress and debug logs",
    )
    return parser


def _read_snippet(source: str) -> str | None:
    if source == "-":
        return sys.stdin.read()
    snippet_path = Path(source)
    if not snippet_path.exists():
        print(f"Error: snippet file not found: {source}", file=sys.stderr)
        return None
    return snippet_path.read_text(encoding="utf-8")


def _check_snippet(source: str, checker: ScafChecker, as_json: bool) -> int:
    text = _read_snippet(source)
    if text is None:
        return 2

    verdict = validate_snippet(text, checker)

    if as_json:
        print(json.dumps(verdict.to_dict(), indent=2))
    elif verdict.failed:
        line = verdict.line if verdict.line is not None else 1
        print(f"{source}:{line}:1: scaf syntax error: {verdict.message}")
    else:
        label = verdict.status.name.lower()
        print(f"{source}: {label} ({verdict.shape.name.lower()}, {verdict.strategy or 'no check'})")

    return 1 if verdict.failed else 0


def _check_with_strategy(source: str, strategy_name: str, checker: ScafChecker, as_json: bool) -> int:
    """Check a snippet with one forced wrap; no classification, no fallbacks."""
    text = _read_snippet(source)
    if text is None:
        return 2

    strategy = get_strategy(strategy_name)
    outcome = attempt(text, strategy, checker)

    if as_json:
        print(json.dumps({
            "strategy": strategy.name,
            "kind": outcome.kind.name.lower(),
            "message": outcome.message,
            "line": outcome.line,
        }, indent=2))
    elif outcome.success:
        print(f"{source}: succeeded ({strategy.name})")
    else:
        line = outcome.line if outcome.line is not None else 1
        print(f"{source}:{line}:1: scaf syntax error: {outcome.message} ({strategy.name})")

    return 0 if outcome.success else 1


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.timeout is not None and args.timeout <= 0:
        parser.error(f"--timeout must be positive, got {args.timeout}")
    if args.strategy is not None and args.snippet is None:
        parser.error("--strategy requires --snippet")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    config = config.with_overrides(tool=args.tool, timeout_s=args.timeout)
    checker = ScafChecker.from_config(config)

    if args.strategy is not None:
        return _check_with_strategy(args.snippet, args.strategy, checker, args.json)
    if args.snippet is not None:
        return _check_snippet(args.snippet, checker, args.json)

    roots = args.paths or [config.docs_dir]
    files = iter_doc_files(roots, config.suffixes)
    if not files:
        print(f"No documentation files found under: {', '.join(str(r) for r in roots)}")
        return 0

    reports = run_documents(files, checker=checker, config=config)
    failures = [r for r in reports if not r.ok]

    if args.json:
        print(json.dumps({
            "documents": [r.to_dict() for r in reports],
            "failed": len(failures),
        }, indent=2))
        return 1 if failures else 0

    for report in reports:
        if report.ok:
            logger.info("%s: %d checked, %d skipped", report.path, report.checked, report.skipped)
        else:
            print(str(report.failure), file=sys.stderr)

    checked = sum(r.checked for r in reports)
    skipped = sum(r.skipped for r in reports)
    if failures:
        print(f"scaf snippet validation failed in {len(failures)}/{len(reports)} document(s).")
        return 1

    print(f"Validated {checked} scaf snippet(s) in {len(reports)} document(s) ({skipped} skipped).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
