"""
Document walker: finds scaf code fences in Markdown/MDX pages and validates
them, failing fast on the first bad block.

Fence handling follows CommonMark: ``` or ~~~ runs of 3+ characters,
indented at most 3 spaces; the closing fence uses the same character and is
at least as long; an unclosed fence runs to the end of the document. MDX
has no indented code blocks, so in .mdx pages a fence may be indented any
amount (fences nested in JSX such as <TabItem>). Lines break only on \n,
\r\n and \r.

The info string is split into a language tag and free-form metadata:

    ```scaf skip extra
    ^^^^^^^ ^^^^^^^^^^
    lang    meta

A `skip` token in the metadata disables validation for that block.

Error locations are reported as fence_start_line + snippet_line, where
fence_start_line is the line of the opening ``` (so snippet line 1 lands on
the first content line).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from docs_config import DocsConfig, load_config
from scaf_checker import ScafChecker
from snippet_validator import Checker, ValidationVerdict, validate_snippet

logger = logging.getLogger(__name__)

_OPEN_FENCE_RE = re.compile(r"^(?P<indent> {0,3})(?P<marker>`{3,}|~{3,})(?P<info>.*)$")
_MDX_OPEN_FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(?P<marker>`{3,}|~{3,})(?P<info>.*)$")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


# ── Data Structures ────────────────────────────────────────────────────


@dataclass(frozen=True)
class CodeFence:
    """A fenced code block extracted from a document."""
    text: str
    lang: str
    meta: str | None
    start_line: int  # 1-based line of the opening fence


class SnippetSyntaxError(Exception):
    """A scaf code fence failed validation.

    line and column are 1-based document coordinates.
    """

    def __init__(
        self,
        message: str,
        line: int,
        column: int = 1,
        path: str | Path | None = None,
        verdict: ValidationVerdict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.path = Path(path) if path is not None else None
        self.verdict = verdict

    @property
    def location(self) -> str:
        where = str(self.path) if self.path is not None else "<document>"
        return f"{where}:{self.line}:{self.column}"

    def __str__(self) -> str:
        return f"{self.location}: {self.message}"


@dataclass
class DocumentReport:
    """Outcome of validating one document."""
    path: Path | None = None
    checked: int = 0
    skipped: int = 0
    failure: SnippetSyntaxError | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_dict(self) -> dict:
        data = {
            "path": str(self.path) if self.path is not None else None,
            "checked": self.checked,
            "skipped": self.skipped,
            "ok": self.ok,
        }
        if self.failure is not None:
            data["error"] = {
                "line": self.failure.line,
                "column": self.failure.column,
                "message": self.failure.message,
            }
        return data


# ── Fence extraction ───────────────────────────────────────────────────


def _split_lines(markdown: str) -> list[str]:
    lines = _LINE_BREAK_RE.split(markdown)
    if lines[-1] == "":
        lines.pop()
    return lines


def _strip_indent(line: str, indent: int) -> str:
    removed = 0
    while removed < indent and removed < len(line) and line[removed] in " \t":
        removed += 1
    return line[removed:]


def _is_closing_fence(line: str, marker: str, max_indent: int | None = 3) -> bool:
    stripped = line.lstrip(" \t")
    if max_indent is not None and len(line) - len(stripped) > max_indent:
        return False
    run = len(stripped) - len(stripped.lstrip(marker[0]))
    return run >= len(marker) and not stripped[run:].strip()


def iter_code_fences(markdown: str, *, mdx: bool = False) -> Iterator[CodeFence]:
    """Yield every fenced code block in document order.

    With mdx=True, opening and closing fences may be indented any amount.
    """
    open_re = _MDX_OPEN_FENCE_RE if mdx else _OPEN_FENCE_RE
    max_indent = None if mdx else 3
    lines = _split_lines(markdown)
    i = 0
    while i < len(lines):
        m = open_re.match(lines[i])
        if not m or (m.group("marker")[0] == "`" and "`" in m.group("info")):
            i += 1
            continue

        indent = len(m.group("indent"))
        marker = m.group("marker")
        info = m.group("info").strip()
        parts = info.split(None, 1)
        lang = parts[0] if parts else ""
        meta = parts[1] if len(parts) > 1 else ""
        start = i + 1

        body: list[str] = []
        i += 1
        while i < len(lines) and not _is_closing_fence(lines[i], marker, max_indent):
            body.append(_strip_indent(lines[i], indent))
            i += 1
        i += 1  # closing fence (or end of document)

        yield CodeFence(
            text="\n".join(body),
            lang=lang,
            meta=meta.strip() or None,
            start_line=start,
        )


def has_skip_directive(fence: CodeFence, token: str = "skip") -> bool:
    if not fence.meta:
        return False
    return token in fence.meta.split()


# ── Validation ─────────────────────────────────────────────────────────


def _is_mdx(path: Path | None) -> bool:
    return path is not None and path.suffix.lower() == ".mdx"


def _walk(markdown: str, report: DocumentReport, check: Checker, cfg: DocsConfig, mdx: bool) -> None:
    where = report.path or "<document>"
    for fence in iter_code_fences(markdown, mdx=mdx):
        if fence.lang != cfg.language:
            continue
        if has_skip_directive(fence, cfg.skip_token):
            logger.debug("%s:%d: skip directive", where, fence.start_line)
            report.skipped += 1
            continue

        verdict = validate_snippet(fence.text, check)
        if verdict.skipped:
            report.skipped += 1
            continue

        report.checked += 1
        if verdict.failed:
            line = fence.start_line + (verdict.line if verdict.line is not None else 1)
            raise SnippetSyntaxError(
                f"{cfg.language} syntax error: {verdict.message}",
                line=line,
                column=1,
                path=report.path,
                verdict=verdict,
            )


def validate_document(
    markdown: str,
    path: str | Path | None = None,
    *,
    checker: Checker | None = None,
    config: DocsConfig | None = None,
    mdx: bool | None = None,
) -> DocumentReport:
    """Validate every scaf fence in a document.

    mdx defaults to whether path has an .mdx suffix.

    Raises:
        SnippetSyntaxError: On the first fence that fails validation.
    """
    cfg = config or load_config()
    check = checker if checker is not None else ScafChecker.from_config(cfg)
    report = DocumentReport(path=Path(path) if path is not None else None)
    if mdx is None:
        mdx = _is_mdx(report.path)
    _walk(markdown, report, check, cfg, mdx)
    return report


def validate_file(
    path: str | Path,
    *,
    checker: Checker | None = None,
    config: DocsConfig | None = None,
) -> DocumentReport:
    """Read a Markdown/MDX file and validate it."""
    p = Path(path)
    return validate_document(p.read_text(encoding="utf-8"), p, checker=checker, config=config)


def iter_doc_files(paths: Iterable[str | Path], suffixes: Iterable[str] = (".md", ".mdx")) -> list[Path]:
    """Expand files/directories into a sorted, de-duplicated list of doc files."""
    wanted = {s.lower() for s in suffixes}
    found: set[Path] = set()
    for raw in paths:
        p = Path(raw)
        if p.is_dir():
            found.update(f for f in p.rglob("*") if f.is_file() and f.suffix.lower() in wanted)
        elif p.is_file() and p.suffix.lower() in wanted:
            found.add(p)
    return sorted(found, key=str)


def run_documents(
    files: Iterable[Path],
    *,
    checker: Checker | None = None,
    config: DocsConfig | None = None,
) -> list[DocumentReport]:
    """Validate documents independently; a failure in one does not stop the rest.

    Unlike validate_document, failures are recorded on the report instead of
    raised.
    """
    cfg = config or load_config()
    check = checker if checker is not None else ScafChecker.from_config(cfg)
    reports: list[DocumentReport] = []
    for f in files:
        report = DocumentReport(path=Path(f))
        try:
            _walk(report.path.read_text(encoding="utf-8"), report, check, cfg, _is_mdx(report.path))
        except SnippetSyntaxError as e:
            logger.info("%s", e)
            report.failure = e
        reports.append(report)
    return reports
