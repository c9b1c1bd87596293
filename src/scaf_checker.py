"""
External scaf syntax checker.

Writes candidate program text to a uniquely named temp file, runs
`scaf fmt <file>` on it, and normalizes the result into a CheckOutcome:

  OK                → exit status 0
  SYNTAX            → non-zero exit; line/message parsed from the diagnostic
                      stream when it matches "<anything>:<line>:<col>: <message>"
  TOOL_UNAVAILABLE  → the executable could not be spawned
  TIMEOUT           → the check ran longer than timeout_s

The command is always passed as an argument vector (no shell), since the
checked text comes from documentation content. The temp file is removed on
every exit path.
"""

from __future__ import annotations

import logging
import os
import re
import secrets
import subprocess
import tempfile
import time
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from docs_config import DocsConfig

logger = logging.getLogger(__name__)


class OutcomeKind(Enum):
    """Kind of result from one checker invocation."""
    OK = auto()
    SYNTAX = auto()             # Checker rejected the text
    TOOL_UNAVAILABLE = auto()   # Executable missing / not executable
    TIMEOUT = auto()            # Checker exceeded the time limit


# Kinds where trying a wrapped variant cannot change the result
TERMINAL_KINDS = frozenset({OutcomeKind.TOOL_UNAVAILABLE, OutcomeKind.TIMEOUT})


@dataclass(frozen=True)
class CheckOutcome:
    """Result of a single checker run.

    line is 1-based and relative to the text that was actually checked.
    """
    kind: OutcomeKind
    message: str = ""
    line: int | None = None

    @property
    def success(self) -> bool:
        return self.kind is OutcomeKind.OK

    def __str__(self) -> str:
        if self.success:
            return "ok"
        loc = f" (line {self.line})" if self.line is not None else ""
        return f"[{self.kind.name.lower()}] {self.message}{loc}"


OK_OUTCOME = CheckOutcome(kind=OutcomeKind.OK)


# ── Diagnostic parsing ─────────────────────────────────────────────────

# e.g. "error: /tmp/scaf-validate-123.scaf: 3:5: unexpected token"
_DIAGNOSTIC_RE = re.compile(r":\s*(\d+):\d+:\s*(.+)")
_ERROR_PREFIX_RE = re.compile(r"^error:\s*[^:]+:\s*")


def parse_diagnostic(stream: str) -> tuple[int | None, str]:
    """Extract (line, message) from checker diagnostic output.

    Falls back to (None, stream minus any "error: <path>:" prefix) when no
    line:column pair is present.
    """
    match = _DIAGNOSTIC_RE.search(stream)
    if match:
        return int(match.group(1)), match.group(2).strip()
    cleaned = _ERROR_PREFIX_RE.sub("", stream).strip()
    return None, cleaned or stream.strip()


def _temp_name() -> str:
    return f"scaf-validate-{time.time_ns()}-{secrets.token_hex(8)}.scaf"


# ── Checker ────────────────────────────────────────────────────────────


class ScafChecker:
    """Runs the scaf CLI against candidate program text.

    Instances hold only immutable settings, so one checker can be shared
    across documents.
    """

    def __init__(
        self,
        tool: str = "scaf",
        subcommand: str = "fmt",
        timeout_s: float | None = 5.0,
        temp_dir: str | Path | None = None,
    ):
        self.tool = tool
        self.subcommand = subcommand
        self.timeout_s = timeout_s
        self.temp_dir = Path(temp_dir) if temp_dir else Path(tempfile.gettempdir())

    @classmethod
    def from_config(cls, config: DocsConfig) -> ScafChecker:
        return cls(tool=config.tool, subcommand=config.subcommand, timeout_s=config.timeout_s)

    @property
    def not_found_message(self) -> str:
        return f"{self.tool} CLI not found in PATH"

    @property
    def not_executable_message(self) -> str:
        return f"{self.tool} CLI is not executable"

    def command(self, path: Path) -> list[str]:
        return [self.tool, self.subcommand, str(path)]

    def check(self, text: str) -> CheckOutcome:
        """Check one candidate program.

        Raises:
            OSError: If the temp file cannot be written.
        """
        path = self.temp_dir / _temp_name()
        path.write_text(text, encoding="utf-8")
        try:
            return self._run(path)
        finally:
            try:
                os.unlink(path)
            except OSError as e:
                logger.debug("Could not remove temp file %s: %s", path, e)

    __call__ = check

    def _run(self, path: Path) -> CheckOutcome:
        cmd = self.command(path)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
            )
        except FileNotFoundError as e:
            logger.warning("Cannot run %s: %s", self.tool, e)
            return CheckOutcome(kind=OutcomeKind.TOOL_UNAVAILABLE, message=self.not_found_message)
        except PermissionError as e:
            logger.warning("Cannot run %s: %s", self.tool, e)
            return CheckOutcome(kind=OutcomeKind.TOOL_UNAVAILABLE, message=self.not_executable_message)
        except subprocess.TimeoutExpired:
            return CheckOutcome(
                kind=OutcomeKind.TIMEOUT,
                message=f"{self.tool} {self.subcommand} timed out after {self.timeout_s}s",
            )

        if result.returncode == 0:
            if result.stderr.strip():
                logger.debug("%s exited 0 with output: %s", self.tool, result.stderr.strip())
            return OK_OUTCOME

        stream = result.stderr.strip() or result.stdout.strip()
        if not stream:
            stream = f"{self.tool} {self.subcommand} exited with status {result.returncode}"
        line, message = parse_diagnostic(stream)
        logger.debug("%s rejected %s: line=%s message=%s", self.tool, path.name, line, message)
        return CheckOutcome(kind=OutcomeKind.SYNTAX, message=message, line=line)
