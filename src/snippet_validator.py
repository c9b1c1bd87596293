"""
Snippet validator: drives one scaf code sample through the wrap-and-retry
ladder and produces a ValidationVerdict.

Ladder:
  snippet → classify
         → PSEUDO_CODE: skipped, checker never called
         → identity check → ok: succeeded
                          → tool unavailable / timeout: failed as-is
         → first matching fallback (scope-wrap, then test-wrap) → ok: succeeded
                                                                → failed, line remapped
         → no fallback applies: failed with the identity error

The reported error is always one the checker actually produced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Callable

from scaf_checker import TERMINAL_KINDS, CheckOutcome, OutcomeKind, ScafChecker
from snippet_shape import Shape, classify, looks_like_assert, looks_like_scope
from snippet_wrapper import IDENTITY, SCOPE_WRAP, TEST_WRAP, WrapStrategy, wrap

logger = logging.getLogger(__name__)

Checker = Callable[[str], CheckOutcome]


class VerdictStatus(Enum):
    SUCCEEDED = auto()
    FAILED = auto()
    SKIPPED = auto()


@dataclass(frozen=True)
class ValidationVerdict:
    """Final result for one code fence.

    line is 1-based within the original snippet (already remapped).
    """
    status: VerdictStatus
    message: str = ""
    line: int | None = None
    kind: OutcomeKind | None = None
    strategy: str = ""
    shape: Shape = Shape.UNCLASSIFIED
    attempts: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status is VerdictStatus.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.status is VerdictStatus.FAILED

    @property
    def skipped(self) -> bool:
        return self.status is VerdictStatus.SKIPPED

    def to_dict(self) -> dict:
        return {
            "status": self.status.name.lower(),
            "message": self.message,
            "line": self.line,
            "kind": self.kind.name.lower() if self.kind else None,
            "strategy": self.strategy,
            "shape": self.shape.name.lower(),
            "attempts": self.attempts,
        }


# (predicate, strategy) pairs tried after identity; first match wins.
FALLBACKS: tuple[tuple[Callable[[str], bool], WrapStrategy], ...] = (
    (looks_like_scope, SCOPE_WRAP),
    (looks_like_assert, TEST_WRAP),
)


def remap(outcome: CheckOutcome, offset: int) -> CheckOutcome:
    """Translate a wrapped-program line back into snippet coordinates.

    Floors at line 1. Returns the same object when there is no line.
    """
    if outcome.line is None:
        return outcome
    return replace(outcome, line=max(1, outcome.line - offset))


def attempt(text: str, strategy: WrapStrategy, checker: Checker) -> CheckOutcome:
    """Check text wrapped with one strategy; failure lines come back remapped."""
    wrapped = wrap(text, strategy)
    outcome = checker(wrapped.text)
    logger.debug("%s attempt: %s", strategy.name, outcome)
    if outcome.success:
        return outcome
    return remap(outcome, wrapped.line_offset)


def _failed(outcome: CheckOutcome, strategy: WrapStrategy, shape: Shape, attempts: int) -> ValidationVerdict:
    return ValidationVerdict(
        status=VerdictStatus.FAILED,
        message=outcome.message,
        line=outcome.line,
        kind=outcome.kind,
        strategy=strategy.name,
        shape=shape,
        attempts=attempts,
    )


def _succeeded(strategy: WrapStrategy, shape: Shape, attempts: int) -> ValidationVerdict:
    return ValidationVerdict(
        status=VerdictStatus.SUCCEEDED,
        strategy=strategy.name,
        shape=shape,
        attempts=attempts,
    )


def validate_snippet(text: str, checker: Checker | None = None) -> ValidationVerdict:
    """Validate one scaf snippet.

    Args:
        text: Raw code fence content.
        checker: Callable str -> CheckOutcome. Defaults to ScafChecker().

    Returns:
        ValidationVerdict (SUCCEEDED, FAILED or SKIPPED).
    """
    shape = classify(text)
    if shape is Shape.PSEUDO_CODE:
        logger.debug("Skipping pseudo-code snippet")
        return ValidationVerdict(status=VerdictStatus.SKIPPED, shape=shape)

    check = checker if checker is not None else ScafChecker()

    direct = attempt(text, IDENTITY, check)
    if direct.success:
        return _succeeded(IDENTITY, shape, attempts=1)
    if direct.kind in TERMINAL_KINDS:
        return _failed(direct, IDENTITY, shape, attempts=1)

    for predicate, strategy in FALLBACKS:
        if not predicate(text):
            continue
        outcome = attempt(text, strategy, check)
        if outcome.success:
            return _succeeded(strategy, shape, attempts=2)
        return _failed(outcome, strategy, shape, attempts=2)

    return _failed(direct, IDENTITY, shape, attempts=1)
