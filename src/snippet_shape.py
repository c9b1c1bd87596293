"""
Snippet shape classifier.

Looks at the surface text of a scaf code sample and decides how it should be
checked:

  - PSEUDO_CODE         → illustrative fragment, never checked
  - SCOPE_BODY          → contains test "..." / group "..." blocks; needs an
                          enclosing function scope to parse
  - ASSERTION_FRAGMENT  → bare assert list; needs an enclosing test block
  - FULL_PROGRAM        → checked exactly as written

The categories overlap in the source text (a scope body usually contains
asserts too); the order above is also the fallback priority used by
snippet_validator.
"""

from __future__ import annotations

import re
from enum import Enum, auto


class Shape(Enum):
    """Classification of a code fence's text."""
    UNCLASSIFIED = auto()        # Not yet looked at
    FULL_PROGRAM = auto()
    SCOPE_BODY = auto()
    ASSERTION_FRAGMENT = auto()
    PSEUDO_CODE = auto()


# ── Pseudo-code markers ────────────────────────────────────────────────

_ELLIPSIS_RE = re.compile(r"\.\.\.|…")
# fn Name with no parameter list or body
_FN_STUB_RE = re.compile(r"^fn\s+[A-Z]\w*\s*$", re.MULTILINE)
# Snippet opens with a scope invocation: Name { ...
_BARE_INVOCATION_RE = re.compile(r"^\s*[A-Z]\w*\s*\{")
_FN_DECL_RE = re.compile(r"^\s*fn\s+", re.MULTILINE)

# ── Scope / assert markers ─────────────────────────────────────────────

_SCOPE_RE = re.compile(r"\b(?:test|group)\s+\"")
_ASSERT_RE = re.compile(r"^\s*assert\s*[({]", re.MULTILINE)


def is_pseudo_code(text: str) -> bool:
    """True for placeholders, fn stubs and bare invocations without a fn."""
    if _ELLIPSIS_RE.search(text):
        return True
    if _FN_STUB_RE.search(text):
        return True
    if _BARE_INVOCATION_RE.match(text) and not _FN_DECL_RE.search(text):
        return True
    return False


def looks_like_scope(text: str) -> bool:
    return _SCOPE_RE.search(text) is not None


def looks_like_assert(text: str) -> bool:
    return _ASSERT_RE.search(text) is not None


def classify(text: str) -> Shape:
    """Classify snippet text. Pseudo-code wins over every other shape.

    Never returns Shape.UNCLASSIFIED.
    """
    if is_pseudo_code(text):
        return Shape.PSEUDO_CODE
    if looks_like_scope(text):
        return Shape.SCOPE_BODY
    if looks_like_assert(text):
        return Shape.ASSERTION_FRAGMENT
    return Shape.FULL_PROGRAM
