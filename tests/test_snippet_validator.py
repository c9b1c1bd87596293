"""
Tests for snippet_validator.py -- retry ladder and line remapping.

The checker is a scripted fake that records every program it is asked to
check, so the number and order of attempts can be asserted.

Run: python -m pytest tests/test_snippet_validator.py -v
"""

import sys
import unittest
from pathlib import Path

_SCRIPT_DIR = Path(__file__).resolve().parent
_SRC_DIR = _SCRIPT_DIR.parent / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from scaf_checker import CheckOutcome, OutcomeKind
from snippet_shape import Shape
from snippet_validator import (
    FALLBACKS,
    VerdictStatus,
    remap,
    validate_snippet,
)
from snippet_wrapper import SCOPE_WRAP, TEST_WRAP

OK = CheckOutcome(kind=OutcomeKind.OK)


def syntax(message, line=None):
    return CheckOutcome(kind=OutcomeKind.SYNTAX, message=message, line=line)


class FakeChecker:
    """Returns scripted outcomes in order and records the checked texts."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def __call__(self, text):
        self.calls.append(text)
        if not self.outcomes:
            raise AssertionError(f"unexpected checker call #{len(self.calls)}")
        return self.outcomes.pop(0)


class AcceptsWhenWrapped:
    """Accepts only programs that start with the scope-wrap header."""

    def __init__(self):
        self.calls = []

    def __call__(self, text):
        self.calls.append(text)
        if text.startswith(SCOPE_WRAP.header):
            return OK
        return syntax("test block outside of scope", line=1)


class TestRemap(unittest.TestCase):

    def test_no_line_returns_same_object(self):
        outcome = syntax("no location")
        self.assertIs(remap(outcome, 3), outcome)

    def test_zero_offset_is_identity(self):
        outcome = syntax("bad", line=7)
        self.assertEqual(remap(outcome, 0), outcome)

    def test_line_after_header(self):
        for offset in (0, 2, 3):
            for line in range(offset + 1, offset + 6):
                with self.subTest(offset=offset, line=line):
                    self.assertEqual(remap(syntax("m", line=line), offset).line, line - offset)

    def test_line_inside_header_floors_at_one(self):
        for offset in (2, 3):
            for line in range(1, offset + 1):
                with self.subTest(offset=offset, line=line):
                    self.assertEqual(remap(syntax("m", line=line), offset).line, 1)

    def test_does_not_mutate_input(self):
        outcome = syntax("bad", line=9)
        remapped = remap(outcome, 3)
        self.assertEqual(outcome.line, 9)
        self.assertEqual(remapped.line, 6)
        self.assertEqual(remapped.message, "bad")
        self.assertEqual(remapped.kind, OutcomeKind.SYNTAX)


class TestLadder(unittest.TestCase):

    def test_fallback_order(self):
        self.assertEqual([s for _, s in FALLBACKS], [SCOPE_WRAP, TEST_WRAP])

    def test_pseudo_code_never_checked(self):
        for text in ['test "x" {\n  ...\n}', "assert (a) …", "fn Stub\n", "Foo {\n}"]:
            with self.subTest(text=text):
                checker = FakeChecker()
                verdict = validate_snippet(text, checker)
                self.assertEqual(verdict.status, VerdictStatus.SKIPPED)
                self.assertEqual(verdict.shape, Shape.PSEUDO_CODE)
                self.assertEqual(checker.calls, [])

    def test_full_program_accepted_once(self):
        checker = FakeChecker(OK)
        text = "fn GetUser(id) `MATCH (u) RETURN u`"
        verdict = validate_snippet(text, checker)
        self.assertTrue(verdict.succeeded)
        self.assertEqual(checker.calls, [text])
        self.assertEqual(verdict.attempts, 1)
        self.assertEqual(verdict.strategy, "identity")

    def test_scope_body_accepted_as_is_is_not_wrapped(self):
        checker = FakeChecker(OK)
        verdict = validate_snippet('fn A() `q`\nA {\n  test "x" { }\n}', checker)
        self.assertTrue(verdict.succeeded)
        self.assertEqual(len(checker.calls), 1)

    def test_scope_body_needs_scope_wrap(self):
        checker = AcceptsWhenWrapped()
        text = 'test "x" { assert (1 == 1) }'
        verdict = validate_snippet(text, checker)
        self.assertTrue(verdict.succeeded)
        self.assertEqual(verdict.shape, Shape.SCOPE_BODY)
        self.assertEqual(verdict.strategy, "scope-wrap")
        self.assertEqual(len(checker.calls), 2)
        self.assertEqual(checker.calls[0], text)
        self.assertEqual(checker.calls[1], SCOPE_WRAP.apply(text))
        self.assertIsNone(verdict.line)

    def test_scope_wrap_failure_is_remapped(self):
        checker = FakeChecker(syntax("orig", line=1), syntax("unexpected }", line=5))
        verdict = validate_snippet('test "x" {\n  assert (1 ==\n}', checker)
        self.assertTrue(verdict.failed)
        self.assertEqual(verdict.message, "unexpected }")
        self.assertEqual(verdict.line, 3)
        self.assertEqual(verdict.strategy, "scope-wrap")
        self.assertEqual(verdict.attempts, 2)

    def test_assert_fragment_uses_test_wrap(self):
        checker = FakeChecker(syntax("orig", line=1), OK)
        text = "assert (u.name == \"alice\")"
        verdict = validate_snippet(text, checker)
        self.assertTrue(verdict.succeeded)
        self.assertEqual(verdict.shape, Shape.ASSERTION_FRAGMENT)
        self.assertEqual(checker.calls[1], TEST_WRAP.apply(text))

    def test_assert_fragment_failure_is_remapped_by_three(self):
        checker = FakeChecker(syntax("orig", line=1), syntax("bad operator", line=5))
        verdict = validate_snippet("assert (a)\nassert (b ===)", checker)
        self.assertTrue(verdict.failed)
        self.assertEqual(verdict.line, 2)
        self.assertEqual(verdict.strategy, "test-wrap")

    def test_scope_takes_priority_over_assert(self):
        checker = FakeChecker(syntax("orig"), OK)
        text = 'group "g" {\n  test "t" {\n    assert (1 == 1)\n  }\n}'
        validate_snippet(text, checker)
        self.assertEqual(checker.calls[1], SCOPE_WRAP.apply(text))

    def test_only_one_fallback_attempted(self):
        checker = FakeChecker(syntax("orig"), syntax("still bad"))
        validate_snippet('test "x" {\n  assert (1)\n}', checker)
        self.assertEqual(len(checker.calls), 2)

    def test_tool_unavailable_short_circuits(self):
        missing = CheckOutcome(kind=OutcomeKind.TOOL_UNAVAILABLE, message="scaf CLI not found in PATH")
        checker = FakeChecker(missing)
        verdict = validate_snippet('test "x" { assert (1 == 1) }', checker)
        self.assertTrue(verdict.failed)
        self.assertEqual(verdict.kind, OutcomeKind.TOOL_UNAVAILABLE)
        self.assertEqual(verdict.message, "scaf CLI not found in PATH")
        self.assertIsNone(verdict.line)
        self.assertEqual(len(checker.calls), 1)

    def test_timeout_short_circuits(self):
        checker = FakeChecker(CheckOutcome(kind=OutcomeKind.TIMEOUT, message="timed out"))
        verdict = validate_snippet("assert (1)", checker)
        self.assertEqual(verdict.kind, OutcomeKind.TIMEOUT)
        self.assertEqual(len(checker.calls), 1)

    def test_full_program_failure_reports_original_error(self):
        original = syntax("unexpected identifier \"bad\"", line=2)
        checker = FakeChecker(original)
        verdict = validate_snippet("fn Foo() `q`\nFoo { bad syntax here }", checker)
        self.assertTrue(verdict.failed)
        self.assertEqual(verdict.shape, Shape.FULL_PROGRAM)
        self.assertEqual(verdict.message, original.message)
        self.assertEqual(verdict.line, 2)
        self.assertEqual(verdict.kind, OutcomeKind.SYNTAX)
        self.assertEqual(verdict.strategy, "identity")
        self.assertEqual(len(checker.calls), 1)

    def test_to_dict(self):
        verdict = validate_snippet("fn A() `q`", FakeChecker(OK))
        data = verdict.to_dict()
        self.assertEqual(data["status"], "succeeded")
        self.assertEqual(data["shape"], "full_program")
        self.assertIsNone(data["kind"])


if __name__ == "__main__":
    unittest.main()
