"""
Snippet wrapper: embeds a scaf fragment in boilerplate so it can be checked
on its own.

Strategies, in priority order:
  identity    → text unchanged
  scope-wrap  → fn __s__() `q`
                __s__ {
                <text>
                }
  test-wrap   → fn __s__() `q`
                __s__ {
                test "t" {
                <text>
                }
                }

line_offset is the number of header lines before the first original line,
used to translate checker line numbers back into snippet coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class WrapStrategy:
    """A named, stateless wrapping transformation."""
    name: str
    header: str = ""
    footer: str = ""
    line_offset: int = 0

    def apply(self, text: str) -> str:
        return f"{self.header}{text}{self.footer}"


@dataclass(frozen=True)
class WrapResult:
    """Wrapped program text plus the header line count."""
    text: str
    line_offset: int


_SCOPE_HEADER = "fn __s__() `q`\n__s__ {\n"

IDENTITY = WrapStrategy(name="identity")
SCOPE_WRAP = WrapStrategy(
    name="scope-wrap",
    header=_SCOPE_HEADER,
    footer="\n}",
    line_offset=2,
)
TEST_WRAP = WrapStrategy(
    name="test-wrap",
    header=_SCOPE_HEADER + 'test "t" {\n',
    footer="\n}\n}",
    line_offset=3,
)

STRATEGIES: tuple[WrapStrategy, ...] = (IDENTITY, SCOPE_WRAP, TEST_WRAP)


def get_strategy(name: str) -> WrapStrategy:
    """Look up a strategy by name.

    Raises:
        KeyError: If no strategy has that name.
    """
    for strategy in STRATEGIES:
        if strategy.name == name:
            return strategy
    raise KeyError(
        f"Unknown wrap strategy '{name}'. Available: {[s.name for s in STRATEGIES]}"
    )


def wrap(text: str, strategy: WrapStrategy) -> WrapResult:
    return WrapResult(text=strategy.apply(text), line_offset=strategy.line_offset)
