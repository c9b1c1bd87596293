"""Configuration loader for scaf-docs snippet validation.

Loads the validator settings from configs/scaf_docs.yaml: which fence
language tag to validate, which checker executable to run, how long a
single check may take, and where the documentation pages live.

Usage:
    from docs_config import load_config

    config = load_config()
    print(config.tool, config.timeout_s)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from paths import DOCS_CONFIG_PATH, DOCS_DIR, PROJECT_ROOT

TOOL_ENV_VAR = "SCAF_BIN"


@dataclass(frozen=True)
class DocsConfig:
    """Settings for one validation pass."""
    language: str = "scaf"
    tool: str = "scaf"
    subcommand: str = "fmt"
    timeout_s: float = 5.0
    skip_token: str = "skip"
    docs_dir: Path = DOCS_DIR
    suffixes: tuple[str, ...] = (".md", ".mdx")

    def with_overrides(self, **changes: Any) -> DocsConfig:
        """Return a copy with the non-None keyword values applied."""
        applied = {k: v for k, v in changes.items() if v is not None}
        if not applied:
            return self
        return replace(self, **applied)


def _resolve_docs_dir(value: str) -> Path:
    p = Path(value)
    if p.is_absolute():
        return p
    return PROJECT_ROOT / p


def load_config(config_path: str | Path | None = None) -> DocsConfig:
    """Load validator settings from YAML.

    Args:
        config_path: Path to config file. Defaults to configs/scaf_docs.yaml;
            when the default file is absent the built-in defaults are used.

    Returns:
        DocsConfig with file values applied, then the SCAF_BIN override.

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist.
        ValueError: If config is malformed.
    """
    path = Path(config_path) if config_path else DOCS_CONFIG_PATH

    if not path.exists():
        if config_path:
            raise FileNotFoundError(f"Docs config not found: {path}")
        return _apply_env(DocsConfig())

    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid docs config: expected a mapping in {path}")

    section = raw.get("validate", raw)
    if not isinstance(section, dict):
        raise ValueError(f"Invalid docs config: 'validate' must be a mapping in {path}")

    config = DocsConfig()
    kwargs: dict[str, Any] = {}

    for key in ("language", "tool", "subcommand", "skip_token"):
        if key in section:
            value = section[key]
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Invalid docs config: '{key}' must be a non-empty string")
            kwargs[key] = value.strip()

    if "timeout_s" in section:
        try:
            timeout = float(section["timeout_s"])
        except (TypeError, ValueError):
            raise ValueError(
                f"Invalid docs config: 'timeout_s' must be a number, got {section['timeout_s']!r}"
            ) from None
        if timeout <= 0:
            raise ValueError(f"Invalid docs config: 'timeout_s' must be positive, got {timeout}")
        kwargs["timeout_s"] = timeout

    if "docs_dir" in section:
        kwargs["docs_dir"] = _resolve_docs_dir(str(section["docs_dir"]))

    if "suffixes" in section:
        suffixes = section["suffixes"]
        if not isinstance(suffixes, list) or not all(isinstance(s, str) for s in suffixes):
            raise ValueError("Invalid docs config: 'suffixes' must be a list of strings")
        kwargs["suffixes"] = tuple(s if s.startswith(".") else f".{s}" for s in suffixes)

    return _apply_env(replace(config, **kwargs))


def _apply_env(config: DocsConfig) -> DocsConfig:
    tool = os.environ.get(TOOL_ENV_VAR, "").strip()
    if tool:
        return replace(config, tool=tool)
    return config


# ---------------------------------------------------------------------------
# Self-test
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    cfg = load_config()
    print(f"Loaded config from {DOCS_CONFIG_PATH}")
    print(f"  language={cfg.language} tool={cfg.tool} {cfg.subcommand}")
    print(f"  timeout_s={cfg.timeout_s} skip_token={cfg.skip_token}")
    print(f"  docs_dir={cfg.docs_dir} suffixes={list(cfg.suffixes)}")
