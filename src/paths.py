"""Centralized path resolution for scaf-docs.

All modules should import paths from here rather than computing them locally.
This module resolves paths relative to the project root (parent of src/).
"""

from __future__ import annotations

from pathlib import Path

# Project root: parent of the src/ directory
PROJECT_ROOT = Path(__file__).resolve().parent.parent

CONFIGS_DIR = PROJECT_ROOT / "configs"

# Documentation pages (Starlight content collection)
DOCS_DIR = PROJECT_ROOT / "src" / "content" / "docs"

DOCS_CONFIG_PATH = CONFIGS_DIR / "scaf_docs.yaml"
