"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.fakes import ASTRO_INTRO, ASTRO_ISLANDS, REACT_HOOKS, HashingEmbeddingProvider, InMemoryVectorIndex


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring a model download or external services")


@pytest.fixture()
def provider() -> HashingEmbeddingProvider:
    return HashingEmbeddingProvider()


@pytest.fixture()
def index() -> InMemoryVectorIndex:
    return InMemoryVectorIndex("docs")


@pytest.fixture()
def docs_dir(tmp_path: Path) -> Path:
    """A small Markdown / MDX corpus."""
    root = tmp_path / "docs"
    (root / "astro").mkdir(parents=True)
    (root / "react").mkdir()
    (root / "astro" / "intro.md").write_text(
        f"---\ntitle: Astro\n---\n\n{ASTRO_INTRO}\n\n{ASTRO_ISLANDS}\n\nShort note.\n",
        encoding="utf-8",
    )
    (root / "react" / "hooks.mdx").write_text(f"# Hooks\n\n{REACT_HOOKS}\n", encoding="utf-8")
    (root / "notes.txt").write_text(f"{ASTRO_INTRO}\n", encoding="utf-8")
    return root
