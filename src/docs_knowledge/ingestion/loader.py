"""Document loader — Markdown / MDX files with optional YAML frontmatter."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from docs_knowledge.errors import TransportFailure
from docs_knowledge.retrieval.models import SourceDocument

logger = logging.getLogger(__name__)

_FRONTMATTER = re.compile(r"\A---[^\S\n]*\n(?:(.*?)\n)?---[^\S\n]*(?:\n|\Z)", re.DOTALL)

DEFAULT_GLOBS = ("**/*.md", "**/*.mdx")


def parse_frontmatter(raw: str, *, source: str = "<string>") -> tuple[dict[str, Any], str]:
    """Split *raw* into ``(frontmatter, body)``.

    Text without a leading ``---`` block, or whose block is not a YAML
    mapping, is returned unchanged with an empty mapping.
    """
    text = raw.lstrip("\ufeff")
    match = _FRONTMATTER.match(text)
    if match is None:
        return {}, text

    try:
        data = yaml.safe_load(match.group(1) or "")
    except yaml.YAMLError as exc:
        logger.warning("Ignoring malformed frontmatter in %s: %s", source, exc)
        return {}, text

    if data is None:
        data = {}
    if not isinstance(data, dict):
        logger.warning("Ignoring non-mapping frontmatter in %s", source)
        return {}, text
    # YAML allows int and date keys; metadata is keyed by string.
    return {str(key): value for key, value in data.items()}, text[match.end():]


def load_document(path: str | Path) -> SourceDocument:
    """Load a single Markdown / MDX file."""
    fpath = Path(path)
    try:
        raw = fpath.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise TransportFailure("load", str(fpath), exc) from exc

    frontmatter, body = parse_frontmatter(raw, source=str(fpath))
    title = frontmatter.get("title")
    if not isinstance(title, str) or not title.strip():
        title = None
    return SourceDocument(
        path=str(fpath),
        text=body,
        title=title.strip() if title else None,
        metadata=frontmatter,
    )


def load_directory(path: str | Path, globs: Iterable[str] = DEFAULT_GLOBS) -> list[SourceDocument]:
    """Recursively load every file under *path* matching one of *globs*.

    Parameters
    ----------
    path:
        Root directory of the documentation corpus.
    globs:
        ``Path.glob`` patterns, ``**/*.md`` and ``**/*.mdx`` by default.

    Returns
    -------
    list[SourceDocument]
        Documents sorted by path so ingestion order is reproducible.
    """
    root = Path(path)
    if not root.is_dir():
        raise TransportFailure("load", str(root), FileNotFoundError(f"Directory not found: {root}"))

    files: set[Path] = set()
    for pattern in globs:
        files.update(p for p in root.glob(pattern) if p.is_file())

    ordered = sorted(files)
    logger.info("Found %d files under %s", len(ordered), root)
    return [load_document(f) for f in ordered]
