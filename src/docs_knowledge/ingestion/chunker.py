"""Text chunking strategies."""

from __future__ import annotations

import re

from langchain_text_splitters import RecursiveCharacterTextSplitter

# A blank line is an empty or whitespace-only line.
_BLANK_LINE = re.compile(r"\n[^\S\n]*\n")

STRATEGIES = ("paragraph", "recursive")


def _validate_min_length(min_length: int) -> None:
    if min_length < 0:
        raise ValueError(f"min_length must be >= 0, got {min_length}")


def split_paragraphs(text: str, min_length: int = 50) -> list[str]:
    """Split *text* on blank lines and keep paragraphs of at least *min_length* chars.

    Parameters
    ----------
    text:
        Document body.
    min_length:
        Minimum length of a paragraph after trimming.

    Returns
    -------
    list[str]
        Trimmed paragraphs, in document order.
    """
    _validate_min_length(min_length)
    normalised = text.replace("\r\n", "\n").replace("\r", "\n")
    segments = (segment.strip() for segment in _BLANK_LINE.split(normalised))
    return [segment for segment in segments if segment and len(segment) >= min_length]


def split_recursive(
    text: str,
    min_length: int = 50,
    chunk_size: int = 1000,
    chunk_overlap: int = 100,
) -> list[str]:
    """Split *text* with LangChain's recursive character splitter.

    Paragraph boundaries are tried first, then lines, sentences and
    words. The same trimming and min-length floor as
    :func:`split_paragraphs` apply.
    """
    _validate_min_length(min_length)
    if chunk_overlap >= chunk_size:
        raise ValueError(f"chunk_overlap ({chunk_overlap}) must be < chunk_size ({chunk_size})")

    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        length_function=len,
        separators=["\n\n", "\n", ". ", " ", ""],
    )
    normalised = text.replace("\r\n", "\n")
    pieces = (piece.strip() for piece in splitter.split_text(normalised))
    return [piece for piece in pieces if piece and len(piece) >= min_length]


def chunk_text(
    text: str,
    *,
    strategy: str = "paragraph",
    min_length: int = 50,
    chunk_size: int = 1000,
    chunk_overlap: int = 100,
) -> list[str]:
    """Dispatch to the configured chunking *strategy*."""
    if strategy == "paragraph":
        return split_paragraphs(text, min_length)
    if strategy == "recursive":
        return split_recursive(text, min_length, chunk_size=chunk_size, chunk_overlap=chunk_overlap)
    raise ValueError(f"Unknown chunk strategy: {strategy!r}. Supported: {', '.join(STRATEGIES)}")
