"""Domain models for documents, stored chunks, search hits and tool responses."""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# Chroma metadata values must be flat scalars.
ExtraValue = Union[str, int, float, bool]


class SourceDocument(BaseModel):
    """A raw document handed to the ingestion pipeline by a loader.

    Attributes
    ----------
    path:
        Stable path identifier; scopes the chunk ids derived from it.
    text:
        Body text with any frontmatter removed.
    title:
        Title from the document's frontmatter, if it had one.
    metadata:
        The full frontmatter mapping.
    """

    path: str
    text: str
    title: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ChunkRecord(BaseModel):
    """One retrievable unit as persisted in the vector index.

    Attributes
    ----------
    id:
        ``"<path>#<ordinal>"``; stable across re-ingestion of an
        unchanged document.
    content:
        Trimmed chunk text.
    title:
        Document title, falling back to the file name.
    path:
        Originating document path.
    vector:
        Embedding of :attr:`content`; every record in one index has
        the same length.
    extra:
        Optional engine-specific scalar metadata.
    """

    id: str
    content: str
    title: str
    path: str
    vector: list[float]
    extra: dict[str, ExtraValue] = Field(default_factory=dict)

    @staticmethod
    def make_id(path: str, ordinal: int) -> str:
        return f"{path}#{ordinal}"


class SearchHit(BaseModel):
    """A record returned by a nearest-neighbour search."""

    record: ChunkRecord
    distance: float
    rank: int = 0

    @property
    def score(self) -> float:
        """Cosine similarity (``1 - distance``)."""
        return 1.0 - self.distance

    def __str__(self) -> str:  # noqa: D105
        return f"[{self.record.title}#{self.rank} d={self.distance:.3f}] {self.record.content[:120]}…"


class IndexHandle(BaseModel):
    """Read handle to one generation of a named collection."""

    name: str
    dimension: int
    count: int
    generation: str | None = None


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResponse(BaseModel):
    """Response shape consumed by the host protocol.

    ``is_error`` serialises as ``isError`` and is only emitted on failure
    when dumped with ``exclude_defaults=True``.
    """

    model_config = ConfigDict(populate_by_name=True)

    content: list[TextContent]
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def text(cls, text: str, *, is_error: bool = False) -> ToolResponse:
        return cls(content=[TextContent(text=text)], is_error=is_error)

    @property
    def first_text(self) -> str:
        return self.content[0].text if self.content else ""

    def to_payload(self) -> dict[str, Any]:
        """Return ``{"content": [...]}`` plus ``"isError": true`` on failure."""
        payload: dict[str, Any] = {"content": [c.model_dump() for c in self.content]}
        if self.is_error:
            payload["isError"] = True
        return payload
