"""
Retrieval — vector index contract, Chroma backend, and context assembly.

Public surface
--------------
- :class:`KnowledgeRetriever` — question in, formatted context out.
- :class:`VectorIndexBase` — abstract backend (subclass for other engines).
- :class:`ChromaVectorIndex` — default Chroma backend.
- :class:`ChunkRecord`, :class:`SearchHit`, :class:`ToolResponse` — data models.
"""

from docs_knowledge.retrieval.base import VectorIndexBase
from docs_knowledge.retrieval.models import ChunkRecord, IndexHandle, SearchHit, SourceDocument, ToolResponse
from docs_knowledge.retrieval.retriever import KnowledgeRetriever, format_context

__all__ = [
    "ChromaVectorIndex",
    "ChunkRecord",
    "IndexHandle",
    "KnowledgeRetriever",
    "SearchHit",
    "SourceDocument",
    "ToolResponse",
    "VectorIndexBase",
    "format_context",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorIndex to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorIndex":
        from docs_knowledge.retrieval.chroma_store import ChromaVectorIndex

        return ChromaVectorIndex
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
