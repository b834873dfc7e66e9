"""Knowledge retriever — question in, formatted documentation context out.

This module is the **primary public interface** for retrieval.  Host
integrations (the MCP tool server, the HTTP API, the CLI) only ever call
:meth:`KnowledgeRetriever.respond` or :meth:`KnowledgeRetriever.retrieve`.

Usage::

    from docs_knowledge.retrieval.retriever import KnowledgeRetriever

    retriever = KnowledgeRetriever()
    print(retriever.retrieve("What is Astro?", k=3))
"""

from __future__ import annotations

import logging

from docs_knowledge.config import settings
from docs_knowledge.errors import IndexNotFound, KnowledgeBaseError
from docs_knowledge.ingestion.embedder import EmbeddingProvider, get_embedding_provider
from docs_knowledge.retrieval.base import VectorIndexBase
from docs_knowledge.retrieval.models import SearchHit, ToolResponse

logger = logging.getLogger(__name__)

SEPARATOR = "\n\n---\n\n"
CONTEXT_PREAMBLE = "Here is the relevant documentation I found:\n\n"
NOT_INITIALIZED_MESSAGE = (
    "The documentation database is not initialized. "
    "Run `docs-knowledge ingest` to build it, then ask again."
)
SEARCH_FAILED_MESSAGE = (
    "I encountered an error searching the documentation. "
    "Please check if the database is initialized."
)
NO_RESULTS_MESSAGE = "No relevant documentation was found for this question."


def format_context(hits: list[SearchHit]) -> str:
    """Render *hits* as ``## Source: <title>`` blocks, nearest first."""
    return SEPARATOR.join(f"## Source: {hit.record.title}\n{hit.record.content}" for hit in hits)


class KnowledgeRetriever:
    """Read-only retrieval over one collection.

    Parameters
    ----------
    index:
        A concrete vector-index backend.  When *None*, a
        :class:`~docs_knowledge.retrieval.chroma_store.ChromaVectorIndex`
        is created from the global settings.
    provider:
        Embedding provider; defaults to the process-wide shared one.
    collection_name:
        Collection to search.
    default_k:
        Default number of results.
    """

    def __init__(
        self,
        index: VectorIndexBase | None = None,
        provider: EmbeddingProvider | None = None,
        *,
        collection_name: str = settings.collection_name,
        default_k: int = settings.top_k,
    ) -> None:
        if index is None:
            from docs_knowledge.retrieval.chroma_store import ChromaVectorIndex

            index = ChromaVectorIndex(collection_name)
        self._index = index
        self._provider = provider
        self.collection_name = collection_name
        self.default_k = default_k

    @property
    def provider(self) -> EmbeddingProvider:
        if self._provider is None:
            self._provider = get_embedding_provider()
        return self._provider

    # -- public API -----------------------------------------------------------

    def search(self, question: str, *, k: int | None = None) -> list[SearchHit]:
        """Embed *question* and return the nearest chunks.

        Raises
        ------
        IndexNotFound
            Ingestion has never run for this collection.
        ProviderUnavailable, DimensionMismatch, TransportFailure
            Propagated unchanged.
        """
        k = self.default_k if k is None else k
        query_vector = self.provider.embed(question)
        handle = self._index.open(self.collection_name)
        return self._index.search(handle, query_vector, k)

    def retrieve(self, question: str, *, k: int | None = None) -> str:
        """Same as :meth:`search` but returns the formatted context."""
        return format_context(self.search(question, k=k))

    def respond(self, question: str, *, k: int | None = None) -> ToolResponse:
        """Answer *question* as a tool response.  Never raises."""
        if not question or not question.strip():
            return ToolResponse.text("The question must not be empty.", is_error=True)

        try:
            hits = self.search(question, k=k)
        except IndexNotFound:
            logger.warning("Search before ingestion: collection %s does not exist", self.collection_name)
            return ToolResponse.text(NOT_INITIALIZED_MESSAGE, is_error=True)
        except KnowledgeBaseError as exc:
            logger.error("Search failed (%s): %s", type(exc).__name__, exc, exc_info=True)
            return ToolResponse.text(SEARCH_FAILED_MESSAGE, is_error=True)
        except Exception:
            logger.exception("Search failed unexpectedly")
            return ToolResponse.text(SEARCH_FAILED_MESSAGE, is_error=True)

        if not hits:
            return ToolResponse.text(NO_RESULTS_MESSAGE)
        return ToolResponse.text(CONTEXT_PREAMBLE + format_context(hits))

    def is_ready(self) -> bool:
        """``True`` when the backend is reachable and the collection exists."""
        if not self._index.health_check():
            return False
        try:
            self._index.open(self.collection_name)
        except KnowledgeBaseError:
            return False
        return True
