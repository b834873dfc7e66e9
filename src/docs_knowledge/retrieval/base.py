"""Abstract base class for vector-index backends.

Adding a new backend (LanceDB, Qdrant …) only requires subclassing
:class:`VectorIndexBase` and implementing the abstract methods.  The
ingestion pipeline and the retriever are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from docs_knowledge.errors import DimensionMismatch
from docs_knowledge.retrieval.models import ChunkRecord, IndexHandle, SearchHit


class VectorIndexBase(ABC):
    """Backend-agnostic vector-index interface.

    Parameters
    ----------
    collection_name:
        Default logical name of the collection; every method also
        accepts an explicit ``name``.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def open(self, name: str | None = None) -> IndexHandle:
        """Return a handle to an existing collection.

        Raises
        ------
        IndexNotFound
            The collection has never been created.
        """
        ...

    @abstractmethod
    def create_or_replace(self, records: list[ChunkRecord], name: str | None = None) -> IndexHandle:
        """Replace every record of the collection with *records*.

        Readers observe either the previous contents or the new ones,
        never a mix.  All vectors must share one length.
        """
        ...

    @abstractmethod
    def search(self, handle: IndexHandle, query_vector: list[float], k: int) -> list[SearchHit]:
        """Return up to *k* hits, nearest first.

        Ties are broken by insertion order.  Fewer than *k* hits are
        returned only when the collection holds fewer than *k* records.
        """
        ...

    @abstractmethod
    def drop(self, name: str | None = None) -> None:
        """Delete the collection if it exists."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable."""
        ...

    # -- optional overrides ---------------------------------------------------

    def count(self, handle: IndexHandle) -> int:
        return self.open(handle.name).count

    # -- shared validation ----------------------------------------------------

    @staticmethod
    def validate_records(records: list[ChunkRecord]) -> int:
        """Return the common vector length of *records*."""
        if not records:
            raise ValueError("create_or_replace requires at least one record")
        dimension = len(records[0].vector)
        for record in records:
            if len(record.vector) != dimension:
                raise DimensionMismatch(dimension, len(record.vector), context=f"record {record.id}")
        return dimension

    @staticmethod
    def validate_query(handle: IndexHandle, query_vector: list[float], k: int) -> None:
        if isinstance(k, bool) or not isinstance(k, int) or k <= 0:
            raise ValueError(f"k must be a positive integer, got {k!r}")
        if len(query_vector) != handle.dimension:
            raise DimensionMismatch(handle.dimension, len(query_vector), context=f"query on {handle.name}")
