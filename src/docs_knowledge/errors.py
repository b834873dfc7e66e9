"""Error taxonomy shared by ingestion and retrieval.

Only :meth:`KnowledgeRetriever.respond` and the host boundaries convert
these into user-facing responses; everything below them lets them
propagate.
"""

from __future__ import annotations


class KnowledgeBaseError(Exception):
    """Base class for every failure raised by the knowledge base."""


class ProviderUnavailable(KnowledgeBaseError):
    """The embedding model failed to load or failed during inference."""


class IndexNotFound(KnowledgeBaseError):
    """The named collection does not exist, i.e. ingestion never ran."""

    def __init__(self, collection: str) -> None:
        super().__init__(f"Collection {collection!r} does not exist; run the ingestion first")
        self.collection = collection


class DimensionMismatch(KnowledgeBaseError):
    """A vector does not have the dimensionality the index expects."""

    def __init__(self, expected: int, actual: int, *, context: str = "") -> None:
        where = f" ({context})" if context else ""
        super().__init__(f"Expected vector of length {expected}, got {actual}{where}")
        self.expected = expected
        self.actual = actual


class TransportFailure(KnowledgeBaseError):
    """A collaborator (document loader, storage engine) failed.

    The original exception is chained as ``__cause__`` and kept on
    :attr:`cause`.
    """

    def __init__(self, operation: str, target: str, cause: BaseException | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{operation} failed for {target!r}{detail}")
        self.operation = operation
        self.target = target
        self.cause = cause
