"""Embedding providers.

The ingestion and retrieval paths share one provider per process. The
model is loaded lazily on first use, exactly once, under a lock; callers
that arrive while the load is in flight wait for it instead of starting
their own.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from docs_knowledge.config import settings
from docs_knowledge.errors import DimensionMismatch, ProviderUnavailable

if TYPE_CHECKING:
    from langchain_huggingface import HuggingFaceEmbeddings

logger = logging.getLogger(__name__)


class EmbeddingProvider(ABC):
    """Text → fixed-length, L2-normalised vector."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Length of every vector this provider returns."""

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Embed a single string."""

    def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Embed *texts* in order. Backends override this to batch."""
        return [self.embed(text) for text in texts]


class HuggingFaceEmbeddingProvider(EmbeddingProvider):
    """Sentence-transformer embeddings via ``langchain-huggingface``.

    Parameters
    ----------
    model_name:
        HuggingFace model id; mean pooling is part of the model config.
    dimension:
        Expected output length; any other length raises
        :class:`DimensionMismatch`.
    device:
        Torch device passed to sentence-transformers.
    batch_size:
        Forward-pass batch size for :meth:`embed_many`.
    """

    def __init__(
        self,
        model_name: str = settings.embedding_model,
        *,
        dimension: int = settings.embedding_dimension,
        device: str = settings.embedding_device,
        batch_size: int = settings.embedding_batch_size,
    ) -> None:
        self.model_name = model_name
        self._dimension = dimension
        self._device = device
        self._batch_size = batch_size
        self._model: HuggingFaceEmbeddings | None = None
        self._load_error: BaseException | None = None
        self._lock = threading.Lock()

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def loaded(self) -> bool:
        return self._model is not None

    # -- model lifecycle ------------------------------------------------------

    def _get_model(self) -> HuggingFaceEmbeddings:
        model = self._model
        if model is not None:
            return model

        with self._lock:
            if self._model is None:
                if self._load_error is not None:
                    raise ProviderUnavailable(
                        f"Embedding model {self.model_name!r} failed to load: {self._load_error}"
                    ) from self._load_error
                self._model = self._load()
            return self._model

    def _load(self) -> HuggingFaceEmbeddings:
        logger.info("Loading embedding model %s on %s", self.model_name, self._device)
        try:
            from langchain_huggingface import HuggingFaceEmbeddings

            model = HuggingFaceEmbeddings(
                model_name=self.model_name,
                model_kwargs={"device": self._device},
                encode_kwargs={"normalize_embeddings": True, "batch_size": self._batch_size},
            )
        except Exception as exc:
            self._load_error = exc
            logger.error("Embedding model %s failed to load", self.model_name, exc_info=True)
            raise ProviderUnavailable(f"Embedding model {self.model_name!r} failed to load: {exc}") from exc
        logger.info("Embedding model loaded")
        return model

    # -- EmbeddingProvider overrides ------------------------------------------

    def embed(self, text: str) -> list[float]:
        model = self._get_model()
        try:
            vector = model.embed_query(text)
        except Exception as exc:
            raise ProviderUnavailable(f"Embedding failed: {exc}") from exc
        return self._check(vector)

    def embed_many(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        model = self._get_model()
        try:
            vectors = model.embed_documents(list(texts))
        except Exception as exc:
            raise ProviderUnavailable(f"Embedding failed: {exc}") from exc
        return [self._check(v) for v in vectors]

    def _check(self, vector: list[float]) -> list[float]:
        if len(vector) != self._dimension:
            raise DimensionMismatch(self._dimension, len(vector), context=f"model {self.model_name}")
        return [float(x) for x in vector]


# ---------------------------------------------------------------------------
# Process-wide shared provider
# ---------------------------------------------------------------------------

_shared: EmbeddingProvider | None = None
_shared_lock = threading.Lock()


def get_embedding_provider() -> EmbeddingProvider:
    """Return the provider shared by ingestion and retrieval in this process.

    Constructing it is cheap; the model itself loads on first ``embed``.
    """
    global _shared
    with _shared_lock:
        if _shared is None:
            _shared = HuggingFaceEmbeddingProvider()
        return _shared
