"""In-process test doubles for the embedding provider and the vector index."""

from __future__ import annotations

import hashlib
import math
import re
import threading

from docs_knowledge.errors import IndexNotFound
from docs_knowledge.ingestion.embedder import EmbeddingProvider
from docs_knowledge.retrieval.base import VectorIndexBase
from docs_knowledge.retrieval.models import ChunkRecord, IndexHandle, SearchHit

_WORD = re.compile(r"[a-z0-9]+")


class HashingEmbeddingProvider(EmbeddingProvider):
    """Deterministic bag-of-words embedding: words hashed into buckets, L2-normalised.

    Texts sharing vocabulary end up close, which is enough to exercise
    nearest-neighbour behaviour without a model download.
    """

    def __init__(self, dim: int = 64) -> None:
        self._dim = dim
        self.calls = 0
        self._lock = threading.Lock()

    @property
    def dimension(self) -> int:
        return self._dim

    def embed(self, text: str) -> list[float]:
        with self._lock:
            self.calls += 1
        vector = [0.0] * self._dim
        for word in _WORD.findall(text.lower()):
            bucket = int(hashlib.md5(word.encode()).hexdigest(), 16) % self._dim
            vector[bucket] += 1.0
        norm = math.sqrt(sum(x * x for x in vector))
        if norm == 0.0:
            vector[0] = 1.0
            return vector
        return [x / norm for x in vector]


class InMemoryVectorIndex(VectorIndexBase):
    """Exact cosine search over in-memory collections."""

    def __init__(self, collection_name: str = "docs") -> None:
        super().__init__(collection_name)
        self._collections: dict[str, tuple[list[ChunkRecord], str]] = {}
        self.replace_calls = 0

    def open(self, name: str | None = None) -> IndexHandle:
        name = name or self.collection_name
        if name not in self._collections:
            raise IndexNotFound(name)
        records, generation = self._collections[name]
        return IndexHandle(name=name, dimension=len(records[0].vector), count=len(records), generation=generation)

    def create_or_replace(self, records: list[ChunkRecord], name: str | None = None) -> IndexHandle:
        name = name or self.collection_name
        self.validate_records(records)
        self.replace_calls += 1
        generation = f"gen-{self.replace_calls}"
        self._collections[name] = (list(records), generation)
        return self.open(name)

    def search(self, handle: IndexHandle, query_vector: list[float], k: int) -> list[SearchHit]:
        self.validate_query(handle, query_vector, k)
        records, _ = self._collections[handle.name]
        scored = [
            (1.0 - sum(a * b for a, b in zip(r.vector, query_vector)), ordinal, r)
            for ordinal, r in enumerate(records)
        ]
        scored.sort(key=lambda item: (item[0], item[1]))
        return [SearchHit(record=r, distance=d, rank=i) for i, (d, _, r) in enumerate(scored[:k])]

    def drop(self, name: str | None = None) -> None:
        self._collections.pop(name or self.collection_name, None)

    def health_check(self) -> bool:
        return True

    def records(self, name: str | None = None) -> list[ChunkRecord]:
        return list(self._collections[name or self.collection_name][0])


# ── Sample corpus text ──────────────────────────────────────────────────

ASTRO_INTRO = (
    "Astro is a web framework for building fast, content-driven websites "
    "such as blogs, marketing pages and documentation."
)
ASTRO_ISLANDS = (
    "Astro islands let you hydrate individual interactive components while the "
    "rest of the page stays static HTML."
)
REACT_HOOKS = (
    "React hooks such as useState and useEffect let function components hold "
    "state and run side effects after rendering."
)
