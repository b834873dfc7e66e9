"""Chroma implementation of the vector-index abstraction."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any
from uuid import uuid4

import chromadb
from chromadb.errors import NotFoundError

from docs_knowledge.config import settings
from docs_knowledge.errors import DimensionMismatch, IndexNotFound, KnowledgeBaseError, TransportFailure
from docs_knowledge.retrieval.base import VectorIndexBase
from docs_knowledge.retrieval.models import ChunkRecord, IndexHandle, SearchHit

logger = logging.getLogger(__name__)

# Keys reserved in per-record metadata; everything else comes from ChunkRecord.extra.
_RESERVED_KEYS = ("title", "path", "ordinal")

# Serialises generation swaps against searches within this process.
_swap_lock = threading.RLock()


@contextmanager
def _storage(operation: str, target: str) -> Iterator[None]:
    """Re-raise storage-engine errors as :class:`TransportFailure`."""
    try:
        yield
    except KnowledgeBaseError:
        raise
    except Exception as exc:
        raise TransportFailure(operation, target, exc) from exc


def build_client(
    *,
    persist_directory: str | None = None,
    host: str | None = None,
    port: int = 8000,
) -> Any:
    """Return a Chroma client.

    ``host`` selects the client/server mode, ``persist_directory`` the
    embedded persistent mode; with neither the store lives in memory.
    """
    if host:
        logger.info("Chroma: connecting to %s:%d", host, port)
        return chromadb.HttpClient(host=host, port=port)
    if persist_directory:
        Path(persist_directory).mkdir(parents=True, exist_ok=True)
        logger.info("Chroma: persistent at %s", persist_directory)
        return chromadb.PersistentClient(path=persist_directory)
    logger.info("Chroma: ephemeral (in-memory)")
    return chromadb.EphemeralClient()


class ChromaVectorIndex(VectorIndexBase):
    """Chroma-backed vector index with whole-collection replacement.

    Parameters
    ----------
    collection_name:
        Default collection name.
    client:
        Pre-built Chroma client; when *None* one is built from the
        remaining arguments.
    persist_directory / host / port:
        See :func:`build_client`.
    upsert_batch_size:
        Max records per ``add`` call.
    """

    def __init__(
        self,
        collection_name: str = settings.collection_name,
        *,
        client: Any = None,
        persist_directory: str | None = settings.chroma_persist_dir,
        host: str | None = settings.chroma_host,
        port: int = settings.chroma_port,
        upsert_batch_size: int = settings.upsert_batch_size,
    ) -> None:
        super().__init__(collection_name)
        if client is None:
            with _storage("connect", host or persist_directory or "memory"):
                client = build_client(persist_directory=persist_directory, host=host, port=port)
        self._client = client
        self._batch_size = upsert_batch_size

    # -- VectorIndexBase overrides --------------------------------------------

    def open(self, name: str | None = None) -> IndexHandle:
        name = name or self.collection_name
        collection = self._get_collection(name)
        with _storage("count", name):
            count = collection.count()
        meta = collection.metadata or {}
        return IndexHandle(
            name=name,
            dimension=int(meta.get("dimension", 0)),
            count=count,
            generation=meta.get("generation"),
        )

    def create_or_replace(self, records: list[ChunkRecord], name: str | None = None) -> IndexHandle:
        name = name or self.collection_name
        dimension = self.validate_records(records)
        generation = uuid4().hex[:12]
        staging_name = f"{name}-staging-{generation}"

        t0 = time.monotonic()
        with _storage("create", staging_name):
            staging = self._client.create_collection(
                name=staging_name,
                metadata={"hnsw:space": "cosine", "dimension": dimension, "generation": generation},
            )
        try:
            self._add_batches(staging, records)
        except Exception:
            logger.error("Staging %s failed; live collection %s left untouched", staging_name, name)
            self._delete_quietly(staging_name)
            raise

        with _swap_lock:
            with _storage("swap", name):
                self._delete_quietly(name)
            try:
                with _storage("rename", staging_name):
                    staging.modify(name=name)
            except TransportFailure:
                logger.error(
                    "Collection %s was dropped but renaming %s failed; rename %s to %s to restore it",
                    name, staging_name, staging_name, name,
                )
                raise

        logger.info(
            "Replaced collection %s with %d records (dim=%d, generation=%s) in %.1fs",
            name, len(records), dimension, generation, time.monotonic() - t0,
        )
        return IndexHandle(name=name, dimension=dimension, count=len(records), generation=generation)

    def search(self, handle: IndexHandle, query_vector: list[float], k: int) -> list[SearchHit]:
        self.validate_query(handle, query_vector, k)

        with _swap_lock:
            collection = self._get_collection(handle.name)
            meta = collection.metadata or {}
            stored_dim = int(meta.get("dimension", handle.dimension))
            if stored_dim != len(query_vector):
                raise DimensionMismatch(stored_dim, len(query_vector), context=f"query on {handle.name}")

            with _storage("search", handle.name):
                available = collection.count()
                if available == 0:
                    return []
                # Over-fetch so exact distance ties at the cut-off can be
                # resolved by insertion order.
                n_results = min(available, k + max(k, 10))
                results = collection.query(
                    query_embeddings=[list(query_vector)],
                    n_results=n_results,
                    include=["documents", "metadatas", "distances", "embeddings"],
                )

        hits = self._to_hits(results)
        hits.sort(key=lambda h: (h[0], h[1]))
        return [
            SearchHit(record=record, distance=distance, rank=rank)
            for rank, (distance, _ordinal, record) in enumerate(hits[:k])
        ]

    def drop(self, name: str | None = None) -> None:
        name = name or self.collection_name
        with _swap_lock:
            self._delete_quietly(name)

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    # -- internals ------------------------------------------------------------

    def _get_collection(self, name: str) -> Any:
        try:
            return self._client.get_collection(name=name)
        except (NotFoundError, ValueError) as exc:
            raise IndexNotFound(name) from exc
        except Exception as exc:
            raise TransportFailure("open", name, exc) from exc

    def _delete_quietly(self, name: str) -> None:
        try:
            self._client.delete_collection(name=name)
        except (NotFoundError, ValueError):
            pass

    def _add_batches(self, collection: Any, records: list[ChunkRecord]) -> None:
        for start in range(0, len(records), self._batch_size):
            batch = records[start : start + self._batch_size]
            with _storage("add", f"{collection.name}[{start}:{start + len(batch)}]"):
                collection.add(
                    ids=[r.id for r in batch],
                    embeddings=[r.vector for r in batch],
                    documents=[r.content for r in batch],
                    metadatas=[_record_metadata(r, start + i) for i, r in enumerate(batch)],
                )
            logger.debug("  added batch %d-%d", start, start + len(batch))

    @staticmethod
    def _to_hits(results: dict[str, Any]) -> list[tuple[float, int, ChunkRecord]]:
        ids = (results.get("ids") or [[]])[0]
        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]
        embeddings = results.get("embeddings")
        vectors = embeddings[0] if embeddings is not None and len(embeddings) else [None] * len(ids)

        out: list[tuple[float, int, ChunkRecord]] = []
        for doc_id, content, meta, dist, vec in zip(ids, docs, metas, distances, vectors):
            meta = dict(meta or {})
            ordinal = int(meta.get("ordinal", 0))
            record = ChunkRecord(
                id=doc_id,
                content=content or "",
                title=str(meta.get("title", "")),
                path=str(meta.get("path", "")),
                vector=[float(x) for x in vec] if vec is not None else [],
                extra={k: v for k, v in meta.items() if k not in _RESERVED_KEYS},
            )
            out.append((float(dist), ordinal, record))
        return out


def _record_metadata(record: ChunkRecord, ordinal: int) -> dict[str, Any]:
    meta: dict[str, Any] = {k: v for k, v in record.extra.items() if k not in _RESERVED_KEYS}
    meta.update(title=record.title, path=record.path, ordinal=ordinal)
    return meta
