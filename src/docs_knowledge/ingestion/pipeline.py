"""Ingestion pipeline — documents → chunks → vectors → one index generation.

The run is all-or-nothing: a single embedding or storage failure aborts
it, and a run that finds no qualifying chunks leaves the index as it was.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel

from docs_knowledge.config import Settings, settings as default_settings
from docs_knowledge.ingestion.chunker import chunk_text
from docs_knowledge.ingestion.embedder import (
    EmbeddingProvider,
    HuggingFaceEmbeddingProvider,
    get_embedding_provider,
)
from docs_knowledge.ingestion.loader import load_directory
from docs_knowledge.retrieval.base import VectorIndexBase
from docs_knowledge.retrieval.models import ChunkRecord, SourceDocument

logger = logging.getLogger(__name__)


class IngestionReport(BaseModel):
    """Outcome of one ingestion run."""

    collection: str
    documents: int = 0
    chunks: int = 0
    empty: bool = False
    generation: str | None = None
    elapsed_seconds: float = 0.0

    def summary(self) -> str:
        if self.empty:
            return f"No records to ingest from {self.documents} documents; '{self.collection}' left unchanged."
        return f"Ingested {self.chunks} chunks from {self.documents} documents into '{self.collection}'"


def document_title(document: SourceDocument) -> str:
    """Frontmatter title, else the file's base name."""
    return document.title or Path(document.path).name


def build_chunk_records(
    document: SourceDocument,
    provider: EmbeddingProvider,
    *,
    min_length: int = 50,
    strategy: str = "paragraph",
    chunk_size: int = 1000,
    chunk_overlap: int = 100,
) -> list[ChunkRecord]:
    """Chunk and embed one document.

    Returns
    -------
    list[ChunkRecord]
        Records in document order, ids ``"<path>#<ordinal>"``.
    """
    chunks = chunk_text(
        document.text,
        strategy=strategy,
        min_length=min_length,
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
    )
    logger.info("Processing: %s (%d chunks)", document.path, len(chunks))
    if not chunks:
        return []

    vectors = provider.embed_many(chunks)
    title = document_title(document)
    return [
        ChunkRecord(
            id=ChunkRecord.make_id(document.path, ordinal),
            content=content,
            title=title,
            path=document.path,
            vector=vector,
        )
        for ordinal, (content, vector) in enumerate(zip(chunks, vectors))
    ]


def ingest_documents(
    documents: Iterable[SourceDocument],
    *,
    provider: EmbeddingProvider,
    index: VectorIndexBase,
    collection_name: str | None = None,
    min_length: int = 50,
    strategy: str = "paragraph",
    chunk_size: int = 1000,
    chunk_overlap: int = 100,
) -> IngestionReport:
    """Build one index generation from *documents*.

    Parameters
    ----------
    documents:
        Source documents; order only affects embedding-call order.
    provider:
        Embedding provider shared with the retrieval path.
    index:
        Target vector index; replaced wholesale on success.
    collection_name:
        Collection to replace (defaults to the index's own).
    min_length / strategy / chunk_size / chunk_overlap:
        Chunking parameters, see :func:`~docs_knowledge.ingestion.chunker.chunk_text`.
    """
    collection = collection_name or index.collection_name
    t0 = time.monotonic()

    records: list[ChunkRecord] = []
    n_documents = 0
    for document in documents:
        n_documents += 1
        records.extend(
            build_chunk_records(
                document,
                provider,
                min_length=min_length,
                strategy=strategy,
                chunk_size=chunk_size,
                chunk_overlap=chunk_overlap,
            )
        )

    if not records:
        logger.warning("No records to ingest from %d documents; %s left unchanged", n_documents, collection)
        return IngestionReport(
            collection=collection,
            documents=n_documents,
            empty=True,
            elapsed_seconds=round(time.monotonic() - t0, 2),
        )

    handle = index.create_or_replace(records, collection)
    report = IngestionReport(
        collection=collection,
        documents=n_documents,
        chunks=len(records),
        generation=handle.generation,
        elapsed_seconds=round(time.monotonic() - t0, 2),
    )
    logger.info("%s in %.1fs", report.summary(), report.elapsed_seconds)
    return report


def ingest_corpus(
    config: Settings | None = None,
    *,
    docs_dir: str | Path | None = None,
    provider: EmbeddingProvider | None = None,
    index: VectorIndexBase | None = None,
) -> IngestionReport:
    """Standalone entry point: load ``docs_dir`` and ingest it."""
    config = config or default_settings
    root = Path(docs_dir) if docs_dir is not None else config.docs_dir

    if index is None:
        from docs_knowledge.retrieval.chroma_store import ChromaVectorIndex

        index = ChromaVectorIndex(
            config.collection_name,
            persist_directory=config.chroma_persist_dir,
            host=config.chroma_host,
            port=config.chroma_port,
            upsert_batch_size=config.upsert_batch_size,
        )
    if provider is None:
        if config is default_settings:
            provider = get_embedding_provider()
        else:
            provider = HuggingFaceEmbeddingProvider(
                config.embedding_model,
                dimension=config.embedding_dimension,
                device=config.embedding_device,
                batch_size=config.embedding_batch_size,
            )

    logger.info("Starting ingestion from %s", root)
    documents = load_directory(root, config.doc_globs)
    return ingest_documents(
        documents,
        provider=provider,
        index=index,
        collection_name=config.collection_name,
        min_length=config.min_chunk_length,
        strategy=config.chunk_strategy,
        chunk_size=config.chunk_size,
        chunk_overlap=config.chunk_overlap,
    )
