"""KFP v2 component — Rebuild the documentation index.

Runs the same ingestion entry point as ``docs-knowledge ingest`` inside a
container built from this repository, so a cluster run and a local run
produce identical collections.

Local testing
-------------
    from pipelines.components.ingest import ingest_corpus_component
    ingest_corpus_component.python_func(
        docs_dir="/data/docs",
        chroma_host="localhost",
        chroma_port=8000,
        collection_name="docs",
        metrics=_FakeArtifact("/tmp/metrics"),
    )
"""

from kfp import dsl

# Container image with this package installed (`pip install .`).
KNOWLEDGE_IMAGE = "docs-knowledge:latest"


@dsl.component(base_image=KNOWLEDGE_IMAGE)
def ingest_corpus_component(
    docs_dir: str,
    chroma_host: str,
    chroma_port: int,
    collection_name: str,
    metrics: dsl.Output[dsl.Metrics],
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2",
    embedding_dimension: int = 384,
    min_chunk_length: int = 50,
    chunk_strategy: str = "paragraph",
) -> str:
    """Load, chunk, embed, and replace the collection.

    Parameters
    ----------
    docs_dir:
        Mounted directory of Markdown / MDX sources.
    chroma_host / chroma_port:
        Chroma server connection details.
    collection_name:
        Collection to replace.
    metrics:
        Output Metrics artifact with ingestion statistics.
    embedding_model / embedding_dimension:
        Must match what the retrieval service is configured with.
    min_chunk_length / chunk_strategy:
        Chunking parameters.

    Returns
    -------
    str
        The ingestion summary line.
    """
    import logging

    from docs_knowledge.config import Settings
    from docs_knowledge.ingestion.pipeline import ingest_corpus

    logging.basicConfig(level=logging.INFO)
    log = logging.getLogger("ingest_corpus")

    config = Settings(
        docs_dir=docs_dir,
        chroma_host=chroma_host,
        chroma_port=chroma_port,
        collection_name=collection_name,
        embedding_model=embedding_model,
        embedding_dimension=embedding_dimension,
        min_chunk_length=min_chunk_length,
        chunk_strategy=chunk_strategy,
    )
    report = ingest_corpus(config)

    # KFP Metrics
    metrics.log_metric("chunks_ingested", report.chunks)
    metrics.log_metric("documents_processed", report.documents)
    metrics.log_metric("ingest_elapsed_seconds", report.elapsed_seconds)

    msg = report.summary()
    log.info(msg)
    return msg
