"""KFP v2 pipeline — scheduled rebuild of the documentation index.

Compile
-------
    python -m pipelines.ingestion_pipeline --compile
"""

from kfp import compiler, dsl

from pipelines.components.ingest import ingest_corpus_component


@dsl.pipeline(
    name="docs-knowledge-ingestion",
    description="Rebuild the documentation vector collection from a mounted docs folder.",
)
def knowledge_ingestion_pipeline(
    docs_dir: str = "/data/docs",
    chroma_host: str = "chroma.kubeflow.svc.cluster.local",
    chroma_port: int = 8000,
    collection_name: str = "docs",
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2",
    embedding_dimension: int = 384,
    min_chunk_length: int = 50,
    chunk_strategy: str = "paragraph",
) -> None:
    """Single-step ingestion; the collection is replaced only on success."""
    ingest_corpus_component(
        docs_dir=docs_dir,
        chroma_host=chroma_host,
        chroma_port=chroma_port,
        collection_name=collection_name,
        embedding_model=embedding_model,
        embedding_dimension=embedding_dimension,
        min_chunk_length=min_chunk_length,
        chunk_strategy=chunk_strategy,
    )


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Docs knowledge ingestion pipeline")
    parser.add_argument("--compile", action="store_true", help="Compile pipeline to YAML")
    parser.add_argument(
        "--output",
        default="pipelines/compiled/ingestion_pipeline.yaml",
        help="Output path for compiled YAML",
    )
    args = parser.parse_args()

    if args.compile:
        compiler.Compiler().compile(knowledge_ingestion_pipeline, args.output)
        print(f"Pipeline compiled → {args.output}")
