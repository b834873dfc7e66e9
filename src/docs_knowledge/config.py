"""Shared configuration loaded from environment / ``.env``."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Source documents
    docs_dir: Path = Field(default=Path("./docs"), description="Root folder of the Markdown / MDX corpus")
    doc_globs: list[str] = Field(default_factory=lambda: ["**/*.md", "**/*.mdx"])

    # Chunking
    min_chunk_length: int = Field(default=50, description="Chunks shorter than this (after trimming) are dropped")
    chunk_strategy: Literal["paragraph", "recursive"] = "paragraph"
    chunk_size: int = 1000
    chunk_overlap: int = 100

    # Retrieval
    top_k: int = 5
    request_timeout_seconds: float = 30.0

    # Embedding
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    embedding_dimension: int = 384
    embedding_batch_size: int = 32
    embedding_device: str = "cpu"

    # Vector store
    collection_name: str = "docs"
    chroma_persist_dir: str = Field(
        default="data/docs-knowledge-chroma",
        description="Embedded Chroma location. Ignored when chroma_host is set.",
    )
    chroma_host: str = ""
    chroma_port: int = 8000
    upsert_batch_size: int = 5000

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @field_validator("top_k", "embedding_dimension", "embedding_batch_size", "upsert_batch_size", "chunk_size")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("min_chunk_length", "chunk_overlap")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value


# Singleton — import `settings` wherever needed.
settings = Settings()
