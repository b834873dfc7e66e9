"""FastAPI application exposing the retrieval tool as a REST API."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI
from pydantic import BaseModel, Field

from docs_knowledge.retrieval.retriever import KnowledgeRetriever
from docs_knowledge.serving.boundary import respond_async

app = FastAPI(
    title="Docs Knowledge API",
    version="0.1.0",
    description="REST interface to the documentation retrieval tool.",
)


# ── Request / Response schemas ────────────────────────────────────────
class RetrieveRequest(BaseModel):
    """Incoming question from the caller."""

    question: str
    k: int | None = Field(default=None, gt=0)


@lru_cache(maxsize=1)
def get_retriever() -> KnowledgeRetriever:
    """Process-wide read-only retriever."""
    return KnowledgeRetriever()


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.get("/ready")
def ready(retriever: KnowledgeRetriever = Depends(get_retriever)) -> dict[str, Any]:
    """Readiness probe: the index is reachable and has been ingested."""
    return {"ready": retriever.is_ready(), "collection": retriever.collection_name}


@app.post("/retrieve")
async def retrieve(
    request: RetrieveRequest,
    retriever: KnowledgeRetriever = Depends(get_retriever),
) -> dict[str, Any]:
    """Return formatted documentation context, or an ``isError`` payload."""
    response = await respond_async(retriever, request.question, k=request.k)
    return response.to_payload()
