"""Request boundary shared by the MCP server and the HTTP API."""

from __future__ import annotations

import asyncio
import logging

from docs_knowledge.config import settings
from docs_knowledge.retrieval.models import ToolResponse
from docs_knowledge.retrieval.retriever import KnowledgeRetriever

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Searching the documentation took too long. Please try again."


async def respond_async(
    retriever: KnowledgeRetriever,
    question: str,
    *,
    k: int | None = None,
    timeout: float | None = settings.request_timeout_seconds,
) -> ToolResponse:
    """Run :meth:`KnowledgeRetriever.respond` in a worker thread, bounded by *timeout*.

    Embedding and index I/O block, so they never run on the event loop.
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(retriever.respond, question, k=k), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("Retrieval timed out after %.1fs", timeout)
        return ToolResponse.text(TIMEOUT_MESSAGE, is_error=True)
