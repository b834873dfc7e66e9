"""MCP tool server exposing ``ask_docs`` over stdio."""

from __future__ import annotations

import logging

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from docs_knowledge.config import settings
from docs_knowledge.retrieval.retriever import KnowledgeRetriever
from docs_knowledge.serving.boundary import respond_async

logger = logging.getLogger(__name__)

SERVER_NAME = "docs-knowledge-server"


def build_server(
    retriever: KnowledgeRetriever | None = None,
    *,
    timeout: float | None = settings.request_timeout_seconds,
) -> FastMCP:
    """Build the MCP server.

    The retriever is created on the first call to the tool so that
    starting the server never touches the index or the model.
    """
    server = FastMCP(SERVER_NAME)
    holder: dict[str, KnowledgeRetriever] = {}
    if retriever is not None:
        holder["retriever"] = retriever

    @server.tool(
        description="Search the ingested documentation for passages relevant to a technical question."
    )
    async def ask_docs(question: str) -> str:
        if "retriever" not in holder:
            holder["retriever"] = KnowledgeRetriever()
        response = await respond_async(holder["retriever"], question, timeout=timeout)
        if response.is_error:
            # FastMCP turns ToolError into a result with isError set.
            raise ToolError(response.first_text)
        return response.first_text

    return server


def run_stdio() -> None:
    """Serve on stdin/stdout; logs go to stderr."""
    server = build_server()
    logger.info("%s running on stdio", SERVER_NAME)
    server.run(transport="stdio")
