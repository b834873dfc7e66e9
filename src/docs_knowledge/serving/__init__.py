"""
Serving — host boundaries for the retrieval service.

The MCP tool server (stdio) is what agents talk to; the FastAPI app
exposes the same operation over HTTP for containers and smoke tests.
"""
