"""docs-knowledge — retrieval-augmented documentation knowledge base."""

__version__ = "0.1.0"
