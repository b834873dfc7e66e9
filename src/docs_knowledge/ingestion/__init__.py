"""
Ingestion — document loading, chunking, and embedding into the vector index.

This module is responsible for the ETL-like pipeline that converts a
folder of Markdown / MDX documents into embedded chunks stored as one
generation of a vector collection.
"""
