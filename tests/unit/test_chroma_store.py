"""Tests for the Chroma vector index, run against an embedded store in ``tmp_path``."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from docs_knowledge.errors import DimensionMismatch, IndexNotFound, TransportFailure
from docs_knowledge.ingestion.loader import load_directory
from docs_knowledge.ingestion.pipeline import ingest_documents
from docs_knowledge.retrieval.models import ChunkRecord
from docs_knowledge.retrieval.retriever import KnowledgeRetriever

chromadb = pytest.importorskip("chromadb")

from docs_knowledge.retrieval.chroma_store import ChromaVectorIndex  # noqa: E402


def _unit(*xs: float) -> list[float]:
    norm = sum(x * x for x in xs) ** 0.5
    return [x / norm for x in xs]


def _record(id_: str, vector: list[float], **extra) -> ChunkRecord:
    return ChunkRecord(
        id=id_,
        content=f"content of {id_}",
        title=f"Title {id_}",
        path=f"docs/{id_}.md",
        vector=vector,
        extra=extra,
    )


def _collection_names(client) -> list[str]:
    return sorted(getattr(c, "name", c) for c in client.list_collections())


@pytest.fixture()
def client(tmp_path: Path):
    return chromadb.PersistentClient(path=str(tmp_path / "chroma"))


@pytest.fixture()
def store(client) -> ChromaVectorIndex:
    return ChromaVectorIndex("docs", client=client, upsert_batch_size=2)


RECORDS = [
    _record("east", _unit(1.0, 0.0, 0.0)),
    _record("north-east", _unit(1.0, 1.0, 0.0)),
    _record("north", _unit(0.0, 1.0, 0.0)),
    _record("up", _unit(0.0, 0.0, 1.0)),
    _record("down", _unit(0.0, 0.0, -1.0)),
]


class TestOpen:
    def test_missing_collection_raises_index_not_found(self, store: ChromaVectorIndex) -> None:
        with pytest.raises(IndexNotFound) as info:
            store.open()
        assert info.value.collection == "docs"

    def test_handle_after_replace(self, store: ChromaVectorIndex) -> None:
        created = store.create_or_replace(RECORDS)
        opened = store.open()
        assert opened.count == 5
        assert opened.dimension == 3
        assert opened.generation == created.generation
        assert store.count(opened) == 5


class TestCreateOrReplace:
    def test_replace_discards_previous_generation(self, store: ChromaVectorIndex, client) -> None:
        first = store.create_or_replace(RECORDS)
        second = store.create_or_replace([_record("only", _unit(1.0, 0.0, 0.0))])

        assert second.generation != first.generation
        handle = store.open()
        assert handle.count == 1
        hits = store.search(handle, _unit(1.0, 0.0, 0.0), 5)
        assert [h.record.id for h in hits] == ["only"]
        assert _collection_names(client) == ["docs"]

    def test_mixed_dimensions_rejected_before_write(self, store: ChromaVectorIndex, client) -> None:
        with pytest.raises(DimensionMismatch):
            store.create_or_replace([_record("a", [1.0, 0.0]), _record("b", [1.0, 0.0, 0.0])])
        assert _collection_names(client) == []

    def test_failed_staging_leaves_live_collection(self, store: ChromaVectorIndex, client) -> None:
        store.create_or_replace(RECORDS)
        with patch.object(ChromaVectorIndex, "_add_batches", side_effect=TransportFailure("add", "docs")):
            with pytest.raises(TransportFailure):
                store.create_or_replace([_record("new", _unit(1.0, 0.0, 0.0))])

        assert store.open().count == 5
        assert _collection_names(client) == ["docs"]

    def test_failed_rename_keeps_staging_and_logs_its_name(self, store: ChromaVectorIndex, client, caplog) -> None:
        store.create_or_replace(RECORDS)
        with patch("chromadb.api.models.Collection.Collection.modify", side_effect=RuntimeError("rename refused")):
            with caplog.at_level("ERROR", logger="docs_knowledge.retrieval.chroma_store"):
                with pytest.raises(TransportFailure) as info:
                    store.create_or_replace([_record("new", _unit(1.0, 0.0, 0.0))])

        assert info.value.operation == "rename"
        (staging,) = _collection_names(client)
        assert staging.startswith("docs-staging-")
        assert staging in caplog.text

    def test_payload_round_trips(self, store: ChromaVectorIndex) -> None:
        store.create_or_replace([_record("east", _unit(1.0, 0.0, 0.0), section="intro", draft=False)])
        hit = store.search(store.open(), _unit(1.0, 0.0, 0.0), 1)[0]
        assert hit.record.title == "Title east"
        assert hit.record.path == "docs/east.md"
        assert hit.record.content == "content of east"
        assert hit.record.extra == {"section": "intro", "draft": False}
        assert hit.record.vector == pytest.approx(_unit(1.0, 0.0, 0.0))

    def test_drop(self, store: ChromaVectorIndex) -> None:
        store.create_or_replace(RECORDS)
        store.drop()
        with pytest.raises(IndexNotFound):
            store.open()
        store.drop()  # dropping a missing collection is a no-op


class TestSearch:
    def test_nearest_first(self, store: ChromaVectorIndex) -> None:
        handle = store.create_or_replace(RECORDS)
        hits = store.search(handle, _unit(1.0, 0.2, 0.0), 3)
        assert [h.record.id for h in hits] == ["east", "north-east", "north"]
        distances = [h.distance for h in hits]
        assert distances == sorted(distances)
        assert [h.rank for h in hits] == [0, 1, 2]

    def test_fewer_records_than_k(self, store: ChromaVectorIndex) -> None:
        handle = store.create_or_replace(RECORDS[:2])
        assert len(store.search(handle, _unit(1.0, 0.0, 0.0), 10)) == 2

    def test_ties_broken_by_insertion_order(self, store: ChromaVectorIndex) -> None:
        same = _unit(0.0, 1.0, 0.0)
        handle = store.create_or_replace([_record(f"r{i}", same) for i in range(4)])
        hits = store.search(handle, same, 3)
        assert [h.record.id for h in hits] == ["r0", "r1", "r2"]

    def test_query_dimension_mismatch(self, store: ChromaVectorIndex) -> None:
        handle = store.create_or_replace(RECORDS)
        with pytest.raises(DimensionMismatch):
            store.search(handle, [1.0, 0.0], 1)

    def test_invalid_k(self, store: ChromaVectorIndex) -> None:
        handle = store.create_or_replace(RECORDS)
        with pytest.raises(ValueError):
            store.search(handle, _unit(1.0, 0.0, 0.0), 0)

    def test_stale_handle_after_drop(self, store: ChromaVectorIndex) -> None:
        handle = store.create_or_replace(RECORDS)
        store.drop()
        with pytest.raises(IndexNotFound):
            store.search(handle, _unit(1.0, 0.0, 0.0), 1)


def test_health_check(store: ChromaVectorIndex) -> None:
    assert store.health_check() is True


def test_end_to_end_ingest_and_retrieve(store: ChromaVectorIndex, docs_dir: Path, provider) -> None:
    report = ingest_documents(load_directory(docs_dir), provider=provider, index=store)
    assert report.chunks == 3

    retriever = KnowledgeRetriever(store, provider, collection_name="docs")
    response = retriever.respond("What is Astro?")
    assert not response.is_error
    assert "## Source: Astro" in response.first_text

    ids = {h.record.id for h in retriever.search("Astro", k=10)}
    assert len(ids) == 3
    assert all("#" in i for i in ids)
