"""
Tests for Indexer

Covers the build-if-empty start-up path, destructive rebuilds and
batch failure handling.
"""

import pytest
from unittest.mock import Mock

from cohort.common.embedding_service import EmbeddingService
from cohort.common.errors import CollaboratorFailure
from cohort.common.vector_store import VectorRecord
from cohort.ingest.chunk_builder import ChunkBuilder
from cohort.ingest.indexer import Indexer


@pytest.fixture
def indexer(record_store, embedding_service, vector_store):
    return Indexer(
        ChunkBuilder(record_store),
        embedding_service,
        vector_store,
        batch_size=2,
        batch_delay=0,
    )


class TestIndexer:
    """Tests for Indexer"""

    @pytest.mark.asyncio
    async def test_ensure_index_builds_when_empty(self, indexer, vector_store, embedding_client):
        count = await indexer.ensure_index()

        # 2 program chunks + 4 student chunks, in batches of 2
        assert count == 6
        assert vector_store.count() == 6
        assert embedding_client.calls == 3

    @pytest.mark.asyncio
    async def test_ensure_index_skips_when_populated(self, indexer, vector_store, embedding_client):
        await indexer.ensure_index()
        calls = embedding_client.calls

        count = await indexer.ensure_index()

        assert count == 6
        assert embedding_client.calls == calls

    @pytest.mark.asyncio
    async def test_stored_metadata(self, indexer, vector_store):
        await indexer.build()

        programs = vector_store.search_by_metadata({"type": "program"})
        students = vector_store.search_by_metadata({"type": "student", "program": "2025_may"})

        assert [r.id for r in programs] == ["program_2025_may", "program_2024_june"]
        assert len(students) == 3
        assert all(len(r.embedding) == 1024 for r in programs)

    @pytest.mark.asyncio
    async def test_rebuild_deletes_first(self, indexer, vector_store):
        vector_store.upsert([VectorRecord(id="stale", content="old", embedding=[1.0] * 1024)])

        count = await indexer.rebuild()

        ids = [r.id for r in vector_store.search_by_metadata({})]
        assert count == 6
        assert len(ids) == 6
        assert "stale" not in ids

    @pytest.mark.asyncio
    async def test_failed_batch_writes_nothing(self, record_store, vector_store):
        client = Mock()
        client.embed.side_effect = RuntimeError("quota exceeded")
        indexer = Indexer(
            ChunkBuilder(record_store),
            EmbeddingService(mode="femb", client=client),
            vector_store,
            batch_delay=0,
        )

        with pytest.raises(CollaboratorFailure):
            await indexer.build()

        assert vector_store.count() == 0
