"""
Index Builder

Embeds the chunk set and stores it in the vector store.

Rebuilds are destructive-then-additive: delete_all() completes before
any chunk is re-inserted. Callers must not run a rebuild concurrently
with live queries, since readers can observe an empty index.
"""

import logging
from typing import List

from ..common.embedding_service import EmbeddingService
from ..common.vector_store import VectorRecord, VectorStore
from .chunk_builder import ChunkBuilder

logger = logging.getLogger("cohort.ingest.indexer")


class Indexer:
    """Builds and refreshes the embedding index"""

    def __init__(
        self,
        chunk_builder: ChunkBuilder,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        batch_size: int = 50,
        batch_delay: float = 1.0,
    ):
        """
        Initialize indexer.

        Args:
            chunk_builder: Source of chunks
            embedding_service: For embedding chunk content
            vector_store: Destination store
            batch_size: Chunks per embedding request
            batch_delay: Seconds to wait between embedding batches
        """
        self._chunks = chunk_builder
        self._embedding = embedding_service
        self._store = vector_store
        self._batch_size = batch_size
        self._batch_delay = batch_delay

    async def ensure_index(self) -> int:
        """
        Build the index only when the store is empty.

        Returns:
            Number of stored embeddings
        """
        count = self._store.count()
        if count == 0:
            logger.info("No embeddings found, generating...")
            return await self.build()

        logger.info("Found %d existing embeddings", count)
        return count

    async def rebuild(self) -> int:
        """Delete every stored embedding, then regenerate the full index"""
        self._store.delete_all()
        return await self.build()

    async def build(self) -> int:
        """
        Embed all chunks in batches and upsert them.

        Nothing is written if any batch fails.

        Returns:
            Number of records stored
        """
        chunks = self._chunks.build()
        logger.info("Generating embeddings for %d chunks...", len(chunks))

        embeddings = await self._embedding.embed_batches(
            [chunk.content for chunk in chunks],
            batch_size=self._batch_size,
            batch_delay=self._batch_delay,
        )

        records: List[VectorRecord] = [
            VectorRecord(
                id=chunk.id,
                content=chunk.content,
                embedding=embedding,
                metadata=chunk.metadata.to_dict(),
            )
            for chunk, embedding in zip(chunks, embeddings)
        ]

        self._store.upsert(records)
        logger.info("Stored %d embeddings", len(records))
        return len(records)
