"""
Vector Store

Storage and similarity search for chunk embeddings.

Backends:
- InMemoryVectorStore: numpy matrix, cosine similarity (single process)
- SupabaseVectorStore: pgvector table behind Supabase, searched through
  the `match_documents` RPC
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from .embedding_service import batch_cosine_similarity
from .errors import CollaboratorFailure

logger = logging.getLogger("cohort.common.vector_store")


@dataclass
class VectorRecord:
    """A stored chunk: id, text, embedding and metadata tags"""
    id: str
    content: str
    embedding: List[float] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    similarity: Optional[float] = None

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "embedding": self.embedding,
            "metadata": self.metadata,
        }


class VectorStore(ABC):
    """
    Vector store contract.

    Every backend raises CollaboratorFailure when the underlying call fails.
    """

    @abstractmethod
    def upsert(self, records: List[VectorRecord]) -> None:
        """Insert or replace records by id"""
        pass

    @abstractmethod
    def delete_all(self) -> None:
        """Remove every record"""
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of stored records"""
        pass

    @abstractmethod
    def search_similar(
        self,
        query_vector: List[float],
        limit: int = 10,
        min_score: float = 0.7,
    ) -> List[VectorRecord]:
        """Records with cosine similarity >= min_score, best first"""
        pass

    @abstractmethod
    def search_by_metadata(self, filters: Dict[str, Any]) -> List[VectorRecord]:
        """Records whose metadata equals every filter value"""
        pass


class InMemoryVectorStore(VectorStore):
    """
    Process-local vector store.

    Keeps records in insertion order and an embeddings matrix that is
    rebuilt lazily after writes.
    """

    def __init__(self):
        self._records: Dict[str, VectorRecord] = {}
        self._ids: List[str] = []
        self._matrix: Optional[np.ndarray] = None

    def upsert(self, records: List[VectorRecord]) -> None:
        for record in records:
            self._records[record.id] = VectorRecord(
                id=record.id,
                content=record.content,
                embedding=list(record.embedding),
                metadata=dict(record.metadata),
            )
        self._matrix = None

    def delete_all(self) -> None:
        self._records.clear()
        self._ids = []
        self._matrix = None

    def count(self) -> int:
        return len(self._records)

    def _ensure_matrix(self) -> np.ndarray:
        if self._matrix is None:
            self._ids = [rid for rid, r in self._records.items() if r.embedding]
            if self._ids:
                self._matrix = np.array([self._records[rid].embedding for rid in self._ids], dtype=float)
            else:
                self._matrix = np.zeros((0, 0))
        return self._matrix

    def search_similar(
        self,
        query_vector: List[float],
        limit: int = 10,
        min_score: float = 0.7,
    ) -> List[VectorRecord]:
        matrix = self._ensure_matrix()
        if matrix.size == 0 or limit <= 0:
            return []

        if matrix.shape[1] != len(query_vector):
            raise CollaboratorFailure(
                "vector_store",
                f"query dimension {len(query_vector)} does not match index dimension {matrix.shape[1]}",
            )

        similarities = batch_cosine_similarity(query_vector, matrix)

        # Stable sort keeps insertion order among equal scores
        order = np.argsort(-similarities, kind="stable")

        results = []
        for idx in order:
            score = float(similarities[idx])
            if score < min_score:
                break
            record = self._records[self._ids[idx]]
            results.append(VectorRecord(
                id=record.id,
                content=record.content,
                embedding=record.embedding,
                metadata=dict(record.metadata),
                similarity=score,
            ))
            if len(results) >= limit:
                break

        return results

    def search_by_metadata(self, filters: Dict[str, Any]) -> List[VectorRecord]:
        return [
            record for record in self._records.values()
            if all(record.metadata.get(key) == value for key, value in filters.items())
        ]


class SupabaseVectorStore(VectorStore):
    """
    Supabase (pgvector) backed store.

    Expects a table with columns id, content, embedding, metadata (jsonb)
    and a `match_documents(query_embedding, match_threshold, match_count)`
    SQL function returning rows with a similarity column.
    """

    def __init__(
        self,
        url: str = "",
        key: str = "",
        table: str = "document_embeddings",
        match_function: str = "match_documents",
        client=None,
    ):
        """
        Initialize Supabase vector store.

        Args:
            url: Supabase project URL
            key: Supabase anon/service key
            table: Embeddings table name
            match_function: Similarity search RPC name
            client: Optional pre-built supabase client
        """
        self._table = table
        self._match_function = match_function
        self._client = client

        if self._client is None:
            if not (url and key):
                raise CollaboratorFailure("vector_store", "Supabase URL and key are required")
            try:
                from supabase import create_client

                self._client = create_client(url, key)
            except Exception as e:
                raise CollaboratorFailure("vector_store", f"failed to create Supabase client: {e}") from e

    @staticmethod
    def _to_record(row: Dict[str, Any]) -> VectorRecord:
        return VectorRecord(
            id=row.get("id", ""),
            content=row.get("content", ""),
            embedding=row.get("embedding") or [],
            metadata=row.get("metadata") or {},
            similarity=row.get("similarity"),
        )

    def upsert(self, records: List[VectorRecord]) -> None:
        if not records:
            return
        try:
            self._client.table(self._table).upsert([r.to_row() for r in records]).execute()
        except Exception as e:
            raise CollaboratorFailure("vector_store", f"failed to insert vectors: {e}") from e

    def delete_all(self) -> None:
        try:
            self._client.table(self._table).delete().neq("id", "").execute()
        except Exception as e:
            raise CollaboratorFailure("vector_store", f"failed to delete vectors: {e}") from e

    def count(self) -> int:
        try:
            response = self._client.table(self._table).select("id", count="exact").execute()
        except Exception as e:
            raise CollaboratorFailure("vector_store", f"failed to get count: {e}") from e
        return response.count or 0

    def search_similar(
        self,
        query_vector: List[float],
        limit: int = 10,
        min_score: float = 0.7,
    ) -> List[VectorRecord]:
        try:
            response = self._client.rpc(
                self._match_function,
                {
                    "query_embedding": query_vector,
                    "match_threshold": min_score,
                    "match_count": limit,
                },
            ).execute()
        except Exception as e:
            raise CollaboratorFailure("vector_store", f"search failed: {e}") from e

        return [self._to_record(row) for row in (response.data or [])]

    def search_by_metadata(self, filters: Dict[str, Any]) -> List[VectorRecord]:
        query = self._client.table(self._table).select("*")
        for key, value in filters.items():
            query = query.eq(f"metadata->>{key}", value)

        try:
            response = query.execute()
        except Exception as e:
            raise CollaboratorFailure("vector_store", f"metadata search failed: {e}") from e

        return [self._to_record(row) for row in (response.data or [])]


def create_vector_store(config) -> VectorStore:
    """Build the configured backend from a VectorStoreConfig"""
    backend = (config.backend or "memory").lower()

    if backend == "memory":
        return InMemoryVectorStore()

    if backend == "supabase":
        return SupabaseVectorStore(
            url=config.supabase_url,
            key=config.supabase_key,
            table=config.table,
            match_function=config.match_function,
        )

    raise ValueError(f"Unsupported vector store backend: {config.backend}")
