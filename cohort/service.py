"""
Assistant Service

Wires the components in their initialization order:
RecordStore -> ChunkBuilder -> Indexer -> HybridRetriever -> Synthesizer.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .common.config import CohortConfig, validate_config
from .common.embedding_service import EmbeddingService
from .common.errors import RetrievalFailure
from .common.llm_client import LLMClient, TokenUsage, create_llm_client
from .common.vector_store import VectorRecord, VectorStore, create_vector_store
from .ingest.chunk_builder import ChunkBuilder
from .ingest.indexer import Indexer
from .ingest.record_store import RecordStore
from .retriever.context import ContextAssembler
from .retriever.query_processor import QueryProcessor
from .retriever.searcher import HybridRetriever
from .retriever.synthesizer import Synthesizer

logger = logging.getLogger("cohort.service")


@dataclass
class QueryResult:
    """Answer plus provenance for one user query"""
    answer: str
    sources: List[VectorRecord] = field(default_factory=list)
    processing_time: float = 0.0  # seconds
    usage: TokenUsage = field(default_factory=TokenUsage)
    used_fallback: bool = False


class AssistantService:
    """
    Question answering over the roster.

    The index must not be rebuilt while queries are running; callers
    serialize refresh_embeddings() against query().
    """

    def __init__(
        self,
        store: RecordStore,
        indexer: Indexer,
        retriever: HybridRetriever,
        synthesizer: Synthesizer,
        vector_store: VectorStore,
        sources_topk: int = 5,
        sources_min_score: float = 0.6,
    ):
        self._store = store
        self._indexer = indexer
        self._retriever = retriever
        self._synthesizer = synthesizer
        self._vectors = vector_store
        self._sources_topk = sources_topk
        self._sources_min_score = sources_min_score
        self._initialized = False

    @classmethod
    def from_config(
        cls,
        config: CohortConfig,
        store: Optional[RecordStore] = None,
        embedding_service: Optional[EmbeddingService] = None,
        vector_store: Optional[VectorStore] = None,
        llm_client: Optional[LLMClient] = None,
    ) -> "AssistantService":
        """
        Build every component from configuration.

        Raises:
            ConfigurationMissing: before anything is constructed, when
                credentials for the selected backends are absent
        """
        validate_config(config)

        store = store or RecordStore.from_file(config.data.path)
        chunk_builder = ChunkBuilder(store)

        embedding_service = embedding_service or EmbeddingService(
            mode=config.embedding.mode,
            model=config.embedding.model,
            api_key=config.embedding.openai_api_key or None,
            max_chars=config.embedding.max_chars,
        )
        vector_store = vector_store or create_vector_store(config.vector_store)

        indexer = Indexer(
            chunk_builder,
            embedding_service,
            vector_store,
            batch_size=config.embedding.batch_size,
            batch_delay=config.embedding.batch_delay,
        )

        retriever = HybridRetriever(
            store,
            embedding_service,
            vector_store,
            query_processor=QueryProcessor.from_pass_names(config.retriever.expansion_passes),
            assembler=ContextAssembler(store),
            topk=config.retriever.topk,
            min_score=config.retriever.min_score,
            keyword_limit=config.retriever.keyword_limit,
            fused_limit=config.retriever.fused_limit,
            fallback_limit=config.retriever.fallback_limit,
        )

        synthesizer = Synthesizer(llm_client or create_llm_client(config.llm))

        return cls(
            store,
            indexer,
            retriever,
            synthesizer,
            vector_store,
            sources_topk=config.retriever.sources_topk,
            sources_min_score=config.retriever.sources_min_score,
        )

    @property
    def retriever(self) -> HybridRetriever:
        return self._retriever

    async def initialize(self) -> None:
        """Build the index if the vector store is empty"""
        if self._initialized:
            return
        await self._indexer.ensure_index()
        self._initialized = True

    async def query(
        self,
        user_query: str,
        history: Optional[List[Dict[str, str]]] = None,
    ) -> QueryResult:
        """
        Answer a question.

        Raises:
            RetrievalFailure: no context could be produced
            CollaboratorFailure: the completion call failed
        """
        start = time.monotonic()

        if not self._initialized:
            await self.initialize()

        outcome = await self._retriever.search(user_query)
        if not outcome.context:
            raise RetrievalFailure("Retrieval produced no context")

        completion = self._synthesizer.answer(user_query, outcome.context, history)

        sources: List[VectorRecord] = []
        if not outcome.used_fallback:
            sources = self._retriever.find_sources(
                outcome.query,
                limit=self._sources_topk,
                min_score=self._sources_min_score,
            )

        return QueryResult(
            answer=completion.text,
            sources=sources,
            processing_time=time.monotonic() - start,
            usage=completion.usage,
            used_fallback=outcome.used_fallback,
        )

    async def refresh_embeddings(self) -> int:
        """Destructive full rebuild of the index"""
        count = await self._indexer.rebuild()
        self._initialized = True
        return count

    def get_stats(self) -> Dict[str, int]:
        """Embedding, program and student counts"""
        return {
            "total_embeddings": self._vectors.count(),
            "programs": len(self._store.summaries()),
            "students": self._store.total_students(),
        }
