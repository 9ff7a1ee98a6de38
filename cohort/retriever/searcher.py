"""
Hybrid Retriever

Combines semantic search (embedding + vector store) with keyword
heuristics over the Record Store, then fuses the two result lists.

Pipeline:
1. Expand the query for the semantic path
2. Semantic: embed the expanded query, top-k matches above a similarity floor
3. Keyword: aggregation cue -> per-program counts; year token -> that
   year's program summaries (driven off the original query)
4. Fuse: semantic order first, then unseen keyword results, capped
5. On any semantic-path failure, fall back to plain record search
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..common.embedding_service import EmbeddingService
from ..common.errors import RetrievalFailure
from ..common.schemas import program_chunk_id, render_count_line, render_summary_text
from ..common.terminology import normalize_school_name
from ..common.vector_store import VectorRecord, VectorStore
from ..ingest.record_store import RecordStore
from .context import ContextAssembler
from .query_processor import ParsedQuery, QueryProcessor

logger = logging.getLogger("cohort.retriever.searcher")


@dataclass
class SearchResult:
    """A single search result from either path"""
    id: str
    content: str
    # Cosine similarity for semantic results; None for keyword matches
    score: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    source: str = "semantic"  # "semantic" or "keyword"

    @property
    def is_keyword_match(self) -> bool:
        return self.source == "keyword"


@dataclass
class RetrievalResult:
    """Outcome of one hybrid search"""
    query: ParsedQuery
    results: List[SearchResult]
    context: str
    used_fallback: bool = False
    error: Optional[str] = None


class HybridRetriever:
    """
    Hybrid semantic + keyword retriever over the roster.

    Features:
    - Terminology expansion for semantic recall
    - Keyword heuristics for counts and year lookups
    - Deduplicated fusion keyed on chunk id
    - Graceful fallback when embeddings or the vector store fail
    """

    def __init__(
        self,
        store: RecordStore,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        query_processor: Optional[QueryProcessor] = None,
        assembler: Optional[ContextAssembler] = None,
        topk: int = 8,
        min_score: float = 0.5,
        keyword_limit: int = 5,
        fused_limit: int = 10,
        fallback_limit: int = 10,
    ):
        """
        Initialize retriever.

        Args:
            store: Record Store for keyword and fallback search
            embedding_service: For embedding queries
            vector_store: Chunk index
            query_processor: Query parsing and expansion
            assembler: Context rendering
            topk: Semantic matches requested
            min_score: Semantic similarity floor
            keyword_limit: Cap on keyword results
            fused_limit: Cap on the fused list
            fallback_limit: Cap on fallback records
        """
        self._store = store
        self._embedding = embedding_service
        self._vectors = vector_store
        self._processor = query_processor or QueryProcessor()
        self._assembler = assembler or ContextAssembler(store)
        self._topk = topk
        self._min_score = min_score
        self._keyword_limit = keyword_limit
        self._fused_limit = fused_limit
        self._fallback_limit = fallback_limit

    @property
    def query_processor(self) -> QueryProcessor:
        return self._processor

    async def search(self, query: str) -> RetrievalResult:
        """
        Run the hybrid search and assemble its context.

        Raises:
            RetrievalFailure: only when the fallback path also fails
        """
        parsed = self._processor.parse(query)

        try:
            semantic = self.semantic_search(parsed)
        except Exception as e:
            logger.error("Hybrid search failed, using keyword fallback: %s", e, exc_info=True)
            return self._fallback(parsed, e)

        keyword = self.keyword_search(parsed)
        fused = self.fuse(semantic, keyword)

        return RetrievalResult(
            query=parsed,
            results=fused,
            context=self._assembler.assemble(fused, parsed.original),
        )

    async def search_context(self, query: str) -> str:
        """Context string for the completion call"""
        outcome = await self.search(query)
        return outcome.context

    def semantic_search(self, parsed: ParsedQuery) -> List[SearchResult]:
        """Embed the expanded query and fetch similar chunks; errors propagate"""
        query_vector = self._embedding.embed_single(parsed.semantic_text)
        matches = self._vectors.search_similar(
            query_vector,
            limit=self._topk,
            min_score=self._min_score,
        )
        return [self._to_search_result(m) for m in matches]

    def keyword_search(self, parsed: ParsedQuery) -> List[SearchResult]:
        """Heuristic program-summary matches for counts and years"""
        results: List[SearchResult] = []
        summaries = self._store.summaries()

        if parsed.is_aggregation:
            for summary in summaries:
                results.append(SearchResult(
                    id=program_chunk_id(summary.program),
                    content=render_count_line(summary),
                    metadata={"type": "program", "program": summary.program},
                    source="keyword",
                ))

        if parsed.year:
            for summary in summaries:
                if summary.year != parsed.year:
                    continue
                results.append(SearchResult(
                    id=program_chunk_id(summary.program),
                    content=render_summary_text(summary),
                    metadata={"type": "program", "program": summary.program, "year": summary.year},
                    source="keyword",
                ))

        return results[: self._keyword_limit]

    def fuse(
        self,
        semantic: List[SearchResult],
        keyword: List[SearchResult],
    ) -> List[SearchResult]:
        """Semantic results in order, then keyword results with unseen ids"""
        fused: List[SearchResult] = []
        seen_ids = set()

        for result in semantic + keyword:
            if result.id in seen_ids:
                continue
            seen_ids.add(result.id)
            fused.append(result)

        return fused[: self._fused_limit]

    def _fallback(self, parsed: ParsedQuery, cause: Exception) -> RetrievalResult:
        """Plain record search, skipping expansion, embeddings and fusion"""
        try:
            records = self._store.search(parsed.original)[: self._fallback_limit]
            context = self._assembler.assemble_fallback(records)
        except Exception as e:
            logger.error("Fallback search failed: %s", e)
            raise RetrievalFailure(f"Could not retrieve any data for this query: {e}") from e

        return RetrievalResult(
            query=parsed,
            results=[],
            context=context,
            used_fallback=True,
            error=str(cause),
        )

    def find_sources(
        self,
        parsed: ParsedQuery,
        limit: int = 5,
        min_score: float = 0.6,
    ) -> List[VectorRecord]:
        """Top chunks shown alongside an answer; failures yield no sources"""
        try:
            query_vector = self._embedding.embed_single(parsed.semantic_text)
            return self._vectors.search_similar(query_vector, limit=limit, min_score=min_score)
        except Exception as e:
            logger.warning("Source lookup failed: %s", e)
            return []

    def search_by_school(self, school_name: str) -> List[SearchResult]:
        """Student chunks whose school normalizes to the same network"""
        key = normalize_school_name(school_name)
        if not key:
            return []
        matches = self._vectors.search_by_metadata({"normalized_school_name": key})
        return [self._to_search_result(m) for m in matches]

    @staticmethod
    def _to_search_result(record: VectorRecord) -> SearchResult:
        return SearchResult(
            id=record.id,
            content=record.content,
            score=record.similarity,
            metadata=dict(record.metadata),
            source="semantic",
        )
