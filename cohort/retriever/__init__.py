"""
Retriever - Roster Question Answering

Key Components:
- QueryProcessor: Detects cues and expands queries for the semantic path
- HybridRetriever: Semantic + keyword search with fusion and fallback
- ContextAssembler: Renders results and statistics into LLM context
- Synthesizer: Answers from context with one completion call

Pipeline:
1. Parse and expand the user query
2. Semantic and keyword search, fused and deduplicated
3. Assemble the context (with statistics for count questions)
4. Complete with the context in the system prompt
"""

from .query_processor import QueryProcessor, ParsedQuery
from .searcher import HybridRetriever, SearchResult, RetrievalResult
from .context import ContextAssembler, NO_DATA_CONTEXT
from .synthesizer import Synthesizer, build_system_prompt

__all__ = [
    "QueryProcessor",
    "ParsedQuery",
    "HybridRetriever",
    "SearchResult",
    "RetrievalResult",
    "ContextAssembler",
    "NO_DATA_CONTEXT",
    "Synthesizer",
    "build_system_prompt",
]
