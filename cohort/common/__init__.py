"""
Cohort Common Module

Shared infrastructure for ingestion and retrieval.
"""

from .config import CohortConfig, load_config, validate_config
from .embedding_service import EmbeddingService
from .errors import CohortError, CollaboratorFailure, ConfigurationMissing, RetrievalFailure
from .llm_client import Completion, LLMClient, TokenUsage
from .terminology import TerminologyExpander, TerminologyTable
from .vector_store import InMemoryVectorStore, SupabaseVectorStore, VectorRecord, VectorStore

__all__ = [
    "CohortConfig",
    "load_config",
    "validate_config",
    "EmbeddingService",
    "CohortError",
    "CollaboratorFailure",
    "ConfigurationMissing",
    "RetrievalFailure",
    "Completion",
    "LLMClient",
    "TokenUsage",
    "TerminologyExpander",
    "TerminologyTable",
    "InMemoryVectorStore",
    "SupabaseVectorStore",
    "VectorRecord",
    "VectorStore",
]
