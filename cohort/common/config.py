"""
Configuration Management for Cohort Assistant

Loads configuration from ~/.cohort/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

from .errors import ConfigurationMissing

logger = logging.getLogger("cohort.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".cohort"
CONFIG_PATH = CONFIG_DIR / "config.json"

# Project paths (relative to this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_DATA_PATH = PROJECT_ROOT / "data" / "roster.txt"


@dataclass
class DataConfig:
    """Raw roster corpus location"""
    path: str = str(DEFAULT_DATA_PATH)


@dataclass
class VectorStoreConfig:
    """Vector store backend configuration"""
    backend: str = "memory"  # "memory" or "supabase"
    supabase_url: str = ""
    supabase_key: str = ""
    table: str = "document_embeddings"
    match_function: str = "match_documents"


@dataclass
class EmbeddingConfig:
    """Embedding model configuration"""
    mode: str = "openai"  # "openai" or "femb" (fastembed, on-device)
    model: str = ""  # backend default when empty
    openai_api_key: str = ""
    batch_size: int = 50
    batch_delay: float = 1.0  # seconds between batches (rate limits)
    max_chars: int = 8000


@dataclass
class LLMConfig:
    """Completion provider configuration"""
    provider: str = "anthropic"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-haiku-20240307"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    max_tokens: int = 1500
    temperature: float = 0.1


@dataclass
class RetrieverConfig:
    """Hybrid retriever configuration"""
    topk: int = 8
    min_score: float = 0.5
    keyword_limit: int = 5
    fused_limit: int = 10
    fallback_limit: int = 10
    sources_topk: int = 5
    sources_min_score: float = 0.6
    expansion_passes: List[str] = field(default_factory=lambda: ["recall"])


@dataclass
class CohortConfig:
    """Main configuration"""
    data: DataConfig = field(default_factory=DataConfig)
    vector_store: VectorStoreConfig = field(default_factory=VectorStoreConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    retriever: RetrieverConfig = field(default_factory=RetrieverConfig)


def _parse_data_config(data: dict) -> DataConfig:
    """Parse data section from config dict"""
    data_section = data.get("data", {})
    return DataConfig(
        path=data_section.get("path", str(DEFAULT_DATA_PATH)),
    )


def _parse_vector_store_config(data: dict) -> VectorStoreConfig:
    """Parse vector_store section from config dict"""
    store_data = data.get("vector_store", {})
    return VectorStoreConfig(
        backend=store_data.get("backend", "memory"),
        supabase_url=store_data.get("supabase_url", ""),
        supabase_key=store_data.get("supabase_key", ""),
        table=store_data.get("table", "document_embeddings"),
        match_function=store_data.get("match_function", "match_documents"),
    )


def _parse_embedding_config(data: dict) -> EmbeddingConfig:
    """Parse embedding section from config dict"""
    embedding_data = data.get("embedding", {})
    return EmbeddingConfig(
        mode=embedding_data.get("mode", "openai"),
        model=embedding_data.get("model", ""),
        openai_api_key=embedding_data.get("openai_api_key", ""),
        batch_size=embedding_data.get("batch_size", 50),
        batch_delay=embedding_data.get("batch_delay", 1.0),
        max_chars=embedding_data.get("max_chars", 8000),
    )


def _parse_llm_config(data: dict) -> LLMConfig:
    """Parse llm section from config dict"""
    llm_data = data.get("llm", {})
    return LLMConfig(
        provider=llm_data.get("provider", "anthropic"),
        anthropic_api_key=llm_data.get("anthropic_api_key", ""),
        anthropic_model=llm_data.get("anthropic_model", "claude-3-haiku-20240307"),
        openai_api_key=llm_data.get("openai_api_key", ""),
        openai_model=llm_data.get("openai_model", "gpt-4o-mini"),
        max_tokens=llm_data.get("max_tokens", 1500),
        temperature=llm_data.get("temperature", 0.1),
    )


def _parse_retriever_config(data: dict) -> RetrieverConfig:
    """Parse retriever section from config dict"""
    retriever_data = data.get("retriever", {})
    return RetrieverConfig(
        topk=retriever_data.get("topk", 8),
        min_score=retriever_data.get("min_score", 0.5),
        keyword_limit=retriever_data.get("keyword_limit", 5),
        fused_limit=retriever_data.get("fused_limit", 10),
        fallback_limit=retriever_data.get("fallback_limit", 10),
        sources_topk=retriever_data.get("sources_topk", 5),
        sources_min_score=retriever_data.get("sources_min_score", 0.6),
        expansion_passes=list(retriever_data.get("expansion_passes", ["recall"])),
    )


def load_config() -> CohortConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (a local .env file is loaded first)
    2. Config file (~/.cohort/config.json, or $COHORT_CONFIG)
    3. Default values
    """
    load_dotenv()
    config = CohortConfig()

    env_path = os.getenv("COHORT_CONFIG")
    config_path = Path(env_path).expanduser() if env_path else CONFIG_PATH

    # Load from config file if exists
    if config_path.exists():
        try:
            with open(config_path) as f:
                data = json.load(f)

            config.data = _parse_data_config(data)
            config.vector_store = _parse_vector_store_config(data)
            config.embedding = _parse_embedding_config(data)
            config.llm = _parse_llm_config(data)
            config.retriever = _parse_retriever_config(data)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config file %s: %s", config_path, e)

    # Environment variable overrides
    if os.getenv("COHORT_DATA_PATH"):
        config.data.path = os.getenv("COHORT_DATA_PATH")

    if os.getenv("COHORT_VECTOR_BACKEND"):
        config.vector_store.backend = os.getenv("COHORT_VECTOR_BACKEND")
    if os.getenv("SUPABASE_URL"):
        config.vector_store.supabase_url = os.getenv("SUPABASE_URL")
    if os.getenv("SUPABASE_ANON_KEY"):
        config.vector_store.supabase_key = os.getenv("SUPABASE_ANON_KEY")

    if os.getenv("EMBEDDING_MODE"):
        config.embedding.mode = os.getenv("EMBEDDING_MODE")
    if os.getenv("EMBEDDING_MODEL"):
        config.embedding.model = os.getenv("EMBEDDING_MODEL")

    # The OpenAI key serves both embeddings and the openai completion provider
    if os.getenv("OPENAI_API_KEY"):
        config.embedding.openai_api_key = os.getenv("OPENAI_API_KEY")

    _env_llm_map = {
        "ANTHROPIC_API_KEY": "anthropic_api_key",
        "ANTHROPIC_MODEL": "anthropic_model",
        "OPENAI_API_KEY": "openai_api_key",
        "OPENAI_MODEL": "openai_model",
        "COHORT_LLM_PROVIDER": "provider",
    }
    for env_var, attr in _env_llm_map.items():
        val = os.getenv(env_var)
        if val:
            setattr(config.llm, attr, val)

    return config


def missing_credentials(config: CohortConfig) -> List[str]:
    """List the required credentials absent for the selected backends."""
    missing = []

    if config.vector_store.backend == "supabase":
        if not config.vector_store.supabase_url:
            missing.append("SUPABASE_URL")
        if not config.vector_store.supabase_key:
            missing.append("SUPABASE_ANON_KEY")

    if config.embedding.mode == "openai" and not config.embedding.openai_api_key:
        missing.append("OPENAI_API_KEY")

    if config.llm.provider == "anthropic" and not config.llm.anthropic_api_key:
        missing.append("ANTHROPIC_API_KEY")
    elif config.llm.provider == "openai" and not config.llm.openai_api_key:
        if "OPENAI_API_KEY" not in missing:
            missing.append("OPENAI_API_KEY")

    return missing


def validate_config(config: CohortConfig) -> None:
    """Fail fast when required credentials are absent.

    Raises:
        ConfigurationMissing: naming every missing variable
    """
    missing = missing_credentials(config)
    if missing:
        raise ConfigurationMissing(missing)
