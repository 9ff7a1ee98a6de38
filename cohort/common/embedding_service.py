"""
Embedding Service

Generates embedding vectors for chunks and queries.
Backends:
- openai: OpenAI embeddings API (text-embedding-3-small, 1536 dims)
- femb: on-device embedding generation using fastembed
"""

import asyncio
import logging
from typing import List, Optional

import numpy as np

from .errors import CollaboratorFailure

logger = logging.getLogger("cohort.common.embedding_service")

DEFAULT_OPENAI_MODEL = "text-embedding-3-small"
DEFAULT_FEMB_MODEL = "sentence-transformers/all-MiniLM-L6-v2"


class EmbeddingService:
    """
    Embedding provider for the index builder and the retriever.

    Constructed explicitly and passed to the components that need it.
    A pre-built client may be injected (tests, custom transports).
    """

    def __init__(
        self,
        mode: str = "openai",
        model: str = "",
        api_key: Optional[str] = None,
        max_chars: int = 8000,
        client=None,
    ):
        """
        Initialize embedding service.

        Args:
            mode: "openai" or "femb"
            model: Model name (backend default when empty)
            api_key: OpenAI API key (openai mode)
            max_chars: Input texts are truncated to this many characters
            client: Optional pre-built backend client
        """
        self._mode = (mode or "openai").lower()
        self._model = model or (DEFAULT_OPENAI_MODEL if self._mode == "openai" else DEFAULT_FEMB_MODEL)
        self._max_chars = max_chars
        self._client = client

        if self._client is None:
            self._init_client(api_key)

    def _init_client(self, api_key: Optional[str]) -> None:
        """Initialize the underlying backend client"""
        if self._mode == "openai":
            if not api_key:
                logger.info("OpenAI API key not provided, embedding service unavailable")
                return
            try:
                from openai import OpenAI

                self._client = OpenAI(api_key=api_key)
            except ImportError:
                logger.warning("openai package not installed")
            except Exception as e:
                logger.warning("Failed to initialize OpenAI client: %s", e)
            return

        if self._mode == "femb":
            try:
                from fastembed import TextEmbedding

                self._client = TextEmbedding(model_name=self._model)
            except ImportError:
                logger.warning("fastembed package not installed")
            except Exception as e:
                logger.warning("Failed to initialize fastembed model %s: %s", self._model, e)
            return

        logger.warning("Unsupported embedding mode: %s", self._mode)

    @property
    def is_available(self) -> bool:
        """Check if embedding service is available"""
        return self._client is not None

    @property
    def model(self) -> str:
        return self._model

    def embed(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: List of strings to embed

        Returns:
            List of embedding vectors, in input order

        Raises:
            CollaboratorFailure: if the backend call fails
        """
        if not self._client:
            raise CollaboratorFailure("embeddings", "embedding client not initialized")

        if not texts:
            return []

        inputs = [t[: self._max_chars] for t in texts]

        try:
            if self._mode == "openai":
                response = self._client.embeddings.create(
                    model=self._model,
                    input=inputs,
                    encoding_format="float",
                )
                data = sorted(response.data, key=lambda d: d.index)
                embeddings = [list(d.embedding) for d in data]
            else:
                embeddings = list(self._client.embed(inputs))
        except Exception as e:
            logger.error("Embedding request failed: %s", e)
            raise CollaboratorFailure("embeddings", str(e)) from e

        # Ensure consistent return type
        return [e.tolist() if isinstance(e, np.ndarray) else list(e) for e in embeddings]

    def embed_single(self, text: str) -> List[float]:
        """
        Generate embedding for a single text.

        Args:
            text: String to embed

        Returns:
            Embedding vector
        """
        if not text:
            raise ValueError("Cannot embed empty text")

        return self.embed([text])[0]

    async def embed_batches(
        self,
        texts: List[str],
        batch_size: int = 50,
        batch_delay: float = 1.0,
    ) -> List[List[float]]:
        """
        Embed texts in sequential batches with a fixed delay between them.

        The delay keeps index builds under the provider's rate limits.
        A failing batch raises; vectors from earlier batches are left intact
        and are not returned.
        """
        embeddings: List[List[float]] = []
        total_batches = (len(texts) + batch_size - 1) // batch_size

        for batch_num, start in enumerate(range(0, len(texts), batch_size), 1):
            batch = texts[start:start + batch_size]
            logger.info("Embedding batch %d/%d (%d texts)", batch_num, total_batches, len(batch))

            try:
                embeddings.extend(self.embed(batch))
            except CollaboratorFailure:
                logger.error("Failed to embed batch %d/%d", batch_num, total_batches)
                raise

            if start + batch_size < len(texts) and batch_delay > 0:
                await asyncio.sleep(batch_delay)

        return embeddings

    def test_connection(self) -> bool:
        """Check that the backend answers a trivial request"""
        try:
            self.embed_single("test")
            return True
        except Exception as e:
            logger.warning("Embedding connection test failed: %s", e)
            return False


def cosine_similarity(vec1: List[float], vec2: List[float]) -> float:
    """
    Compute cosine similarity between two vectors.

    Returns:
        Cosine similarity score (-1.0 to 1.0); 0.0 for zero vectors
    """
    v1 = np.asarray(vec1, dtype=float)
    v2 = np.asarray(vec2, dtype=float)

    if v1.shape != v2.shape:
        raise ValueError(f"Vector dimension mismatch: {v1.shape} vs {v2.shape}")

    norm = np.linalg.norm(v1) * np.linalg.norm(v2)
    if norm == 0:
        return 0.0
    return float(np.dot(v1, v2) / norm)


def batch_cosine_similarity(query_vec: List[float], matrix: np.ndarray) -> np.ndarray:
    """
    Compute cosine similarity between a query and each row of a matrix.

    Rows (or a query) with zero norm score 0.0.
    """
    if matrix.size == 0:
        return np.zeros(0)

    query = np.asarray(query_vec, dtype=float)
    row_norms = np.linalg.norm(matrix, axis=1)
    query_norm = np.linalg.norm(query)
    denom = row_norms * query_norm

    dots = matrix @ query
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(denom > 0, dots / denom, 0.0)
    return scores
