"""
Error taxonomy for the assistant.

Malformed sections and rows are not errors: the Record Store drops them.
"""

from typing import List, Optional


class CohortError(Exception):
    """Base class for assistant errors."""
    pass


class CollaboratorFailure(CohortError):
    """An external collaborator (embeddings, vector store, LLM) call failed."""

    def __init__(self, collaborator: str, message: str):
        super().__init__(f"{collaborator}: {message}")
        self.collaborator = collaborator


class RetrievalFailure(CohortError):
    """No context could be produced for a query, not even by the fallback path."""
    pass


class ConfigurationMissing(CohortError):
    """Required credentials are absent."""

    def __init__(self, missing: List[str], message: Optional[str] = None):
        self.missing = list(missing)
        super().__init__(
            message or f"Missing required configuration: {', '.join(self.missing)}"
        )
