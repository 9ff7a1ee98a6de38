"""
Query Processor

Parses user queries for the hybrid retriever: detects aggregation cues
and year tokens on the original text, and produces the expanded text
used for the semantic (embedding) path.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..common.terminology import (
    TerminologyExpander,
    compose_expansions,
    default_recall_table,
    default_terminology_table,
)


@dataclass
class ParsedQuery:
    """Parsed representation of a user query"""
    original: str
    cleaned: str
    semantic_text: str
    is_aggregation: bool = False
    year: Optional[str] = None
    matched_terms: List[str] = field(default_factory=list)


class QueryProcessor:
    """
    Processes user queries for roster search.

    Responsibilities:
    1. Clean and normalize query text
    2. Detect aggregation cues ("total", "how many")
    3. Detect a year token ("20xx")
    4. Run the configured expansion passes for the semantic path
    """

    AGGREGATION_CUES = ("total", "how many")
    YEAR_PATTERN = re.compile(r"20\d{2}")

    # Names accepted in RetrieverConfig.expansion_passes
    PASS_NAMES = ("recall", "terminology")

    def __init__(self, expanders: Optional[Sequence[TerminologyExpander]] = None):
        """Initialize query processor.

        Args:
            expanders: Expansion passes applied in order; defaults to the
                embedding-recall table only
        """
        if expanders is None:
            expanders = [TerminologyExpander(default_recall_table())]
        self._expanders = list(expanders)

    @classmethod
    def from_pass_names(
        cls,
        names: Sequence[str],
        terminology: Optional[TerminologyExpander] = None,
        recall: Optional[TerminologyExpander] = None,
    ) -> "QueryProcessor":
        """Build a processor from configured pass names ("recall", "terminology")."""
        available = {
            "recall": recall or TerminologyExpander(default_recall_table()),
            "terminology": terminology or TerminologyExpander(default_terminology_table()),
        }
        expanders = []
        for name in names:
            if name not in available:
                raise ValueError(f"Unknown expansion pass: {name}")
            expanders.append(available[name])
        return cls(expanders)

    @property
    def expanders(self) -> List[TerminologyExpander]:
        return list(self._expanders)

    def parse(self, query: str) -> ParsedQuery:
        """
        Parse a user query into structured form.

        Args:
            query: Raw user query string

        Returns:
            ParsedQuery; cue and year detection use the unexpanded text
        """
        cleaned = self._clean_query(query)

        matched = []
        for expander in self._expanders:
            for key in expander.matched_keys(cleaned):
                if key not in matched:
                    matched.append(key)

        return ParsedQuery(
            original=query,
            cleaned=cleaned,
            semantic_text=compose_expansions(cleaned, self._expanders),
            is_aggregation=self.is_aggregation_query(query),
            year=self.extract_year(query),
            matched_terms=matched,
        )

    @classmethod
    def is_aggregation_query(cls, query: str) -> bool:
        query_lower = query.lower()
        return any(cue in query_lower for cue in cls.AGGREGATION_CUES)

    @classmethod
    def extract_year(cls, query: str) -> Optional[str]:
        match = cls.YEAR_PATTERN.search(query)
        return match.group(0) if match else None

    def _clean_query(self, query: str) -> str:
        """Lowercase and collapse whitespace"""
        return re.sub(r"\s+", " ", query.lower().strip())
