"""
Context Assembler

Renders retrieval results into the bounded text context handed to the
completion call. Aggregation queries get a statistics block derived from
the Record Store, independent of which results were retrieved.
"""

from typing import TYPE_CHECKING, Dict, List

from ..common.schemas import StudentRecord
from ..ingest.record_store import RecordStore
from .query_processor import QueryProcessor

if TYPE_CHECKING:
    from .searcher import SearchResult


NO_DATA_CONTEXT = "No relevant data found for this query."
CONTEXT_HEADER = "RELEVANT DATA:\n\n"
FALLBACK_HEADER = "RELEVANT DATA (from keyword search):\n\n"
STATS_HEADER = "\nAGGREGATED STATISTICS:\n"


class ContextAssembler:
    """Builds context strings from search results and roster statistics"""

    def __init__(self, store: RecordStore):
        self._store = store

    def assemble(self, results: List["SearchResult"], query: str) -> str:
        """
        Numbered result blocks under a fixed header, plus statistics for
        aggregation queries.

        The statistics block is appended even when the results already
        carry per-program counts.
        """
        wants_stats = QueryProcessor.is_aggregation_query(query)

        if not results:
            context = NO_DATA_CONTEXT
            if wants_stats:
                context += "\n" + self.aggregated_stats()
            return context

        parts = [CONTEXT_HEADER]
        for index, result in enumerate(results, 1):
            parts.append(f"[{index}] {result.content}\n\n")

        if wants_stats:
            parts.append(self.aggregated_stats())

        return "".join(parts)

    def assemble_fallback(self, records: List[StudentRecord]) -> str:
        """One line per record; never empty"""
        if not records:
            return NO_DATA_CONTEXT

        lines = [FALLBACK_HEADER]
        for index, record in enumerate(records, 1):
            program = record.program_name or record.program
            lines.append(
                f"[{index}] Student: {record.student_name}, "
                f"School: {record.school_name}, Program: {program}\n"
            )
        return "".join(lines)

    def year_totals(self) -> Dict[str, int]:
        """Students per year, keyed in order of first appearance"""
        totals: Dict[str, int] = {}
        for summary in self._store.summaries():
            totals[summary.year] = totals.get(summary.year, 0) + summary.total_students
        return totals

    def aggregated_stats(self) -> str:
        """Grand total and per-year breakdown across all programs"""
        lines = [
            STATS_HEADER,
            f"Total students across all programs: {self._store.total_students()}\n",
            "Students by year:\n",
        ]
        for year, count in self.year_totals().items():
            lines.append(f"  {year}: {count} students\n")
        return "".join(lines)
