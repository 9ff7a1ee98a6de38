"""
Ingest - Roster Parsing and Indexing

Key Components:
- RecordStore: Parses the raw corpus into records and program summaries
- ChunkBuilder: Renders summaries and records into retrievable chunks
- Indexer: Embeds chunks and (re)builds the vector index

Construction order: RecordStore -> ChunkBuilder -> Indexer.
"""

from .record_store import RecordStore, parse_csv_line, extract_sections, build_summary
from .chunk_builder import ChunkBuilder
from .indexer import Indexer

__all__ = [
    "RecordStore",
    "parse_csv_line",
    "extract_sections",
    "build_summary",
    "ChunkBuilder",
    "Indexer",
]
