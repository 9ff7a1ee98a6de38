"""
Cohort Roster Schemas

Typed records, derived summaries and retrievable chunks.
"""

from .roster import (
    StudentRecord,
    ProgramSummary,
    Chunk,
    ChunkMetadata,
    HEADER_ALIASES,
    normalize_header,
    field_for_header,
    program_chunk_id,
    student_chunk_id,
)
from .templates import (
    render_program_text,
    render_student_text,
    render_summary_text,
    render_count_line,
)

__all__ = [
    "StudentRecord",
    "ProgramSummary",
    "Chunk",
    "ChunkMetadata",
    "HEADER_ALIASES",
    "normalize_header",
    "field_for_header",
    "program_chunk_id",
    "student_chunk_id",
    "render_program_text",
    "render_student_text",
    "render_summary_text",
    "render_count_line",
]
