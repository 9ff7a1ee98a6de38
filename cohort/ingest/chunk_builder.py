"""
Chunk Builder

Turns the Record Store into retrievable chunks: one per ProgramSummary
and one per StudentRecord. Rendering is pure; the full chunk set is
regenerated on every index build.
"""

from typing import List

from ..common.schemas import (
    Chunk,
    ChunkMetadata,
    ProgramSummary,
    StudentRecord,
    program_chunk_id,
    render_program_text,
    render_student_text,
    student_chunk_id,
)
from ..common.terminology import normalize_school_name
from .record_store import RecordStore


def build_program_chunk(summary: ProgramSummary) -> Chunk:
    """Chunk for one program summary"""
    return Chunk(
        id=program_chunk_id(summary.program),
        content=render_program_text(summary),
        metadata=ChunkMetadata(
            type="program",
            program=summary.program,
            year=summary.year,
            month=summary.month,
        ),
    )


def build_student_chunk(record: StudentRecord, program: str, row_index: int) -> Chunk:
    """Chunk for one student record; row_index is the record's position within its program"""
    return Chunk(
        id=student_chunk_id(program, row_index),
        content=render_student_text(record, program),
        metadata=ChunkMetadata(
            type="student",
            program=program,
            student_name=record.student_name,
            school_name=record.school_name,
            normalized_school_name=normalize_school_name(record.school_name),
        ),
    )


class ChunkBuilder:
    """Builds the complete chunk set from a RecordStore"""

    def __init__(self, store: RecordStore):
        self._store = store

    def program_chunks(self) -> List[Chunk]:
        return [build_program_chunk(s) for s in self._store.summaries()]

    def student_chunks(self) -> List[Chunk]:
        chunks = []
        for program, records in self._store.items():
            for index, record in enumerate(records):
                chunks.append(build_student_chunk(record, program, index))
        return chunks

    def build(self) -> List[Chunk]:
        """Program chunks first, then student chunks, in corpus order"""
        return self.program_chunks() + self.student_chunks()
