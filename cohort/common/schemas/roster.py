"""
Roster Schemas

StudentRecord: one person's participation in one program instance.
ProgramSummary: aggregates derived from a program's records.
Chunk: a unit of retrievable text with metadata tags.

Absent values are empty strings, never None, so rendering can
concatenate fields without guards.
"""

import re
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Header mapping
# ============================================================================

# Raw header (case-folded, whitespace -> "_") to schema field.
# Headers that already equal a field name map to themselves.
HEADER_ALIASES: Dict[str, str] = {
    "name": "student_name",
    "student": "student_name",
    "age": "student_age",
    "gender": "student_gender",
    "school": "school_name",
    "grade": "grade_level",
    "category": "student_category",
    "program": "program_name",
    "track": "track_chosen",
    "courses": "courses_selected",
    "ta": "teaching_assistant",
    "ta_name": "teaching_assistant",
    "rc": "rc_name",
    "residential_counselor": "rc_name",
    "t-shirt_size": "tshirt_size",
    "t_shirt_size": "tshirt_size",
    "food_preference": "food_preferences",
    "convocation": "convocation_attending",
}


def normalize_header(header: str) -> str:
    """Case-fold a header cell and replace whitespace runs with underscores."""
    return re.sub(r"\s+", "_", header.strip().lower())


def field_for_header(header: str) -> Optional[str]:
    """Resolve a raw header cell to a StudentRecord field, or None if unknown."""
    key = normalize_header(header)
    key = HEADER_ALIASES.get(key, key)
    if key in StudentRecord.model_fields and key != "program":
        return key
    return None


# ============================================================================
# Models
# ============================================================================

class StudentRecord(BaseModel):
    """A single roster row. Immutable once parsed."""
    model_config = ConfigDict(frozen=True)

    # Section (source file) the row was parsed from
    program: str = ""

    student_name: str = Field(..., min_length=1)
    student_id: str = ""
    student_age: str = ""
    student_gender: str = ""
    school_name: str = ""
    city: str = ""
    grade_level: str = ""
    student_category: str = ""
    program_name: str = ""
    track_chosen: str = ""
    courses_selected: str = ""
    course_1: str = ""
    instructor_1: str = ""
    course_2: str = ""
    instructor_2: str = ""
    course_3: str = ""
    instructor_3: str = ""
    teaching_assistant: str = ""
    weeks_attending: str = ""
    parent_name: str = ""
    parent_phone_primary: str = ""
    parent_email: str = ""
    rc_name: str = ""
    tshirt_size: str = ""
    food_preferences: str = ""
    convocation_attending: str = ""
    additional_details: str = ""
    camp_session_id: str = ""

    @property
    def courses(self) -> List[str]:
        return [self.course_1, self.course_2, self.course_3]

    @property
    def instructors(self) -> List[str]:
        return [self.instructor_1, self.instructor_2, self.instructor_3]


class ProgramSummary(BaseModel):
    """
    Aggregates for one program, always recomputed from its records.

    Invariants: total_students equals the number of contributing records;
    every list holds unique, non-empty strings.
    """
    model_config = ConfigDict(frozen=True)

    program: str
    year: str
    month: str
    total_students: int = 0
    tracks: List[str] = Field(default_factory=list)
    courses: List[str] = Field(default_factory=list)
    instructors: List[str] = Field(default_factory=list)
    teaching_assistants: List[str] = Field(default_factory=list)
    schools: List[str] = Field(default_factory=list)
    cities: List[str] = Field(default_factory=list)
    rcs: List[str] = Field(default_factory=list)


class ChunkMetadata(BaseModel):
    """Metadata tags stored alongside a chunk in the vector store"""
    type: Literal["program", "student"]
    program: str
    year: Optional[str] = None
    month: Optional[str] = None
    student_name: Optional[str] = None
    school_name: Optional[str] = None
    normalized_school_name: Optional[str] = None

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)


class Chunk(BaseModel):
    """Retrievable text unit. Regenerated in full on every index build."""
    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    metadata: ChunkMetadata


def program_chunk_id(program: str) -> str:
    return f"program_{program}"


def student_chunk_id(program: str, row_index: int) -> str:
    return f"student_{program}_{row_index}"
