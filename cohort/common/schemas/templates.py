"""
Chunk Text Templates

Renders ProgramSummary and StudentRecord to fixed-field-order text for
embedding and for keyword-path context.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .roster import ProgramSummary, StudentRecord


# Counselors are listed under both labels so either phrasing embeds close by.
PROGRAM_CHUNK_TEMPLATE = """Program: {program}
Year: {year}
Month: {month}
Total Students: {total_students}
Tracks: {tracks}
Courses: {courses}
Instructors: {instructors}
Teaching Assistants: {teaching_assistants}
Schools: {schools}
Cities: {cities}
RCs (Residential Counselors): {rcs}
Residential Counselors: {rcs}"""


STUDENT_CHUNK_TEMPLATE = """Program: {program}
Student: {student_name}
Age: {student_age}
Gender: {student_gender}
School: {school_name}
City: {city}
Grade: {grade_level}
Category: {student_category}
Track: {track_chosen}
Course 1: {course_1} (Instructor: {instructor_1})
Course 2: {course_2} (Instructor: {instructor_2})
Course 3: {course_3} (Instructor: {instructor_3})
Teaching Assistant: {teaching_assistant}
Parent: {parent_name}
RC (Residential Counselor): {rc_name}
Residential Counselor: {rc_name}
T-shirt Size: {tshirt_size}
Food Preferences: {food_preferences}
Convocation: {convocation_attending}"""


# Compact form used by the keyword path when a year is mentioned
SUMMARY_TEMPLATE = """Program: {program}
Year: {year}, Month: {month}
Total Students: {total_students}
Tracks: {tracks}
Courses: {courses}
Instructors: {instructors}
RCs: {rcs}
Schools: {schools}"""


def _join(values: list) -> str:
    return ", ".join(values)


def _summary_fields(summary: "ProgramSummary") -> dict:
    return {
        "program": summary.program,
        "year": summary.year,
        "month": summary.month,
        "total_students": summary.total_students,
        "tracks": _join(summary.tracks),
        "courses": _join(summary.courses),
        "instructors": _join(summary.instructors),
        "teaching_assistants": _join(summary.teaching_assistants),
        "schools": _join(summary.schools),
        "cities": _join(summary.cities),
        "rcs": _join(summary.rcs),
    }


def render_program_text(summary: "ProgramSummary") -> str:
    """Render a program summary chunk"""
    return PROGRAM_CHUNK_TEMPLATE.format(**_summary_fields(summary))


def render_student_text(record: "StudentRecord", program: str) -> str:
    """Render a student chunk covering every modeled field"""
    fields = record.model_dump()
    fields["program"] = program
    return STUDENT_CHUNK_TEMPLATE.format(**fields)


def render_summary_text(summary: "ProgramSummary") -> str:
    """Render the compact summary used in keyword results"""
    return SUMMARY_TEMPLATE.format(**_summary_fields(summary))


def render_count_line(summary: "ProgramSummary") -> str:
    """One-line count for aggregation queries"""
    return f"Program {summary.program}: {summary.total_students} students"
