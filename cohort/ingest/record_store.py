"""
Record Store

Parses the raw roster corpus into StudentRecords grouped by program and
derives one ProgramSummary per program.

Corpus format: repeated blocks of

    --- START OF FILE: <program file name> ---
    header,row,...
    value,value,...
    --- END OF FILE: <program file name> ---

Sections without an end marker or with a blank name are skipped. Rows
without a student name are dropped; short rows get empty trailing fields.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from ..common.schemas import ProgramSummary, StudentRecord, field_for_header

logger = logging.getLogger("cohort.ingest.record_store")

SECTION_START_PREFIX = "--- START OF FILE:"
SECTION_END_PREFIX = "--- END OF FILE:"
_SECTION_NAME_RE = re.compile(r"START OF FILE: (.+) ---")

_YEAR_RE = re.compile(r"20\d{2}")
_MONTH_RE = re.compile(
    r"(january|february|march|april|may|june|july|august|september|october|november|december)",
    re.IGNORECASE,
)

DEFAULT_YEAR = "2025"
DEFAULT_MONTH = "may"

# Fields matched by free-text record search (any one match qualifies)
SEARCH_FIELDS = (
    "student_name",
    "school_name",
    "city",
    "track_chosen",
    "course_1",
    "instructor_1",
    "rc_name",
)


def extract_year(program: str) -> str:
    """First four-digit token starting with "20", or empty"""
    match = _YEAR_RE.search(program)
    return match.group(0) if match else ""


def extract_month(program: str) -> str:
    """First month name (lowercased), or empty"""
    match = _MONTH_RE.search(program)
    return match.group(1).lower() if match else ""


def parse_csv_line(line: str) -> List[str]:
    """
    Split one CSV row.

    A double quote toggles the in-quotes state and is dropped; a comma
    separates fields only outside quotes. Fields are whitespace-trimmed.
    """
    result = []
    current = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            result.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    result.append("".join(current).strip())
    return result


def extract_sections(raw_text: str) -> List[Tuple[str, List[str]]]:
    """
    Split the corpus into (program, non-blank lines) sections.

    A repeated program name replaces the earlier section in place.
    """
    sections: Dict[str, List[str]] = {}

    current_file = ""
    current_content: List[str] = []
    in_section = False

    for line in raw_text.splitlines():
        if line.startswith(SECTION_START_PREFIX):
            match = _SECTION_NAME_RE.search(line)
            current_file = match.group(1).strip() if match else ""
            current_content = []
            in_section = True
        elif line.startswith(SECTION_END_PREFIX):
            if in_section and current_file and current_content:
                sections[current_file] = current_content
            elif in_section:
                logger.debug("Skipping empty or unnamed section %r", current_file)
            in_section = False
            current_file = ""
            current_content = []
        elif in_section and line.strip():
            current_content.append(line)

    if in_section:
        logger.debug("Skipping unterminated section %r", current_file)

    return list(sections.items())


def parse_section(lines: List[str], program: str) -> List[StudentRecord]:
    """
    Parse one section's lines into records.

    The first line is the header; unknown headers are ignored.
    """
    if len(lines) < 2:
        return []

    headers = parse_csv_line(lines[0])
    columns: List[Tuple[int, str]] = []
    for index, header in enumerate(headers):
        field = field_for_header(header)
        if field:
            columns.append((index, field))

    records = []
    for line_num, line in enumerate(lines[1:], 2):
        values = parse_csv_line(line)
        fields = {"program": program}
        for index, field in columns:
            fields[field] = values[index] if index < len(values) else ""

        name = fields.get("student_name", "").strip()
        if not name:
            logger.debug("%s line %d: no student name, row dropped", program, line_num)
            continue
        fields["student_name"] = name

        records.append(StudentRecord(**fields))

    return records


def _unique(values: Iterable[str]) -> List[str]:
    """Distinct non-empty values in first-seen order"""
    return list(dict.fromkeys(v for v in values if v))


def build_summary(program: str, records: List[StudentRecord]) -> ProgramSummary:
    """Derive a ProgramSummary from a program's records"""
    return ProgramSummary(
        program=program,
        year=extract_year(program) or DEFAULT_YEAR,
        month=extract_month(program) or DEFAULT_MONTH,
        total_students=len(records),
        tracks=_unique(r.track_chosen for r in records),
        courses=_unique(c for r in records for c in r.courses),
        instructors=_unique(i for r in records for i in r.instructors),
        teaching_assistants=_unique(r.teaching_assistant for r in records),
        schools=_unique(r.school_name for r in records),
        cities=_unique(r.city for r in records),
        rcs=_unique(r.rc_name for r in records),
    )


class RecordStore:
    """
    In-memory roster, read-only after construction.

    Records are grouped by program (section file name) in corpus order.
    """

    def __init__(self, programs: Dict[str, List[StudentRecord]]):
        self._records: Dict[str, List[StudentRecord]] = {
            program: list(records) for program, records in programs.items()
        }
        self._summaries: Dict[str, ProgramSummary] = {
            program: build_summary(program, records)
            for program, records in self._records.items()
        }

    @classmethod
    def from_text(cls, raw_text: str) -> "RecordStore":
        """Parse a raw corpus string"""
        programs: Dict[str, List[StudentRecord]] = {}
        for program, lines in extract_sections(raw_text):
            programs[program] = parse_section(lines, program)

        store = cls(programs)
        logger.info(
            "Parsed %d programs, %d student records",
            len(store.programs()), store.total_students(),
        )
        return store

    @classmethod
    def from_file(cls, path: str) -> "RecordStore":
        """Load and parse a corpus file"""
        text = Path(path).expanduser().read_text(encoding="utf-8")
        return cls.from_text(text)

    def programs(self) -> List[str]:
        return list(self._records.keys())

    def all_records(self) -> List[StudentRecord]:
        return [r for records in self._records.values() for r in records]

    def records_for(self, program: str) -> List[StudentRecord]:
        return list(self._records.get(program, []))

    def items(self) -> List[Tuple[str, List[StudentRecord]]]:
        """(program, records) pairs in corpus order"""
        return [(program, list(records)) for program, records in self._records.items()]

    def summary(self, program: str) -> Optional[ProgramSummary]:
        return self._summaries.get(program)

    def summaries(self) -> List[ProgramSummary]:
        return list(self._summaries.values())

    def total_students(self) -> int:
        return sum(s.total_students for s in self._summaries.values())

    def search(self, query: str) -> List[StudentRecord]:
        """Case-insensitive substring match on any of SEARCH_FIELDS"""
        needle = query.lower()
        return [
            record for record in self.all_records()
            if any(needle in getattr(record, f).lower() for f in SEARCH_FIELDS)
        ]
