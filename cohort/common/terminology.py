"""
Terminology Expansion

Domain-specific terms, abbreviations and variations used across programs.
Queries are expanded by appending the expansion text of every key found in
the case-folded query. Expansion is additive: the original query is always
kept verbatim as the prefix, and overlapping keys each fire independently.

Two tables are maintained separately:
- TERMINOLOGY_GROUPS: five term groups for terminology normalization
  (staff roles, schools, programs, categories, locations)
- RECALL_TERMS: a narrower table tuned for embedding recall, applied
  right before the query is embedded

MAPPING STRATEGY (schools):
1. Focus on unique identifiers (school names, not generic terms)
2. Group schools by network (JNV, VIBGYOR, etc.)
3. Handle common abbreviations (PSBB, AVM, DPS)
4. Include location variations for multi-branch schools
5. Account for misspellings and case variations
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Tuple


# Staff and Role Abbreviations
STAFF_ROLE_TERMS: Dict[str, str] = {
    "rc": "RC Residential Counselor residential counselor",
    "rcs": "RCs Residential Counselors residential counselors",
    "residential counselor": "RC Residential Counselor residential counselor",
    "residential counselors": "RCs Residential Counselors residential counselors",
    "ta": "TA Teaching Assistant teaching assistant",
    "tas": "TAs Teaching Assistants teaching assistants",
    "teaching assistant": "TA Teaching Assistant teaching assistant",
    "teaching assistants": "TAs Teaching Assistants teaching assistants",
}

# School Name Variations and Abbreviations, grouped by network
SCHOOL_NAME_TERMS: Dict[str, str] = {
    # JNV Network - Jawahar Navodaya Vidyalaya
    "jnv": "JNV Jawahar Navodaya Vidyalaya JNV Chandrapur JNV Mandya JNV Udupi JNV Bengaluru Urban JNV South Canara JNV - Jawahar Navodaya Vidyalaya JNV - Mandya JNV - Udupi JNV - Pm Shri Jawahar Navodaya Vidyalaya Chandrapur",
    "navodaya": "Jawahar Navodaya Vidyalaya JNV JNV Chandrapur JNV Mandya JNV Udupi JNV Bengaluru Urban JNV South Canara",
    "jawahar navodaya": "Jawahar Navodaya Vidyalaya JNV JNV - Jawahar Navodaya Vidyalaya JNV - Pm Shri Jawahar Navodaya Vidyalaya Chandrapur",

    # VIBGYOR Network
    "vibgyor": "VIBGYOR High School VIBGYOR Rise VIBGYOR With GOLDEN BEE Vibgyor High Vibgyor High School VIBGYOR Horamavu Mumbai Vibgyor High",

    # Sri Kumaran Network
    "sri kumaran": "Sri Kumaran Public School ICSE Sri Kumaran Children Home CBSE Sri Kumarans Children Home Educational Counsil",
    "kumarans": "Sri Kumarans Children Home Educational Counsil Sri Kumaran Public School ICSE Sri Kumaran Children Home CBSE",
    "sri kumarans": "Sri Kumarans Children Home Educational Counsil Sri Kumaran",

    # TVS Network
    "tvs": "TVS ACADEMY TVS Academy",
    "tvs academy": "TVS Academy TVS ACADEMY",

    # SNS Network
    "sns": "SNS Noida SNS Faridabad",

    # Padma Seshadri (PSBB)
    "psbb": "Padma Seshadri Bala Bhavan Senior Secondary School PSBB",
    "padma seshadri": "Padma Seshadri Bala Bhavan Senior Secondary School PSBB",
    "bala bhavan": "Padma Seshadri Bala Bhavan Senior Secondary School",

    # Greenwood Network
    "greenwood": "Greenwood High International School Greenwood High Bannerghatta",

    # HDFC School Network
    "hdfc school": "The HDFC School",

    # Delhi Public School Network (DPS)
    "dps": "DPS Delhi Public School Delhi Public School International Delhi Public School Nacharam",
    "delhi public": "Delhi Public School DPS Delhi Public School International Delhi Public School Nacharam",

    # Arya Vidya Mandir Network (AVM)
    "arya vidya mandir": "Arya Vidya Mandir Bandra West Smt. Ramdevi Sobhraj Bajaj Arya Vidya Mandir",
    "avm": "Arya Vidya Mandir AVM Bandra West",

    # Shri Ram Network
    "shri ram": "The Shri Ram School The Shishukunj International School",
    "sri ram": "The Shri Ram School",

    # Single schools
    "inventure": "Inventure Academy",
    "fravashi": "Fravashi International Academy",
    "akshar arbol": "Akshar Arbol International School",
    "manthan": "Manthan School",
    "vidya valley": "Vidya Valley",
    "vidyagyan": "VidyaGyan",
    "sanskriti": "Sanskriti The Gurukul",
    "orchids": "ORCHIDS The International School Orchids The International School",
    "euroschool": "EuroSchool Whitefield",
    "deens academy": "Deens Academy -Whitefield",
    "presidency school": "Presidency School",
    "symbiosis": "Symbiosis",
    "zydus": "Zydus School for Excellence",
    "gaudium": "The Gaudium School",
    "samhita": "The Samhita Academy",
    "heritage school": "The Heritage School Heritage Xperiential Learning School",
    "aurinko": "Aurinko Academy",

    # Misspellings
    "kumaraan": "Sri Kumaran Sri Kumarans",
    "counsil": "Council Educational Counsil",
    "bandra west": "Bandra West",
}

# Program and Track Terminology
PROGRAM_TERMS: Dict[str, str] = {
    "gsp": "GSP GenWise Summer Program summer program",
    "genwise summer program": "GSP GenWise Summer Program summer program",
    "summer program": "GSP GenWise Summer Program summer program",
    "explorers": "Explorers Track explorer",
    "wizards": "Wizards Track wizard",
    "ats": "ATS Aptitude Test Score aptitude test",
    "aptitude test": "ATS Aptitude Test Score aptitude test",
}

# Student Categories and Scholarship Terms
CATEGORY_TERMS: Dict[str, str] = {
    "full scholarship": "Full Gold Scholarship sponsored student full scholarship",
    "partial scholarship": "Partial Gold Scholarship partial scholarship",
    "sponsored": "sponsored student Full Gold Scholarship Partial Gold Scholarship scholarship",
    "gold scholarship": "Gold Scholarship Full Gold Scholarship Partial Gold Scholarship",
    "returning": "Returning Student returning student repeat student",
    "ats student": "ATS Student ATS 2024 aptitude test student",
}

# City and Location Variations
LOCATION_TERMS: Dict[str, str] = {
    "bangalore": "Bangalore Bengaluru Karnataka",
    "bengaluru": "Bangalore Bengaluru Karnataka",
    "ahmedabad": "Ahmedabad Gujarat",
    "mumbai": "Mumbai Maharashtra Bombay",
    "delhi": "Delhi New Delhi NCR",
    "chennai": "Chennai Tamil Nadu Madras",
    "hyderabad": "Hyderabad Telangana",
    "pune": "Pune Maharashtra",
    "kolkata": "Kolkata West Bengal Calcutta",
}

TERMINOLOGY_GROUPS: Dict[str, Dict[str, str]] = {
    "staff": STAFF_ROLE_TERMS,
    "school": SCHOOL_NAME_TERMS,
    "program": PROGRAM_TERMS,
    "category": CATEGORY_TERMS,
    "location": LOCATION_TERMS,
}

# Embedding-recall table. Counselor wording here is "regional coordinator",
# unlike STAFF_ROLE_TERMS; the two are kept apart on purpose.
RECALL_TERMS: Dict[str, str] = {
    "rc": "RC Regional Coordinator regional coordinator",
    "rcs": "RCs Regional Coordinators regional coordinators",
    "regional coordinator": "RC Regional Coordinator regional coordinator",
    "regional coordinators": "RCs Regional Coordinators regional coordinators",
    "ta": "TA Teaching Assistant teaching assistant",
    "tas": "TAs Teaching Assistants teaching assistants",
    "teaching assistant": "TA Teaching Assistant teaching assistant",
    "tvs": "TVS Academy TVS School TVS Hosur TVS Tumkur",
    "kumarans": "Sri Kumaran Kumarans Kumar Children Public School",
    "dps": "Delhi Public School DPS",
    "jnv": "Jawahar Navodaya Vidyalaya Navodaya",
    "gems": "GEMS Modern Academy GEMS Genesis GEMS Our Own",
    "vibgyor": "VIBGYOR High School VIBGYOR Rise",
    "greenwood": "Greenwood High International School",
    "inventure": "Inventure Academy",
}

# Network key -> name fragments identifying a school of that network
SCHOOL_VARIATIONS: Dict[str, List[str]] = {
    "tvs": ["tvs academy", "tvs school", "tvs hosur", "tvs tumkur", "tvs tiruanamalai"],
    "kumarans": ["sri kumaran", "kumarans", "sri kumarans", "kumaran children", "kumaran public"],
    "greenwood": ["greenwood high", "greenwood international", "greenwood bannerghatta"],
    "vibgyor": ["vibgyor high", "vibgyor school", "vibgyor rise"],
    "inventure": ["inventure academy"],
    "gems": ["gems modern", "gems genesis", "gems our own", "gems new millennium"],
    "dps": ["delhi public school", "dps dubai", "dps saket"],
    "jnv": ["jawahar navodaya vidyalaya", "navodaya vidyalaya"],
}


def normalize_school_name(school_name: str) -> str:
    """Map a school name to its network key, or return it unchanged."""
    if not school_name:
        return ""

    normalized = school_name.lower().strip()
    for key, variations in SCHOOL_VARIATIONS.items():
        if any(variation in normalized for variation in variations):
            return key

    return school_name


@dataclass(frozen=True)
class TerminologyTable:
    """
    Versioned, immutable set of term groups.

    Registering a term produces a new table with version + 1; existing
    tables (and expanders built on them) are unaffected.
    """
    groups: Mapping[str, Mapping[str, str]]
    version: int = 1
    combined: Tuple[Tuple[str, str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        frozen_groups = {name: dict(terms) for name, terms in self.groups.items()}
        object.__setattr__(self, "groups", frozen_groups)

        # Later groups override duplicate keys, earlier position is kept
        merged: Dict[str, str] = {}
        for terms in frozen_groups.values():
            merged.update(terms)
        object.__setattr__(self, "combined", tuple(merged.items()))

    def with_term(self, group: str, key: str, expansion: str) -> "TerminologyTable":
        """Return a new table with key -> expansion registered under group."""
        key = key.strip().lower()
        if not key:
            raise ValueError("Terminology key cannot be empty")

        groups = {name: dict(terms) for name, terms in self.groups.items()}
        groups.setdefault(group, {})[key] = expansion
        return TerminologyTable(groups=groups, version=self.version + 1)

    def __len__(self) -> int:
        return len(self.combined)


def default_terminology_table() -> TerminologyTable:
    """The five domain term groups"""
    return TerminologyTable(groups=TERMINOLOGY_GROUPS)


def default_recall_table() -> TerminologyTable:
    """The embedding-recall table"""
    return TerminologyTable(groups={"recall": RECALL_TERMS})


class TerminologyExpander:
    """
    Stateless query expansion over a TerminologyTable.

    For every key contained in the case-folded query, the key's expansion
    is appended (space-separated). Nothing is removed or reordered.
    """

    def __init__(self, table: TerminologyTable):
        self._table = table

    @property
    def table(self) -> TerminologyTable:
        return self._table

    @property
    def version(self) -> int:
        return self._table.version

    def matched_keys(self, query: str) -> List[str]:
        """Keys whose text occurs in the case-folded query"""
        folded = query.lower()
        return [key for key, _ in self._table.combined if key in folded]

    def expand(self, query: str) -> str:
        """Expand query with every matching term group entry."""
        folded = query.lower()
        expansions = [
            expansion for key, expansion in self._table.combined
            if key in folded
        ]
        if not expansions:
            return query
        return " ".join([query] + expansions)

    def with_mapping(self, group: str, key: str, expansion: str) -> "TerminologyExpander":
        """Build a new expander with an extra key -> expansion pair."""
        return TerminologyExpander(self._table.with_term(group, key, expansion))


def compose_expansions(query: str, expanders: Iterable[TerminologyExpander]) -> str:
    """Apply expansion passes in order; each pass sees the previous output."""
    expanded = query
    for expander in expanders:
        expanded = expander.expand(expanded)
    return expanded
