"""Tests for terminology expansion and school-name normalization."""

import pytest

from cohort.common.terminology import (
    TerminologyExpander,
    TerminologyTable,
    compose_expansions,
    default_recall_table,
    default_terminology_table,
    normalize_school_name,
)


class TestTerminologyExpander:
    @pytest.fixture
    def recall(self):
        return TerminologyExpander(default_recall_table())

    @pytest.fixture
    def terminology(self):
        return TerminologyExpander(default_terminology_table())

    @pytest.mark.parametrize("query", [
        "Who were the RCs in 2025?",
        "list every student",
        "",
        "TVS students from Hosur",
    ])
    def test_original_query_is_prefix(self, recall, terminology, query):
        assert recall.expand(query).startswith(query)
        assert terminology.expand(query).startswith(query)

    def test_no_match_returns_query_unchanged(self):
        expander = TerminologyExpander(TerminologyTable(groups={"g": {"zebra": "Zebra Stripes"}}))

        assert expander.expand("Which students attended?") == "Which students attended?"

    def test_recall_table_uses_regional_coordinator(self, recall):
        expanded = recall.expand("Who were the RCs in 2025?")

        assert "Regional Coordinators" in expanded
        assert "Residential Counselor" not in expanded

    def test_terminology_table_uses_residential_counselor(self, terminology):
        expanded = terminology.expand("Who were the RCs?")

        assert "Residential Counselors" in expanded
        assert "Regional Coordinator" not in expanded

    def test_overlapping_keys_fire_independently(self, recall):
        expanded = recall.expand("rcs")

        # "rc" is a substring of "rcs"; both expansions are appended
        assert "RC Regional Coordinator regional coordinator" in expanded
        assert "RCs Regional Coordinators regional coordinators" in expanded

    def test_matching_is_case_insensitive(self, recall):
        assert "Delhi Public School" in recall.expand("DPS students")

    def test_matched_keys(self, recall):
        keys = recall.matched_keys("TVS RCs")

        assert "tvs" in keys
        assert "rc" in keys
        assert "rcs" in keys

    def test_compose_applies_passes_in_order(self, recall, terminology):
        composed = compose_expansions("tvs", [terminology, recall])

        assert composed.startswith(terminology.expand("tvs"))
        assert "TVS Tumkur" in composed


class TestTerminologyRegistration:
    def test_with_mapping_returns_new_expander(self):
        base = TerminologyExpander(default_recall_table())

        updated = base.with_mapping("recall", "gsp", "Global Summer Program")

        assert "Global Summer Program" in updated.expand("gsp students")
        assert "Global Summer Program" not in base.expand("gsp students")

    def test_version_increments(self):
        base = TerminologyExpander(default_terminology_table())

        updated = base.with_mapping("program", "Bootcamp", "Coding Bootcamp")

        assert base.version == 1
        assert updated.version == 2
        assert len(updated.table) == len(base.table) + 1

    def test_new_group_created(self):
        table = TerminologyTable(groups={})

        updated = table.with_term("custom", "abc", "Alpha Beta")

        assert updated.groups == {"custom": {"abc": "Alpha Beta"}}
        assert table.groups == {}

    def test_empty_key_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            default_recall_table().with_term("recall", "  ", "nothing")

    def test_source_mapping_not_shared(self):
        terms = {"abc": "Alpha"}
        table = TerminologyTable(groups={"g": terms})

        terms["xyz"] = "Ex"

        assert len(table) == 1


class TestNormalizeSchoolName:
    @pytest.mark.parametrize("school,expected", [
        ("TVS Academy Hosur", "tvs"),
        ("tvs tumkur", "tvs"),
        ("Greenwood High, Bannerghatta", "greenwood"),
        ("Delhi Public School", "dps"),
        ("Sri Kumaran Public School", "kumarans"),
        ("Jawahar Navodaya Vidyalaya, Mandya", "jnv"),
    ])
    def test_known_networks(self, school, expected):
        assert normalize_school_name(school) == expected

    def test_unknown_school_unchanged(self):
        assert normalize_school_name("Springfield Elementary") == "Springfield Elementary"

    def test_empty(self):
        assert normalize_school_name("") == ""
