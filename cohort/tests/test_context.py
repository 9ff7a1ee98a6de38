"""Tests for context assembly and answer synthesis."""

import pytest
from unittest.mock import MagicMock

from cohort.common.llm_client import Completion, TokenUsage
from cohort.retriever.context import ContextAssembler, NO_DATA_CONTEXT
from cohort.retriever.searcher import SearchResult
from cohort.retriever.synthesizer import Synthesizer, build_system_prompt


class TestContextAssembler:
    @pytest.fixture
    def assembler(self, record_store):
        return ContextAssembler(record_store)

    def test_numbered_blocks(self, assembler):
        results = [
            SearchResult(id="a", content="First"),
            SearchResult(id="b", content="Second"),
        ]

        context = assembler.assemble(results, "Who teaches robotics?")

        assert context == "RELEVANT DATA:\n\n[1] First\n\n[2] Second\n\n"

    def test_empty_results(self, assembler):
        assert assembler.assemble([], "Who teaches robotics?") == NO_DATA_CONTEXT

    def test_stats_appended_for_aggregation(self, assembler):
        context = assembler.assemble([SearchResult(id="a", content="First")], "How many students?")

        assert context.endswith(
            "\nAGGREGATED STATISTICS:\n"
            "Total students across all programs: 4\n"
            "Students by year:\n"
            "  2025: 3 students\n"
            "  2024: 1 students\n"
        )

    def test_year_totals(self, assembler):
        assert assembler.year_totals() == {"2025": 3, "2024": 1}

    def test_fallback_lines(self, assembler, record_store):
        context = assembler.assemble_fallback(record_store.records_for("2024_june"))

        assert context.endswith("[1] Student: Isha Reddy, School: Delhi Public School, Program: 2024_june\n")

    def test_fallback_empty(self, assembler):
        assert assembler.assemble_fallback([]) == NO_DATA_CONTEXT


class TestSynthesizer:
    def test_context_embedded_in_system_prompt(self):
        prompt = build_system_prompt("RELEVANT DATA:\n\n[1] Program 2025_may: 3 students")

        assert "CONTEXT DATA:\nRELEVANT DATA:" in prompt
        assert "Answer questions ONLY using the provided context data" in prompt

    def test_context_with_braces(self):
        assert "{odd}" in build_system_prompt("{odd}")

    def test_answer_delegates_to_llm(self):
        llm = MagicMock()
        llm.is_available = True
        llm.complete.return_value = Completion(text="Four", usage=TokenUsage(10, 1))
        synthesizer = Synthesizer(llm)

        completion = synthesizer.answer("How many?", "ctx")

        assert synthesizer.has_llm
        assert completion.text == "Four"
        system, history, query = llm.complete.call_args[0]
        assert "ctx" in system
        assert history == []
        assert query == "How many?"
