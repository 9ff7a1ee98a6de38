"""Tests for the command line entry point."""

import pytest
from unittest.mock import patch

from cohort.cli import main


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in ("COHORT_CONFIG", "COHORT_DATA_PATH", "COHORT_VECTOR_BACKEND", "EMBEDDING_MODE",
                 "OPENAI_API_KEY", "ANTHROPIC_API_KEY", "COHORT_LLM_PROVIDER"):
        monkeypatch.delenv(name, raising=False)
    with patch("cohort.common.config.load_dotenv"), \
            patch("cohort.common.config.CONFIG_PATH", tmp_path / "missing.json"):
        yield


@pytest.fixture
def roster_file(tmp_path, sample_corpus):
    path = tmp_path / "roster.txt"
    path.write_text(sample_corpus)
    return str(path)


class TestCli:
    def test_check_reports_missing(self, capsys):
        assert main(["check"]) == 1
        assert "ANTHROPIC_API_KEY" in capsys.readouterr().out

    def test_check_ok(self, monkeypatch, capsys):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")

        assert main(["check"]) == 0
        assert "Configuration OK" in capsys.readouterr().out

    def test_missing_configuration_exit_code(self, roster_file, capsys):
        assert main(["--data", roster_file, "stats"]) == 2
        assert "Missing required configuration" in capsys.readouterr().err

    def test_stats(self, monkeypatch, roster_file, capsys):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")

        assert main(["--data", roster_file, "stats"]) == 0

        out = capsys.readouterr().out
        assert "programs: 2" in out
        assert "students: 4" in out
        assert "total_embeddings: 0" in out

    def test_missing_data_file(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")

        assert main(["--data", str(tmp_path / "nope.txt"), "stats"]) == 1
        assert "ERROR" in capsys.readouterr().err

    def test_reindex_dry_run(self, monkeypatch, roster_file, capsys):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")

        assert main(["--data", roster_file, "reindex", "--dry-run"]) == 0
        assert "2 programs, 4 students" in capsys.readouterr().out
