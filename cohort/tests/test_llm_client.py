"""Tests for LLMClient provider abstraction."""

import pytest
from unittest.mock import MagicMock

from cohort.common.config import LLMConfig
from cohort.common.errors import CollaboratorFailure
from cohort.common.llm_client import LLMClient, create_llm_client


def _anthropic_response(text="Answer", block_type="text"):
    response = MagicMock()
    block = MagicMock()
    block.type = block_type
    block.text = text
    response.content = [block]
    response.usage.input_tokens = 120
    response.usage.output_tokens = 30
    return response


class TestLLMClientInit:
    def test_missing_anthropic_key_logs_info(self, caplog):
        import logging
        with caplog.at_level(logging.INFO, logger="cohort.common.llm_client"):
            client = LLMClient(provider="anthropic")
        assert not client.is_available
        assert "API key not provided" in caplog.text

    def test_missing_openai_key_logs_info(self, caplog):
        import logging
        with caplog.at_level(logging.INFO, logger="cohort.common.llm_client"):
            client = LLMClient(provider="openai")
        assert not client.is_available
        assert "API key not provided" in caplog.text

    def test_unsupported_provider_logs_warning(self, caplog):
        import logging
        with caplog.at_level(logging.WARNING, logger="cohort.common.llm_client"):
            client = LLMClient(provider="unsupported_xyz")
        assert not client.is_available
        assert "Unsupported" in caplog.text

    def test_create_from_config_picks_model(self):
        config = LLMConfig(provider="openai", openai_model="gpt-4o", anthropic_model="claude-x")

        client = create_llm_client(config)

        assert client.provider == "openai"
        assert client.model == "gpt-4o"


class TestLLMClientComplete:
    def test_complete_raises_when_unavailable(self):
        client = LLMClient(provider="anthropic")
        with pytest.raises(CollaboratorFailure, match="not available"):
            client.complete("system", [], "question")

    def test_anthropic_request(self):
        sdk = MagicMock()
        sdk.messages.create.return_value = _anthropic_response("42 students")
        client = LLMClient(provider="anthropic", model="claude-test", client=sdk)

        history = [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]
        completion = client.complete("SYSTEM", history, "How many?")

        assert completion.text == "42 students"
        assert completion.usage.input_tokens == 120
        assert completion.usage.output_tokens == 30

        kwargs = sdk.messages.create.call_args.kwargs
        assert kwargs["system"] == "SYSTEM"
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 1500
        assert kwargs["temperature"] == 0.1
        assert kwargs["messages"] == history + [{"role": "user", "content": "How many?"}]

    def test_anthropic_empty_system_omitted(self):
        sdk = MagicMock()
        sdk.messages.create.return_value = _anthropic_response()
        client = LLMClient(provider="anthropic", client=sdk)

        client.complete("", None, "Hello", max_tokens=10)

        kwargs = sdk.messages.create.call_args.kwargs
        assert "system" not in kwargs
        assert kwargs["max_tokens"] == 10

    def test_anthropic_non_text_block(self):
        sdk = MagicMock()
        sdk.messages.create.return_value = _anthropic_response(block_type="tool_use")
        client = LLMClient(provider="anthropic", client=sdk)

        with pytest.raises(CollaboratorFailure, match="Unexpected response type"):
            client.complete("s", [], "q")

    def test_openai_request(self):
        sdk = MagicMock()
        response = MagicMock()
        response.choices[0].message.content = "  Four students \n"
        response.usage.prompt_tokens = 80
        response.usage.completion_tokens = 5
        sdk.chat.completions.create.return_value = response
        client = LLMClient(provider="openai", model="gpt-4o-mini", client=sdk)

        completion = client.complete("SYSTEM", [], "How many?")

        assert completion.text == "Four students"
        assert completion.usage.input_tokens == 80
        messages = sdk.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "SYSTEM"}
        assert messages[-1] == {"role": "user", "content": "How many?"}

    def test_provider_error_wrapped(self, caplog):
        import logging
        sdk = MagicMock()
        sdk.messages.create.side_effect = RuntimeError("overloaded")
        client = LLMClient(provider="anthropic", client=sdk)

        with caplog.at_level(logging.ERROR, logger="cohort.common.llm_client"):
            with pytest.raises(CollaboratorFailure) as exc_info:
                client.complete("s", [], "q")

        assert exc_info.value.collaborator == "llm"
        assert "overloaded" in str(exc_info.value)
        assert "completion failed" in caplog.text

    def test_connection_check(self):
        sdk = MagicMock()
        sdk.messages.create.return_value = _anthropic_response("hi")

        assert LLMClient(provider="anthropic", client=sdk).test_connection() is True
        assert LLMClient(provider="anthropic").test_connection() is False
