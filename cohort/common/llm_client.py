"""
Provider-agnostic completion client.

Supports Anthropic and OpenAI with a shared chat-completion interface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import CollaboratorFailure

logger = logging.getLogger("cohort.common.llm_client")


@dataclass
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class Completion:
    """Completion text plus token accounting"""
    text: str
    usage: TokenUsage = field(default_factory=TokenUsage)


class LLMClient:
    """Unified chat completion client across LLM providers."""

    def __init__(
        self,
        provider: str = "anthropic",
        model: str = "",
        anthropic_api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        max_tokens: int = 1500,
        temperature: float = 0.1,
        client=None,
    ) -> None:
        self.provider = (provider or "anthropic").lower()
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = client

        if self._client is not None:
            return

        if self.provider == "anthropic":
            if not anthropic_api_key:
                logger.info("%s API key not provided, LLM client unavailable", self.provider)
                return
            try:
                import anthropic

                self._client = anthropic.Anthropic(api_key=anthropic_api_key)
            except ImportError:
                logger.warning("anthropic package not installed")
            except Exception as e:
                logger.warning("Failed to initialize Anthropic client: %s", e)
            return

        if self.provider == "openai":
            if not openai_api_key:
                logger.info("%s API key not provided, LLM client unavailable", self.provider)
                return
            try:
                from openai import OpenAI

                self._client = OpenAI(api_key=openai_api_key)
            except ImportError:
                logger.warning("openai package not installed")
            except Exception as e:
                logger.warning("Failed to initialize OpenAI client: %s", e)
            return

        logger.warning("Unsupported LLM provider: %s", self.provider)

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def complete(
        self,
        system: str,
        history: Optional[List[Dict[str, str]]],
        user_query: str,
        *,
        max_tokens: Optional[int] = None,
        timeout: float = 60.0,
    ) -> Completion:
        """
        Run one chat completion.

        Args:
            system: System prompt (carries the retrieved context)
            history: Prior turns as {"role": "user"|"assistant", "content": str}
            user_query: The current user message

        Raises:
            CollaboratorFailure: client unavailable or provider error
        """
        if not self.is_available:
            raise CollaboratorFailure("llm", "LLM client is not available")

        messages = [
            {"role": turn["role"], "content": turn["content"]}
            for turn in (history or [])
        ]
        messages.append({"role": "user", "content": user_query})
        max_tokens = max_tokens or self.max_tokens

        try:
            if self.provider == "anthropic":
                kwargs = {}
                if system:
                    kwargs["system"] = system
                response = self._client.messages.create(
                    model=self.model,
                    max_tokens=max_tokens,
                    temperature=self.temperature,
                    messages=messages,
                    timeout=timeout,
                    **kwargs,
                )
                block = response.content[0]
                if getattr(block, "type", "text") != "text":
                    raise CollaboratorFailure("llm", "Unexpected response type from Anthropic")
                return Completion(
                    text=block.text,
                    usage=TokenUsage(
                        input_tokens=response.usage.input_tokens,
                        output_tokens=response.usage.output_tokens,
                    ),
                )

            if self.provider == "openai":
                response = self._client.chat.completions.create(
                    model=self.model,
                    max_tokens=max_tokens,
                    temperature=self.temperature,
                    messages=([{"role": "system", "content": system}] if system else []) + messages,
                    timeout=timeout,
                )
                usage = response.usage
                return Completion(
                    text=(response.choices[0].message.content or "").strip(),
                    usage=TokenUsage(
                        input_tokens=getattr(usage, "prompt_tokens", 0) if usage else 0,
                        output_tokens=getattr(usage, "completion_tokens", 0) if usage else 0,
                    ),
                )
        except CollaboratorFailure:
            raise
        except Exception as e:
            logger.error("%s completion failed: %s", self.provider, e)
            raise CollaboratorFailure("llm", f"Failed to generate response: {e}") from e

        raise CollaboratorFailure("llm", f"Unsupported LLM provider: {self.provider}")

    def test_connection(self) -> bool:
        """Send a minimal request; never raises"""
        try:
            self.complete("", None, "Hello", max_tokens=10)
            return True
        except Exception as e:
            logger.warning("LLM connection test failed: %s", e)
            return False


def create_llm_client(config) -> LLMClient:
    """Build an LLMClient from an LLMConfig"""
    model = config.anthropic_model if config.provider == "anthropic" else config.openai_model
    return LLMClient(
        provider=config.provider,
        model=model,
        anthropic_api_key=config.anthropic_api_key or None,
        openai_api_key=config.openai_api_key or None,
        max_tokens=config.max_tokens,
        temperature=config.temperature,
    )
