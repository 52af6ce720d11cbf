"""OpenAI LLM provider."""

from __future__ import annotations

import os
from typing import Any, Optional

try:
    from openai import OpenAI
except ImportError:
    OpenAI = None  # type: ignore

from sql2nosql.agent.base import BaseLLMProvider, LLMResponse

CLIENT_KEYS = {"api_key", "base_url", "organization", "project", "timeout"}


class OpenAIProvider(BaseLLMProvider):
    """OpenAI chat completions provider.

    Configuration options:
        - api_key: OpenAI API key (or OPENAI_API_KEY env var)
        - base_url / organization / project / timeout: client options
        - temperature / max_tokens: per-call defaults
    """

    default_model = "gpt-4o-mini"

    def __init__(self, model: Optional[str] = None, **kwargs: Any):
        if OpenAI is None:
            raise ImportError(
                "openai package is required. Install with: pip install 'sql2nosql[llm]'"
            )

        client_kwargs = {k: v for k, v in kwargs.items() if k in CLIENT_KEYS}
        if "api_key" not in client_kwargs and os.getenv("OPENAI_API_KEY"):
            client_kwargs["api_key"] = os.getenv("OPENAI_API_KEY")
        self.client = OpenAI(**client_kwargs)

        super().__init__(
            model=model, **{k: v for k, v in kwargs.items() if k not in CLIENT_KEYS}
        )

    def _uses_completion_tokens(self) -> bool:
        # Reasoning models reject max_tokens
        return self.model.startswith(("o1", "o3", "o4", "gpt-5"))

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_output: bool = False,
    ) -> LLMResponse:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        request: dict = {"model": self.model, "messages": messages}
        effective_temperature = self._option("temperature", temperature)
        if effective_temperature is not None:
            request["temperature"] = effective_temperature

        effective_max_tokens = self._option("max_tokens", max_tokens)
        if effective_max_tokens is not None:
            key = "max_completion_tokens" if self._uses_completion_tokens() else "max_tokens"
            request[key] = effective_max_tokens

        if json_output:
            request["response_format"] = {"type": "json_object"}

        try:
            response = self.client.chat.completions.create(**request)
        except Exception as e:
            self.logger.error(f"OpenAI API error: {e}")
            raise

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=response.model,
            usage=usage,
            metadata={"finish_reason": response.choices[0].finish_reason},
        )
