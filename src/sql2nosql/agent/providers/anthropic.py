"""Anthropic/Claude LLM provider."""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

try:
    from anthropic import Anthropic
except ImportError:
    Anthropic = None  # type: ignore

from sql2nosql.agent.base import BaseLLMProvider, LLMResponse

CLIENT_KEYS = {"api_key", "base_url", "timeout", "max_retries"}

JSON_ONLY_INSTRUCTION = "You must respond with valid JSON only, no additional text."


class AnthropicProvider(BaseLLMProvider):
    """Anthropic messages provider.

    The messages API has no JSON mode, so ``json_output`` is enforced through
    the system prompt.
    """

    default_model = "claude-sonnet-4-5-20250929"

    def __init__(self, model: Optional[str] = None, **kwargs: Any):
        if Anthropic is None:
            raise ImportError(
                "anthropic package is required. Install with: pip install 'sql2nosql[llm]'"
            )

        client_kwargs = {k: v for k, v in kwargs.items() if k in CLIENT_KEYS}
        if "api_key" not in client_kwargs and os.getenv("ANTHROPIC_API_KEY"):
            client_kwargs["api_key"] = os.getenv("ANTHROPIC_API_KEY")
        self.client = Anthropic(**client_kwargs)

        super().__init__(
            model=model, **{k: v for k, v in kwargs.items() if k not in CLIENT_KEYS}
        )

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_output: bool = False,
    ) -> LLMResponse:
        if json_output:
            system_prompt = (
                f"{system_prompt}\n\nIMPORTANT: {JSON_ONLY_INSTRUCTION}"
                if system_prompt
                else JSON_ONLY_INSTRUCTION
            )

        request: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self._option("max_tokens", max_tokens, 4096),
        }
        effective_temperature = self._option("temperature", temperature)
        if effective_temperature is not None:
            request["temperature"] = effective_temperature
        if system_prompt:
            request["system"] = [{"type": "text", "text": system_prompt}]

        try:
            response = self.client.messages.create(**request)
        except Exception as e:
            self.logger.error(f"Anthropic API error: {e}")
            raise

        return LLMResponse(
            content=response.content[0].text if response.content else "",
            model=response.model,
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.input_tokens + response.usage.output_tokens,
            },
            metadata={"stop_reason": response.stop_reason},
        )
