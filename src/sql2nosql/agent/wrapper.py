"""High-level agent wrapper that resolves provider settings from config."""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

from sql2nosql.agent.base import LLMResponse
from sql2nosql.agent.factory import LLMProviderFactory
from sql2nosql.utils.config import Config, get_config
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)


class AgentWrapper:
    """LLM agent configured from the ``agent`` config section.

    Resolution order for every setting: explicit argument, then the
    provider-specific subsection (``agent.<provider>``), then the ``agent``
    section itself. API keys come from ``agent.keys.<provider>_api_key`` or
    the provider's environment variable. String values written as
    ``${VAR}`` are expanded from the environment.

    Example:
        >>> agent = AgentWrapper(provider="anthropic")
        >>> response = agent.generate("Summarize this schema", json_output=True)
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        config: Optional[Config] = None,
        **kwargs: Any,
    ):
        agent_config = (config or get_config()).get("agent", {}) or {}

        provider = provider or agent_config.get("provider")
        if not provider:
            raise ValueError("Provider must be specified via parameter or agent.provider")

        provider_section = agent_config.get(provider, {}) or {}
        model = model or provider_section.get("model") or agent_config.get("model")

        provider_kwargs = self._build_provider_kwargs(agent_config, provider_section, provider)
        provider_kwargs.update(kwargs)

        self.provider = LLMProviderFactory.create_provider(
            provider=provider, model=model, **provider_kwargs
        )
        logger.info(f"Initialized AgentWrapper with {provider}/{self.provider.model}")

    @staticmethod
    def _build_provider_kwargs(
        agent_config: Dict[str, Any], provider_section: Dict[str, Any], provider: str
    ) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for key in ("temperature", "max_tokens"):
            if agent_config.get(key) is not None:
                merged[key] = agent_config[key]
        merged.update({k: v for k, v in provider_section.items() if k != "model"})

        keys = agent_config.get("keys", {}) or {}
        if keys.get(f"{provider}_api_key"):
            merged["api_key"] = keys[f"{provider}_api_key"]

        for key, value in list(merged.items()):
            if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
                env_value = os.getenv(value[2:-1])
                if env_value:
                    merged[key] = env_value
                else:
                    del merged[key]
        return merged

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_output: bool = False,
    ) -> LLMResponse:
        return self.provider.generate(
            prompt=prompt,
            system_prompt=system_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
            json_output=json_output,
        )

    @property
    def model(self) -> str:
        return self.provider.model

    def __repr__(self) -> str:
        return f"AgentWrapper({self.provider!r})"
