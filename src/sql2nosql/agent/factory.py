"""Factory for creating LLM provider instances."""

from __future__ import annotations

from typing import Any, List, Optional, Type

from sql2nosql.agent.base import BaseLLMProvider
from sql2nosql.agent.providers import PROVIDER_REGISTRY
from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)


class LLMProviderFactory:
    """Factory for creating LLM providers."""

    @staticmethod
    def create_provider(
        provider: str, model: Optional[str] = None, **kwargs: Any
    ) -> BaseLLMProvider:
        """Create an LLM provider instance.

        Args:
            provider: Provider name (e.g., "openai", "anthropic")
            model: Model name (provider default if None)
            **kwargs: Provider-specific configuration

        Returns:
            BaseLLMProvider instance

        Raises:
            ValueError: If provider is not supported

        Example:
            >>> provider = LLMProviderFactory.create_provider(
            ...     provider="openai", model="gpt-4o-mini", temperature=0.0
            ... )
        """
        provider_class = PROVIDER_REGISTRY.get(provider.lower())
        if provider_class is None:
            available = ", ".join(LLMProviderFactory.list_providers())
            raise ValueError(
                f"Unsupported provider: {provider}. Available providers: {available}"
            )

        logger.info(f"Creating {provider_class.__name__} with model={model or 'default'}")
        return provider_class(model=model, **kwargs)

    @staticmethod
    def register(name: str, provider_class: Type[BaseLLMProvider]) -> None:
        """Register an additional provider class under ``name``."""
        PROVIDER_REGISTRY[name.lower()] = provider_class

    @staticmethod
    def list_providers() -> List[str]:
        return sorted(PROVIDER_REGISTRY.keys())
