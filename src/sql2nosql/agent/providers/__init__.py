"""LLM provider registry."""

from sql2nosql.agent.providers.anthropic import AnthropicProvider
from sql2nosql.agent.providers.openai import OpenAIProvider

# Provider registry maps provider name to class
PROVIDER_REGISTRY = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}

__all__ = [
    "PROVIDER_REGISTRY",
    "AnthropicProvider",
    "OpenAIProvider",
]
