"""LLM agent module for sql2nosql."""

from sql2nosql.agent.base import BaseLLMProvider, LLMResponse
from sql2nosql.agent.factory import LLMProviderFactory
from sql2nosql.agent.wrapper import AgentWrapper

__all__ = [
    "AgentWrapper",
    "BaseLLMProvider",
    "LLMResponse",
    "LLMProviderFactory",
]
