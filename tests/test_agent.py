"""Tests for the LLM provider factory and agent wrapper."""

import pytest

from sql2nosql.agent.base import BaseLLMProvider, LLMResponse
from sql2nosql.agent.factory import LLMProviderFactory
from sql2nosql.agent.providers import PROVIDER_REGISTRY
from sql2nosql.agent.wrapper import AgentWrapper
from sql2nosql.utils.config import Config


class EchoProvider(BaseLLMProvider):
    default_model = "echo-1"

    def generate(
        self, prompt, system_prompt=None, temperature=None, max_tokens=None, json_output=False
    ):
        return LLMResponse(
            content=prompt,
            model=self.model,
            metadata={
                "temperature": self._option("temperature", temperature, 1.0),
                "json_output": json_output,
            },
        )


@pytest.fixture
def echo_provider():
    LLMProviderFactory.register("echo", EchoProvider)
    yield
    PROVIDER_REGISTRY.pop("echo", None)


def test_builtin_providers():
    """OpenAI and Anthropic are registered."""
    assert {"openai", "anthropic"} <= set(LLMProviderFactory.list_providers())


def test_unknown_provider():
    """Unknown provider names are rejected with the available list."""
    with pytest.raises(ValueError) as exc:
        LLMProviderFactory.create_provider("gemini")
    assert "openai" in str(exc.value)


def test_wrapper_resolves_settings_from_config(echo_provider, monkeypatch):
    """Provider, defaults and API keys come from the agent section."""
    monkeypatch.setenv("ECHO_KEY", "secret")
    config = Config()
    config.set("agent.provider", "echo")
    config.set("agent.model", None)
    config.set("agent.temperature", 0.2)
    config.set("agent.keys", {"echo_api_key": "${ECHO_KEY}"})

    agent = AgentWrapper(config=config)

    assert agent.model == "echo-1"
    assert agent.provider.config["api_key"] == "secret"
    assert agent.provider.config["temperature"] == 0.2
    response = agent.generate("hello", json_output=True)
    assert response.content == "hello"
    assert response.metadata == {"temperature": 0.2, "json_output": True}


def test_wrapper_drops_unset_env_keys(echo_provider, monkeypatch):
    """Keys pointing at unset environment variables are left out."""
    monkeypatch.delenv("ECHO_KEY", raising=False)
    config = Config()
    config.set("agent.keys", {"echo_api_key": "${ECHO_KEY}"})
    config.set("agent.echo", {"model": "echo-2"})

    agent = AgentWrapper(provider="echo", config=config)

    assert agent.model == "echo-2"
    assert "api_key" not in agent.provider.config


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
