"""Base classes for LLM providers used by the schema advisor."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from sql2nosql.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class LLMResponse:
    """Standardized response from LLM providers."""

    content: str
    model: str
    usage: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        tokens = self.usage.get("total_tokens", "?")
        return f"LLMResponse(model={self.model}, tokens={tokens})"


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers.

    Subclasses create their SDK client in ``__init__`` and implement
    ``generate``. Keyword arguments that are not client options are kept in
    ``self.config`` as per-call defaults (temperature, max_tokens).
    """

    default_model: str = ""

    def __init__(self, model: Optional[str] = None, **kwargs: Any):
        self.model = model or self.default_model
        self.config = kwargs
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_output: bool = False,
    ) -> LLMResponse:
        """Generate a completion for a single prompt.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            temperature: Sampling temperature (config default if None)
            max_tokens: Maximum tokens to generate (config default if None)
            json_output: Ask the model for a bare JSON object

        Returns:
            LLMResponse object
        """
        pass

    def _option(self, name: str, value: Any, fallback: Any = None) -> Any:
        """Call-time value, else the configured default, else ``fallback``."""
        if value is not None:
            return value
        configured = self.config.get(name)
        return fallback if configured is None else configured

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model})"
