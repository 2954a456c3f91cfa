"""
Base AI Provider - contract shared by every language-model backend.

The assistant only needs one capability from a model: given a system prompt
and a user prompt, return text (JSON in practice). Each backend implements
that capability and reports the outcome as an AIResponse.

Error contract:
- Missing configuration is detected at construction time and raises
  AIProviderConfigError, so the application can start without the assistant.
- Call-time failures (network, quota, bad request) are NOT raised; they come
  back as AIResponse(success=False, error=...). The assistant decides what to
  do with them.

Example:
    provider = build_provider(settings)
    response = await provider.generate_json(user_prompt, system_prompt=SYSTEM)
    if response.success:
        print(response.content)
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Any, Dict
from enum import Enum
import logging

logger = logging.getLogger("smartcal.ai")


class ProviderType(str, Enum):
    """Supported model backends (values match the AI_PROVIDER setting)."""
    GEMINI = "gemini"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class AIProviderError(Exception):
    """A model call failed or timed out."""


class AIProviderConfigError(AIProviderError):
    """The selected provider cannot be built (unknown name or missing API key)."""


@dataclass
class TokenUsage:
    """Token accounting for one request."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        if self.total_tokens == 0:
            self.total_tokens = self.prompt_tokens + self.completion_tokens


@dataclass
class AIResponse:
    """
    Normalized result of a model call.

    Attributes:
        content: Generated text (empty on failure)
        provider: Backend that produced it
        model: Model name
        usage: Token counts
        latency_ms: Wall time of the call
        success: False when the call failed
        error: Failure description when success is False
    """
    content: str
    provider: ProviderType
    model: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    latency_ms: float = 0.0
    success: bool = True
    error: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Log-friendly view; content is truncated."""
        return {
            "content": self.content[:100] + "..." if len(self.content) > 100 else self.content,
            "provider": self.provider.value,
            "model": self.model,
            "tokens": {
                "prompt": self.usage.prompt_tokens,
                "completion": self.usage.completion_tokens,
                "total": self.usage.total_tokens,
            },
            "latency_ms": self.latency_ms,
            "success": self.success,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
        }


class AIProvider(ABC):
    """
    Abstract base class for model backends.

    Subclasses set provider_type and implement generate_json().
    """

    provider_type: ProviderType
    model: str

    @abstractmethod
    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 1024,
    ) -> AIResponse:
        """
        Ask the model for a JSON answer.

        Args:
            prompt: User prompt
            system_prompt: Instructions, including the expected JSON fields
            temperature: Low by default; the output is parsed, not read
            max_tokens: Upper bound on the answer length

        Returns:
            AIResponse; never raises for call-time failures
        """

    def _measure_latency(self, start_time: float) -> float:
        """Milliseconds elapsed since start_time."""
        return (time.time() - start_time) * 1000

    def _create_error_response(self, error: str, latency_ms: float = 0.0) -> AIResponse:
        logger.error(f"AI provider error [{self.provider_type.value}]: {error}")
        return AIResponse(
            content="",
            provider=self.provider_type,
            model=self.model,
            latency_ms=latency_ms,
            success=False,
            error=error,
        )
