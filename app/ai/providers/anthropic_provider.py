"""
Anthropic Provider - Claude messages API.

Claude has no dedicated JSON mode; the system prompt carries the
instruction and the normalizer strips any code fences from the answer.

API Documentation: https://docs.anthropic.com/en/api
"""

import time
import logging
from typing import Optional

from anthropic import AsyncAnthropic

from app.ai.providers.base import (
    AIProvider,
    AIProviderConfigError,
    AIResponse,
    ProviderType,
    TokenUsage,
)

logger = logging.getLogger("smartcal.ai.anthropic")


class AnthropicProvider(AIProvider):
    provider_type = ProviderType.ANTHROPIC

    def __init__(self, model: str, api_key: str):
        if not api_key:
            raise AIProviderConfigError("ANTHROPIC_API_KEY is not configured")
        self.model = model
        self._client = AsyncAnthropic(api_key=api_key)
        logger.info(f"Anthropic provider initialized with model: {self.model}")

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 1024,
    ) -> AIResponse:
        start_time = time.time()

        try:
            request_params = {
                "model": self.model,
                "max_tokens": max_tokens,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": temperature,
                "system": (system_prompt or "") + "\n\nRespond with a single JSON object and nothing else.",
            }

            response = await self._client.messages.create(**request_params)

            # Claude returns a list of content blocks
            content = ""
            for block in response.content or []:
                if hasattr(block, "text"):
                    content += block.text

            return AIResponse(
                content=content,
                provider=self.provider_type,
                model=self.model,
                usage=TokenUsage(
                    prompt_tokens=response.usage.input_tokens if response.usage else 0,
                    completion_tokens=response.usage.output_tokens if response.usage else 0,
                ),
                latency_ms=self._measure_latency(start_time),
                success=True,
            )

        except Exception as e:
            return self._create_error_response(str(e), self._measure_latency(start_time))
