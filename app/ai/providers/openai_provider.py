"""
OpenAI Provider - chat completions with JSON response format.

API Documentation: https://platform.openai.com/docs/api-reference
"""

import time
import logging
from typing import Optional

from openai import AsyncOpenAI

from app.ai.providers.base import (
    AIProvider,
    AIProviderConfigError,
    AIResponse,
    ProviderType,
    TokenUsage,
)

logger = logging.getLogger("smartcal.ai.openai")


class OpenAIProvider(AIProvider):
    """
    OpenAI GPT backend.

    Usage:
        provider = OpenAIProvider(model="gpt-4o-mini", api_key="sk-...")
        response = await provider.generate_json(
            prompt="Current time: ...\nUser input: lunch with Ann at noon",
            system_prompt=PROPOSAL_SYSTEM_PROMPT,
        )
    """

    provider_type = ProviderType.OPENAI

    def __init__(self, model: str, api_key: str):
        if not api_key:
            raise AIProviderConfigError("OPENAI_API_KEY is not configured")
        self.model = model
        self._client = AsyncOpenAI(api_key=api_key)
        logger.info(f"OpenAI provider initialized with model: {self.model}")

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 1024,
    ) -> AIResponse:
        start_time = time.time()

        try:
            # json_object mode requires the word "JSON" somewhere in the messages
            system_content = (system_prompt or "") + "\n\nYou must respond with valid JSON only."
            messages = [
                {"role": "system", "content": system_content},
                {"role": "user", "content": prompt},
            ]

            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
            )

            latency_ms = self._measure_latency(start_time)
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens if response.usage else 0,
                completion_tokens=response.usage.completion_tokens if response.usage else 0,
            )
            logger.info(f"OpenAI request completed in {latency_ms:.0f}ms, tokens: {usage.total_tokens}")

            return AIResponse(
                content=response.choices[0].message.content or "",
                provider=self.provider_type,
                model=self.model,
                usage=usage,
                latency_ms=latency_ms,
                success=True,
            )

        except Exception as e:
            return self._create_error_response(str(e), self._measure_latency(start_time))
