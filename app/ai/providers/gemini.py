"""
Gemini Provider - Google GenAI SDK (google-genai).

Uses the async surface (client.aio) so the event loop is never blocked while
the model is thinking.
"""

import time
import logging
from typing import Optional

from google import genai
from google.genai import types

from app.ai.providers.base import (
    AIProvider,
    AIProviderConfigError,
    AIResponse,
    ProviderType,
    TokenUsage,
)

logger = logging.getLogger("smartcal.ai.gemini")


class GeminiProvider(AIProvider):
    provider_type = ProviderType.GEMINI

    def __init__(self, model: str, api_key: str):
        if not api_key:
            raise AIProviderConfigError("GEMINI_API_KEY is not configured")
        self.model = model
        self._client = genai.Client(api_key=api_key)
        logger.info(f"Gemini provider initialized with model: {self.model}")

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 1024,
    ) -> AIResponse:
        start_time = time.time()

        try:
            # JSON mode is native in the v2 SDK
            config = types.GenerateContentConfig(
                temperature=temperature,
                max_output_tokens=max_tokens,
                response_mime_type="application/json",
                system_instruction=system_prompt,
            )

            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )

            return AIResponse(
                content=(response.text or "").strip(),
                provider=self.provider_type,
                model=self.model,
                usage=self._extract_usage(response),
                latency_ms=self._measure_latency(start_time),
                success=True,
            )

        except Exception as e:
            return self._create_error_response(str(e), self._measure_latency(start_time))

    def _extract_usage(self, response) -> TokenUsage:
        # usage_metadata is None when the backend reports nothing
        meta = response.usage_metadata
        if not meta:
            return TokenUsage()
        return TokenUsage(
            prompt_tokens=meta.prompt_token_count or 0,
            completion_tokens=meta.candidates_token_count or 0,
        )
