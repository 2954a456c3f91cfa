"""
AI Providers Module - interchangeable model backends.

- Google Gemini (default)
- OpenAI
- Anthropic

The backend is chosen by settings.AI_PROVIDER and built once at start-up:

    provider = build_provider(settings)
    response = await provider.generate_json(prompt, system_prompt=...)
"""

from app.ai.providers.base import (
    AIProvider,
    AIProviderConfigError,
    AIProviderError,
    AIResponse,
    ProviderType,
    TokenUsage,
)


def build_provider(settings) -> AIProvider:
    """
    Build the provider selected by settings.AI_PROVIDER.

    Raises:
        AIProviderConfigError: unknown provider name or missing API key
    """
    name = (settings.AI_PROVIDER or "").strip().lower()

    # Imported lazily so an unused SDK is never initialized
    if name == ProviderType.GEMINI.value:
        from app.ai.providers.gemini import GeminiProvider
        return GeminiProvider(model=settings.GEMINI_MODEL, api_key=settings.GEMINI_API_KEY)
    if name == ProviderType.OPENAI.value:
        from app.ai.providers.openai_provider import OpenAIProvider
        return OpenAIProvider(model=settings.OPENAI_MODEL, api_key=settings.OPENAI_API_KEY)
    if name == ProviderType.ANTHROPIC.value:
        from app.ai.providers.anthropic_provider import AnthropicProvider
        return AnthropicProvider(model=settings.ANTHROPIC_MODEL, api_key=settings.ANTHROPIC_API_KEY)

    raise AIProviderConfigError(f"Unknown AI_PROVIDER: {settings.AI_PROVIDER!r}")


__all__ = [
    "AIProvider",
    "AIProviderConfigError",
    "AIProviderError",
    "AIResponse",
    "ProviderType",
    "TokenUsage",
    "build_provider",
]
