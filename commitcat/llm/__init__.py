"""LLM Client Package"""

from commitcat.llm.base import (
    ReviewClient, LLMResponse, LLMError, ContractError, EmptyResponseError, ResponseParseError,
    RateLimitedError, TransportError, clean_error_message, is_rate_limited, transport_error,
)
from commitcat.llm.claude import ClaudeClient
from commitcat.llm.gemini import GeminiClient

PROVIDERS = {
    "gemini": GeminiClient,
    "claude": ClaudeClient,
}


def get_client(provider: str, api_key: str, model: str | None = None,
               temperature: float | None = None) -> ReviewClient:
    """Get a review client. Provider can be 'gemini' or 'claude'."""
    if provider not in PROVIDERS:
        raise LLMError(f"Unknown provider: {provider}. Use {' or '.join(repr(p) for p in PROVIDERS)}.")
    return PROVIDERS[provider](api_key=api_key, model=model, temperature=temperature)


__all__ = [
    "ReviewClient",
    "LLMResponse",
    "LLMError",
    "ContractError",
    "EmptyResponseError",
    "ResponseParseError",
    "RateLimitedError",
    "TransportError",
    "ClaudeClient",
    "GeminiClient",
    "get_client",
    "PROVIDERS",
    "clean_error_message",
    "is_rate_limited",
    "transport_error",
]
