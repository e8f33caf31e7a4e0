"""Gemini (Google) Review Client"""

import httpx
from loguru import logger

from commitcat.llm.base import LLMError, LLMResponse, ReviewClient, TransportError, status_error_text, transport_error


class GeminiClient(ReviewClient):
    """Gemini API client using the google-genai SDK. Asks for JSON-only output."""

    DEFAULT_MODEL = "gemini-2.5-flash-lite"
    TEMPERATURE = 0.2

    def __init__(self, api_key: str, model: str | None = None, temperature: float | None = None):
        if not api_key:
            raise LLMError(
                "No API key found. Set GEMINI_API_KEY environment variable:\n"
                "  export GEMINI_API_KEY='your-key-here'"
            )
        self.model = model or self.DEFAULT_MODEL
        self.temperature = self.TEMPERATURE if temperature is None else temperature

        try:
            from google import genai
        except ImportError:
            raise LLMError(
                "Google GenAI SDK not installed. Run:\n"
                "  pip install google-genai"
            )
        self._client = genai.Client(api_key=api_key)

    @property
    def name(self) -> str:
        return f"Gemini ({self.model})"

    def generate(self, system: str, prompt: str) -> LLMResponse:
        from google.genai import errors, types

        logger.debug(f"Gemini request model={self.model} prompt_chars={len(prompt)}")
        try:
            response = self._client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system,
                    response_mime_type="application/json",
                    temperature=self.temperature,
                ),
            )
        except errors.APIError as e:
            logger.debug(f"Gemini API error code={e.code}: {e}")
            if not e.message:
                raise transport_error(str(e), e.code)
            raise transport_error(status_error_text(e.code, e.status, e.message), e.code)
        except httpx.HTTPError as e:
            raise TransportError(f"Could not reach Gemini: {e}")

        usage = response.usage_metadata
        return LLMResponse(
            content=(response.text or "").strip(),
            model=self.model,
            tokens_used=(usage.total_token_count or 0) if usage else 0,
        )
