"""Claude (Anthropic) Review Client"""

from loguru import logger

from commitcat.llm.base import LLMError, LLMResponse, ReviewClient, TransportError, status_error_text, transport_error

JSON_ONLY = "\n\nRespond with the JSON object only. No prose, no markdown fences."


def _status_error_text(e) -> str:
    """Pull the readable message out of the error body, e.g. {"error": {"type": ..., "message": ...}}."""
    error = e.body.get("error") if isinstance(e.body, dict) else None
    if not isinstance(error, dict) or not error.get("message"):
        return e.message
    return status_error_text(e.status_code, error.get("type"), error["message"])


class ClaudeClient(ReviewClient):
    """Claude API client. Requires ANTHROPIC_API_KEY."""

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    MAX_TOKENS = 4000
    TEMPERATURE = 0.2

    def __init__(self, api_key: str, model: str | None = None, temperature: float | None = None):
        if not api_key:
            raise LLMError(
                "No API key found. Set ANTHROPIC_API_KEY environment variable:\n"
                "  export ANTHROPIC_API_KEY='your-key-here'"
            )
        self.model = model or self.DEFAULT_MODEL
        self.temperature = self.TEMPERATURE if temperature is None else temperature

        try:
            from anthropic import Anthropic
            self._client = Anthropic(api_key=api_key)
        except ImportError:
            raise LLMError(
                "Anthropic SDK not installed. Run:\n"
                "  pip install anthropic"
            )

    @property
    def name(self) -> str:
        return f"Claude ({self.model})"

    def generate(self, system: str, prompt: str) -> LLMResponse:
        from anthropic import APIConnectionError, APIStatusError, AuthenticationError

        logger.debug(f"Claude request model={self.model} prompt_chars={len(prompt)}")
        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=self.MAX_TOKENS,
                temperature=self.temperature,
                system=system + JSON_ONLY,
                messages=[{"role": "user", "content": prompt}]
            )
        except AuthenticationError:
            raise TransportError("Invalid API key. Check your ANTHROPIC_API_KEY.", status_code=401)
        except APIStatusError as e:
            logger.debug(f"Claude API error status={e.status_code}: {e.message}")
            raise transport_error(_status_error_text(e), e.status_code)
        except APIConnectionError as e:
            raise TransportError(f"Could not reach Claude: {e}")

        content = ""
        for block in response.content:
            if block.type == "text":
                content = block.text.strip()
                break

        return LLMResponse(
            content=content,
            model=self.model,
            tokens_used=response.usage.input_tokens + response.usage.output_tokens
        )
