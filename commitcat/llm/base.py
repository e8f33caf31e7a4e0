"""LLM Base Classes and Shared Code"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

# Structured diagnostic payloads start with a JSON array/object ("[{", '{"')
# or a Python dict repr ("{'") appended by the SDK
_DETAIL_START = re.compile(r"\s*(\[\{|\{[\"'])")
# "[400 Bad Request] API key not valid." -> bracketed status plus its sentence
_STATUS_MESSAGE = re.compile(r"\[[45]\d{2}\s[^\]]*\][^\[\n]*")
_RATE_LIMIT_MARKERS = ("Too Many Requests", "RESOURCE_EXHAUSTED", "rate_limit")


@dataclass
class LLMResponse:
    """Structured response from any LLM provider."""
    content: str
    model: str = ""
    tokens_used: int = 0


class LLMError(Exception):
    """Raised when LLM operations fail."""
    pass


class ContractError(LLMError):
    """The review call did not produce a usable result. Fatal for the run, never retried."""
    pass


class EmptyResponseError(ContractError):
    """The service answered with no text at all."""
    pass


class ResponseParseError(ContractError):
    """The response text is not the JSON we asked for."""

    SNIPPET_LENGTH = 200

    def __init__(self, message: str, text: str = ""):
        self.snippet = text if len(text) <= self.SNIPPET_LENGTH else text[:self.SNIPPET_LENGTH] + "..."
        super().__init__(f"{message}\nRaw: {self.snippet}" if self.snippet else message)


class RateLimitedError(ContractError):
    """HTTP 429 or the provider's quota equivalent."""
    pass


class TransportError(ContractError):
    """Any other failure talking to the service (HTTP error, auth, network)."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


def clean_error_message(raw: str) -> str:
    """Reduce a transport error to its human-readable part.

    Everything from the start of structured diagnostic detail onward is
    dropped, and if a bracketed HTTP status is present only that status and
    its sentence are kept.
    """
    text = (raw or "").strip()
    match = _DETAIL_START.search(text)
    cleaned = text[:match.start()].rstrip(" \t\n-:,") if match else text

    status = _STATUS_MESSAGE.search(cleaned)
    if status:
        cleaned = status.group(0).strip()

    if not cleaned:
        return text[:ResponseParseError.SNIPPET_LENGTH]
    return cleaned


def status_error_text(code: int | None, status: str | None, message: str | None) -> str:
    """Format an SDK error as "[429 RESOURCE_EXHAUSTED] You exceeded your quota."."""
    label = " ".join(str(part) for part in (code, status) if part)
    message = (message or "").strip()
    if not label:
        return message
    return f"[{label}] {message}" if message else f"[{label}]"


def is_rate_limited(message: str, status_code: int | None = None) -> bool:
    if status_code == 429:
        return True
    return bool(re.search(r"\b429\b", message)) or any(m in message for m in _RATE_LIMIT_MARKERS)


def transport_error(raw: str, status_code: int | None = None) -> ContractError:
    """Classify a provider failure into RateLimitedError or TransportError."""
    message = clean_error_message(raw)
    if is_rate_limited(raw, status_code):
        return RateLimitedError(message)
    return TransportError(message, status_code=status_code)


class ReviewClient(ABC):
    """Abstract base for generation clients that answer in JSON."""

    @abstractmethod
    def generate(self, system: str, prompt: str) -> LLMResponse:
        """Send one request and return the raw text. Raises ContractError subclasses."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass
