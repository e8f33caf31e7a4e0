"""Review Contract - one request to the model, one validated ReviewResult back."""

import json
import re

from loguru import logger

from commitcat.git.collector import ChangeSet
from commitcat.llm.base import EmptyResponseError, ResponseParseError, ReviewClient
from commitcat.prompts.builder import PromptBuilder
from commitcat.review.models import ReviewResult

# Only a fence that wraps the whole payload is removed
_OPEN_FENCE = re.compile(r"^```[\w-]*[ \t]*\n?")
_CLOSE_FENCE = re.compile(r"\n?```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around the whole response."""
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = _OPEN_FENCE.sub("", stripped, count=1)
        stripped = _CLOSE_FENCE.sub("", stripped, count=1)
    return stripped.strip()


def parse_review(text: str | None) -> ReviewResult:
    """Decode the model's text into a ReviewResult.

    Raises:
        EmptyResponseError: no text at all
        ResponseParseError: not valid JSON (carries a short snippet)
        ReviewSchemaError: valid JSON, wrong shape
    """
    if text is None or not text.strip():
        raise EmptyResponseError("Empty response from AI")

    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Failed to parse AI response as JSON: {e.msg} (line {e.lineno}, column {e.colno})", cleaned)

    return ReviewResult.from_dict(data)


class ReviewService:
    """Sends a ChangeSet for review. One call per review; failures are not retried."""

    def __init__(self, client: ReviewClient, builder: PromptBuilder | None = None):
        self.client = client
        self.builder = builder or PromptBuilder()

    def review(self, change_set: ChangeSet, language: str = "en") -> ReviewResult:
        system = self.builder.system_instruction(language)
        prompt = self.builder.build(change_set.diff_text)
        logger.debug(f"Review request via {self.client.name}: {len(change_set.included)} files, {len(prompt)} chars")

        response = self.client.generate(system, prompt)
        logger.debug(f"Review response: {len(response.content)} chars, {response.tokens_used} tokens")

        result = parse_review(response.content)
        logger.debug(f"Parsed review: {len(result.critical)} critical, {len(result.suggestions)} suggestions")
        return result
