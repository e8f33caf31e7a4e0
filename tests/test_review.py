"""
Tests for the review contract: response parsing, schema validation, error cleaning,
and the provider clients' error mapping.

Run with:
    pytest tests/test_review.py -v
"""

import json
from types import SimpleNamespace

import httpx
import pytest

from commitcat.git.collector import ChangeSet, FileChange
from commitcat.llm import ClaudeClient, GeminiClient, get_client
from commitcat.llm.base import (
    ContractError, EmptyResponseError, LLMError, LLMResponse, RateLimitedError, ResponseParseError,
    ReviewClient, TransportError, clean_error_message, is_rate_limited, status_error_text, transport_error,
)
from commitcat.prompts.builder import PromptBuilder
from commitcat.review import Finding, ReviewResult, ReviewSchemaError, ReviewService, parse_review, strip_code_fences

VALID = {
    "commitMessage": "feat: add login\n\n- add /login endpoint",
    "review": {
        "critical": [
            {"message": "Hardcoded password", "filePath": "app/auth.py", "lineNumber": "12"},
        ],
        "suggestions": [
            {
                "message": "Rename x to user_count",
                "filePath": "app/views.py",
                "lineNumber": "40",
                "contextLine": "x = len(users)",
            },
        ],
    },
}


class FakeClient(ReviewClient):
    """Records requests and returns a canned response or raises."""

    def __init__(self, content="", error=None):
        self.content = content
        self.error = error
        self.requests = []

    @property
    def name(self):
        return "Fake (test)"

    def generate(self, system, prompt):
        self.requests.append((system, prompt))
        if self.error:
            raise self.error
        return LLMResponse(content=self.content, model="fake", tokens_used=7)


# ---------------------------------------------------------------------------
# parse_review
# ---------------------------------------------------------------------------

class TestParseReview:

    def test_valid_response(self):
        result = parse_review(json.dumps(VALID))
        assert result.commit_message == "feat: add login\n\n- add /login endpoint"
        assert result.critical == [Finding("Hardcoded password", "app/auth.py", "12")]
        assert result.suggestions[0].context_line == "x = len(users)"
        assert not result.is_clean

    def test_round_trip(self):
        result = parse_review(json.dumps(VALID))
        assert parse_review(json.dumps(result.to_dict())) == result
        assert result.to_dict() == VALID

    def test_empty_lists_are_clean(self):
        result = parse_review(json.dumps({"commitMessage": "chore: x", "review": {"critical": [], "suggestions": []}}))
        assert result.is_clean

    @pytest.mark.parametrize("text", [
        pytest.param("```json\n" + json.dumps(VALID) + "\n```", id="json-fence"),
        pytest.param("```\n" + json.dumps(VALID) + "\n```", id="bare-fence"),
        pytest.param("  \n```JSON\n" + json.dumps(VALID) + "```  \n", id="padded-fence"),
    ])
    def test_strips_wrapping_fences(self, text):
        assert parse_review(text).commit_message.startswith("feat: add login")

    @pytest.mark.parametrize("text", [None, "", "   \n\t"])
    def test_empty_response(self, text):
        with pytest.raises(EmptyResponseError, match="Empty response"):
            parse_review(text)

    @pytest.mark.parametrize("text", [
        pytest.param('{"commitMessage": "feat: x", "review": {', id="unbalanced-braces"),
        pytest.param("Here you go:\n```json\n{}\n```", id="fence-after-prose"),
        pytest.param("not json at all", id="prose"),
    ])
    def test_malformed_json_is_parse_error(self, text):
        with pytest.raises(ResponseParseError) as exc_info:
            parse_review(text)
        assert not isinstance(exc_info.value, ReviewSchemaError)
        assert "Raw:" in str(exc_info.value)

    def test_parse_error_snippet_is_bounded(self):
        text = "x" * 1000
        with pytest.raises(ResponseParseError) as exc_info:
            parse_review(text)
        assert exc_info.value.snippet == "x" * 200 + "..."

    def test_errors_are_contract_errors(self):
        for error in (EmptyResponseError, ResponseParseError, ReviewSchemaError, RateLimitedError, TransportError):
            assert issubclass(error, ContractError)
        assert issubclass(ContractError, LLMError)


class TestStripCodeFences:

    def test_plain_text_unchanged(self):
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'

    def test_inner_backticks_kept(self):
        text = '{"message": "use ```code``` blocks"}'
        assert strip_code_fences(text) == text


# ---------------------------------------------------------------------------
# Schema validation
# ---------------------------------------------------------------------------

def _with(**changes):
    data = json.loads(json.dumps(VALID))
    for path, value in changes.items():
        target = data
        keys = path.split("__")
        for key in keys[:-1]:
            target = target[int(key)] if isinstance(target, list) else target[key]
        target[keys[-1]] = value
    return data


class TestReviewSchema:

    @pytest.mark.parametrize("data, where", [
        pytest.param([], "response", id="not-object"),
        pytest.param({"review": VALID["review"]}, "response.commitMessage", id="missing-message"),
        pytest.param(_with(commitMessage=42), "response.commitMessage", id="message-not-string"),
        pytest.param(_with(commitMessage="  "), "response.commitMessage", id="message-blank"),
        pytest.param({"commitMessage": "feat: x"}, "response.review", id="missing-review"),
        pytest.param(_with(review="none"), "response.review", id="review-not-object"),
        pytest.param({"commitMessage": "feat: x", "review": {"critical": []}}, "review.suggestions", id="missing-suggestions"),
        pytest.param(_with(review__critical={}), "review.critical", id="critical-not-array"),
        pytest.param(_with(review__critical=["oops"]), "review.critical[0]", id="finding-not-object"),
        pytest.param(_with(review__suggestions__0__filePath=None), "review.suggestions[0].filePath", id="finding-null-path"),
        pytest.param(_with(review__suggestions__0__contextLine=["a"]), "review.suggestions[0].contextLine", id="context-not-string"),
    ])
    def test_rejects_on_first_violation(self, data, where):
        with pytest.raises(ReviewSchemaError) as exc_info:
            ReviewResult.from_dict(data)
        assert exc_info.value.where == where

    def test_numeric_line_number_normalized(self):
        result = ReviewResult.from_dict(_with(review__critical__0__lineNumber=12))
        assert result.critical[0].line_number == "12"

    def test_boolean_line_number_rejected(self):
        with pytest.raises(ReviewSchemaError):
            ReviewResult.from_dict(_with(review__critical__0__lineNumber=True))

    def test_blank_optional_fields_become_none(self):
        result = ReviewResult.from_dict(_with(review__suggestions__0__contextLine="  "))
        assert result.suggestions[0].context_line is None

    def test_commit_message_trimmed(self):
        assert ReviewResult.from_dict(_with(commitMessage="\n feat: x \n")).commit_message == "feat: x"

    def test_location(self):
        assert Finding("m", "a.py", "3").location == "a.py:3"
        assert Finding("m", "a.py").location == "a.py:?"


# ---------------------------------------------------------------------------
# Transport error cleaning
# ---------------------------------------------------------------------------

class TestCleanErrorMessage:

    def test_429_with_diagnostic_payload(self):
        raw = '[429 Too Many Requests] Quota exceeded [{"@type":"type.googleapis.com/google.rpc.QuotaFailure","violations":[{"quotaMetric":"x"}]}]'
        assert clean_error_message(raw) == "[429 Too Many Requests] Quota exceeded"

    def test_transport_error_classifies_429(self):
        raw = '[429 Too Many Requests] Quota exceeded [{"@type":"x"}]'
        error = transport_error(raw)
        assert isinstance(error, RateLimitedError)
        assert str(error) == "[429 Too Many Requests] Quota exceeded"

    def test_anthropic_style_dict_repr(self):
        raw = "Error code: 429 - {'type': 'error', 'error': {'type': 'rate_limit_error'}}"
        assert clean_error_message(raw) == "Error code: 429"

    def test_status_message_kept_from_longer_text(self):
        raw = "Request failed: [400 Bad Request] API key not valid. {\"error\": {}}"
        assert clean_error_message(raw) == "[400 Bad Request] API key not valid."

    def test_plain_message_unchanged(self):
        assert clean_error_message("connection reset by peer") == "connection reset by peer"

    def test_all_payload_falls_back_to_raw(self):
        raw = '{"error": "x"}'
        assert clean_error_message(raw) == raw

    @pytest.mark.parametrize("message, status, expected", [
        ("anything", 429, True),
        ("429 RESOURCE_EXHAUSTED", None, True),
        ("Too Many Requests", None, True),
        ("rate_limit_error", None, True),
        ("port 14290 refused", None, False),
        ("Internal error", 500, False),
    ])
    def test_is_rate_limited(self, message, status, expected):
        assert is_rate_limited(message, status) is expected

    def test_other_status_is_transport_error(self):
        error = transport_error("[503 Service Unavailable] try later", 503)
        assert type(error) is TransportError
        assert error.status_code == 503

    @pytest.mark.parametrize("code, status, message, expected", [
        (429, "RESOURCE_EXHAUSTED", "Quota exceeded.", "[429 RESOURCE_EXHAUSTED] Quota exceeded."),
        (400, None, "API key not valid.", "[400] API key not valid."),
        (None, None, "plain", "plain"),
        (500, "INTERNAL", None, "[500 INTERNAL]"),
    ])
    def test_status_error_text(self, code, status, message, expected):
        assert status_error_text(code, status, message) == expected


# ---------------------------------------------------------------------------
# ReviewService
# ---------------------------------------------------------------------------

class TestReviewService:

    @pytest.fixture
    def change_set(self):
        return ChangeSet(files=(FileChange("app.py", "+print(1)\n", 10),))

    def test_single_request_with_language(self, change_set):
        client = FakeClient(json.dumps(VALID))
        result = ReviewService(client).review(change_set, "ko")

        assert result.commit_message.startswith("feat: add login")
        assert len(client.requests) == 1
        system, prompt = client.requests[0]
        assert "Korean" in system
        assert "File: app.py\n+print(1)" in prompt

    def test_prompt_truncated_by_builder(self, change_set):
        client = FakeClient(json.dumps(VALID))
        ReviewService(client, PromptBuilder(max_chars=5)).review(change_set)
        assert "+print" not in client.requests[0][1]

    def test_transport_failure_not_retried(self, change_set):
        client = FakeClient(error=RateLimitedError("[429 Too Many Requests] Quota exceeded"))
        with pytest.raises(RateLimitedError):
            ReviewService(client).review(change_set)
        assert len(client.requests) == 1

    def test_bad_json_propagates(self, change_set):
        with pytest.raises(ResponseParseError):
            ReviewService(FakeClient("{oops")).review(change_set)


# ---------------------------------------------------------------------------
# Provider clients
# ---------------------------------------------------------------------------

class _FakeModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.response


class TestGeminiClient:

    @pytest.fixture
    def client(self):
        return GeminiClient(api_key="test-key", model="gemini-2.5-flash-lite")

    def test_requires_api_key(self):
        with pytest.raises(LLMError, match="GEMINI_API_KEY"):
            GeminiClient(api_key="")

    def test_generate_requests_json(self, client, monkeypatch):
        models = _FakeModels(SimpleNamespace(text=' {"a": 1} \n', usage_metadata=SimpleNamespace(total_token_count=42)))
        monkeypatch.setattr(client, "_client", SimpleNamespace(models=models))

        response = client.generate("system text", "prompt text")

        assert response.content == '{"a": 1}'
        assert response.tokens_used == 42
        call = models.calls[0]
        assert call["model"] == "gemini-2.5-flash-lite"
        assert call["contents"] == "prompt text"
        assert call["config"].response_mime_type == "application/json"

    def test_missing_text_is_empty(self, client, monkeypatch):
        models = _FakeModels(SimpleNamespace(text=None, usage_metadata=None))
        monkeypatch.setattr(client, "_client", SimpleNamespace(models=models))
        assert client.generate("s", "p").content == ""

    def test_api_error_429_is_rate_limited(self, client, monkeypatch):
        from google.genai import errors

        error = errors.ClientError(429, {"error": {
            "code": 429,
            "message": "You exceeded your current quota, please check your plan and billing details.",
            "status": "RESOURCE_EXHAUSTED",
            "details": [{"@type": "type.googleapis.com/google.rpc.QuotaFailure"}],
        }})
        monkeypatch.setattr(client, "_client", SimpleNamespace(models=_FakeModels(error=error)))
        with pytest.raises(RateLimitedError) as exc_info:
            client.generate("s", "p")
        assert str(exc_info.value) == (
            "[429 RESOURCE_EXHAUSTED] You exceeded your current quota, please check your plan and billing details."
        )

    def test_api_error_keeps_readable_message(self, client, monkeypatch):
        from google.genai import errors

        error = errors.ClientError(400, {"error": {
            "code": 400,
            "message": "API key not valid. Please pass a valid API key.",
            "status": "INVALID_ARGUMENT",
        }})
        monkeypatch.setattr(client, "_client", SimpleNamespace(models=_FakeModels(error=error)))
        with pytest.raises(TransportError) as exc_info:
            client.generate("s", "p")
        assert type(exc_info.value) is TransportError
        assert exc_info.value.status_code == 400
        assert str(exc_info.value) == "[400 INVALID_ARGUMENT] API key not valid. Please pass a valid API key."

    def test_network_error_is_transport_error(self, client, monkeypatch):
        error = httpx.ConnectError("connection refused")
        monkeypatch.setattr(client, "_client", SimpleNamespace(models=_FakeModels(error=error)))
        with pytest.raises(TransportError, match="Could not reach Gemini"):
            client.generate("s", "p")


class TestClaudeClient:

    @pytest.fixture
    def client(self):
        return ClaudeClient(api_key="test-key", model="claude-3-5-haiku-latest")

    def _status_error(self, cls, status, message, body=None):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        return cls(message, response=httpx.Response(status, request=request), body=body)

    def test_generate_returns_first_text_block(self, client, monkeypatch):
        response = SimpleNamespace(
            content=[SimpleNamespace(type="text", text=' {"a": 1} ')],
            usage=SimpleNamespace(input_tokens=10, output_tokens=5),
        )
        calls = []

        def create(**kwargs):
            calls.append(kwargs)
            return response

        monkeypatch.setattr(client, "_client", SimpleNamespace(messages=SimpleNamespace(create=create)))
        result = client.generate("system text", "prompt text")

        assert result.content == '{"a": 1}'
        assert result.tokens_used == 15
        assert calls[0]["system"].startswith("system text")
        assert calls[0]["messages"] == [{"role": "user", "content": "prompt text"}]

    def test_rate_limit(self, client, monkeypatch):
        import anthropic

        body = {"type": "error", "error": {
            "type": "rate_limit_error",
            "message": "Number of request tokens has exceeded your per-minute rate limit.",
        }}
        error = self._status_error(anthropic.RateLimitError, 429, f"Error code: 429 - {body}", body=body)

        def create(**kwargs):
            raise error

        monkeypatch.setattr(client, "_client", SimpleNamespace(messages=SimpleNamespace(create=create)))
        with pytest.raises(RateLimitedError) as exc_info:
            client.generate("s", "p")
        assert str(exc_info.value) == (
            "[429 rate_limit_error] Number of request tokens has exceeded your per-minute rate limit."
        )

    def test_rate_limit_without_body_falls_back_to_message(self, client, monkeypatch):
        import anthropic

        error = self._status_error(anthropic.RateLimitError, 429, "Error code: 429 - {'type': 'error'}")

        def create(**kwargs):
            raise error

        monkeypatch.setattr(client, "_client", SimpleNamespace(messages=SimpleNamespace(create=create)))
        with pytest.raises(RateLimitedError, match="Error code: 429"):
            client.generate("s", "p")

    def test_auth_error(self, client, monkeypatch):
        import anthropic

        error = self._status_error(anthropic.AuthenticationError, 401, "invalid x-api-key")

        def create(**kwargs):
            raise error

        monkeypatch.setattr(client, "_client", SimpleNamespace(messages=SimpleNamespace(create=create)))
        with pytest.raises(TransportError) as exc_info:
            client.generate("s", "p")
        assert exc_info.value.status_code == 401


class TestGetClient:

    def test_unknown_provider(self):
        with pytest.raises(LLMError, match="Unknown provider"):
            get_client("ollama", api_key="k")

    def test_gemini_client_with_model(self):
        client = get_client("gemini", api_key="k", model="gemini-3-flash-preview", temperature=0.5)
        assert isinstance(client, GeminiClient)
        assert client.name == "Gemini (gemini-3-flash-preview)"
        assert client.temperature == 0.5
