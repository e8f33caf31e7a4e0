"""Review data model and its JSON schema.

The service's JSON is decoded here, at the boundary. A missing or mistyped
field is a ReviewSchemaError on the first violation; nothing downstream sees
a half-decoded result.
"""

from dataclasses import dataclass, field
from typing import Any

from commitcat.llm.base import ResponseParseError


class ReviewSchemaError(ResponseParseError):
    """Valid JSON that does not match the review contract."""

    def __init__(self, where: str, problem: str):
        self.where = where
        super().__init__(f"Invalid review response: {where} {problem}")


def _require_str(data: dict, key: str, where: str) -> str:
    if key not in data:
        raise ReviewSchemaError(f"{where}.{key}", "is missing")
    value = data[key]
    if not isinstance(value, str):
        raise ReviewSchemaError(f"{where}.{key}", f"must be a string, got {type(value).__name__}")
    return value


def _optional_str(data: dict, key: str, where: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    # Models often emit line numbers as JSON numbers
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        raise ReviewSchemaError(f"{where}.{key}", f"must be a string, got {type(value).__name__}")
    return value if value.strip() else None


def _require_list(data: dict, key: str, where: str) -> list:
    if key not in data:
        raise ReviewSchemaError(f"{where}.{key}", "is missing")
    value = data[key]
    if not isinstance(value, list):
        raise ReviewSchemaError(f"{where}.{key}", f"must be an array, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Finding:
    """A single review observation and where it applies."""
    message: str
    file_path: str
    line_number: str | None = None
    context_line: str | None = None

    @property
    def location(self) -> str:
        return f"{self.file_path}:{self.line_number or '?'}"

    @classmethod
    def from_dict(cls, data: Any, where: str = "finding") -> 'Finding':
        if not isinstance(data, dict):
            raise ReviewSchemaError(where, f"must be an object, got {type(data).__name__}")
        return cls(
            message=_require_str(data, "message", where),
            file_path=_require_str(data, "filePath", where),
            line_number=_optional_str(data, "lineNumber", where),
            context_line=_optional_str(data, "contextLine", where),
        )

    def to_dict(self) -> dict:
        data = {"message": self.message, "filePath": self.file_path}
        if self.line_number is not None:
            data["lineNumber"] = self.line_number
        if self.context_line is not None:
            data["contextLine"] = self.context_line
        return data


@dataclass
class ReviewResult:
    """Commit message plus findings, as returned by one review call."""
    commit_message: str
    critical: list[Finding] = field(default_factory=list)
    suggestions: list[Finding] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.critical and not self.suggestions

    @classmethod
    def from_dict(cls, data: Any) -> 'ReviewResult':
        if not isinstance(data, dict):
            raise ReviewSchemaError("response", f"must be an object, got {type(data).__name__}")

        commit_message = _require_str(data, "commitMessage", "response").strip()
        if not commit_message:
            raise ReviewSchemaError("response.commitMessage", "is empty")

        review = data.get("review")
        if review is None:
            raise ReviewSchemaError("response.review", "is missing")
        if not isinstance(review, dict):
            raise ReviewSchemaError("response.review", f"must be an object, got {type(review).__name__}")

        critical = [
            Finding.from_dict(item, f"review.critical[{i}]")
            for i, item in enumerate(_require_list(review, "critical", "review"))
        ]
        suggestions = [
            Finding.from_dict(item, f"review.suggestions[{i}]")
            for i, item in enumerate(_require_list(review, "suggestions", "review"))
        ]
        return cls(commit_message=commit_message, critical=critical, suggestions=suggestions)

    def to_dict(self) -> dict:
        return {
            "commitMessage": self.commit_message,
            "review": {
                "critical": [f.to_dict() for f in self.critical],
                "suggestions": [f.to_dict() for f in self.suggestions],
            },
        }
