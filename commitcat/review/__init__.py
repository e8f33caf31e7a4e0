"""Review Contract and Suggestion Injection Package"""

from commitcat.review.models import Finding, ReviewResult, ReviewSchemaError
from commitcat.review.contract import ReviewService, parse_review, strip_code_fences
from commitcat.review.injector import SuggestionInjector, comment_for, inject_comment

__all__ = [
    "Finding",
    "ReviewResult",
    "ReviewSchemaError",
    "ReviewService",
    "parse_review",
    "strip_code_fences",
    "SuggestionInjector",
    "comment_for",
    "inject_comment",
]
