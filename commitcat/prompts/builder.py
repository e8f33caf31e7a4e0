"""Prompt Builder - Construct the review request sent to the model."""

from commitcat import LANGUAGES

# The exact JSON shape the response parser accepts
OUTPUT_SCHEMA = """{
  "commitMessage": "type: subject\\n\\n- detail\\n- detail",
  "review": {
    "critical": [
      { "message": "Why this is dangerous", "filePath": "path/to/file", "lineNumber": "10" }
    ],
    "suggestions": [
      {
        "message": "Actionable suggestion",
        "filePath": "path/to/file",
        "lineNumber": "25",
        "contextLine": "unique code snippet from the diff"
      }
    ]
  }
}"""

# Extra rules for languages other than English
LANGUAGE_RULES = {
    'ko': "- **NO ENGLISH:** Do NOT write English in the JSON values except for identifiers and code terms.",
}


class PromptBuilder:
    """Builds the system instruction and the diff payload for one review call."""

    DEFAULT_MAX_CHARS = 5000

    def __init__(self, max_chars: int = DEFAULT_MAX_CHARS):
        self.max_chars = max_chars

    def system_instruction(self, language: str = "en") -> str:
        language_name = LANGUAGES.get(language, LANGUAGES['en'])
        sections = [
            self._build_role_section(language_name),
            self._build_task_section(language_name),
            self._build_format_section(),
            self._build_rules_section(language, language_name),
        ]
        return "\n\n".join(sections)

    def build(self, diff_text: str) -> str:
        """User payload: the diff, cut at max_chars.

        The cut is blunt and may land mid-line; it only keeps requests bounded.
        """
        truncated = len(diff_text) > self.max_chars
        parts = ["**Git Diff:**", diff_text[:self.max_chars]]
        if truncated:
            parts.append(f"\n[Note: Diff truncated to {self.max_chars} characters. Review only what is shown.]")
        return "\n".join(parts)

    def _build_role_section(self, language_name: str) -> str:
        return f"""You are an expert Senior Developer and Code Reviewer who writes in {language_name}.
Analyze the provided git diff and respond with a single valid JSON object and nothing else."""

    def _build_task_section(self, language_name: str) -> str:
        return f"""<task>
1. Commit message: write a Conventional Commit message in {language_name}.
   - Format: 'type: subject'
   - If the changes are not trivial, include a bulleted body explaining what changed and why.
   - Separate subject and body with a blank line.
2. Code review: sort every finding into exactly one category.
   - critical: security problems (hardcoded passwords, API keys, tokens, secrets), bugs, infinite loops, logic errors.
   - suggestions: style, performance, naming, clean-code improvements.
</task>"""

    def _build_format_section(self) -> str:
        return f"""<format>
Output JSON format (strict):
{OUTPUT_SCHEMA}
</format>"""

    def _build_rules_section(self, language: str, language_name: str) -> str:
        rules = [
            f"- Language: ALL values (commit message, review messages) MUST be in {language_name}.",
            "- Any hardcoded secret (password, API key, token) in an ADDED line ('+') MUST be 'critical', NEVER 'suggestions'.",
            "- EXCLUSIVE: an issue listed in 'critical' must NOT also appear in 'suggestions'.",
            "- ACTIONABLE ONLY: suggestions say what to fix or improve. Do not summarize the diff.",
            "- DELETED lines ('-') were removed by the author. NEVER review them.",
            "- ADDED lines ('+') are the new code. Focus the review there.",
            "- Context lines are for understanding only; do not flag unchanged code unless the new change breaks it.",
            "- 'lineNumber': estimate it from the hunk header (@@ -a,b +c,d @@) for the NEW file.",
            "- 'contextLine': copy one unique line of the new code verbatim; it is used to place a TODO comment.",
            "- If there are no findings in a category, return an empty array [].",
        ]
        if language in LANGUAGE_RULES:
            rules.append(LANGUAGE_RULES[language])
        return "<rules>\n" + "\n".join(rules) + "\n</rules>"
