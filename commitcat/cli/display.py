"""Report rendering for the review flow. Display only; nothing parses this output."""

from commitcat import LANGUAGES
from commitcat.git.collector import ChangeSet
from commitcat.output import (
    UNICODE_ENABLED, ai_error_box, badge, bold, box_message, critical_heading, critical_line, dim, info,
    print_warning, success, suggestion_text, terminal_columns, wrap_text,
)
from commitcat.review.models import Finding, ReviewResult

MESSAGE_TITLE = "Proposed Commit Message"
MIN_LABEL_WIDTH = 30


def _columns() -> int:
    return terminal_columns() or 80


def show_header(model_name: str, language: str) -> None:
    print(f"\n{bold(info('commit-cat'))} {dim(f'{model_name} | {LANGUAGES.get(language, language)}')}")


def report_skipped(change_set: ChangeSet, max_shown: int = 10) -> None:
    """List skipped files with their reasons, collapsing long lists."""
    skipped = change_set.skipped
    if not skipped:
        return
    print_warning(f"Skipped {len(skipped)} files:")
    for change in skipped[:max_shown]:
        print(dim(f"  - {change.path} ({change.skip_reason.value})"))
    if len(skipped) > max_shown:
        print(dim(f"  ... and {len(skipped) - max_shown} more"))


def report_findings(result: ReviewResult) -> None:
    if result.critical:
        print(f"\n{critical_heading('CRITICAL ISSUES:')}")
        for finding in result.critical:
            print(critical_line(finding.location, finding.message))

    if result.suggestions:
        print(f"\n{badge('SUGGESTIONS')}\n")
        width = max(MIN_LABEL_WIDTH, _columns() - 8)
        for finding in result.suggestions:
            print(badge(f"[{finding.location}]"))
            if finding.context_line:
                print(dim(f"  {finding.context_line.strip()}"))
            print(suggestion_text(wrap_text(finding.message, width)))
            print()

    if result.is_clean:
        print(f"\n{success('Clean code! No issues found.')}")


def show_message(message: str) -> None:
    print()
    print(box_message(MESSAGE_TITLE, message, unicode=UNICODE_ENABLED))


def show_ai_error(message: str) -> None:
    print(ai_error_box(message))


def suggestion_label(finding: Finding) -> str:
    """Location header plus wrapped message, sized to stay inside the terminal."""
    columns = _columns()
    location = finding.location
    max_prefix = max(20, columns - 15)
    if len(location) > max_prefix:
        location = "..." + location[-(max_prefix - 3):]
    body = wrap_text(finding.message, max(MIN_LABEL_WIDTH, columns - 15))
    return f"{badge(f'[{location}]')}\n{body}"
