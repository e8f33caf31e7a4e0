"""Interactive Resolution Loop

The review flow as an explicit state machine. Each state has one handler
that performs its side effects and returns the next state; the action menu
maps the user's choice to a state through ACTION_TRANSITIONS. Edit and
annotate return to the menu, so the user can annotate, edit and annotate
again before committing.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable

from commitcat.cli.display import (
    report_findings, report_skipped, show_ai_error, show_header, show_message, suggestion_label,
)
from commitcat.cli.prompts import Cancelled, Option, TerminalPrompts
from commitcat.cli.utils import edit_message
from commitcat.git.collector import ChangeSet, DiffCollector
from commitcat.git.repository import CommitError, GitError, GitRepository
from commitcat.llm.base import ContractError
from commitcat.output import Spinner, dim, print_error, print_info, print_success, print_warning
from commitcat.review.contract import ReviewService
from commitcat.review.injector import SuggestionInjector
from commitcat.review.models import Finding, ReviewResult


class State(Enum):
    INIT = auto()
    STAGING = auto()
    COLLECTING = auto()
    REQUESTING = auto()
    REPORTING = auto()
    ACTING = auto()
    EDITING = auto()
    ANNOTATING = auto()
    FINALIZING = auto()
    CANCELLED = auto()
    TERMINAL = auto()


class Action(Enum):
    COMMIT = "commit"
    EDIT = "edit"
    ANNOTATE = "annotate"
    CANCEL = "cancel"


ACTION_TRANSITIONS = {
    Action.COMMIT: State.FINALIZING,
    Action.EDIT: State.EDITING,
    Action.ANNOTATE: State.ANNOTATING,
    Action.CANCEL: State.CANCELLED,
}


@dataclass
class Session:
    """Mutable state of one run. Only the loop touches it."""
    staged_files: list[str] = field(default_factory=list)
    change_set: ChangeSet | None = None
    result: ReviewResult | None = None
    current_message: str = ""
    suggestions: list[Finding] = field(default_factory=list)
    applied_count: int = 0
    exit_code: int = 0
    visited: list[State] = field(default_factory=list)


class ResolutionLoop:
    """Stage, collect, review, then let the user commit, edit, annotate or cancel."""

    def __init__(self, git: GitRepository, collector: DiffCollector, reviewer: ReviewService,
                 injector: SuggestionInjector, language: str = "en", prompts=None,
                 editor: Callable[[str], str | None] = edit_message):
        self.git = git
        self.collector = collector
        self.reviewer = reviewer
        self.injector = injector
        self.language = language
        self.prompts = prompts or TerminalPrompts()
        self.editor = editor
        self.session = Session()
        self._handlers = {
            State.INIT: self._init,
            State.STAGING: self._stage,
            State.COLLECTING: self._collect,
            State.REQUESTING: self._request,
            State.REPORTING: self._report,
            State.ACTING: self._act,
            State.EDITING: self._edit,
            State.ANNOTATING: self._annotate,
            State.FINALIZING: self._finalize,
            State.CANCELLED: self._cancelled,
        }

    def run(self) -> int:
        """Drive the machine to TERMINAL and return the exit code."""
        state = State.INIT
        while state is not State.TERMINAL:
            state = self.step(state)
        return self.session.exit_code

    def step(self, state: State) -> State:
        self.session.visited.append(state)
        return self._handlers[state]()

    def _finish(self, exit_code: int) -> State:
        self.session.exit_code = exit_code
        return State.TERMINAL

    def _fail(self, message: str) -> State:
        print_error(message)
        return self._finish(1)

    # -- states -----------------------------------------------------------

    def _init(self) -> State:
        show_header(self.reviewer.client.name, self.language)
        return State.STAGING

    def _stage(self) -> State:
        try:
            files = self.git.list_staged_files()
            if not files:
                if not self.git.has_changes():
                    print_warning("Nothing to commit, working tree clean.")
                    return self._finish(0)

                print_warning("No staged files.")
                answer = self.prompts.confirm("Stage all changes?", default=True)
                if isinstance(answer, Cancelled):
                    return State.CANCELLED
                if not answer.value:
                    print(dim("Aborted."))
                    return self._finish(0)

                self.git.stage_all()
                files = self.git.list_staged_files()
                if not files:
                    print_warning("No changes found.")
                    return self._finish(0)
                print_success(f"Staged {len(files)} files.")
        except GitError as e:
            return self._fail(str(e))

        self.session.staged_files = files
        return State.COLLECTING

    def _collect(self) -> State:
        with Spinner("Reading changes...", done="Done"):
            change_set = self.collector.collect(self.session.staged_files)
        self.session.change_set = change_set

        report_skipped(change_set)
        if not change_set.has_content:
            return self._fail("No reviewable text changes (all files were binary, ignored, or too large).")
        return State.REQUESTING

    def _request(self) -> State:
        try:
            with Spinner("Thinking...", done="Meow!"):
                result = self.reviewer.review(self.session.change_set, self.language)
        except ContractError as e:
            show_ai_error(str(e))
            return self._finish(1)

        self.session.result = result
        return State.REPORTING

    def _report(self) -> State:
        result = self.session.result
        report_findings(result)
        self.session.current_message = result.commit_message
        self.session.suggestions = list(result.suggestions)
        return State.ACTING

    def _act(self) -> State:
        show_message(self.session.current_message)
        pending = len(self.session.suggestions)
        options = [
            Option(Action.COMMIT, "Commit"),
            Option(Action.EDIT, "Edit message"),
            Option(Action.ANNOTATE, f"Add TODO comments from suggestions ({pending} left)", disabled=not pending),
            Option(Action.CANCEL, "Cancel"),
        ]
        answer = self.prompts.select("Commit with this message?", options)
        if isinstance(answer, Cancelled):
            return State.CANCELLED
        return ACTION_TRANSITIONS[answer.value]

    def _edit(self) -> State:
        edited = self.editor(self.session.current_message)
        if edited is None:
            print_warning("Editor failed or left the message empty; keeping the current message.")
        else:
            self.session.current_message = edited
        return State.ACTING

    def _annotate(self) -> State:
        pending = self.session.suggestions
        if not pending:
            print_info("No suggestions left.")
            return State.ACTING

        answer = self.prompts.multiselect(
            "Select suggestions to add as TODO comments",
            [Option(i, suggestion_label(f)) for i, f in enumerate(pending)],
        )
        if isinstance(answer, Cancelled):
            return State.CANCELLED
        if not answer.value:
            print(dim("Nothing selected."))
            return State.ACTING

        remaining, applied = self.injector.apply_selected(pending, answer.value)
        self.session.suggestions = remaining
        self.session.applied_count += applied

        print_success(f"Applied {applied} TODO comments!")
        skipped = len(set(answer.value)) - applied
        if skipped:
            print_warning(f"Skipped {skipped} (file missing or anchor not found).")
        if not remaining:
            print_info("All suggestions applied.")

        try:
            self.git.stage_all()
        except GitError as e:
            return self._fail(str(e))
        print(dim("Re-staged changes."))
        return State.ACTING

    def _finalize(self) -> State:
        try:
            output = self.git.commit(self.session.current_message)
        except CommitError as e:
            return self._fail(f"Commit failed: {e}")

        if output.strip():
            print(dim(output.strip()))
        print_success("Commit complete! (Don't forget to push: git push)")
        return self._finish(0)

    def _cancelled(self) -> State:
        print(dim("Operation cancelled."))
        return self._finish(0)
