"""Interactive Prompts

Every prompt returns either Confirmed(value) or CANCELLED. Cancellation
(q, Ctrl+C, Ctrl+D) is a normal outcome the caller handles, not an exception,
and a falsy answer such as False or [] is never confused with it.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from commitcat.output import bold, dim, info

T = TypeVar('T')


@dataclass(frozen=True)
class Confirmed(Generic[T]):
    value: T


@dataclass(frozen=True)
class Cancelled:
    pass


CANCELLED = Cancelled()

PromptResult = Union[Confirmed[T], Cancelled]


@dataclass(frozen=True)
class Option:
    """One selectable entry."""
    value: Any
    label: str
    disabled: bool = False


def _ask(text: str) -> str | None:
    """Read one line; None means the user interrupted."""
    try:
        return input(text).strip()
    except (KeyboardInterrupt, EOFError):
        print()
        return None


class TerminalPrompts:
    """Line-based prompts on stdin/stdout."""

    def confirm(self, message: str, default: bool = True) -> PromptResult[bool]:
        hint = "[Y/n]" if default else "[y/N]"
        while True:
            answer = _ask(f"{bold('?')} {message} {dim(hint)} ")
            if answer is None:
                return CANCELLED
            answer = answer.lower()
            if answer == '':
                return Confirmed(default)
            if answer in ('y', 'yes'):
                return Confirmed(True)
            if answer in ('n', 'no'):
                return Confirmed(False)
            if answer == 'q':
                return CANCELLED
            print("Enter y, n, or q")

    def select(self, message: str, options: list[Option]) -> PromptResult[Any]:
        print(f"\n{bold('?')} {message}")
        for i, opt in enumerate(options, 1):
            if opt.disabled:
                print(dim(f"  [{i}] {opt.label} (unavailable)"))
            else:
                print(f"  {info(f'[{i}]')} {opt.label}")

        while True:
            answer = _ask(f"Select [1-{len(options)}] or (q)uit: ")
            if answer is None or answer.lower() == 'q':
                return CANCELLED
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                opt = options[int(answer) - 1]
                if not opt.disabled:
                    return Confirmed(opt.value)
            print(f"Enter an available number 1-{len(options)} or q")

    def multiselect(self, message: str, options: list[Option]) -> PromptResult[list]:
        print(f"\n{bold('?')} {message}")
        for i, opt in enumerate(options, 1):
            label = opt.label.replace('\n', '\n      ')
            print(f"  {info(f'[{i}]')} {label}")

        while True:
            answer = _ask("Select numbers (e.g. 1,3), (a)ll, Enter for none, or (q)uit: ")
            if answer is None or answer.lower() == 'q':
                return CANCELLED
            if answer == '':
                return Confirmed([])
            if answer.lower() == 'a':
                return Confirmed([opt.value for opt in options])
            picked = _parse_indices(answer, len(options))
            if picked is not None:
                return Confirmed([options[i].value for i in picked])
            print(f"Enter numbers between 1 and {len(options)}, separated by commas or spaces")


def _parse_indices(answer: str, count: int) -> list[int] | None:
    """'1, 3 3' -> [0, 2]; None if any token is invalid."""
    picked = []
    for token in answer.replace(',', ' ').split():
        if not token.isdigit() or not 1 <= int(token) <= count:
            return None
        index = int(token) - 1
        if index not in picked:
            picked.append(index)
    return picked
