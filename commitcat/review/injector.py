"""Suggestion Injector - Write review suggestions into the code as TODO comments."""

import re
from pathlib import Path
from typing import Iterable

from loguru import logger

from commitcat.review.models import Finding

TODO_PREFIX = "TODO: [AI]"

# Comment syntax by extension; anything not listed gets '//'
HASH_EXTENSIONS = {'.py', '.sh', '.bash', '.zsh', '.yml', '.yaml', '.rb', '.toml', '.dockerfile'}
HASH_FILENAMES = {'dockerfile', 'makefile'}
BLOCK_EXTENSIONS = {'.css', '.scss', '.sass', '.less'}
MARKUP_EXTENSIONS = {'.md', '.markdown', '.html', '.htm', '.xml'}

_LEADING_WHITESPACE = re.compile(r'^[ \t]*')


def comment_for(file_path: str, message: str) -> str:
    """Render a one-line TODO comment in the file's comment syntax."""
    text = f"{TODO_PREFIX} {' '.join(message.split())}"
    path = Path(file_path)
    ext = path.suffix.lower()

    if ext in HASH_EXTENSIONS or path.name.lower() in HASH_FILENAMES:
        return f"# {text}"
    if ext in BLOCK_EXTENSIONS:
        return f"/* {text.replace('*/', '* /')} */"
    if ext in MARKUP_EXTENSIONS:
        return f"<!-- {text.replace('-->', '-- >')} -->"
    return f"// {text}"


def _line_ending(line: str) -> str:
    if line.endswith('\r\n'):
        return '\r\n'
    if line.endswith('\n'):
        return '\n'
    return ''


def _parse_line_number(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        number = int(value.strip())
    except ValueError:
        return None
    return number if number > 0 else None


def inject_comment(finding: Finding, contents: str) -> tuple[str, bool]:
    """Insert the finding's TODO comment into contents.

    The context line wins over the line number: the comment goes right
    before the first line containing the trimmed context, with that line's
    indentation. Failing that, it goes before the 1-based line number,
    unindented. If neither locates a line, contents come back unchanged.

    Returns:
        tuple: (new_contents, applied)
    """
    lines = contents.splitlines(keepends=True)
    comment = comment_for(finding.file_path, finding.message)

    index = None
    indent = ''
    context = (finding.context_line or '').strip()
    if context:
        for i, line in enumerate(lines):
            if context in line:
                index = i
                indent = _LEADING_WHITESPACE.match(line).group(0)
                break

    if index is None:
        number = _parse_line_number(finding.line_number)
        if number is not None and number <= len(lines):
            index = number - 1

    if index is None:
        return contents, False

    newline = _line_ending(lines[index]) or (_line_ending(lines[index - 1]) if index > 0 else '') or '\n'
    lines.insert(index, f"{indent}{comment}{newline}")
    return ''.join(lines), True


class SuggestionInjector:
    """Applies findings to files under the repository root."""

    def __init__(self, root: Path | str = "."):
        self.root = Path(root)

    def apply(self, finding: Finding) -> bool:
        """Inject one finding. The file is only written when the comment was placed."""
        path = self.root / finding.file_path
        if not path.resolve().is_relative_to(self.root.resolve()):
            logger.debug(f"Refusing path outside the repository: {finding.file_path}")
            return False
        try:
            with open(path, 'r', encoding='utf-8', newline='') as f:
                contents = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Cannot read {path}: {e}")
            return False

        new_contents, applied = inject_comment(finding, contents)
        if not applied:
            logger.debug(f"No anchor for {finding.location} (context={finding.context_line!r})")
            return False

        try:
            with open(path, 'w', encoding='utf-8', newline='') as f:
                f.write(new_contents)
        except OSError as e:
            logger.warning(f"Could not write {path}: {e}")
            return False
        logger.debug(f"Injected TODO at {finding.location}")
        return True

    def apply_selected(self, pending: list[Finding], indices: Iterable[int]) -> tuple[list[Finding], int]:
        """Apply the chosen pending findings and drop the ones that landed.

        Applied findings leave the pending list so a later pass cannot insert
        the same comment twice; findings that found no anchor stay pending.

        Returns:
            tuple: (new pending list in original order, number applied)
        """
        applied = set()
        for index in indices:
            if index not in applied and self.apply(pending[index]):
                applied.add(index)
        remaining = [f for i, f in enumerate(pending) if i not in applied]
        return remaining, len(applied)
