"""Text layout for fixed-width terminals.

Width is measured with a coarse rule: any character above the Latin-1 range
(code point > 255) takes two columns, everything else takes one. This
approximates East-Asian wide glyphs without a full East-Asian-width table, so
some symbols (box drawing, emoji modifiers) are over-counted.

Wrapping is greedy per character and knows nothing about word boundaries;
words may be split.
"""

import shutil

DEFAULT_COLUMNS = 80
MAX_WRAP_WIDTH = 80
WRAP_MARGIN = 12
BOX_CHROME = 4  # "│ " + " │"

_UNICODE_GLYPHS = {'h': '─', 'v': '│', 'tl': '┌', 'tr': '┐', 'bl': '└', 'br': '┘'}
_ASCII_GLYPHS = {'h': '-', 'v': '|', 'tl': '+', 'tr': '+', 'bl': '+', 'br': '+'}


def char_width(char: str) -> int:
    return 2 if ord(char) > 255 else 1


def visual_width(text: str) -> int:
    """Columns needed to display text."""
    return sum(char_width(c) for c in text)


def terminal_columns() -> int | None:
    """Terminal width, or None when it cannot be determined."""
    columns = shutil.get_terminal_size((0, 0)).columns
    return columns if columns > 0 else None


def default_wrap_width() -> int:
    columns = terminal_columns()
    if columns is None:
        return DEFAULT_COLUMNS
    return max(1, min(MAX_WRAP_WIDTH, columns - WRAP_MARGIN))


def wrap_text(text: str, width: int | None = None) -> str:
    """Wrap each paragraph of text so no line is wider than width columns.

    Args:
        text: Text to wrap; existing newlines are kept as paragraph breaks
        width: Column limit. Falsy means min(80, terminal columns - 12),
            or 80 when the terminal size is unknown.
    """
    if not text:
        return ""
    limit = max(1, width or default_wrap_width())

    lines = []
    for paragraph in text.split('\n'):
        current: list[str] = []
        current_width = 0
        for char in paragraph:
            w = char_width(char)
            # A lone wide glyph on a 1-column limit still gets its own line
            if current and current_width + w > limit:
                lines.append(''.join(current))
                current, current_width = [char], w
            else:
                current.append(char)
                current_width += w
        lines.append(''.join(current))
    return '\n'.join(lines)


def box_message(title: str, text: str, width: int | None = None, unicode: bool = True) -> str:
    """Draw a frame around wrapped text with the title set into the top border.

        ┌─ Title ────────────┐
        │ wrapped content    │
        └────────────────────┘
    """
    g = _UNICODE_GLYPHS if unicode else _ASCII_GLYPHS
    columns = terminal_columns() or DEFAULT_COLUMNS
    max_content_width = width or max(1, min(MAX_WRAP_WIDTH, columns - BOX_CHROME))

    lines = wrap_text(text, max_content_width).split('\n')
    title_width = visual_width(title)
    content_width = max((visual_width(line) for line in lines), default=0)
    content_width = max(content_width, title_width + 2)
    box_width = content_width + 2

    out = [f"{g['tl']}{g['h']} {title} {g['h'] * max(0, box_width - title_width - 3)}{g['tr']}"]
    for line in lines:
        padding = ' ' * max(0, box_width - visual_width(line) - 1)
        out.append(f"{g['v']} {line}{padding}{g['v']}")
    out.append(f"{g['bl']}{g['h'] * box_width}{g['br']}")
    return '\n'.join(out)
