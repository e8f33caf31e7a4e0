"""Terminal Output Formatting Package

Colours are looked up by role (what the text means in a review) rather than
by colour name, so the report, the prompts and the status lines stay
consistent.
"""

import sys
import os
import threading

from commitcat.output.layout import visual_width, wrap_text, box_message, terminal_columns, default_wrap_width

ANSI = {
    'reset': '\033[0m',
    'bold': '\033[1m',
    'dim': '\033[2m',
    'black': '\033[30m',
    'red': '\033[31m',
    'green': '\033[32m',
    'yellow': '\033[33m',
    'cyan': '\033[36m',
    'bg_yellow': '\033[43m',
}

# role -> ANSI codes
STYLES = {
    'success': ('green',),
    'error': ('red',),
    'warning': ('yellow',),
    'info': ('cyan',),
    'dim': ('dim',),
    'bold': ('bold',),
    'critical': ('bold', 'red'),
    'finding': ('red',),
    'suggestion': ('yellow',),
    'location': ('bg_yellow', 'black'),
    'ai_error': ('red',),
}


def _supports_color(stream=None) -> bool:
    stream = stream or sys.stdout
    if os.environ.get('NO_COLOR'):
        return False
    if os.environ.get('FORCE_COLOR'):
        return True
    if not getattr(stream, 'isatty', None) or not stream.isatty():
        return False
    if sys.platform != 'win32':
        return True
    try:
        import ctypes
        kernel32 = ctypes.windll.kernel32
        kernel32.SetConsoleMode(kernel32.GetStdHandle(-11), 7)
    except (AttributeError, OSError):
        return False
    return True


def _supports_unicode(stream=None) -> bool:
    stream = stream or sys.stdout
    # Hangul messages and box borders need more than cp1252
    try:
        '✓─한'.encode(getattr(stream, 'encoding', None) or 'utf-8')
    except (UnicodeEncodeError, LookupError):
        return False
    return True


COLORS_ENABLED = _supports_color()
UNICODE_ENABLED = _supports_unicode()

CHECK = '✓' if UNICODE_ENABLED else '[OK]'
CROSS = '✗' if UNICODE_ENABLED else '[X]'
BULLET = '•' if UNICODE_ENABLED else '*'
WARN = '⚠' if UNICODE_ENABLED else '[!]'


def styled(role: str, text: str) -> str:
    """Wrap text in the ANSI codes for a role. Plain text when colour is off."""
    if not COLORS_ENABLED:
        return text
    codes = ''.join(ANSI[name] for name in STYLES[role])
    return f"{codes}{text}{ANSI['reset']}"


def success(text: str) -> str:
    return styled('success', text)


def error(text: str) -> str:
    return styled('error', text)


def warning(text: str) -> str:
    return styled('warning', text)


def info(text: str) -> str:
    return styled('info', text)


def dim(text: str) -> str:
    return styled('dim', text)


def bold(text: str) -> str:
    return styled('bold', text)


def badge(text: str) -> str:
    """Black on yellow label, used for suggestion locations."""
    return styled('location', f" {text} ")


def critical_heading(text: str) -> str:
    return styled('critical', text)


def critical_line(location: str, message: str) -> str:
    """One critical finding: "  [config.py:3] Hardcoded API key"."""
    return styled('finding', f"  [{location}] {message}")


def suggestion_text(text: str) -> str:
    return styled('suggestion', text)


def ai_error_box(message: str) -> str:
    """The provider's failure, boxed under an "AI Error" title."""
    return styled('ai_error', box_message("AI Error", message, unicode=UNICODE_ENABLED))


def print_success(message: str) -> None:
    print(f"{success(CHECK)} {message}")


def print_error(message: str) -> None:
    print(f"{error(CROSS)} {error(message)}", file=sys.stderr)


def print_warning(message: str) -> None:
    print(f"{warning(WARN)} {warning(message)}")


def print_info(message: str) -> None:
    print(f"{info(BULLET)} {message}")


class Spinner:
    """Animated spinner for the collect and review steps. Use as context manager.

    On exit it leaves one status line behind: ``done`` when the block
    finished, ``failed`` when it raised.
    """
    FRAMES_UNICODE = ['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']
    FRAMES_ASCII = ['-', '\\', '|', '/']

    def __init__(self, text: str = "", done: str = "", failed: str = "Error"):
        self.text = text
        self.done = done
        self.failed = failed
        self._thread = None
        self._stop_event = threading.Event()
        self._frames = self.FRAMES_UNICODE if UNICODE_ENABLED else self.FRAMES_ASCII
        self._tty = sys.stdout.isatty()

    def _spin(self):
        idx = 0
        while not self._stop_event.is_set():
            frame = self._frames[idx % len(self._frames)]
            print(f'\r\033[K{frame} {self.text}', end='', flush=True)
            idx += 1
            self._stop_event.wait(0.08)

    def __enter__(self):
        if self._tty:
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._spin, daemon=True)
            self._thread.start()
        elif self.text:
            print(self.text)
        return self

    def __exit__(self, exc_type, exc, tb):
        self._stop_event.set()
        if self._thread:
            self._thread.join()
        if self._tty:
            print('\r\033[K', end='', flush=True)
        # Ctrl+C gets its own "Operation cancelled." line
        if exc_type is KeyboardInterrupt:
            return False
        if exc_type is not None:
            print(f"{error(CROSS)} {error(self.failed)}")
        elif self.done:
            print(f"{success(CHECK)} {success(self.done)}")
        return False


__all__ = [
    "ANSI", "STYLES", "COLORS_ENABLED", "UNICODE_ENABLED",
    "CHECK", "CROSS", "BULLET", "WARN",
    "styled", "success", "error", "warning", "info", "dim", "bold", "badge",
    "critical_heading", "critical_line", "suggestion_text", "ai_error_box",
    "print_success", "print_error", "print_warning", "print_info",
    "Spinner",
    "visual_width", "wrap_text", "box_message", "terminal_columns", "default_wrap_width",
]
