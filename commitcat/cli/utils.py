"""CLI Utility Functions"""

import os
import shlex
import subprocess
import sys
import tempfile

from loguru import logger


def get_editor() -> list[str]:
    editor = os.environ.get('VISUAL') or os.environ.get('EDITOR')
    if not editor:
        editor = 'notepad' if sys.platform == 'win32' else 'vi'
    # EDITOR may carry flags, e.g. "code --wait"
    return shlex.split(editor, posix=sys.platform != 'win32')


def edit_message(message: str) -> str | None:
    """Open message in user's editor. Returns edited text or None on failure.

    The temp file is removed on every path out, including editor failure.
    """
    tmp = tempfile.NamedTemporaryFile(mode='w', suffix='.gitcommit', delete=False, encoding='utf-8')
    try:
        tmp.write(message)
        tmp.close()
        subprocess.run([*get_editor(), tmp.name], check=True)
        with open(tmp.name, 'r', encoding='utf-8') as f:
            edited = f.read().strip()
        return edited if edited else None
    except (subprocess.CalledProcessError, OSError) as e:
        logger.debug(f"Editor failed: {e}")
        return None
    finally:
        tmp.close()
        try:
            os.unlink(tmp.name)
        except OSError as e:
            # Log so temp files don't silently accumulate
            logger.warning(f"Could not delete temp file {tmp.name}: {e}")
