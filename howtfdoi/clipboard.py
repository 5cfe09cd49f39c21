"""Clipboard support.

Copying relies on ``pyperclip``, which shells out to the platform's
clipboard utility (``pbcopy``, ``xclip``/``xsel``/``wl-copy``,
``clip.exe``).  On systems without one the copy simply does not
happen; callers get ``False`` back and nothing is reported.
"""

import pyperclip


def copy_to_clipboard(text: str) -> bool:
    """Write ``text`` to the system clipboard, returning whether it worked."""
    try:
        pyperclip.copy(text)
    except (pyperclip.PyperclipException, OSError):
        return False
    return True
