"""Dangerous command detection.

Generated commands are shown to the user as-is, so before that happens
the tool checks them against a small list of high blast-radius
patterns: recursive deletion of the root or of everything in the
current directory, ``dd`` writing to a device file, filesystem
creation, the classic fork bomb, redirection onto a raw disk and moving
files into ``/dev/null``.

The check is a tripwire, not a sandbox.  Matching only triggers a
displayed warning; nothing is ever blocked, and commands that are
destructive in other ways will pass unnoticed.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

# Compiled once at import time and never mutated.
DANGEROUS_PATTERNS: Tuple[re.Pattern[str], ...] = (
    re.compile(r"rm\s+-rf\s+/"),
    re.compile(r"rm\s+-rf\s+\*"),
    re.compile(r"dd\s+.*of=/dev/"),
    re.compile(r"mkfs\."),
    re.compile(r":\(\)\s*\{\s*:\|:\s*&\s*\}\s*;\s*:"),
    re.compile(r">\s*/dev/sd"),
    re.compile(r"mv\s+.*\s+/dev/null"),
)


def find_dangerous_pattern(command: str) -> Optional[str]:
    """Return the source of the first pattern matching ``command``.

    :param command: Command string taken from the parsed response.
    :returns: The regular expression that matched, or ``None``.
    """
    for pattern in DANGEROUS_PATTERNS:
        if pattern.search(command):
            return pattern.pattern
    return None


def is_dangerous(command: str) -> bool:
    """Return True if the command matches any dangerous pattern."""
    return find_dangerous_pattern(command) is not None
