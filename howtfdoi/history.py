"""Query history.

Every answered query is appended to a plain-text log in the XDG state
directory.  Each record looks like::

    [2025-01-31 14:05:09] list files
    ls -la
    (Lists all files including hidden ones)
    ---

The header line holds a local timestamp and the original query, the
body is the raw model answer and a line containing exactly ``---``
closes the record.  Answers that themselves contain a ``---`` line are
written as-is, so such records look fragmented when read back.

History is best-effort: the file is opened, appended to and closed for
every query, and failures are reported only in verbose mode.  Undecodable
bytes from the command line are written back unchanged.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import click

from .config import Config

RECORD_SEPARATOR = "---"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_history_entry(query: str, response_text: str, when: Optional[datetime] = None) -> str:
    """Return one history record, including the trailing separator line."""
    timestamp = (when or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return f"[{timestamp}] {query}\n{response_text}\n{RECORD_SEPARATOR}\n"


def save_to_history(config: Config, query: str, response_text: str) -> bool:
    """Append a query and its raw answer to the history file.

    :returns: ``True`` if the record was written.  Errors never
      propagate; they are echoed as warnings when ``config.verbose`` is
      set and silently ignored otherwise.
    """
    entry = format_history_entry(query, response_text)
    try:
        with open(config.history_file, "a", encoding="utf-8", errors="surrogateescape") as f:
            f.write(entry)
    except (OSError, UnicodeError) as exc:
        if config.verbose:
            click.secho(f"Warning: Could not write to history file: {exc}", fg="yellow")
        return False
    if config.verbose:
        click.secho(f"Saved to history: {config.history_file}", fg="cyan")
    return True
