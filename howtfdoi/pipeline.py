"""Response pipeline.

Once a query has been answered and parsed, :func:`handle_response`
runs the post-processing steps in a fixed order:

1. display the command and explanation (or the raw text when no
   command could be found),
2. warn if the command matches a dangerous pattern,
3. append the query and raw answer to the history file,
4. copy the command to the clipboard (``-c``),
5. run the command after confirmation (``-x``).

The answer is shown before any warning so the user reads it first.
Each step absorbs its own failures: history problems are reported in
verbose mode only, clipboard problems are ignored, execution problems
are printed and output that can no longer be written is dropped.  One
broken capability never stops the steps after it.  The warning is
informational and never blocks copying or execution.
"""

from __future__ import annotations

from typing import Any, Callable

import click

from .clipboard import copy_to_clipboard
from .config import Config
from .executor import execute_command
from .history import save_to_history
from .response import Response, ResponseOptions
from .validator import find_dangerous_pattern


def display_response(response: Response) -> None:
    if response.command:
        click.secho(response.command, fg="green", bold=True)
        if response.explanation:
            click.secho(response.explanation, fg="bright_white")
    else:
        # Nothing parseable; show whatever the model said.
        click.echo(response.full_text)


def warn_if_dangerous(config: Config, command: str) -> bool:
    """Print a warning when ``command`` looks destructive.

    :returns: Whether a warning was shown.
    """
    pattern = find_dangerous_pattern(command)
    if pattern is None:
        return False
    click.secho("\nWARNING: This command may be dangerous!", fg="yellow", bold=True)
    click.secho("Please review carefully before executing.", fg="yellow")
    if config.verbose:
        click.secho(f"Matched pattern: {pattern}", fg="cyan")
    return True


def _guarded(step: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    try:
        step(*args, **kwargs)
    except (OSError, UnicodeError):
        # Terminal output is gone (e.g. stdout is a closed pipe).
        pass


def handle_response(
    config: Config,
    query: str,
    response: Response,
    opts: ResponseOptions,
) -> None:
    """Process a response with all requested options."""
    _guarded(display_response, response)

    _guarded(warn_if_dangerous, config, response.command)

    _guarded(save_to_history, config, query, response.full_text)

    if opts.copy_to_clipboard and response.command:
        if copy_to_clipboard(response.command):
            _guarded(click.secho, "\nCommand copied to clipboard!", fg="cyan")

    if opts.execute and response.command:
        execute_command(response.command)
