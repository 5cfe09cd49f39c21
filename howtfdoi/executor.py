"""Confirmed command execution.

When the user passes ``-x`` the generated command is run, but only
after an explicit ``y``/``yes`` on standard input.  The command is
handed verbatim to the system shell so pipes, redirections and globs
behave as the model intended, and the child inherits this process's
standard streams so its output is live and it can read input itself.

Failures of the executed command are shown to the user but never
change the exit status of howtfdoi.
"""

from __future__ import annotations

import subprocess
import sys
from typing import Optional, TextIO

import click

CONFIRM_ANSWERS = ("y", "yes")


def confirm(input_stream: Optional[TextIO] = None) -> bool:
    """Ask whether to proceed and read one line of input.

    Anything other than ``y`` or ``yes`` (case-insensitive), including
    an empty line or end of input, means no.
    """
    click.echo("Continue? [y/N]: ", nl=False)
    stream = input_stream or sys.stdin
    answer = stream.readline()
    return answer.strip().lower() in CONFIRM_ANSWERS


def execute_command(command: str, input_stream: Optional[TextIO] = None) -> Optional[int]:
    """Run ``command`` through the shell after interactive confirmation.

    :param command: The exact command line to run.
    :param input_stream: Where to read the confirmation from; defaults
      to standard input.
    :returns: The command's exit status, or ``None`` if the user
      cancelled or the shell could not be started.
    """
    click.secho(f"\nExecuting: {command}", fg="cyan")
    if not confirm(input_stream):
        click.secho("Cancelled.", fg="yellow")
        return None

    try:
        proc = subprocess.run(command, shell=True)
    except OSError as exc:
        click.secho(f"Error executing command: {exc}", fg="red", err=True)
        return None
    if proc.returncode != 0:
        click.secho(f"Error executing command: exit status {proc.returncode}", fg="red", err=True)
    return proc.returncode
