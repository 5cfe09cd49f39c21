"""Parsed model answers.

The model is asked to put the command on the first line and a short
explanation underneath, but nothing enforces that.  :func:`parse_response`
applies a fixed heuristic to the raw text: the first non-blank line is
the command, every other non-blank line is the explanation.  Parsing
never fails; any input, including the empty string, yields a
:class:`Response`.

Multi-line commands (heredocs, lines continued with ``\\``) are not
detected and will be split after their first line.  This is a known
limitation of the heuristic and is kept for compatibility.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Response:
    """A single parsed answer.

    ``full_text`` always holds the raw aggregate returned by the
    provider; ``command`` and ``explanation`` are derived from it and
    may both be empty.
    """

    command: str
    explanation: str
    full_text: str


@dataclass(frozen=True)
class ResponseOptions:
    """Per-invocation switches for the response pipeline."""

    copy_to_clipboard: bool = False
    execute: bool = False


def parse_response(text: str) -> Response:
    """Split raw model output into command and explanation.

    :param text: Aggregated answer text from the provider.
    :returns: A :class:`Response`.  ``command`` is the first non-blank
      line (trimmed), ``explanation`` the remaining non-blank lines
      (trimmed) joined by newlines.
    """
    lines = [line.strip() for line in text.split("\n")]
    non_blank = [line for line in lines if line]
    if not non_blank:
        return Response(command="", explanation="", full_text=text)
    return Response(
        command=non_blank[0],
        explanation="\n".join(non_blank[1:]),
        full_text=text,
    )
