"""Prompt construction.

Two prompt styles exist.  The standard prompt asks for a single
command followed by a one-line explanation, tailored to the user's
platform.  The examples prompt (``-e``) asks for several practical
use cases of a tool instead.  Both insist on plain text because the
first line of the answer is treated as a runnable command.
"""

from __future__ import annotations

STANDARD_PROMPT = """You are a command-line expert assistant for {platform} systems. Provide concise, accurate answers about CLI tools and commands.

Rules:
- Output in plain text only, as this output may be copied directly to a terminal
- Give the command/answer directly and immediately
- Be extremely concise - no unnecessary explanation unless the command is complex
- Show the actual command first, then a brief one-line explanation if needed
- Provide platform-specific commands when relevant ({platform} vs Linux vs Windows)
- Focus on common Unix/Linux CLI tools

Example format:
tar -czf archive.tar.gz directory/
(Creates a compressed tarball of the directory)"""

EXAMPLES_PROMPT = """You are a command-line expert assistant. Provide multiple practical examples for the requested command or tool.

Rules:
- Output in plain text only, as this output may be copied directly to a terminal
- Show 3-5 different use cases
- Each example should have the command and a brief explanation
- Focus on common, practical scenarios
- Format: command followed by explanation in parentheses

Example format:
tar -czf archive.tar.gz directory/
(Creates a compressed tarball)

tar -xzf archive.tar.gz
(Extracts a compressed tarball)

tar -tzf archive.tar.gz
(Lists contents without extracting)"""


def build_system_prompt(platform: str, show_examples: bool = False) -> str:
    if show_examples:
        return EXAMPLES_PROMPT
    return STANDARD_PROMPT.format(platform=platform)


def build_user_query(platform: str, query: str, show_examples: bool = False) -> str:
    """Return the user message sent alongside the system prompt.

    In examples mode the query is sent untouched; otherwise it is
    prefixed with the platform so the model picks matching flags.
    """
    if show_examples:
        return query
    return f"Platform: {platform}\nQuery: {query}"
