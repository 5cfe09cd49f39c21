"""Command line interface for howtfdoi.

This module defines the ``howtfdoi`` command using the ``click``
library::

    howtfdoi [-v] [-c] [-x] [-e] QUERY...

With a query the command asks the configured provider once, prints the
answer and runs the response pipeline.  Without one it starts an
interactive session where each line is a query; ``-c``, ``-x`` and
``-e`` may be typed inline and apply to that line only.  ``exit``,
``quit`` or end of input leave the session.
"""

from __future__ import annotations

import sys
from typing import Callable, List, Optional, Tuple

import click
from prompt_toolkit import PromptSession

from . import __version__
from .config import (
    PROVIDER_ANTHROPIC,
    PROVIDER_LMSTUDIO,
    Config,
    ConfigError,
    config_file_path,
    ensure_directories,
    setup_config,
)
from .pipeline import handle_response
from .prompts import build_system_prompt, build_user_query
from .providers import BaseProvider, ProviderError, get_provider
from .response import Response, ResponseOptions, parse_response

REPOSITORY = "https://github.com/NeckBeardPrince/howtfdoi"

EPILOG = """\b
Examples:
  howtfdoi list files
  howtfdoi find large files over 100MB
  howtfdoi -c compress a directory    # copy to clipboard
  howtfdoi -e tar                     # show examples
  howtfdoi -x git commit              # execute with confirmation
  HOWTFDOI_AI_PROVIDER=openai howtfdoi list files

\b
Environment variables:
  ANTHROPIC_API_KEY     Your Anthropic API key (console.anthropic.com)
  OPENAI_API_KEY        Your OpenAI API key (platform.openai.com)
  HOWTFDOI_AI_PROVIDER  anthropic, openai, chatgpt or lmstudio
  LMSTUDIO_BASE_URL     LM Studio base URL (default: http://localhost:1234/v1)
  LMSTUDIO_MODEL        LM Studio model name (default: local-model)
  XDG_CONFIG_HOME       Override config directory (default: ~/.config)
  XDG_STATE_HOME        Override state directory (default: ~/.local/state)
"""


def run_query(
    config: Config,
    query: str,
    show_examples: bool = False,
    provider: Optional[BaseProvider] = None,
) -> Response:
    """Ask the provider about ``query`` and parse the answer.

    :raises ProviderError: If the provider fails; nothing is returned
      in that case.
    """
    provider = provider or get_provider(config)
    system_prompt = build_system_prompt(config.platform, show_examples)
    user_query = build_user_query(config.platform, query, show_examples)
    return parse_response(provider.query(system_prompt, user_query))


def parse_interactive_line(line: str) -> Tuple[str, ResponseOptions, bool]:
    """Split an interactive line into query text, options and examples flag."""
    copy = execute = show_examples = False
    words: List[str] = []
    for part in line.split():
        if part == "-c":
            copy = True
        elif part == "-x":
            execute = True
        elif part == "-e":
            show_examples = True
        else:
            words.append(part)
    opts = ResponseOptions(copy_to_clipboard=copy, execute=execute)
    return " ".join(words), opts, show_examples


def run_interactive_mode(
    config: Config,
    read_line: Optional[Callable[[str], str]] = None,
    provider: Optional[BaseProvider] = None,
) -> None:
    """Read queries line by line until ``exit``, ``quit`` or end of input.

    One provider serves every query of the session.
    """
    if read_line is None:
        read_line = PromptSession().prompt
    provider = provider or get_provider(config)

    click.secho("Interactive mode - Type your questions or 'exit' to quit", fg="cyan")
    click.secho("Tip: Use -c to copy, -x to execute, -e for examples\n", fg="bright_black")

    while True:
        try:
            line = read_line("howtfdoi> ")
        except (EOFError, KeyboardInterrupt):
            break

        line = line.strip()
        if not line:
            continue
        if line in ("exit", "quit"):
            click.secho("Goodbye!", fg="cyan")
            break

        query, opts, show_examples = parse_interactive_line(line)
        if not query:
            continue

        try:
            response = run_query(config, query, show_examples, provider=provider)
        except ProviderError as exc:
            click.secho(f"Error: {exc}", fg="red", err=True)
            continue

        click.echo()
        handle_response(config, query, response, opts)
        click.echo()


def _missing_key_error(config: Config) -> None:
    if config.provider == PROVIDER_ANTHROPIC:
        label, variable = "Anthropic", "ANTHROPIC_API_KEY"
    else:
        label, variable = "OpenAI", "OPENAI_API_KEY"
    click.secho(f"Error: No {label} API key found", fg="red", err=True)
    click.echo(f"Set it via environment variable: export {variable}='your-api-key'", err=True)
    click.echo(f"Or add it to your config file: {config_file_path()}", err=True)


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=EPILOG,
)
@click.option("-v", "verbose", is_flag=True, help="Enable verbose logging.")
@click.option("-c", "copy", is_flag=True, help="Copy command to clipboard.")
@click.option("-x", "execute", is_flag=True, help="Execute the command (asks for confirmation).")
@click.option("-e", "examples", is_flag=True, help="Show multiple examples.")
@click.version_option(
    __version__,
    "--version",
    prog_name="howtfdoi",
    message=f"%(prog)s version %(version)s\nDownload and documentation: {REPOSITORY}",
)
@click.argument("query", nargs=-1, type=str)
def cli(verbose: bool, copy: bool, execute: bool, examples: bool, query: Tuple[str, ...]) -> None:
    """Ask CLI questions in plain English and get instant answers powered by AI.

    Run without a QUERY to start interactive mode.
    """
    try:
        ensure_directories(verbose)
        config = setup_config(verbose)
    except ConfigError as exc:
        click.secho(f"Error: {exc}", fg="red", err=True)
        sys.exit(1)

    if not config.api_key and config.provider != PROVIDER_LMSTUDIO:
        _missing_key_error(config)
        sys.exit(1)

    provider = get_provider(config)
    if not query:
        run_interactive_mode(config, provider=provider)
        return

    query_text = " ".join(query)
    try:
        response = run_query(config, query_text, examples, provider=provider)
    except ProviderError as exc:
        click.secho(f"Error: {exc}", fg="red", err=True)
        sys.exit(1)

    handle_response(config, query_text, response, ResponseOptions(copy_to_clipboard=copy, execute=execute))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
