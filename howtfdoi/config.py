"""Configuration handling for howtfdoi.

Configuration comes from three places, in order of precedence:

1. Environment variables (``HOWTFDOI_AI_PROVIDER``,
   ``ANTHROPIC_API_KEY``, ``OPENAI_API_KEY``, ``LMSTUDIO_BASE_URL``,
   ``LMSTUDIO_MODEL``).
2. The YAML config file ``howtfdoi.yaml`` in the XDG config directory
   (``$XDG_CONFIG_HOME/howtfdoi`` or ``~/.config/howtfdoi``).
3. Built-in defaults.

When no explicit provider is chosen the tool prefers Anthropic and
falls back to OpenAI if only an OpenAI key is available.  If no key
can be found at all and standard input is a terminal, a short
first-run setup asks for one and saves it to the config file.

Query history lives in the XDG state directory
(``$XDG_STATE_HOME/howtfdoi`` or ``~/.local/state/howtfdoi``).
"""

from __future__ import annotations

import os
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Mapping, Optional

import click
import yaml

APP_NAME = "howtfdoi"
CONFIG_FILE_NAME = "howtfdoi.yaml"
HISTORY_FILE_NAME = "history.log"

PROVIDER_ANTHROPIC = "anthropic"
PROVIDER_OPENAI = "openai"
PROVIDER_LMSTUDIO = "lmstudio"

PROVIDER_ALIASES = {
    "anthropic": PROVIDER_ANTHROPIC,
    "claude": PROVIDER_ANTHROPIC,
    "openai": PROVIDER_OPENAI,
    "chatgpt": PROVIDER_OPENAI,
    "lmstudio": PROVIDER_LMSTUDIO,
}

CLAUDE_MODEL = "claude-haiku-4-5"
GPT_MODEL = "gpt-4o-mini"
DEFAULT_LMSTUDIO_BASE_URL = "http://localhost:1234/v1"
DEFAULT_LMSTUDIO_MODEL = "local-model"
# LM Studio ignores the key, but the OpenAI client refuses an empty one.
LMSTUDIO_API_KEY = "not-needed"

CONFIG_HEADER = (
    "# WARNING: This file contains API keys. Do NOT commit this file to git.\n"
    "# Add this file to your .gitignore if it is inside a repository.\n\n"
)


class ConfigError(Exception):
    """Raised when configuration cannot be completed."""


@dataclass
class FileConfig:
    """Values stored in the YAML config file."""

    provider: str = ""
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    lmstudio_base_url: str = ""
    lmstudio_model: str = ""


@dataclass(frozen=True)
class Config:
    """Resolved runtime configuration for one invocation."""

    provider: str
    api_key: str
    history_file: Path
    platform: str
    verbose: bool = False
    model: str = ""
    base_url: Optional[str] = None


def current_platform() -> str:
    """Return ``macos``, ``windows`` or ``linux`` for the running system."""
    if sys.platform == "darwin":
        return "macos"
    if sys.platform.startswith("win"):
        return "windows"
    return "linux"


def data_directory(env: Optional[Mapping[str, str]] = None) -> Path:
    """Return the directory holding the history file."""
    env = os.environ if env is None else env
    state_home = env.get("XDG_STATE_HOME")
    if state_home:
        return Path(state_home) / APP_NAME
    return Path.home() / ".local" / "state" / APP_NAME


def config_directory(env: Optional[Mapping[str, str]] = None) -> Path:
    """Return the directory holding the config file."""
    env = os.environ if env is None else env
    config_home = env.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def config_file_path(env: Optional[Mapping[str, str]] = None) -> Path:
    return config_directory(env) / CONFIG_FILE_NAME


def load_config_file(path: Optional[Path] = None) -> FileConfig:
    """Load the YAML config file, returning empty values if missing or malformed."""
    cfg_path = path or config_file_path()
    try:
        with cfg_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        return FileConfig()
    if not isinstance(data, dict):
        return FileConfig()
    known = FileConfig.__dataclass_fields__
    return FileConfig(
        **{key: str(value) for key, value in data.items() if key in known and value is not None}
    )


def save_config_file(file_config: FileConfig, directory: Optional[Path] = None) -> Path:
    """Persist configuration to disk and return the file path.

    The file is readable by the owner only.  A ``.gitignore`` listing
    the config file is created next to it when none exists.

    :raises ConfigError: If the directory or file cannot be written.
    """
    cfg_dir = directory or config_directory()
    cfg_path = cfg_dir / CONFIG_FILE_NAME
    values = {key: value for key, value in asdict(file_config).items() if value}
    try:
        cfg_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
        with cfg_path.open("w", encoding="utf-8") as f:
            f.write(CONFIG_HEADER)
            yaml.safe_dump(values, f, default_flow_style=False)
        os.chmod(cfg_path, 0o600)
    except OSError as exc:
        raise ConfigError(f"could not write config file: {exc}") from exc

    gitignore = cfg_dir / ".gitignore"
    if not gitignore.exists():
        try:
            gitignore.write_text(
                f"# Ignore config file containing API keys\n{CONFIG_FILE_NAME}\n",
                encoding="utf-8",
            )
        except OSError as exc:
            click.echo(
                f"Warning: Could not create .gitignore in config directory: {exc}",
                err=True,
            )
    return cfg_path


def _first(*values: Optional[str]) -> str:
    for value in values:
        if value:
            return value
    return ""


def resolve_config(
    file_config: FileConfig,
    verbose: bool = False,
    env: Optional[Mapping[str, str]] = None,
    history_file: Optional[Path] = None,
    platform: Optional[str] = None,
) -> Config:
    """Combine environment, config file and defaults into a :class:`Config`.

    The returned ``api_key`` may be empty when no key could be found;
    the caller decides whether to run first-run setup or fail.
    """
    env = os.environ if env is None else env
    from_env = env.get("HOWTFDOI_AI_PROVIDER", "").strip().lower()
    # Only a provider named in the environment disables key auto-detection.
    explicit = bool(from_env)
    requested = from_env or file_config.provider.strip().lower()

    provider = PROVIDER_ALIASES.get(requested)
    if provider is None:
        if from_env:
            click.secho(
                f"Warning: Unknown HOWTFDOI_AI_PROVIDER '{from_env}', defaulting to Anthropic",
                fg="yellow",
                err=True,
            )
        provider = PROVIDER_ANTHROPIC

    api_key = ""
    model = ""
    base_url: Optional[str] = None
    if provider == PROVIDER_OPENAI:
        api_key = _first(env.get("OPENAI_API_KEY"), file_config.openai_api_key)
        model = GPT_MODEL
    elif provider == PROVIDER_LMSTUDIO:
        api_key = LMSTUDIO_API_KEY
        base_url = _first(
            env.get("LMSTUDIO_BASE_URL"),
            file_config.lmstudio_base_url,
            DEFAULT_LMSTUDIO_BASE_URL,
        )
        model = _first(
            env.get("LMSTUDIO_MODEL"),
            file_config.lmstudio_model,
            DEFAULT_LMSTUDIO_MODEL,
        )
    else:
        api_key = _first(env.get("ANTHROPIC_API_KEY"), file_config.anthropic_api_key)
        model = CLAUDE_MODEL
        if not api_key and not explicit:
            # Auto-detect: fall back to whichever OpenAI key is available.
            openai_key = _first(env.get("OPENAI_API_KEY"), file_config.openai_api_key)
            if openai_key:
                provider = PROVIDER_OPENAI
                api_key = openai_key
                model = GPT_MODEL

    return Config(
        provider=provider,
        api_key=api_key,
        history_file=history_file or data_directory(env) / HISTORY_FILE_NAME,
        platform=platform or current_platform(),
        verbose=verbose,
        model=model,
        base_url=base_url,
    )


def run_first_time_setup(directory: Optional[Path] = None) -> FileConfig:
    """Interactively ask for a provider and its credentials, then save them.

    :raises ConfigError: If no API key is entered or saving fails.
    """
    click.echo()
    click.secho("Welcome to howtfdoi! Let's set up your configuration.", fg="cyan")
    click.echo()
    click.echo("Which AI provider would you like to use?")
    click.echo("  1. Anthropic (Claude) - default")
    click.echo("  2. OpenAI (ChatGPT)")
    click.echo("  3. LM Studio (Local)")
    choice = click.prompt("Enter 1, 2, or 3", default="1", show_default=True).strip()

    file_config = FileConfig()
    if choice == "2":
        file_config.provider = PROVIDER_OPENAI
        click.echo("\nGet your API key at: https://platform.openai.com/api-keys")
        file_config.openai_api_key = click.prompt(
            "Enter your OpenAI API key", default="", show_default=False, hide_input=True
        ).strip()
        if not file_config.openai_api_key:
            raise ConfigError("no API key provided")
    elif choice == "3":
        file_config.provider = PROVIDER_LMSTUDIO
        click.echo("\nLM Studio runs locally and doesn't require an API key.")
        click.echo("Make sure LM Studio is running and has a model loaded.")
        file_config.lmstudio_base_url = (
            click.prompt("Enter LM Studio base URL", default=DEFAULT_LMSTUDIO_BASE_URL).strip()
            or DEFAULT_LMSTUDIO_BASE_URL
        )
        file_config.lmstudio_model = (
            click.prompt("Enter model name", default=DEFAULT_LMSTUDIO_MODEL).strip()
            or DEFAULT_LMSTUDIO_MODEL
        )
    else:
        file_config.provider = PROVIDER_ANTHROPIC
        click.echo("\nGet your API key at: https://console.anthropic.com/settings/keys")
        file_config.anthropic_api_key = click.prompt(
            "Enter your Anthropic API key", default="", show_default=False, hide_input=True
        ).strip()
        if not file_config.anthropic_api_key:
            raise ConfigError("no API key provided")

    cfg_path = save_config_file(file_config, directory)
    click.echo()
    click.secho(f"Configuration saved to {cfg_path}", fg="green")
    click.secho("This file contains your API key. Do NOT commit it to git.", fg="yellow")
    click.echo()
    return file_config


def ensure_directories(verbose: bool = False) -> None:
    """Create the data and config directories on first run.

    :raises ConfigError: If either directory cannot be created.
    """
    data_dir = data_directory()
    cfg_dir = config_directory()
    try:
        data_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"Could not create data directory at {data_dir}: {exc}") from exc
    try:
        cfg_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"Could not create config directory at {cfg_dir}: {exc}") from exc
    if verbose:
        click.secho(f"Using data directory: {data_dir}", fg="cyan")
        click.secho(f"Using config file: {cfg_dir / CONFIG_FILE_NAME}", fg="cyan")


def setup_config(verbose: bool = False, interactive: Optional[bool] = None) -> Config:
    """Build the runtime configuration, running first-run setup if needed.

    :param verbose: Whether verbose diagnostics are enabled.
    :param interactive: Whether setup may prompt the user.  Defaults to
      whether standard input is a terminal.
    :raises ConfigError: If first-run setup fails.
    """
    file_config = load_config_file()
    config = resolve_config(file_config, verbose=verbose)

    if interactive is None:
        interactive = sys.stdin.isatty()
    if not config.api_key and interactive:
        file_config = run_first_time_setup()
        config = resolve_config(file_config, verbose=verbose, env=_without_credentials(os.environ))

    if verbose:
        click.secho(f"Using AI provider: {config.provider}", fg="cyan")
        if config.provider == PROVIDER_LMSTUDIO:
            click.secho(f"LM Studio base URL: {config.base_url}", fg="cyan")
            click.secho(f"LM Studio model: {config.model}", fg="cyan")
    return config


_SETUP_OVERRIDES = ("HOWTFDOI_AI_PROVIDER", "ANTHROPIC_API_KEY", "OPENAI_API_KEY")


def _without_credentials(env: Mapping[str, str]) -> dict:
    # The provider and key chosen during setup win over the environment.
    return {key: value for key, value in env.items() if key not in _SETUP_OVERRIDES}
