from __future__ import annotations

import importlib
from pathlib import Path

import pytest
from click.testing import CliRunner

from howtfdoi import __version__
from howtfdoi.config import Config
from howtfdoi.providers import ProviderError
from howtfdoi.response import ResponseOptions, parse_response

cli_module = importlib.import_module("howtfdoi.cli")


@pytest.fixture
def provider(monkeypatch: pytest.MonkeyPatch, make_provider):
    fake = make_provider("ls -la\n\nLists all files including hidden ones")
    monkeypatch.setattr(cli_module, "get_provider", lambda config: fake)
    return fake


def test_version() -> None:
    result = CliRunner().invoke(cli_module.cli, ["--version"])
    assert result.exit_code == 0
    assert f"howtfdoi version {__version__}" in result.output
    assert "Download and documentation: https://github.com/" in result.output


def test_help_lists_environment_variables() -> None:
    result = CliRunner().invoke(cli_module.cli, ["--help"])
    assert result.exit_code == 0
    assert "HOWTFDOI_AI_PROVIDER" in result.output


def test_single_query(monkeypatch: pytest.MonkeyPatch, provider, tmp_path: Path) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")

    result = CliRunner().invoke(cli_module.cli, ["list", "files"])

    assert result.exit_code == 0, result.output
    assert "ls -la\nLists all files including hidden ones" in result.output
    assert provider.calls[0][1].endswith("Query: list files")
    history = tmp_path / "xdg-state" / "howtfdoi" / "history.log"
    assert "] list files\n" in history.read_text(encoding="utf-8")


def test_examples_flag_sends_raw_query(monkeypatch: pytest.MonkeyPatch, provider) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")

    result = CliRunner().invoke(cli_module.cli, ["-e", "tar"])

    assert result.exit_code == 0, result.output
    system_prompt, user_query = provider.calls[0]
    assert user_query == "tar"
    assert "multiple practical examples" in system_prompt


def test_flags_reach_pipeline(monkeypatch: pytest.MonkeyPatch, provider) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    seen = []
    monkeypatch.setattr(
        cli_module, "handle_response", lambda config, query, response, opts: seen.append((query, opts))
    )

    result = CliRunner().invoke(cli_module.cli, ["-c", "-x", "list", "files"])

    assert result.exit_code == 0, result.output
    assert seen == [("list files", ResponseOptions(copy_to_clipboard=True, execute=True))]


def test_provider_error_exits_non_zero(monkeypatch: pytest.MonkeyPatch, make_provider, tmp_path: Path) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    failing = make_provider(error=ProviderError("stream broke"))
    monkeypatch.setattr(cli_module, "get_provider", lambda config: failing)

    result = CliRunner().invoke(cli_module.cli, ["list", "files"])

    assert result.exit_code == 1
    assert "Error: stream broke" in result.output
    assert not (tmp_path / "xdg-state" / "howtfdoi" / "history.log").exists()


def test_missing_key_exits_non_zero() -> None:
    result = CliRunner().invoke(cli_module.cli, ["list", "files"])
    assert result.exit_code == 1
    assert "No Anthropic API key found" in result.output
    assert "ANTHROPIC_API_KEY" in result.output


def test_missing_openai_key_names_openai(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOWTFDOI_AI_PROVIDER", "openai")
    result = CliRunner().invoke(cli_module.cli, ["list", "files"])
    assert result.exit_code == 1
    assert "OPENAI_API_KEY" in result.output


def test_lmstudio_needs_no_key(monkeypatch: pytest.MonkeyPatch, provider) -> None:
    monkeypatch.setenv("HOWTFDOI_AI_PROVIDER", "lmstudio")
    result = CliRunner().invoke(cli_module.cli, ["list", "files"])
    assert result.exit_code == 0, result.output


def test_no_query_starts_interactive_mode(monkeypatch: pytest.MonkeyPatch, provider) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    started = []
    monkeypatch.setattr(
        cli_module, "run_interactive_mode", lambda config, provider=None: started.append((config, provider))
    )

    result = CliRunner().invoke(cli_module.cli, [])

    assert result.exit_code == 0, result.output
    assert len(started) == 1
    assert started[0][0].api_key == "sk-test"
    assert started[0][1] is provider


def test_parse_interactive_line() -> None:
    query, opts, examples = cli_module.parse_interactive_line("  -c find big files -x  ")
    assert query == "find big files"
    assert opts == ResponseOptions(copy_to_clipboard=True, execute=True)
    assert not examples

    query, opts, examples = cli_module.parse_interactive_line("-e rsync")
    assert query == "rsync"
    assert opts == ResponseOptions()
    assert examples


def _reader(lines):
    pending = list(lines)

    def _read(prompt: str) -> str:
        assert prompt == "howtfdoi> "
        if not pending:
            raise EOFError
        return pending.pop(0)

    return _read


def test_interactive_mode_runs_queries_in_order(
    monkeypatch: pytest.MonkeyPatch, config: Config, make_provider, capsys
) -> None:
    queries = []
    handled = []

    def _run_query(config, query, show_examples, provider=None):
        queries.append((query, show_examples))
        if query == "broken":
            raise ProviderError("timeout")
        return parse_response(f"echo {query}")

    monkeypatch.setattr(cli_module, "run_query", _run_query)
    monkeypatch.setattr(
        cli_module, "handle_response", lambda config, query, response, opts: handled.append((query, opts))
    )

    lines = ["", "list files -c", "-x", "broken", "-e tar", "exit", "never read"]
    cli_module.run_interactive_mode(config, read_line=_reader(lines), provider=make_provider())

    assert queries == [("list files", False), ("broken", False), ("tar", True)]
    assert handled == [
        ("list files", ResponseOptions(copy_to_clipboard=True)),
        ("tar", ResponseOptions()),
    ]
    captured = capsys.readouterr()
    assert "Error: timeout" in captured.err
    assert "Goodbye!" in captured.out


def test_interactive_mode_stops_at_end_of_input(
    monkeypatch: pytest.MonkeyPatch, config: Config, make_provider
) -> None:
    monkeypatch.setattr(
        cli_module, "run_query", lambda config, query, show_examples, provider=None: parse_response("pwd")
    )
    handled = []
    monkeypatch.setattr(cli_module, "handle_response", lambda *args: handled.append(args[1]))

    cli_module.run_interactive_mode(config, read_line=_reader(["where am i"]), provider=make_provider())

    assert handled == ["where am i"]


def test_interactive_session_builds_provider_once(
    monkeypatch: pytest.MonkeyPatch, config: Config, make_provider
) -> None:
    fake = make_provider("ls -la")
    built = []

    def _get_provider(config):
        built.append(config.provider)
        return fake

    monkeypatch.setattr(cli_module, "get_provider", _get_provider)
    monkeypatch.setattr(cli_module, "handle_response", lambda *args: None)

    cli_module.run_interactive_mode(config, read_line=_reader(["list files", "show disk usage", "quit"]))

    assert built == ["anthropic"]
    assert [user_query for _, user_query in fake.calls] == [
        "Platform: linux\nQuery: list files",
        "Platform: linux\nQuery: show disk usage",
    ]
