from __future__ import annotations

from pathlib import Path

import pytest

from howtfdoi.config import Config

ENV_VARS = (
    "HOWTFDOI_AI_PROVIDER",
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
    "LMSTUDIO_BASE_URL",
    "LMSTUDIO_MODEL",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "xdg-state"))


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(
        provider="anthropic",
        api_key="sk-test",
        history_file=tmp_path / "history.log",
        platform="linux",
    )


class FakeProvider:
    def __init__(self, text: str = "", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def query(self, system_prompt: str, user_query: str) -> str:
        self.calls.append((system_prompt, user_query))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def make_provider():
    return FakeProvider
