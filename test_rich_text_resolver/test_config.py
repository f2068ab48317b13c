import pytest

from rich_text_resolver.config import env_config


def test_default_config(monkeypatch):
    monkeypatch.delenv("RICH_TEXT_KEY_LENGTH", raising=False)
    monkeypatch.delenv("RICH_TEXT_MAX_TREE_DEPTH", raising=False)
    monkeypatch.delenv("RICH_TEXT_RENDER_UNKNOWN_MARKS_AS_TEXT", raising=False)

    assert env_config.KEY_LENGTH == 12
    assert env_config.MAX_TREE_DEPTH == 256
    assert env_config.RENDER_UNKNOWN_MARKS_AS_TEXT is True


def test_env_override(monkeypatch):
    monkeypatch.setenv("RICH_TEXT_KEY_LENGTH", "8")
    monkeypatch.setenv("RICH_TEXT_MAX_TREE_DEPTH", "32")

    assert env_config.KEY_LENGTH == 8
    assert env_config.MAX_TREE_DEPTH == 32


@pytest.mark.parametrize(
    ("value", "expected_value"),
    [("true", True), ("True", True), ("1", True), ("t", True), ("false", False), ("0", False)],
)
def test_env_bool_override(monkeypatch, value: str, expected_value: bool):
    monkeypatch.setenv("RICH_TEXT_RENDER_UNKNOWN_MARKS_AS_TEXT", value)

    assert env_config.RENDER_UNKNOWN_MARKS_AS_TEXT is expected_value
