import logging

import pytest

from config import Config
from utils.logger import preview, resolve_level


def test_load_model_filter_reads_one_model_per_line(tmp_path):
    filter_file = tmp_path / "models-filter"
    filter_file.write_text("claude-sonnet-4\n\n  gpt-4o  \n")

    assert Config.load_model_filter(str(filter_file)) == {"claude-sonnet-4", "gpt-4o"}


def test_missing_model_filter_disables_filtering(tmp_path):
    assert Config.load_model_filter(str(tmp_path / "does-not-exist")) == set()


def test_unreadable_model_filter_propagates(tmp_path):
    """A path that exists but is not a readable file should raise, not silently disable filtering."""
    with pytest.raises(OSError):
        Config.load_model_filter(str(tmp_path))


@pytest.mark.parametrize("base_url", ["https://openrouter.ai/api/v1/", "https://openrouter.ai/api/v1"])
def test_upstream_url_joins_paths(monkeypatch, base_url):
    monkeypatch.setattr(Config, "OPENROUTER_BASE_URL", base_url)

    assert Config.upstream_url("chat/completions") == "https://openrouter.ai/api/v1/chat/completions"


def test_upstream_headers(upstream_config):
    assert upstream_config.upstream_headers() == {
        "Authorization": "Bearer sk-test",
        "HTTP-Referer": "https://gateway.test",
        "X-Title": "ollama-proxy",
    }


def test_validate_reports_missing_api_key(monkeypatch):
    monkeypatch.setattr(Config, "OPENAI_API_KEY", "")
    assert Config.validate()

    monkeypatch.setattr(Config, "OPENAI_API_KEY", "sk-test")
    assert Config.validate() == []


@pytest.mark.parametrize("name, expected", [
    ("debug", logging.DEBUG),
    ("WARNING", logging.WARNING),
    ("nonsense", logging.INFO),
])
def test_resolve_level(name, expected):
    assert resolve_level(name) == expected


def test_preview_truncates_long_payloads():
    assert preview("x" * 60, limit=10) == "x" * 10 + "..."
    assert preview("short") == "short"
