import pytest

from tests.fixtures.mock_clients import FakeUpstreamClient, text_chunks
from tests.fixtures.responses import UPSTREAM_MODEL_IDS, completion_response


@pytest.fixture
def fake_upstream():
    """Upstream mock with a populated catalog, a completion and a two-chunk stream."""
    return FakeUpstreamClient(
        model_ids=UPSTREAM_MODEL_IDS,
        completion=completion_response(),
        chunks=text_chunks("streamed ", "response"),
    )


@pytest.fixture
def resolver(fake_upstream):
    """ModelResolver backed by the fake upstream."""
    from services.model_resolver import ModelResolver
    return ModelResolver(fake_upstream)


@pytest.fixture
def upstream_config(monkeypatch):
    """Deterministic upstream settings."""
    from config import Config

    monkeypatch.setattr(Config, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(Config, "OPENROUTER_BASE_URL", "https://upstream.test/api/v1/")
    monkeypatch.setattr(Config, "OPENROUTER_HTTP_REFERER", "https://gateway.test")
    monkeypatch.setattr(Config, "OPENROUTER_X_TITLE", "ollama-proxy")
    return Config


@pytest.fixture
def model_filter():
    """Allow-list used by the app. Empty means no filtering."""
    return set()


@pytest.fixture
def configured_app(monkeypatch, fake_upstream, resolver, model_filter):
    """Pre-configured app talking to the fake upstream."""
    from fastapi.testclient import TestClient
    from main import create_app
    from services.model_resolver import ModelResolver

    monkeypatch.setattr("services.chat_service.UpstreamClient", lambda: fake_upstream)
    ModelResolver.reset_shared(resolver)

    app = create_app()
    app.state.model_filter = model_filter

    yield TestClient(app)

    ModelResolver.reset_shared()
