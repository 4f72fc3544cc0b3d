import httpx
import pytest

from services.model_resolver import ModelResolver
from utils.exceptions import UpstreamError, UpstreamUnavailableError
from tests.fixtures.mock_clients import FakeUpstreamClient


@pytest.mark.anyio
async def test_resolve_suffix_scenario():
    """Given alias "sonnet" and catalog ["anthropic/claude-sonnet-4"], it should resolve to the full id."""
    resolver = ModelResolver(FakeUpstreamClient(model_ids=["anthropic/claude-sonnet-4"]))

    assert await resolver.resolve("sonnet") == "anthropic/claude-sonnet-4"


@pytest.mark.anyio
async def test_resolve_prefers_exact_match_over_suffix():
    resolver = ModelResolver(FakeUpstreamClient(model_ids=["vendor/gpt-4", "gpt-4"]))

    assert await resolver.resolve("gpt-4") == "gpt-4"


@pytest.mark.anyio
async def test_resolve_suffix_match_takes_first_in_catalog_order():
    resolver = ModelResolver(FakeUpstreamClient(model_ids=["a/gpt-4o", "b/gpt-4o"]))

    assert await resolver.resolve("gpt-4o") == "a/gpt-4o"


@pytest.mark.anyio
async def test_resolve_suffix_match_beats_short_name_containment():
    resolver = ModelResolver(FakeUpstreamClient(model_ids=["openai/gpt-4o-mini", "openai/gpt-4o"]))

    assert await resolver.resolve("gpt-4o") == "openai/gpt-4o"


@pytest.mark.anyio
async def test_resolve_passes_unknown_alias_through():
    """Given an alias absent from the catalog, it should be returned unchanged."""
    resolver = ModelResolver(FakeUpstreamClient(model_ids=["openai/gpt-4o"]))

    assert await resolver.resolve("mistralai/mistral-large") == "mistralai/mistral-large"


@pytest.mark.anyio
@pytest.mark.parametrize("alias", ["gpt-4", "claude", "sonn"])
async def test_resolve_passes_unmatched_short_alias_through(alias):
    """Given a slashless alias that is only a partial token of a catalog name, it should be returned unchanged."""
    resolver = ModelResolver(FakeUpstreamClient(model_ids=["openai/gpt-4o", "anthropic/claude3-sonnet-4"]))

    assert await resolver.resolve(alias) == alias


@pytest.mark.anyio
async def test_resolve_matches_whole_token_run_in_short_name():
    resolver = ModelResolver(FakeUpstreamClient(model_ids=["openai/gpt-4o", "anthropic/claude-sonnet-4"]))

    assert await resolver.resolve("claude-sonnet") == "anthropic/claude-sonnet-4"


@pytest.mark.anyio
async def test_resolve_fetches_catalog_lazily_once():
    upstream = FakeUpstreamClient(model_ids=["openai/gpt-4o"])
    resolver = ModelResolver(upstream)
    assert upstream.model_fetches == 0

    await resolver.resolve("gpt-4o")
    await resolver.resolve("gpt-4o")

    assert upstream.model_fetches == 1
    assert resolver.catalog == ("openai/gpt-4o",)


@pytest.mark.anyio
@pytest.mark.parametrize("error", [
    httpx.ConnectError("connection refused"),
    UpstreamError("invalid api key", status_code=401),
])
async def test_resolve_with_empty_catalog_and_failed_fetch_raises(error):
    """Given an empty catalog and a failing fetch, resolution should fail with UpstreamUnavailableError."""
    resolver = ModelResolver(FakeUpstreamClient(models_error=error))

    with pytest.raises(UpstreamUnavailableError):
        await resolver.resolve("gpt-x")


@pytest.mark.anyio
async def test_failed_refresh_keeps_existing_catalog():
    """A failing refresh should leave the cached catalog intact and resolution working."""
    upstream = FakeUpstreamClient(model_ids=["anthropic/claude-sonnet-4"])
    resolver = ModelResolver(upstream)
    await resolver.refresh()

    upstream.models_error = httpx.ReadTimeout("timed out")
    with pytest.raises(httpx.ReadTimeout):
        await resolver.refresh()

    assert resolver.catalog == ("anthropic/claude-sonnet-4",)
    assert await resolver.resolve("claude-sonnet-4") == "anthropic/claude-sonnet-4"


@pytest.mark.anyio
async def test_refresh_replaces_catalog_wholesale():
    upstream = FakeUpstreamClient(model_ids=["old/model-a", "old/model-b"])
    resolver = ModelResolver(upstream)
    await resolver.refresh()

    upstream.model_ids = ["new/model-c"]
    await resolver.refresh()

    assert resolver.catalog == ("new/model-c",)
    assert await resolver.resolve("model-a") == "model-a"


@pytest.mark.anyio
async def test_list_models_uses_short_names_and_allow_list():
    resolver = ModelResolver(FakeUpstreamClient(model_ids=["openai/gpt-4o", "anthropic/claude-sonnet-4"]))

    everything = await resolver.list_models()
    filtered = await resolver.list_models({"claude-sonnet-4"})

    assert [m["name"] for m in everything] == ["gpt-4o", "claude-sonnet-4"]
    assert [m["model"] for m in filtered] == ["claude-sonnet-4"]
    assert filtered[0]["details"]["format"] == "gguf"


@pytest.mark.anyio
async def test_list_models_serves_stale_catalog_when_refresh_fails():
    upstream = FakeUpstreamClient(model_ids=["openai/gpt-4o"])
    resolver = ModelResolver(upstream)
    await resolver.refresh()
    upstream.models_error = httpx.ConnectError("down")

    models = await resolver.list_models()

    assert [m["name"] for m in models] == ["gpt-4o"]


@pytest.mark.anyio
async def test_list_models_raises_without_any_catalog():
    resolver = ModelResolver(FakeUpstreamClient(models_error=UpstreamError("bad gateway", status_code=502)))

    with pytest.raises(UpstreamError):
        await resolver.list_models()


def test_shared_resolver_is_reused_until_reset():
    ModelResolver.reset_shared()
    try:
        first = ModelResolver.shared()
        assert ModelResolver.shared() is first
    finally:
        ModelResolver.reset_shared()
