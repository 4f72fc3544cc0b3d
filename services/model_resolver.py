"""
Model alias resolution against the upstream model catalog.
Maps short model names sent by Ollama clients to fully qualified upstream ids.
"""
from datetime import datetime, timezone
from typing import ClassVar, Iterable, Optional

import httpx

from models.chat_models import short_model_name
from services.upstream_client import UpstreamClient
from utils.constants import STUB_MODEL_DETAILS, STUB_MODEL_DIGEST, STUB_MODEL_SIZE
from utils.exceptions import UpstreamError, UpstreamUnavailableError
from utils.logger import app_logger


class ModelResolver:
    """
    Resolves aliases using an in-memory catalog of upstream model ids.

    The catalog is an immutable tuple. A refresh builds a new tuple and swaps
    the reference, so readers always see one complete snapshot. It is filled
    lazily on first use and lives for the process lifetime.
    """

    _shared: ClassVar[Optional["ModelResolver"]] = None

    def __init__(self, client: Optional[UpstreamClient] = None):
        self._client = client or UpstreamClient()
        self._catalog: tuple[str, ...] = ()

    @classmethod
    def shared(cls) -> "ModelResolver":
        """Process-wide resolver instance."""
        if cls._shared is None:
            cls._shared = cls()
        return cls._shared

    @classmethod
    def reset_shared(cls, resolver: Optional["ModelResolver"] = None) -> None:
        cls._shared = resolver

    @property
    def catalog(self) -> tuple[str, ...]:
        return self._catalog

    async def refresh(self) -> tuple[str, ...]:
        """
        Fetch the catalog and replace the cached one wholesale.

        On failure the previous catalog stays in place and the error propagates.
        """
        model_ids = await self._client.list_model_ids()
        self._catalog = tuple(dict.fromkeys(model_ids))
        app_logger.info(f"Model catalog refreshed: {len(self._catalog)} models")
        return self._catalog

    @staticmethod
    def match(alias: str, catalog: Iterable[str]) -> Optional[str]:
        """
        Find the catalog id an alias refers to.

        Precedence: exact id, then the first id ending with the alias, then
        the first id whose short name contains the alias as whole
        hyphen-delimited tokens ("sonnet" -> "anthropic/claude-sonnet-4",
        but "gpt-4" does not match "openai/gpt-4o"). Ties go to catalog order.
        """
        catalog = tuple(catalog)
        if not alias:
            return None
        if alias in catalog:
            return alias
        for model_id in catalog:
            if model_id.endswith(alias):
                return model_id
        if "/" not in alias:
            tokens = f"-{alias}-"
            for model_id in catalog:
                if tokens in f"-{short_model_name(model_id)}-":
                    return model_id
        return None

    async def resolve(self, alias: str) -> str:
        """
        Resolve an alias to a fully qualified upstream id.

        Unknown aliases are returned unchanged so upstream-native ids work
        without a catalog hit.

        Raises:
            UpstreamUnavailableError: the catalog is empty and cannot be fetched
        """
        catalog = self._catalog
        if not catalog:
            try:
                catalog = await self.refresh()
            except (httpx.HTTPError, UpstreamError) as e:
                app_logger.error(f"Failed to fetch model catalog: {e}")
                raise UpstreamUnavailableError(f"failed to get models: {e}") from e

        resolved = self.match(alias, catalog)
        if resolved is None:
            app_logger.info(f"Model '{alias}' not in catalog, passing it through unchanged")
            return alias

        if resolved != alias:
            app_logger.info(f"Resolved model '{alias}' to '{resolved}'")
        return resolved

    async def list_models(self, allow_list: Optional[set[str]] = None) -> list[dict]:
        """
        Build the /api/tags model list.

        The catalog is refreshed first. When the refresh fails but a cached
        catalog exists, the cached one is served.
        """
        try:
            catalog = await self.refresh()
        except (httpx.HTTPError, UpstreamError) as e:
            if not self._catalog:
                raise
            app_logger.warning(f"Model catalog refresh failed, serving cached catalog: {e}")
            catalog = self._catalog

        modified_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
        entries = []
        for model_id in catalog:
            name = short_model_name(model_id)
            if allow_list and name not in allow_list:
                continue
            entries.append({
                "name": name,
                "model": name,
                "modified_at": modified_at,
                "size": STUB_MODEL_SIZE,
                "digest": STUB_MODEL_DIGEST,
                "details": dict(STUB_MODEL_DETAILS),
            })
        return entries
