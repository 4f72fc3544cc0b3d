"""
HTTP client utilities with connection pooling.
Provides the shared httpx client used for every upstream call.
"""
import httpx
from config import Config


class HTTPClientManager:
    """Manages the shared upstream httpx client."""

    _upstream_client: httpx.AsyncClient | None = None

    @classmethod
    def get_upstream_client(cls) -> httpx.AsyncClient:
        """
        Get or create the shared httpx client for upstream calls.

        Features:
        - Connection pooling (reuses TCP connections)
        - HTTP/2 where the provider supports it
        - Long read timeout so slow generations are not cut off

        Returns:
            Configured httpx.AsyncClient
        """
        if cls._upstream_client is None:
            limits = httpx.Limits(
                max_connections=Config.MAX_UPSTREAM_CONNECTIONS,
                max_keepalive_connections=Config.MAX_KEEPALIVE_CONNECTIONS,
                keepalive_expiry=60.0
            )

            cls._upstream_client = httpx.AsyncClient(
                timeout=httpx.Timeout(Config.UPSTREAM_TIMEOUT, connect=Config.UPSTREAM_CONNECT_TIMEOUT),
                limits=limits,
                http2=True
            )

        return cls._upstream_client

    @classmethod
    async def close_all(cls) -> None:
        """
        Close managed clients and clean up connections.
        """
        if cls._upstream_client is not None:
            await cls._upstream_client.aclose()
            cls._upstream_client = None
