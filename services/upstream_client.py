"""
Client for the upstream OpenAI-compatible chat-completion API.
Issues blocking and streaming chat calls and fetches the model catalog.
Errors are surfaced to the caller as-is, nothing is retried.
"""
import json
from typing import AsyncIterator, Optional

import httpx

from config import Config
from models.chat_models import ChatMessage, StreamChunk, UsageStats
from services.message_normalizer import MessageNormalizer
from utils.constants import SSE
from utils.exceptions import UpstreamError, UpstreamStreamError
from utils.http_client import HTTPClientManager
from utils.logger import app_logger, preview


def extract_error_message(response: httpx.Response) -> str:
    """Pull the provider's error message out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return str(error.get("message") or error)
    if error:
        return str(error)
    return response.text


def parse_stream_event(data: str) -> StreamChunk:
    """
    Parse the JSON payload of one SSE data line into a StreamChunk.

    Raises:
        UpstreamStreamError: when the payload is not JSON or reports an error
    """
    try:
        event = json.loads(data)
    except json.JSONDecodeError as e:
        raise UpstreamStreamError(f"malformed upstream event: {preview(data)}") from e

    if not isinstance(event, dict):
        raise UpstreamStreamError(f"malformed upstream event: {preview(data)}")

    error = event.get("error")
    if error:
        message = error.get("message") if isinstance(error, dict) else error
        raise UpstreamStreamError(str(message or error))

    chunk = StreamChunk()
    choices = event.get("choices") or []
    if not isinstance(choices, list):
        raise UpstreamStreamError(f"malformed upstream event: {preview(data)}")
    if choices:
        choice = choices[0]
        delta = (choice.get("delta") or {}) if isinstance(choice, dict) else None
        if not isinstance(delta, dict):
            raise UpstreamStreamError(f"malformed upstream event: {preview(data)}")
        chunk.delta_text = delta.get("content") or ""
        chunk.finish_reason = choice.get("finish_reason") or None

    if event.get("usage"):
        chunk.usage = UsageStats.from_openai(event["usage"])

    return chunk


class ChatStream:
    """
    Open incremental response from the upstream.

    Iterating yields one StreamChunk per upstream event and stops at the
    end-of-stream marker. aclose() releases the HTTP response and may be
    called any number of times.
    """

    def __init__(self, response: httpx.Response, model: str):
        self._response = response
        self.model = model
        self.closed = False

    def __aiter__(self) -> AsyncIterator[StreamChunk]:
        return self._iter_chunks()

    async def _iter_chunks(self) -> AsyncIterator[StreamChunk]:
        async for line in self._response.aiter_lines():
            line = line.strip()
            if not line or line.startswith(SSE.COMMENT_PREFIX):
                continue
            if not line.startswith(SSE.DATA_PREFIX):
                continue

            data = line[len(SSE.DATA_PREFIX):].strip()
            if data == SSE.DONE:
                return
            yield parse_stream_event(data)

    async def aclose(self) -> None:
        if self.closed:
            return
        self.closed = True
        await self._response.aclose()
        app_logger.debug(f"Upstream stream for {self.model} closed")

    async def __aenter__(self) -> "ChatStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class UpstreamClient:
    """Adapter for the upstream chat-completion provider."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self._http_client = http_client

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http_client or HTTPClientManager.get_upstream_client()

    @staticmethod
    def build_payload(messages: list[ChatMessage], model: str, stream: bool) -> dict:
        return {
            "model": model,
            "messages": MessageNormalizer.to_openai_messages(messages),
            "stream": stream,
        }

    @staticmethod
    async def _raise_for_status(response: httpx.Response) -> None:
        if not response.is_error:
            return
        await response.aread()
        message = extract_error_message(response)
        app_logger.error(f"Upstream error {response.status_code}: {message}")
        raise UpstreamError(message, status_code=response.status_code)

    async def chat(self, messages: list[ChatMessage], model: str) -> dict:
        """Run a non-streaming chat completion and return the response object."""
        app_logger.info(f"Sending {len(messages)} messages to {model} (non-streaming)")
        response = await self.http.post(
            Config.upstream_url("chat/completions"),
            json=self.build_payload(messages, model, stream=False),
            headers=Config.upstream_headers(),
        )
        await self._raise_for_status(response)

        body = response.json()
        if isinstance(body, dict) and body.get("error"):
            raise UpstreamError(extract_error_message(response), status_code=response.status_code)
        return body

    async def open_chat_stream(self, messages: list[ChatMessage], model: str) -> ChatStream:
        """
        Start a streaming chat completion.

        The request is sent and its status checked before returning, so a
        rejected request raises here rather than mid-stream.
        """
        app_logger.info(f"Sending {len(messages)} messages to {model} (streaming)")
        request = self.http.build_request(
            "POST",
            Config.upstream_url("chat/completions"),
            json=self.build_payload(messages, model, stream=True),
            headers=Config.upstream_headers(),
        )
        response = await self.http.send(request, stream=True)
        try:
            await self._raise_for_status(response)
        except UpstreamError:
            await response.aclose()
            raise

        return ChatStream(response, model)

    async def list_model_ids(self) -> list[str]:
        """Fetch the fully qualified ids of all upstream models, in upstream order."""
        response = await self.http.get(
            Config.upstream_url("models"),
            headers=Config.upstream_headers(),
        )
        await self._raise_for_status(response)

        try:
            body = response.json()
        except ValueError as e:
            app_logger.error(f"Malformed model list: {preview(response.text)}")
            raise UpstreamError("malformed model list", status_code=response.status_code) from e
        entries = (body.get("data") or []) if isinstance(body, dict) else []
        return [entry["id"] for entry in entries if isinstance(entry, dict) and entry.get("id")]
