"""
Chat service shared by the chat and generate endpoints.
Resolves the model, calls the upstream and shapes the HTTP response.
"""
import httpx
from fastapi import status
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask
from starlette.responses import Response

from models.chat_models import ChatMessage, EnvelopeFlavor
from services.model_resolver import ModelResolver
from services.stream_translator import ResponseFormatter, StreamTranslator
from services.upstream_client import UpstreamClient
from utils.constants import NDJSON_MEDIA_TYPE, STREAM_HEADERS
from utils.exceptions import UpstreamError, UpstreamUnavailableError
from utils.logger import app_logger


class ChatService:
    """Service for handling chat logic."""

    @staticmethod
    def error_response(status_code: int, message: str) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"error": message})

    @staticmethod
    async def respond(messages: list[ChatMessage], alias: str, flavor: EnvelopeFlavor, streaming: bool) -> Response:
        """
        Run a request against the upstream and build the client response.

        Failures before any output is sent become JSON errors: 404 when the
        model cannot be resolved, 500 when the upstream call fails. Failures
        after streaming has started are reported in-band by the translator.
        """
        app_logger.info(f"Requested model: {alias} ({flavor.value}, stream={streaming})")
        try:
            model = await ModelResolver.shared().resolve(alias)
        except UpstreamUnavailableError as e:
            return ChatService.error_response(status.HTTP_404_NOT_FOUND, str(e))

        client = UpstreamClient()

        if not streaming:
            try:
                response = await client.chat(messages, model)
                return JSONResponse(ResponseFormatter.complete(flavor, model, response))
            except (UpstreamError, httpx.HTTPError, ValueError) as e:
                app_logger.error(f"Failed to get {flavor.value} response: {e}")
                return ChatService.error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e) or type(e).__name__)

        try:
            stream = await client.open_chat_stream(messages, model)
        except (UpstreamError, httpx.HTTPError) as e:
            app_logger.error(f"Failed to create {flavor.value} stream: {e}")
            return ChatService.error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e) or type(e).__name__)

        # Released even if the body iterator never starts.
        translator = StreamTranslator(flavor, model)
        return StreamingResponse(
            translator.translate(stream),
            media_type=NDJSON_MEDIA_TYPE,
            headers=STREAM_HEADERS,
            background=BackgroundTask(stream.aclose),
        )
