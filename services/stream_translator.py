"""
Translation of upstream chat-completion responses into Ollama envelopes.
Handles NDJSON framing, finish-reason tracking and stream termination.
"""
import json
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

import httpx

from models.chat_models import EnvelopeFlavor, StreamState, UsageStats
from services.upstream_client import ChatStream
from utils.constants import DEFAULT_FINISH_REASON
from utils.exceptions import UpstreamError, UpstreamStreamError
from utils.logger import app_logger

# Duration estimates for non-streaming responses, per token.
CHAT_DURATION_PER_TOKEN = 10
GENERATE_DURATION_PER_TOKEN_NS = 10_000_000
GENERATE_LOAD_DURATION_NS = 5_000_000


class ResponseFormatter:
    """Builds the JSON envelopes of both endpoint flavors."""

    @staticmethod
    def timestamp() -> str:
        """Current time in RFC 3339 format."""
        return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")

    @staticmethod
    def _base(flavor: EnvelopeFlavor, model: str, text: str, done: bool) -> dict:
        envelope = {"model": model, "created_at": ResponseFormatter.timestamp()}
        if flavor == EnvelopeFlavor.CHAT:
            envelope["message"] = {"role": "assistant", "content": text}
        else:
            envelope["response"] = text
        envelope["done"] = done
        return envelope

    @staticmethod
    def chunk(flavor: EnvelopeFlavor, model: str, text: str) -> dict:
        """Intermediate envelope carrying one content delta."""
        return ResponseFormatter._base(flavor, model, text, done=False)

    @staticmethod
    def terminal(flavor: EnvelopeFlavor, model: str, finish_reason: Optional[str], usage: Optional[UsageStats] = None) -> dict:
        """Final streamed envelope. Counts come from usage when the upstream reported it."""
        usage = usage or UsageStats()
        envelope = ResponseFormatter._base(flavor, model, "", done=True)

        if flavor == EnvelopeFlavor.CHAT:
            envelope["finish_reason"] = finish_reason or DEFAULT_FINISH_REASON
        else:
            envelope["done_reason"] = finish_reason or DEFAULT_FINISH_REASON
            envelope["context"] = []

        envelope.update({
            "total_duration": 0,
            "load_duration": 0,
            "prompt_eval_count": usage.prompt_tokens,
            "eval_count": usage.completion_tokens,
            "eval_duration": 0,
        })
        if flavor == EnvelopeFlavor.GENERATE:
            envelope["prompt_eval_duration"] = 0
        return envelope

    @staticmethod
    def complete(flavor: EnvelopeFlavor, model: str, response: dict) -> dict:
        """
        Single envelope for a non-streaming response.

        Durations are estimated from token counts since the upstream does not
        report timings.

        Raises:
            UpstreamError: when the response has no choices
        """
        choices = response.get("choices") or []
        if not choices:
            raise UpstreamError("No response from model")

        choice = choices[0]
        content = (choice.get("message") or {}).get("content") or ""
        finish_reason = choice.get("finish_reason") or DEFAULT_FINISH_REASON
        usage = UsageStats.from_openai(response.get("usage"))

        envelope = ResponseFormatter._base(flavor, model, content, done=True)
        if flavor == EnvelopeFlavor.CHAT:
            envelope.update({
                "finish_reason": finish_reason,
                "total_duration": usage.total_tokens * CHAT_DURATION_PER_TOKEN,
                "load_duration": 0,
                "prompt_eval_count": usage.prompt_tokens,
                "eval_count": usage.completion_tokens,
                "eval_duration": usage.completion_tokens * CHAT_DURATION_PER_TOKEN,
            })
        else:
            envelope.update({
                "done_reason": finish_reason,
                "context": [],
                "total_duration": usage.total_tokens * GENERATE_DURATION_PER_TOKEN_NS,
                "load_duration": GENERATE_LOAD_DURATION_NS,
                "prompt_eval_count": usage.prompt_tokens,
                "prompt_eval_duration": usage.prompt_tokens * GENERATE_DURATION_PER_TOKEN_NS,
                "eval_count": usage.completion_tokens,
                "eval_duration": usage.completion_tokens * GENERATE_DURATION_PER_TOKEN_NS,
            })
        return envelope


def encode_line(envelope: dict) -> str:
    """Serialize one envelope as an NDJSON line."""
    return json.dumps(envelope, ensure_ascii=False, separators=(',', ':')) + "\n"


class StreamTranslator:
    """
    Re-emits an upstream event stream as Ollama NDJSON lines.

    Every upstream event becomes exactly one line, in upstream order, followed
    by one terminal line. A broken stream ends with a single error line and no
    terminal line. The upstream stream is closed however iteration ends.
    """

    def __init__(self, flavor: EnvelopeFlavor, model: str):
        self.flavor = flavor
        self.model = model
        self.state = StreamState.STREAMING
        self.finish_reason: Optional[str] = None
        self.usage: Optional[UsageStats] = None
        self.event_count = 0

    async def translate(self, stream: ChatStream) -> AsyncIterator[str]:
        try:
            try:
                async for chunk in stream:
                    self.event_count += 1
                    if chunk.finish_reason:
                        self.finish_reason = chunk.finish_reason
                    if chunk.usage:
                        self.usage = chunk.usage
                    yield encode_line(ResponseFormatter.chunk(self.flavor, self.model, chunk.delta_text))
            except (httpx.HTTPError, UpstreamStreamError) as e:
                message = str(e) or type(e).__name__
                app_logger.error(f"Backend stream error after {self.event_count} events: {message}")
                self.state = StreamState.TERMINATED
                yield encode_line({"error": f"Stream error: {message}"})
                return

            self.state = StreamState.DRAINING
            app_logger.info(f"Stream for {self.model} finished after {self.event_count} events ({self.finish_reason or DEFAULT_FINISH_REASON})")
            yield encode_line(ResponseFormatter.terminal(self.flavor, self.model, self.finish_reason, self.usage))
        finally:
            self.state = StreamState.TERMINATED
            await stream.aclose()
