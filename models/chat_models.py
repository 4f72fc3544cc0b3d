"""
Data models for chat processing.
Contains the canonical message representation, stream chunks and stream states.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


def short_model_name(model_id: str) -> str:
    """Last path segment of an upstream id, e.g. "anthropic/claude-sonnet-4" -> "claude-sonnet-4"."""
    return model_id.rsplit("/", 1)[-1]


class MessageRole(str, Enum):
    """Roles a chat message can carry."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class TextPart:
    """Text content part."""
    value: str

    def to_openai(self) -> dict:
        return {"type": "text", "text": self.value}


@dataclass(frozen=True)
class ImagePart:
    """Image content part. The url is always a full URL or a data URL."""
    url: str

    def to_openai(self) -> dict:
        return {"type": "image_url", "image_url": {"url": self.url}}


ContentPart = Union[TextPart, ImagePart]


@dataclass
class ChatMessage:
    """
    Canonical chat message.

    When content_parts is non-empty it is what gets sent upstream and text
    stays empty.
    """
    role: MessageRole
    text: str = ""
    content_parts: list[ContentPart] = field(default_factory=list)

    @property
    def is_multimodal(self) -> bool:
        return bool(self.content_parts)

    def to_openai(self) -> dict:
        """Render the message in OpenAI chat-completion format."""
        if self.content_parts:
            content = [part.to_openai() for part in self.content_parts]
        else:
            content = self.text
        return {"role": self.role.value, "content": content}


@dataclass
class UsageStats:
    """Token usage reported by the upstream."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_openai(cls, usage: Optional[dict]) -> "UsageStats":
        usage = usage or {}
        prompt = int(usage.get("prompt_tokens") or 0)
        completion = int(usage.get("completion_tokens") or 0)
        total = int(usage.get("total_tokens") or (prompt + completion))
        return cls(prompt_tokens=prompt, completion_tokens=completion, total_tokens=total)


@dataclass
class StreamChunk:
    """One incremental upstream event."""
    delta_text: str = ""
    finish_reason: Optional[str] = None
    usage: Optional[UsageStats] = None


class EnvelopeFlavor(Enum):
    """Shape of the envelopes sent back to the client."""
    CHAT = "chat"
    GENERATE = "generate"


class StreamState(Enum):
    """States of the stream translator."""
    STREAMING = "streaming"
    DRAINING = "draining"
    TERMINATED = "terminated"
