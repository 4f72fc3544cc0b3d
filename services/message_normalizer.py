"""
Message normalization for both endpoint flavors.
Merges per-message images, request-level images and text into one canonical
message list the upstream chat-completion API understands.
"""
from typing import Iterable, Optional

from models.api_models import ChatRequest, GenerateRequest
from models.chat_models import ChatMessage, ImagePart, MessageRole, TextPart
from utils.exceptions import EmptyPayloadError
from utils.image_format import format_image_for_api
from utils.logger import app_logger, preview


class MessageNormalizer:
    """Builds canonical ChatMessage sequences from inbound requests."""

    @staticmethod
    def build_image_parts(images: Optional[Iterable[str]], source: str = "message") -> list[ImagePart]:
        """Convert base64 images to image parts, skipping empty entries."""
        parts = []
        for idx, image in enumerate(images or []):
            try:
                url = format_image_for_api(image)
            except EmptyPayloadError:
                app_logger.warning(f"Empty image data in {source} at index {idx}, skipping")
                continue
            app_logger.debug(f"Adding {source} image {idx}: {preview(url)}")
            parts.append(ImagePart(url=url))
        return parts

    @staticmethod
    def ensure_system_prompt(messages: list[ChatMessage], system_prompt: Optional[str]) -> list[ChatMessage]:
        """Prepend a system message unless one is already present."""
        if not system_prompt:
            return messages
        if any(message.role == MessageRole.SYSTEM for message in messages):
            return messages
        return [ChatMessage(role=MessageRole.SYSTEM, text=system_prompt)] + messages

    @staticmethod
    def attach_images(message: ChatMessage, image_parts: list[ImagePart]) -> None:
        """Append image parts to a message, converting its text into a leading text part first."""
        if not image_parts:
            return
        if not message.content_parts:
            message.content_parts = [TextPart(value=message.text)]
        message.content_parts.extend(image_parts)
        message.text = ""

    @staticmethod
    def find_last_user_message(messages: list[ChatMessage]) -> Optional[ChatMessage]:
        for message in reversed(messages):
            if message.role == MessageRole.USER:
                return message
        return None

    @staticmethod
    def attach_top_level_images(messages: list[ChatMessage], images: Optional[list[str]]) -> None:
        """
        Attach request-level images to the last user message.

        With no user message the images are dropped. Clients have relied on
        this behaviour, it is kept as is.
        """
        if not images:
            return

        target = MessageNormalizer.find_last_user_message(messages)
        if target is None:
            app_logger.warning(f"Dropping {len(images)} top-level image(s): request has no user message")
            return

        image_parts = MessageNormalizer.build_image_parts(images, source="request")
        MessageNormalizer.attach_images(target, image_parts)

    @staticmethod
    def _normalize(messages: list[ChatMessage], system_prompt: Optional[str], top_level_images: Optional[list[str]]) -> list[ChatMessage]:
        messages = MessageNormalizer.ensure_system_prompt(messages, system_prompt)
        MessageNormalizer.attach_top_level_images(messages, top_level_images)

        multimodal = sum(1 for message in messages if message.is_multimodal)
        if multimodal:
            app_logger.info(f"Prepared {len(messages)} messages, {multimodal} multimodal")
        return messages

    @staticmethod
    def normalize_chat(request: ChatRequest) -> list[ChatMessage]:
        """Normalize an /api/chat request."""
        messages = []
        for idx, incoming in enumerate(request.messages):
            message = ChatMessage(role=MessageRole(incoming.role), text=incoming.content or "")
            image_parts = MessageNormalizer.build_image_parts(incoming.images, source=f"message {idx}")
            MessageNormalizer.attach_images(message, image_parts)
            messages.append(message)

        return MessageNormalizer._normalize(messages, request.system, request.images)

    @staticmethod
    def normalize_generate(request: GenerateRequest) -> list[ChatMessage]:
        """Normalize an /api/generate request into a single-turn conversation."""
        messages = [ChatMessage(role=MessageRole.USER, text=request.prompt or "")]
        return MessageNormalizer._normalize(messages, request.system, request.images)

    @staticmethod
    def to_openai_messages(messages: list[ChatMessage]) -> list[dict]:
        """Render canonical messages as an OpenAI chat-completion message list."""
        return [message.to_openai() for message in messages]
