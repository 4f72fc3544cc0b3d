"""
Models package exports.
"""
from models.api_models import IncomingMessage, ChatRequest, GenerateRequest, ShowRequest
from models.chat_models import (
    short_model_name,
    MessageRole,
    TextPart,
    ImagePart,
    ContentPart,
    ChatMessage,
    UsageStats,
    StreamChunk,
    EnvelopeFlavor,
    StreamState,
)

__all__ = [
    'IncomingMessage',
    'ChatRequest',
    'GenerateRequest',
    'ShowRequest',
    'short_model_name',
    'MessageRole',
    'TextPart',
    'ImagePart',
    'ContentPart',
    'ChatMessage',
    'UsageStats',
    'StreamChunk',
    'EnvelopeFlavor',
    'StreamState',
]
