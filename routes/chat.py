"""
Route handler for the Ollama /api/chat endpoint.
"""
from fastapi import APIRouter

from models.api_models import ChatRequest
from models.chat_models import EnvelopeFlavor
from services.chat_service import ChatService
from services.message_normalizer import MessageNormalizer

router = APIRouter()


@router.post("/api/chat")
async def chat(request: ChatRequest):
    """
    Chat endpoint. Streams NDJSON unless the client sends "stream": false.
    """
    messages = MessageNormalizer.normalize_chat(request)
    return await ChatService.respond(
        messages=messages,
        alias=request.model,
        flavor=EnvelopeFlavor.CHAT,
        streaming=request.wants_stream,
    )
