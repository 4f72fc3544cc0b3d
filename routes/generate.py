"""
Route handler for the Ollama /api/generate endpoint.
"""
from fastapi import APIRouter

from models.api_models import GenerateRequest
from models.chat_models import EnvelopeFlavor
from services.chat_service import ChatService
from services.message_normalizer import MessageNormalizer

router = APIRouter()


@router.post("/api/generate")
async def generate(request: GenerateRequest):
    """
    Completion endpoint. The prompt is sent as a single user turn with an
    optional system prompt and images.
    """
    messages = MessageNormalizer.normalize_generate(request)
    return await ChatService.respond(
        messages=messages,
        alias=request.model,
        flavor=EnvelopeFlavor.GENERATE,
        streaming=request.wants_stream,
    )
