"""
Route handlers for model listing and model metadata.
"""
import httpx
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from config import Config
from models.api_models import ShowRequest
from services.model_resolver import ModelResolver
from services.stream_translator import ResponseFormatter
from utils.constants import STUB_SHOW_RESPONSE
from utils.exceptions import UpstreamError
from utils.logger import app_logger

router = APIRouter()


@router.get("/api/tags")
async def list_models(request: Request):
    """List upstream models, filtered through the allow-list when one is configured."""
    allow_list = getattr(request.app.state, "model_filter", set())
    try:
        models = await ModelResolver.shared().list_models(allow_list)
    except (UpstreamError, httpx.HTTPError) as e:
        app_logger.error(f"Error getting models: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(e) or type(e).__name__},
        )
    return {"models": models}


@router.post("/api/show")
async def show_model(request: ShowRequest):
    """Static model details. The upstream exposes nothing comparable."""
    if not request.name:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Model name is required"},
        )

    details = dict(STUB_SHOW_RESPONSE)
    details["modifiedAt"] = ResponseFormatter.timestamp()
    return details


@router.get("/api/version")
async def version():
    return {"version": Config.OLLAMA_VERSION}
