"""
Ollama Upstream Gateway - FastAPI application exposing an Ollama-compatible API
on top of an OpenAI-compatible chat-completion provider.
"""
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from config import Config
from routes import chat, generate, models_route
from utils.http_client import HTTPClientManager
from utils.logger import app_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the model allow-list on startup, close upstream connections on shutdown."""
    for problem in Config.validate():
        app_logger.error(problem)

    app.state.model_filter = Config.load_model_filter()
    if app.state.model_filter:
        app_logger.info(f"Loaded {len(app.state.model_filter)} models from filter: {', '.join(sorted(app.state.model_filter))}")
    else:
        app_logger.info(f"{Config.MODELS_FILTER_PATH} not found or empty, model filtering disabled")

    app_logger.info(f"Forwarding to {Config.OPENROUTER_BASE_URL}")
    yield
    await HTTPClientManager.close_all()


def describe_validation_error(errors: list) -> str:
    """Turn the first pydantic error into a short "field: message" string."""
    if not errors:
        return "Validation error"

    first_error = errors[0]
    loc = first_error.get('loc') or []
    field = loc[-1] if loc else 'body'
    return f"{field}: {first_error.get('msg', 'Validation error')}"


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Reject malformed request bodies before anything is sent upstream."""
    errors = exc.errors()
    app_logger.error(f"Invalid payload for {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid JSON payload",
            "detail": describe_validation_error(errors),
        },
    )


async def root():
    """Health check, the same answer Ollama gives."""
    return PlainTextResponse("Ollama is running")


async def root_head():
    return Response(status_code=status.HTTP_200_OK)


def create_app() -> FastAPI:
    app = FastAPI(title=Config.APP_TITLE, lifespan=lifespan)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.add_api_route("/", root, methods=["GET"])
    app.add_api_route("/", root_head, methods=["HEAD"])

    app.include_router(models_route.router, tags=["models"])
    app.include_router(chat.router, tags=["chat"])
    app.include_router(generate.router, tags=["generate"])
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    if not Config.OPENAI_API_KEY and len(sys.argv) > 1:
        Config.OPENAI_API_KEY = sys.argv[1]
    if not Config.OPENAI_API_KEY:
        app_logger.error("OPENAI_API_KEY environment variable or command-line argument not set.")
        sys.exit(1)

    uvicorn.run(app, host=Config.HOST, port=Config.PORT)
