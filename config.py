"""
Configuration module for the Ollama Upstream Gateway.
Handles environment variables and application settings.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration class."""

    # Upstream credentials
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")

    # Upstream Configuration
    OPENROUTER_BASE_URL: str = os.getenv("OPENROUTER_BASE_URL", "") or "https://openrouter.ai/api/v1/"
    OPENROUTER_HTTP_REFERER: str = os.getenv("OPENROUTER_HTTP_REFERER", "")
    OPENROUTER_X_TITLE: str = os.getenv("OPENROUTER_X_TITLE", "") or "ollama-proxy"

    # Application Settings
    APP_TITLE: str = "Ollama Upstream Gateway"
    OLLAMA_VERSION: str = "0.6.2"
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "11434"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Allow-list of short model names, one per line
    MODELS_FILTER_PATH: str = os.getenv("MODELS_FILTER_PATH", "models-filter")

    # Timeouts (in seconds)
    UPSTREAM_TIMEOUT: float = float(os.getenv("UPSTREAM_TIMEOUT", "300"))
    UPSTREAM_CONNECT_TIMEOUT: float = float(os.getenv("UPSTREAM_CONNECT_TIMEOUT", "10"))

    # Connection pool
    MAX_UPSTREAM_CONNECTIONS: int = 100
    MAX_KEEPALIVE_CONNECTIONS: int = 20

    @classmethod
    def upstream_url(cls, path: str) -> str:
        """Join the upstream base URL with an endpoint path."""
        return cls.OPENROUTER_BASE_URL.rstrip("/") + "/" + path.lstrip("/")

    @classmethod
    def upstream_headers(cls) -> dict[str, str]:
        """Headers sent with every upstream request."""
        return {
            "Authorization": f"Bearer {cls.OPENAI_API_KEY}",
            "HTTP-Referer": cls.OPENROUTER_HTTP_REFERER,
            "X-Title": cls.OPENROUTER_X_TITLE,
        }

    @classmethod
    def load_model_filter(cls, path: str | None = None) -> set[str]:
        """
        Load the model allow-list.

        A missing file means no filtering and yields an empty set.
        Any other I/O error propagates.
        """
        filter_path = Path(path or cls.MODELS_FILTER_PATH)
        try:
            content = filter_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return set()

        return {line.strip() for line in content.splitlines() if line.strip()}

    @classmethod
    def validate(cls) -> list[str]:
        """Return a list of configuration problems, empty when the config is usable."""
        problems = []
        if not cls.OPENAI_API_KEY:
            problems.append(
                "OPENAI_API_KEY not set. Put it in the .env file or pass it as the first argument."
            )
        return problems
