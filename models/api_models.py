"""
Pydantic data models for inbound Ollama-style API requests.
"""
from typing import Any, List, Literal, Optional, Union
from pydantic import BaseModel, Field, model_validator


class IncomingMessage(BaseModel):
    """Chat message as sent by an Ollama client."""
    role: Literal["system", "user", "assistant"]
    content: Optional[str] = ""
    images: Optional[List[str]] = None


class ChatRequest(BaseModel):
    """Request body of /api/chat."""
    model: str = Field(..., min_length=1)
    messages: List[IncomingMessage] = Field(default_factory=list)
    stream: Optional[bool] = True
    images: Optional[List[str]] = None
    system: Optional[str] = None
    format: Optional[Union[str, dict]] = None
    options: Optional[dict[str, Any]] = None
    keep_alive: Optional[Union[str, int, float]] = None

    @property
    def wants_stream(self) -> bool:
        """Streaming is on unless the client explicitly sends false."""
        return self.stream is not False


class GenerateRequest(BaseModel):
    """Request body of /api/generate."""
    model: str = Field(..., min_length=1)
    prompt: Optional[str] = ""
    system: Optional[str] = None
    stream: Optional[bool] = True
    raw: bool = False
    images: Optional[List[str]] = None
    format: Optional[Union[str, dict]] = None
    options: Optional[dict[str, Any]] = None
    template: Optional[str] = None
    context: Optional[List[int]] = None
    keep_alive: Optional[Union[str, int, float]] = None

    @property
    def wants_stream(self) -> bool:
        """Streaming is on unless the client explicitly sends false."""
        return self.stream is not False


class ShowRequest(BaseModel):
    """Request body of /api/show. Newer clients send "model" instead of "name"."""
    name: str = ""
    model: str = ""

    @model_validator(mode="after")
    def _fill_name(self) -> "ShowRequest":
        if not self.name:
            self.name = self.model
        return self
