"""
Constants for the Ollama Upstream Gateway.
"""

NDJSON_MEDIA_TYPE = "application/x-ndjson"

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}

DEFAULT_FINISH_REASON = "stop"

DATA_URL_PREFIX = "data:image/"
DATA_URL_BASE64_MARKER = ";base64,"


class ImageType:
    """Image MIME subtypes understood by the signature detector."""
    JPEG, PNG, GIF, WEBP = "jpeg", "png", "gif", "webp"


# Literal base64 prefixes of known image headers, checked in order.
IMAGE_SIGNATURES = (
    ("/9j/", ImageType.JPEG),
    ("iVBOR", ImageType.PNG),
    ("R0lGOD", ImageType.GIF),
    ("UklGR", ImageType.WEBP),
)

DEFAULT_IMAGE_TYPE = ImageType.JPEG


# Metadata reported for every upstream model. The upstream does not expose
# these values, Ollama clients only need them to be present.
STUB_MODEL_DETAILS = {
    "parent_model": "",
    "format": "gguf",
    "family": "claude",
    "families": ["claude"],
    "parameter_size": "175B",
    "quantization_level": "Q4_K_M",
}

STUB_MODEL_SIZE = 270898672
STUB_MODEL_DIGEST = "9077fe9d2ae1a4a41a868836b56b8163731a8fe16621397028c2c76f838c6907"

STUB_SHOW_RESPONSE = {
    "license": "STUB License",
    "system": "STUB SYSTEM",
    "details": {
        "format": "gguf",
        "parameter_size": "200B",
        "quantization_level": "Q4_K_M",
    },
    "model_info": {
        "architecture": "STUB",
        "context_length": 200000,
        "parameter_count": 200_000_000_000,
    },
}


class SSE:
    """Markers of the upstream server-sent event stream."""
    DATA_PREFIX = "data:"
    COMMENT_PREFIX = ":"
    DONE = "[DONE]"
