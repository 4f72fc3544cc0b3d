"""
Image signature detection for base64 payloads.
Turns raw base64 image data into data URLs the upstream API accepts.
"""
from utils.constants import (
    DATA_URL_BASE64_MARKER,
    DATA_URL_PREFIX,
    DEFAULT_IMAGE_TYPE,
    IMAGE_SIGNATURES,
)
from utils.exceptions import EmptyPayloadError
from utils.logger import app_logger, preview


def is_data_url(data: str) -> bool:
    """Check whether the payload already is a base64 image data URL."""
    return data.startswith(DATA_URL_PREFIX) and DATA_URL_BASE64_MARKER in data


def detect_image_type(data: str) -> str | None:
    """Return the image subtype matching the leading base64 text, or None."""
    for prefix, image_type in IMAGE_SIGNATURES:
        if data.startswith(prefix):
            return image_type
    return None


def format_image_for_api(data: str) -> str:
    """
    Build an embeddable image reference from base64 data.

    The base64 text is inspected literally, it is never decoded. Unknown
    signatures are labelled JPEG.

    Raises:
        EmptyPayloadError: when the payload is empty or only whitespace
    """
    data = (data or "").strip()
    if not data:
        app_logger.error("Empty image data received")
        raise EmptyPayloadError("empty image payload")

    if is_data_url(data):
        app_logger.debug("Image already has data URL format")
        return data

    image_type = detect_image_type(data)
    if image_type is None:
        app_logger.info(f"Could not determine image type from '{preview(data, 20)}', defaulting to {DEFAULT_IMAGE_TYPE}")
        image_type = DEFAULT_IMAGE_TYPE
    else:
        app_logger.debug(f"Detected {image_type} image")

    return f"{DATA_URL_PREFIX}{image_type}{DATA_URL_BASE64_MARKER}{data}"
