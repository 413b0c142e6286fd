import logging
from typing import Tuple

import httpx

from app.database import get_settings

logger = logging.getLogger(__name__)

IMAGE_MODEL = "gemini-2.5-flash-image"


class ImageGenerationError(Exception):
    pass


async def generate_image(client: httpx.AsyncClient, prompt: str) -> Tuple[str, str]:
    """Generate an image for ``prompt`` and return ``(mime_type, base64_data)``."""
    settings = get_settings()
    if not settings.GEMINI_API_KEY:
        raise ImageGenerationError("Gemini API key not configured")

    url = f"{settings.GEMINI_BASE_URL.rstrip('/')}/models/{IMAGE_MODEL}:generateContent"
    body = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
    }
    try:
        response = await client.post(url, json=body, headers={"x-goog-api-key": settings.GEMINI_API_KEY})
    except httpx.HTTPError as e:
        raise ImageGenerationError(f"Image request failed: {e}") from e
    if response.status_code >= 400:
        logger.error("Image generation returned %s: %.500s", response.status_code, response.text)
        raise ImageGenerationError(f"Image provider error ({response.status_code})")

    try:
        candidates = response.json().get("candidates") or []
        parts = []
        if candidates:
            parts = (candidates[0].get("content") or {}).get("parts") or []
        for part in parts:
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                return inline.get("mimeType") or inline.get("mime_type") or "image/png", inline["data"]
    except (ValueError, AttributeError, TypeError, KeyError, IndexError) as e:
        logger.error("Unexpected image response: %.500s", response.text)
        raise ImageGenerationError("Invalid response from image provider") from e
    raise ImageGenerationError("No image data in response")
