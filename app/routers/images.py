import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.utils.auth import auth_dependency
from app.utils.http import get_http_client
from app.utils.images import ImageGenerationError, generate_image

logger = logging.getLogger(__name__)

router = APIRouter(tags=["images"])


class ImageRequest(BaseModel):
    prompt: Optional[str] = None


# Route to generate an image from a text prompt
@router.post('/api/generate-image')
async def create_image(
    params: ImageRequest,
    http_client: httpx.AsyncClient = Depends(get_http_client),
    user = Depends(auth_dependency),
):
    prompt = (params.prompt or "").strip()
    if not prompt:
        raise HTTPException(status_code=400, detail="Prompt is required")
    try:
        mime_type, data = await generate_image(http_client, prompt)
    except ImageGenerationError as e:
        logger.error("Image generation failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e))
    return {"b64_json": data, "mimeType": mime_type}
