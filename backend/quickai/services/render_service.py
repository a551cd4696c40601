"""
QuickAI Backend - Text-to-Image Render Service
===============================================

What:  Turns a prompt into raw image bytes via the Pollinations image endpoint.
How:   One plain HTTP GET with httpx:
           {base}/prompt/{url-encoded prompt}?width=1024&height=1024&nologo=true
       The response body is the image.
Who:   Called by ActionService.generate_image before the Cloudinary upload.
"""

import logging
import time
from typing import Optional
from urllib.parse import quote

import httpx

from quickai.config import settings
from quickai.exceptions import ImageRenderError

logger = logging.getLogger(__name__)

# Characters JavaScript's encodeURIComponent leaves untouched
_URI_COMPONENT_SAFE = "-_.!~*'()"


class RenderService:
    """Client for the text-to-image provider."""

    def __init__(self, base_url: Optional[str] = None, size: Optional[int] = None):
        self.base_url = (base_url or settings.image_render_base_url).rstrip("/")
        self.size = size or settings.image_render_size

    def build_url(self, prompt: str) -> str:
        """Render URL for `prompt`, percent-encoded as a single path segment."""
        encoded = quote(prompt, safe=_URI_COMPONENT_SAFE)
        return (
            f"{self.base_url}/prompt/{encoded}"
            f"?width={self.size}&height={self.size}&nologo=true"
        )

    async def render(self, prompt: str) -> bytes:
        """
        Render `prompt` to an image.

        Returns:
            Raw image bytes (PNG/JPEG as served by the provider).

        Raises:
            ImageRenderError: Non-2xx status, transport error, or empty body.
        """
        url = self.build_url(prompt)
        start_time = time.perf_counter()

        try:
            async with httpx.AsyncClient(
                timeout=settings.image_render_timeout,
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Image render returned HTTP %d for prompt of %d chars",
                e.response.status_code,
                len(prompt),
            )
            raise ImageRenderError(
                message=f"Image generation failed with status code {e.response.status_code}",
                context={"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            logger.error("Image render request failed: %s", str(e))
            raise ImageRenderError(
                message=str(e) or "Image generation request failed",
                context={"error_type": type(e).__name__},
            ) from e

        if not response.content:
            raise ImageRenderError(message="Image generation returned no data")

        logger.info(
            "Rendered image: %d bytes in %.0fms",
            len(response.content),
            (time.perf_counter() - start_time) * 1000,
        )
        return response.content


render_service = RenderService()
