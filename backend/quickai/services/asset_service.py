"""
QuickAI Backend - Cloudinary Asset Service
===========================================

What:  Uploads images to Cloudinary and builds transformed delivery URLs.
How:   The Cloudinary SDK is synchronous; uploads run in Starlette's threadpool
       so the event loop keeps serving other requests.
Who:   Called by ActionService for image generation, background removal,
       and object removal.

Transformations used:
    background removal: {"effect": "background_removal",
                         "background_removal": "remove_the_background"}
                        applied at upload time (eager, stored result)
    object removal:     {"effect": "gen_remove:<object>"}
                        applied at delivery time via the URL
"""

import base64
import logging
from typing import Any, Dict, List, Optional, Union

import cloudinary
import cloudinary.uploader
import cloudinary.utils
from starlette.concurrency import run_in_threadpool

from quickai.config import settings
from quickai.exceptions import AssetHostError

logger = logging.getLogger(__name__)

BACKGROUND_REMOVAL = [
    {
        "effect": "background_removal",
        "background_removal": "remove_the_background",
    }
]


def configure_cloudinary() -> None:
    """Apply credentials from settings to the SDK's global config."""
    cloudinary.config(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        secure=True,
    )


def to_data_uri(data: bytes, mime_type: str = "image/png") -> str:
    """Encode raw image bytes as a data URI accepted by the upload API."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def object_removal_transformation(target: str) -> List[Dict[str, str]]:
    """
    Generative-remove transformation for `target`.

    The description is inserted into the effect string verbatim.
    """
    return [{"effect": f"gen_remove:{target}"}]


class AssetService:
    """Thin async wrapper over the Cloudinary uploader."""

    async def upload(
        self,
        source: Union[str, bytes],
        transformation: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Upload an image and return Cloudinary's response.

        Args:
            source:         File path, URL, or data URI. Raw bytes are
                            converted to a PNG data URI first.
            transformation: Optional incoming transformation pipeline.

        Returns:
            The upload response dict; `secure_url` and `public_id` are always
            present on success.

        Raises:
            AssetHostError: The SDK raised, or the response had no URL.
        """
        if isinstance(source, bytes):
            source = to_data_uri(source)

        options: Dict[str, Any] = {"resource_type": "image"}
        if transformation:
            options["transformation"] = transformation

        try:
            result = await run_in_threadpool(cloudinary.uploader.upload, source, **options)
        except Exception as e:
            logger.error("Cloudinary upload failed: %s", str(e))
            raise AssetHostError(
                message=str(e) or "Image upload failed",
                context={"error_type": type(e).__name__},
            ) from e

        if not result or not result.get("secure_url") or not result.get("public_id"):
            raise AssetHostError(
                message="Image upload returned no URL",
                context={"keys": sorted(result or {})},
            )

        logger.info(
            "Uploaded asset public_id=%s (%s bytes)",
            result["public_id"],
            result.get("bytes", "?"),
        )
        return result

    def transformed_url(
        self,
        public_id: str,
        transformation: List[Dict[str, Any]],
    ) -> str:
        """Delivery URL for an uploaded asset with `transformation` applied."""
        url, _options = cloudinary.utils.cloudinary_url(
            public_id,
            transformation=transformation,
            resource_type="image",
            secure=True,
        )
        return url


asset_service = AssetService()
