"""
QuickAI Backend - AI Action Routes
===================================

What:  The six POST endpoints under /api/ai.
How:   Each route hands its raw payload and the caller's RequestContext to
       ActionService and renders the returned ActionResult as the envelope.
       JSON bodies are read loosely here. ActionService validates them after
       the quota check.
Who:   Called by the QuickAI frontend with a Clerk session token.

Every route answers HTTP 200 with either
    {"success": true,  "content": "..."}
    {"success": false, "message": "..."}
Only authentication failures (401) and unexpected crashes (500) differ.
"""

import logging
from typing import Any, Dict, Optional, Type

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from quickai.database import get_db_session
from quickai.middleware.auth import get_request_context
from quickai.schemas.action import (
    ActionResponse,
    ArticleRequest,
    BlogTitleRequest,
    ImageRequest,
    RequestContext,
)
from quickai.services.action_service import action_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["AI"])

_envelope = {
    "response_model": ActionResponse,
    "response_model_exclude_none": True,
}


def _json_body(model: Type[BaseModel]) -> Dict[str, Any]:
    """Documents `model` as the request body without FastAPI validating it."""
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": model.model_json_schema()}},
        }
    }


async def json_object(request: Request) -> Dict[str, Any]:
    """
    The request body as a dict, or {} when it is missing, not JSON, or not an object.

    Declared after the auth dependency on each route so it resolves second.
    """
    try:
        data = await request.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


async def _read_upload(upload: Optional[UploadFile]) -> Optional[bytes]:
    """Read an optional multipart file fully and close it."""
    if upload is None:
        return None
    try:
        return await upload.read()
    finally:
        await upload.close()


@router.post(
    "/generate-article",
    summary="Generate an article",
    description="Count-limited for free plans. `length` is the completion token budget.",
    openapi_extra=_json_body(ArticleRequest),
    **_envelope,
)
async def generate_article(
    ctx: RequestContext = Depends(get_request_context),
    body: Dict[str, Any] = Depends(json_object),
    db: AsyncSession = Depends(get_db_session),
) -> ActionResponse:
    result = await action_service.generate_article(
        db, ctx, body.get("prompt"), body.get("length")
    )
    return result.to_response()


@router.post(
    "/generate-blog-title",
    summary="Suggest blog titles",
    description="Count-limited for free plans.",
    openapi_extra=_json_body(BlogTitleRequest),
    **_envelope,
)
async def generate_blog_title(
    ctx: RequestContext = Depends(get_request_context),
    body: Dict[str, Any] = Depends(json_object),
    db: AsyncSession = Depends(get_db_session),
) -> ActionResponse:
    result = await action_service.generate_blog_title(db, ctx, body.get("prompt"))
    return result.to_response()


@router.post(
    "/generate-image",
    summary="Generate an image from text",
    description="Premium only. The image is hosted on Cloudinary; the URL is returned.",
    openapi_extra=_json_body(ImageRequest),
    **_envelope,
)
async def generate_image(
    ctx: RequestContext = Depends(get_request_context),
    body: Dict[str, Any] = Depends(json_object),
    db: AsyncSession = Depends(get_db_session),
) -> ActionResponse:
    result = await action_service.generate_image(
        db, ctx, body.get("prompt"), body.get("publish")
    )
    return result.to_response()


@router.post(
    "/remove-image-background",
    summary="Remove an image's background",
    description="Premium only. Multipart field `image`.",
    **_envelope,
)
async def remove_image_background(
    image: Optional[UploadFile] = File(None, description="Image to process"),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> ActionResponse:
    filename = image.filename if image else None
    content = await _read_upload(image)
    result = await action_service.remove_image_background(db, ctx, content, filename)
    return result.to_response()


@router.post(
    "/remove-image-object",
    summary="Remove an object from an image",
    description="Premium only. Multipart field `image` plus form field `object`.",
    **_envelope,
)
async def remove_image_object(
    image: Optional[UploadFile] = File(None, description="Image to process"),
    target: Optional[str] = Form(None, alias="object", description="Object to remove"),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> ActionResponse:
    filename = image.filename if image else None
    content = await _read_upload(image)
    result = await action_service.remove_image_object(db, ctx, content, target, filename)
    return result.to_response()


@router.post(
    "/resume-review",
    summary="Review a resume",
    description="Premium only. Multipart field `resume`, a PDF of at most 5 MB.",
    **_envelope,
)
async def resume_review(
    resume: Optional[UploadFile] = File(None, description="Resume PDF"),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> ActionResponse:
    content = await _read_upload(resume)
    logger.info("Resume review request from %s (%d bytes)", ctx.user_id, len(content or b""))
    result = await action_service.review_resume(db, ctx, content)
    return result.to_response()
