"""
QuickAI Backend - Action Service (Usage-Gated AI Pipeline)
===========================================================

What:  The six AI actions behind /api/ai. Each runs the same pipeline and
       returns an ActionResult; none of them raise.
Who:   Called by routes/ai.py with a RequestContext built by the auth dependency.

Pipeline (every action):
    ┌──────────┐   ┌──────────┐   ┌───────────────┐   ┌─────────┐   ┌───────────┐
    │  Policy  │──▶│ Payload  │──▶│ External call │──▶│ Persist │──▶│ Quota +1  │
    │ (quota)  │   │  shape   │   │  (one chain)  │   │ (1 row) │   │ (if free, │
    └──────────┘   └──────────┘   └───────────────┘   └─────────┘   │  counted) │
                                                                    └───────────┘
    Policy and payload failures return before any external call.
    Any exception from the call, the insert, or the quota update becomes
    ErrorKind.UPSTREAM_FAILURE with the exception's message.

Actions:
    generate_article          COUNT_LIMITED  Gemini, max_tokens=length       → article
    generate_blog_title       COUNT_LIMITED  Gemini, max_tokens=100          → blog-title
    generate_image            PREMIUM_ONLY   Pollinations → Cloudinary       → image
    remove_image_background   PREMIUM_ONLY   Cloudinary background_removal   → image
    remove_image_object       PREMIUM_ONLY   Cloudinary upload + gen_remove  → image
    review_resume             PREMIUM_ONLY   pypdf → Gemini, max_tokens=1000 → resume-review
"""

import logging
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from quickai.config import settings
from quickai.exceptions import ErrorKind, QuickAIError
from quickai.schemas.action import (
    ArticleRequest,
    BlogTitleRequest,
    ImageRequest,
    RequestContext,
    describe_validation_error,
)
from quickai.services.asset_service import (
    BACKGROUND_REMOVAL,
    asset_service,
    object_removal_transformation,
)
from quickai.services.creation_service import creation_service
from quickai.services.document_service import document_service
from quickai.services.file_service import UploadTooLargeError, file_service
from quickai.services.gemini_service import gemini_service
from quickai.services.identity_service import identity_service
from quickai.services.outcome import ActionResult
from quickai.services.quota import ActionGate, check_access, consumes_quota
from quickai.services.render_service import render_service

logger = logging.getLogger(__name__)

BodyT = TypeVar("BodyT", bound=BaseModel)

BLOG_TITLE_MAX_TOKENS = 100
RESUME_REVIEW_MAX_TOKENS = 1000

RESUME_REVIEW_PROMPT = (
    "Review the following resume and provide constructive feedback on its strengths, "
    "weaknesses and areas for improvement. Resume Content:\n\n{resume_text}"
)

# Prompts stored for actions that have no user-written prompt
BACKGROUND_REMOVAL_PROMPT = "Remove background from image"
OBJECT_REMOVAL_PROMPT = "Removed {target} from image"
RESUME_REVIEW_STORED_PROMPT = "Review the uploaded resume"

NO_IMAGE_MESSAGE = "No image file uploaded."
NO_RESUME_MESSAGE = "No resume file uploaded."
NO_OBJECT_MESSAGE = "Please describe the object to remove."
RESUME_TOO_LARGE_MESSAGE = "Resume file size exceeds 5MB limit."


def _failure_message(exc: Exception) -> str:
    if isinstance(exc, QuickAIError):
        return exc.message
    return str(exc) or exc.__class__.__name__


def _invalid(message: str) -> ActionResult:
    return ActionResult.failure(ErrorKind.INVALID_PAYLOAD, message)


def _parse(model: Type[BodyT], **fields: Any) -> Tuple[Optional[BodyT], Optional[ActionResult]]:
    """
    Validate JSON fields against `model` once the gate has passed.

    Absent (None) fields are left out so pydantic reports them as missing.
    """
    data = {name: value for name, value in fields.items() if value is not None}
    try:
        return model.model_validate(data), None
    except ValidationError as e:
        return None, _invalid(describe_validation_error(e.errors()))


class ActionService:
    """
    Stateless orchestrator for the AI actions.

    Every public method takes the request's db session and RequestContext and
    returns an ActionResult. Gateways are the module-level singletons, which
    tests patch.
    """

    async def _deliver(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        gate: ActionGate,
        call: Callable[[], Awaitable[str]],
        prompt: str,
        creation_type: str,
        publish: bool = False,
    ) -> ActionResult:
        """
        Run the external call, persist the creation, then update the quota.

        Order is fixed: a failed insert never consumes quota; a failed quota
        update leaves the row in place and reports the failure.
        """
        phase = "external call"
        try:
            content = await call()

            phase = "persist"
            await creation_service.record(
                db,
                user_id=ctx.user_id,
                prompt=prompt,
                content=content,
                creation_type=creation_type,
                publish=publish,
            )

            if consumes_quota(ctx, gate):
                phase = "quota update"
                await identity_service.set_free_usage(ctx.user_id, ctx.free_usage + 1)

        except Exception as e:
            logger.error(
                "%s failed during %s for user %s: %s",
                creation_type,
                phase,
                ctx.user_id,
                str(e),
            )
            return ActionResult.failure(ErrorKind.UPSTREAM_FAILURE, _failure_message(e))

        return ActionResult.success(content)

    # ── Text actions (count-limited) ──────────────────────────────────────

    async def generate_article(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        prompt: Any,
        length: Any,
    ) -> ActionResult:
        """
        Write an article for `prompt` with a token budget of `length`.

        `prompt` and `length` arrive as sent in the JSON body and are only
        validated once the quota allows the request.
        """
        denied = check_access(ctx, ActionGate.COUNT_LIMITED)
        if denied:
            return denied

        body, invalid = _parse(ArticleRequest, prompt=prompt, length=length)
        if invalid:
            return invalid

        return await self._deliver(
            db,
            ctx,
            ActionGate.COUNT_LIMITED,
            call=lambda: gemini_service.generate_text(body.prompt, max_tokens=body.length),
            prompt=body.prompt,
            creation_type="article",
        )

    async def generate_blog_title(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        prompt: Any,
    ) -> ActionResult:
        """Suggest blog titles for `prompt`."""
        denied = check_access(ctx, ActionGate.COUNT_LIMITED)
        if denied:
            return denied

        body, invalid = _parse(BlogTitleRequest, prompt=prompt)
        if invalid:
            return invalid

        return await self._deliver(
            db,
            ctx,
            ActionGate.COUNT_LIMITED,
            call=lambda: gemini_service.generate_text(
                body.prompt, max_tokens=BLOG_TITLE_MAX_TOKENS
            ),
            prompt=body.prompt,
            creation_type="blog-title",
        )

    # ── Image actions (premium-only) ──────────────────────────────────────

    async def generate_image(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        prompt: Any,
        publish: Any = None,
    ) -> ActionResult:
        """
        Render `prompt` to an image and host it on Cloudinary.

        `publish` omitted (None) is stored as false.
        """
        denied = check_access(ctx, ActionGate.PREMIUM_ONLY)
        if denied:
            return denied

        body, invalid = _parse(ImageRequest, prompt=prompt, publish=publish)
        if invalid:
            return invalid

        async def call() -> str:
            image = await render_service.render(body.prompt)
            uploaded = await asset_service.upload(image)
            return uploaded["secure_url"]

        return await self._deliver(
            db,
            ctx,
            ActionGate.PREMIUM_ONLY,
            call=call,
            prompt=body.prompt,
            creation_type="image",
            publish=bool(body.publish),
        )

    async def remove_image_background(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        image: Optional[bytes],
        filename: Optional[str] = None,
    ) -> ActionResult:
        """Upload `image` with Cloudinary's background-removal effect."""
        denied = check_access(ctx, ActionGate.PREMIUM_ONLY)
        if denied:
            return denied

        if not image:
            return _invalid(NO_IMAGE_MESSAGE)
        try:
            file_service.validate_size(image)
        except UploadTooLargeError as e:
            return _invalid(e.message)

        async def call() -> str:
            path = await file_service.store_upload(image, filename)
            try:
                uploaded = await asset_service.upload(path, transformation=BACKGROUND_REMOVAL)
            finally:
                await file_service.cleanup_file(path)
            return uploaded["secure_url"]

        return await self._deliver(
            db,
            ctx,
            ActionGate.PREMIUM_ONLY,
            call=call,
            prompt=BACKGROUND_REMOVAL_PROMPT,
            creation_type="image",
        )

    async def remove_image_object(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        image: Optional[bytes],
        target: Optional[str],
        filename: Optional[str] = None,
    ) -> ActionResult:
        """
        Upload `image`, then return a URL that applies generative removal of `target`.

        `target` goes into the effect string as typed by the user.
        """
        denied = check_access(ctx, ActionGate.PREMIUM_ONLY)
        if denied:
            return denied

        if not image:
            return _invalid(NO_IMAGE_MESSAGE)
        if not target or not target.strip():
            return _invalid(NO_OBJECT_MESSAGE)
        try:
            file_service.validate_size(image)
        except UploadTooLargeError as e:
            return _invalid(e.message)

        async def call() -> str:
            path = await file_service.store_upload(image, filename)
            try:
                uploaded = await asset_service.upload(path)
            finally:
                await file_service.cleanup_file(path)
            return asset_service.transformed_url(
                uploaded["public_id"],
                object_removal_transformation(target),
            )

        return await self._deliver(
            db,
            ctx,
            ActionGate.PREMIUM_ONLY,
            call=call,
            prompt=OBJECT_REMOVAL_PROMPT.format(target=target),
            creation_type="image",
        )

    # ── Resume review (premium-only) ──────────────────────────────────────

    async def review_resume(
        self,
        db: AsyncSession,
        ctx: RequestContext,
        resume: Optional[bytes],
    ) -> ActionResult:
        """
        Extract the resume's text and ask Gemini for a review.

        Files over settings.max_resume_size are rejected before extraction.
        """
        denied = check_access(ctx, ActionGate.PREMIUM_ONLY)
        if denied:
            return denied

        if not resume:
            return _invalid(NO_RESUME_MESSAGE)
        if len(resume) > settings.max_resume_size:
            return _invalid(RESUME_TOO_LARGE_MESSAGE)

        async def call() -> str:
            resume_text = await document_service.extract_text(resume)
            return await gemini_service.generate_text(
                RESUME_REVIEW_PROMPT.format(resume_text=resume_text),
                max_tokens=RESUME_REVIEW_MAX_TOKENS,
            )

        return await self._deliver(
            db,
            ctx,
            ActionGate.PREMIUM_ONLY,
            call=call,
            prompt=RESUME_REVIEW_STORED_PROMPT,
            creation_type="resume-review",
        )


# ── Singleton Instance ────────────────────────────────────────────────────
action_service = ActionService()
