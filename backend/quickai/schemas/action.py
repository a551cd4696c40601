"""
QuickAI Backend - Pydantic Request/Response Schemas
====================================================

What:  Pydantic models for the action endpoints' contract with the frontend,
       plus the per-request context built by the auth dependency.
How:   FastAPI validates JSON bodies against the request models and serializes
       `ActionResponse` for every action, success or failure.
"""

from typing import Any, Dict, Optional, Sequence

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Context: who is calling and what their plan allows
# ══════════════════════════════════════════════════════════════════════════


class RequestContext(BaseModel):
    """
    What:  Caller identity, plan tier, and free-usage counter for one request.
    Who:   Built once by `middleware.auth.get_request_context`, then passed by
           value into every ActionService handler.

    Frozen: handlers never mutate it; the incremented counter is written to
    Clerk, not back into the context.
    """
    user_id: str = Field(description="Clerk user id (`sub` claim)")
    plan: str = Field(default="free", description="'premium' or 'free'")
    free_usage: int = Field(default=0, ge=0, description="Count-limited actions consumed")

    model_config = {"frozen": True}

    @property
    def is_premium(self) -> bool:
        return self.plan == "premium"


# ══════════════════════════════════════════════════════════════════════════
# Request Models: JSON bodies sent by the frontend
# ══════════════════════════════════════════════════════════════════════════


class ArticleRequest(BaseModel):
    """
    Body of POST /api/ai/generate-article.

    length: the token budget handed to the completion call as-is
            (the frontend offers 800 / 1200 / 1600).
    """
    prompt: str = Field(min_length=1, description="Article topic prompt")
    length: int = Field(gt=0, description="Completion token budget")


class BlogTitleRequest(BaseModel):
    """Body of POST /api/ai/generate-blog-title."""
    prompt: str = Field(min_length=1, description="Blog title prompt")


class ImageRequest(BaseModel):
    """
    Body of POST /api/ai/generate-image.

    publish: shows the image in the community feed; omitted means false.
    """
    prompt: str = Field(min_length=1, description="Image description")
    publish: Optional[bool] = Field(default=None, description="Publish to the community feed")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ActionResponse(BaseModel):
    """
    The uniform JSON envelope returned by every action endpoint.

    Success: {"success": true, "content": "..."}
    Failure: {"success": false, "message": "..."}

    Always HTTP 200; `success` is the only signal.
    """
    success: bool = Field(description="Whether the action completed")
    content: Optional[str] = Field(default=None, description="Generated text or image URL")
    message: Optional[str] = Field(default=None, description="Human-readable failure reason")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    gemini: str = Field(description="Gemini API status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")


def describe_validation_error(errors: Sequence[Dict[str, Any]]) -> str:
    """
    One-line message for the first pydantic error, e.g. "length: Field required".

    The leading "body" segment FastAPI adds to request locations is dropped.
    """
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return f"{field}: {message}" if field else message
