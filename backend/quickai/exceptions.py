"""
QuickAI Backend - Error Taxonomy
=================================

What:  The flat error taxonomy of the action pipeline plus the exception types
       raised by gateways and the auth dependency.
How:   Gateways raise exceptions; the action pipeline converts every failure
       into an `ActionResult` tagged with one of the four `ErrorKind` values.
       Two exceptions escape to global handlers in main, both raised by the
       auth dependency before any action handler runs:
         - `AuthenticationError` is rendered as a 401 envelope.
         - `IdentityServiceError` (an `UpstreamFailureError`) from the Clerk
           usage lookup is rendered as a 200 `{success: false}` envelope.

Exception Hierarchy:
    QuickAIError (base)
    ├── AuthenticationError      → 401 (rejected before the handler)
    └── UpstreamFailureError     → ErrorKind.UPSTREAM_FAILURE (200 envelope from
                                   main when raised by the auth dependency)
        ├── LLMServiceError          (Gemini)
        ├── ImageRenderError         (Pollinations)
        ├── AssetHostError           (Cloudinary)
        ├── DocumentExtractionError  (pypdf)
        ├── IdentityServiceError     (Clerk Backend API)
        └── DatabaseError            (creations insert)

ErrorKind:
    QUOTA_EXCEEDED    Free plan used up its count-limited actions
    PLAN_REQUIRED     Premium-only action requested on a non-premium plan
    INVALID_PAYLOAD   Missing/oversized file, malformed body
    UPSTREAM_FAILURE  Any exception from a gateway, the insert, or the quota update
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """The four failure kinds reported by action handlers."""

    QUOTA_EXCEEDED = "quota_exceeded"
    PLAN_REQUIRED = "plan_required"
    INVALID_PAYLOAD = "invalid_payload"
    UPSTREAM_FAILURE = "upstream_failure"


class QuickAIError(Exception):
    """
    Base exception for all QuickAI application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthenticationError(QuickAIError):
    """
    Raised when the caller has no valid session.

    When:    Missing bearer token, bad signature, expired token, untrusted azp.
    HTTP:    401 Unauthorized, rendered by the global handler in main.py.
    """

    def __init__(
        self,
        message: str = "Not authenticated",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamFailureError(QuickAIError):
    """
    Base for failures of an external collaborator.

    The action pipeline reports these as ErrorKind.UPSTREAM_FAILURE with the
    exception message, exactly like any other exception a gateway lets escape.
    """

    kind = ErrorKind.UPSTREAM_FAILURE

    def __init__(
        self,
        message: str = "An upstream service failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class LLMServiceError(UpstreamFailureError):
    """
    Raised when the Gemini completion call fails.

    Raised once; the pipeline makes exactly one delegated call per request.
    """

    def __init__(
        self,
        message: str = "AI text generation service is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ImageRenderError(UpstreamFailureError):
    """Raised when the text-to-image provider returns an error or no image."""

    def __init__(
        self,
        message: str = "Image generation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AssetHostError(UpstreamFailureError):
    """Raised when Cloudinary rejects an upload or returns no URL."""

    def __init__(
        self,
        message: str = "Image upload failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DocumentExtractionError(UpstreamFailureError):
    """Raised when an uploaded PDF cannot be read."""

    def __init__(
        self,
        message: str = "Could not read the uploaded PDF",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class IdentityServiceError(UpstreamFailureError):
    """
    Raised when the Clerk Backend API fails.

    When:    Reading usage metadata (auth dependency) or writing the
             incremented counter (after a count-limited action).
    """

    def __init__(
        self,
        message: str = "Identity service request failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(UpstreamFailureError):
    """
    Raised when the creations insert fails.

    Security Note:
        The message returned to the client is generic. The SQL error is
        logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
