"""
QuickAI Backend - Quota Policy
===============================

What:  Decides whether an action may proceed, independent of which action it is.
Who:   Called by ActionService before any external call is made.

Rules:
    COUNT_LIMITED (article, blog-title):
        premium         → allowed, counter untouched
        free, usage < 5 → allowed, counter +1 after the row is persisted
        free, usage ≥ 5 → QUOTA_EXCEEDED
    PREMIUM_ONLY (image, background, object, resume):
        premium         → allowed
        free            → PLAN_REQUIRED, whatever the usage count
"""

from enum import Enum
from typing import Optional

from quickai.config import settings
from quickai.exceptions import ErrorKind
from quickai.schemas.action import RequestContext
from quickai.services.outcome import ActionResult

QUOTA_EXCEEDED_MESSAGE = "Limit reached. Upgrade to Continue."
PLAN_REQUIRED_MESSAGE = "This feature is only available for premium subscriptions."


class ActionGate(str, Enum):
    """How an action is gated for non-premium callers."""

    COUNT_LIMITED = "count_limited"
    PREMIUM_ONLY = "premium_only"


def check_access(
    ctx: RequestContext,
    gate: ActionGate,
    limit: Optional[int] = None,
) -> Optional[ActionResult]:
    """
    Apply the policy.

    Returns:
        None when the action may proceed, otherwise the failure to return.
    """
    if ctx.is_premium:
        return None

    if gate is ActionGate.PREMIUM_ONLY:
        return ActionResult.failure(ErrorKind.PLAN_REQUIRED, PLAN_REQUIRED_MESSAGE)

    cap = settings.free_usage_limit if limit is None else limit
    if ctx.free_usage >= cap:
        return ActionResult.failure(ErrorKind.QUOTA_EXCEEDED, QUOTA_EXCEEDED_MESSAGE)
    return None


def consumes_quota(ctx: RequestContext, gate: ActionGate) -> bool:
    """True when a successful action must increment the caller's counter."""
    return gate is ActionGate.COUNT_LIMITED and not ctx.is_premium
