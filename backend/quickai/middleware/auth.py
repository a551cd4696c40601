"""
QuickAI Backend - Authentication Dependency
============================================

What:  Builds the RequestContext for every /api/ai request.
How:   FastAPI dependency: HTTPBearer → Clerk JWT verification → plan from the
       `pla` claim → free-usage counter from Clerk private metadata.
Who:   Declared on the /api/ai router; action routes receive the context by value.

Failure modes:
    no / malformed bearer header  → AuthenticationError (401)
    invalid or expired token      → AuthenticationError (401)
    Clerk user lookup fails       → IdentityServiceError (200 failure envelope,
                                    rendered by the handler in main.py)
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quickai.exceptions import AuthenticationError
from quickai.schemas.action import RequestContext
from quickai.services.identity_service import identity_service, plan_from_claims

logger = logging.getLogger(__name__)

# auto_error=False so a missing header reaches our own 401 envelope
bearer_scheme = HTTPBearer(auto_error=False)


async def get_request_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> RequestContext:
    """Authenticate the caller and load their plan and usage."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(context={"path": request.url.path})

    claims = await identity_service.verify_session_token(credentials.credentials)
    user_id = claims["sub"]
    plan = plan_from_claims(claims)
    free_usage = await identity_service.get_free_usage(user_id)

    ctx = RequestContext(user_id=user_id, plan=plan, free_usage=free_usage)
    request.state.user_id = user_id
    logger.debug("Authenticated %s plan=%s free_usage=%d", user_id, plan, free_usage)
    return ctx
