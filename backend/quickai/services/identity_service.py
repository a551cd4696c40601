"""
QuickAI Backend - Clerk Identity & Plan Service
================================================

What:  Talks to Clerk for everything identity related:
       - verifies session tokens (RS256 JWTs signed with the instance's JWKS)
       - derives the plan tier from the token's `pla` claim
       - reads and writes the free-usage counter kept in the user's
         private metadata (`private_metadata.free_usage`)
How:   PyJWT for token verification; httpx for the Clerk Backend API.
Who:   The auth dependency (read side) and ActionService (counter increment).

Plan claim format (Clerk Billing, session token v2):
    "pla": "u:premium"   → user-level subscription to the `premium` plan
    "pla": "o:premium"   → organization-level subscription
    absent / "u:free_user" → not premium
"""

import logging
from typing import Any, Dict, Optional

import httpx
import jwt
from starlette.concurrency import run_in_threadpool

from quickai.config import settings
from quickai.exceptions import AuthenticationError, IdentityServiceError

logger = logging.getLogger(__name__)

PREMIUM = "premium"
FREE = "free"


def plan_from_claims(claims: Dict[str, Any], premium_slug: Optional[str] = None) -> str:
    """Map the `pla` claim to 'premium' or 'free'."""
    slug = premium_slug or settings.premium_plan_slug
    raw = claims.get("pla") or ""
    _scope, _sep, plan = str(raw).rpartition(":")
    return PREMIUM if plan == slug else FREE


def usage_from_metadata(private_metadata: Optional[Dict[str, Any]]) -> int:
    """Read `free_usage`; missing, negative or non-integer values count as 0."""
    value = (private_metadata or {}).get("free_usage")
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return 0
    return value


class IdentityService:
    """
    Clerk gateway.

    The JWKS client caches signing keys after the first fetch.
    """

    def __init__(self):
        self._jwks_client: Optional[jwt.PyJWKClient] = None

    @property
    def jwks_client(self) -> jwt.PyJWKClient:
        if self._jwks_client is None:
            self._jwks_client = jwt.PyJWKClient(settings.clerk_jwks_url)
        return self._jwks_client

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {settings.clerk_secret_key}",
            "Content-Type": "application/json",
        }

    # ── Session verification ──────────────────────────────────────────────

    def _decode(self, token: str) -> Dict[str, Any]:
        signing_key = self.jwks_client.get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            options={"verify_aud": False, "require": ["exp", "sub"]},
            leeway=5,
        )

    async def verify_session_token(self, token: str) -> Dict[str, Any]:
        """
        Verify a Clerk session token and return its claims.

        Raises:
            AuthenticationError: bad signature, expired, missing sub, or an
                `azp` claim outside the configured authorized parties.
        """
        try:
            claims = await run_in_threadpool(self._decode, token)
        except jwt.PyJWTError as e:
            logger.info("Rejected session token: %s", str(e))
            raise AuthenticationError(context={"reason": str(e)}) from e

        parties = settings.clerk_authorized_parties_list
        if parties and claims.get("azp") not in parties:
            logger.info("Rejected session token from azp=%s", claims.get("azp"))
            raise AuthenticationError(context={"azp": claims.get("azp")})

        return claims

    # ── Usage metadata ────────────────────────────────────────────────────

    async def get_free_usage(self, user_id: str) -> int:
        """
        Current free-usage counter for `user_id`.

        Raises:
            IdentityServiceError: Clerk API unreachable or non-2xx.
        """
        url = f"{settings.clerk_api_url}/users/{user_id}"
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(url, headers=self._headers())
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Clerk user lookup failed for %s: %s", user_id, str(e))
            raise IdentityServiceError(
                message="Could not load your account details. Please try again.",
                context={"user_id": user_id, "error": str(e)},
            ) from e

        return usage_from_metadata(response.json().get("private_metadata"))

    async def set_free_usage(self, user_id: str, value: int) -> None:
        """
        Write the free-usage counter.

        Clerk merges the metadata patch, so other private keys are preserved.

        Raises:
            IdentityServiceError: Clerk API unreachable or non-2xx.
        """
        url = f"{settings.clerk_api_url}/users/{user_id}/metadata"
        payload = {"private_metadata": {"free_usage": value}}
        try:
            async with httpx.AsyncClient() as client:
                response = await client.patch(url, json=payload, headers=self._headers())
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Clerk usage update failed for %s: %s", user_id, str(e))
            raise IdentityServiceError(
                message="Could not update your usage count.",
                context={"user_id": user_id, "value": value, "error": str(e)},
            ) from e

        logger.info("free_usage for %s set to %d", user_id, value)


identity_service = IdentityService()
