"""
QuickAI Backend - Creation Persistence Gateway
===============================================

What:  Single-row inserts into the `creations` table.
How:   Adds one Creation and commits before returning, so the row is durable
       before the caller's usage counter is touched.
Who:   Called by ActionService after a successful external call.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from quickai.exceptions import DatabaseError
from quickai.models.creation import CREATION_TYPES, Creation

logger = logging.getLogger(__name__)


class CreationService:
    """Insert-only access to `creations`."""

    async def record(
        self,
        db: AsyncSession,
        user_id: str,
        prompt: str,
        content: str,
        creation_type: str,
        publish: bool = False,
    ) -> Creation:
        """
        Persist one creation.

        Args:
            db:      Request-scoped async session
            user_id: The authenticated caller
            prompt:  User prompt or synthesized action description
            content: Generated text or image URL
            creation_type: One of CREATION_TYPES
            publish: Community feed visibility (images only)

        Returns:
            The committed Creation.

        Raises:
            ValueError:    `creation_type` is not a known creation type (programming error)
            DatabaseError: The insert or commit failed; the session is rolled back.
        """
        if creation_type not in CREATION_TYPES:
            raise ValueError(f"Unknown creation type '{creation_type}'")

        creation = Creation(
            user_id=user_id,
            prompt=prompt,
            content=content,
            type=creation_type,
            publish=publish,
        )

        try:
            db.add(creation)
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(
                "Failed to insert %s creation for %s: %s",
                creation_type,
                user_id,
                str(e),
                exc_info=True,
            )
            raise DatabaseError(
                message="Could not save your creation. Please try again.",
                context={"error_type": type(e).__name__, "creation_type": creation_type},
            ) from e

        logger.info("Recorded %s creation %s for %s", creation_type, creation.id, user_id)
        return creation


creation_service = CreationService()
