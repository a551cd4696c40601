"""
QuickAI Backend - Creation SQLAlchemy Model
============================================

What:  ORM model representing the `creations` table.
Who:   Written by CreationService after every successful action; read by
       Alembic for schema management. Nothing in this service reads it back.

Table Design:
    - UUID primary key, generated client-side (uuid4) and server-side
      (gen_random_uuid() in the migration)
    - content: generated text or an image URL, interpreted according to `type`
    - publish: only meaningful for `type='image'`; defaults to false
    - created_at: UTC with timezone

    Rows are immutable: there is no update or delete path.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, String, Text, Uuid, false, text
from sqlalchemy.orm import Mapped, mapped_column

from quickai.database import Base

# Values accepted in the `type` column
CREATION_TYPES = ("article", "blog-title", "image", "resume-review")


class Creation(Base):
    """One persisted result of a completed AI action."""

    __tablename__ = "creations"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier",
    )

    # Clerk user id; not validated locally
    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Clerk user id of the caller who triggered the action",
    )

    prompt: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="User prompt or synthesized description of the action",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Generated text or URL of the generated/transformed image",
    )

    type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="article, blog-title, image, resume-review",
    )

    publish: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        comment="Visibility flag for the community feed (images only)",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this creation was recorded (UTC)",
    )

    def __repr__(self) -> str:
        return (
            f"<Creation(id={self.id}, user_id='{self.user_id}', "
            f"type='{self.type}', publish={self.publish})>"
        )


# Per-user history, newest first
Index("idx_creations_user_created_at", Creation.user_id, Creation.created_at.desc())
