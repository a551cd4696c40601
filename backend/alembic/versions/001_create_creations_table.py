"""Create creations table

Revision ID: 001
Revises: None
Create Date: 2025-03-02 00:00:00.000000+00:00

What:  The `creations` table: one row per successful AI action.
How:   PostgreSQL UUID primary key generated server-side, timezone-aware
       timestamps, and a (user_id, created_at DESC) index for per-user history.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "creations",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(255),
            nullable=False,
            comment="Clerk user id of the creator",
        ),
        sa.Column(
            "prompt",
            sa.Text(),
            nullable=False,
            comment="User prompt, or a synthesized description for file actions",
        ),
        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            comment="Generated text or hosted image URL",
        ),
        sa.Column(
            "type",
            sa.String(50),
            nullable=False,
            comment="article, blog-title, image, resume-review",
        ),
        sa.Column(
            "publish",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
            comment="Visible in the community feed",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index(
        "idx_creations_user_created_at",
        "creations",
        ["user_id", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Drops the table and every stored creation with it."""
    op.drop_index("idx_creations_user_created_at", table_name="creations")
    op.drop_table("creations")
