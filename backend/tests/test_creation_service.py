"""
QuickAI Backend - Creation Persistence Tests
=============================================

What we test:
    ✅ One row per call with the given fields (real in-memory SQLite)
    ✅ publish defaults to false
    ✅ Commit failure → rollback + DatabaseError with a generic message
    ✅ Unknown creation types rejected before touching the session
"""

import pytest
from sqlalchemy import select

from quickai.exceptions import DatabaseError
from quickai.models.creation import Creation
from quickai.services.creation_service import CreationService

service = CreationService()


@pytest.mark.asyncio
async def test_record_inserts_row(sqlite_session):
    created = await service.record(
        sqlite_session,
        user_id="user_1",
        prompt="a red fox",
        content="https://res.cloudinary.com/demo/fox.png",
        creation_type="image",
        publish=True,
    )

    rows = (await sqlite_session.execute(select(Creation))).scalars().all()
    assert len(rows) == 1
    row = rows[0]
    assert row.id == created.id
    assert row.user_id == "user_1"
    assert row.type == "image"
    assert row.publish is True
    assert row.created_at is not None


@pytest.mark.asyncio
async def test_publish_defaults_false(sqlite_session):
    created = await service.record(
        sqlite_session,
        user_id="user_1",
        prompt="Otters",
        content="An article.",
        creation_type="article",
    )
    assert created.publish is False


@pytest.mark.asyncio
async def test_commit_failure(mock_db_session):
    mock_db_session.commit.side_effect = Exception("connection reset")

    with pytest.raises(DatabaseError) as exc_info:
        await service.record(
            mock_db_session,
            user_id="user_1",
            prompt="Otters",
            content="An article.",
            creation_type="article",
        )

    assert "connection reset" not in exc_info.value.message
    assert exc_info.value.context["error_type"] == "Exception"
    mock_db_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_unknown_type(mock_db_session):
    with pytest.raises(ValueError):
        await service.record(
            mock_db_session,
            user_id="user_1",
            prompt="p",
            content="c",
            creation_type="video",
        )
    mock_db_session.add.assert_not_called()
