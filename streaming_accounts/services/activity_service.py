"""
Activity service — the append-only audit sink.

record_activity() is the single write path into user_activity_log. Callers
in the auth, user, and profile services use it as a side-effect recorder;
nothing in the authentication core reads the log back.

list_user_activity() serves the "my recent activity" endpoint, newest first.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from streaming_accounts.models.activity_log import ActivityLogEntry, UserAction
from streaming_accounts.timeutils import utc_now


async def record_activity(
    db: AsyncSession,
    user_id: int,
    action: UserAction,
    description: str | None = None,
    details: dict[str, Any] | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    now: datetime | None = None,
) -> ActivityLogEntry:
    """
    Append one audit entry for a user.

    Args:
        db: Database session.
        user_id: Owner of the entry.
        action: What happened.
        description: Human-readable summary.
        details: Structured payload stored in the JSON "metadata" column.
        ip_address / user_agent: Client context, if known.
        now: Timestamp override (defaults to current UTC time).

    Returns:
        The flushed ActivityLogEntry.
    """
    entry = ActivityLogEntry(
        user_id=user_id,
        action=action,
        description=description,
        details=details,
        ip_address=ip_address,
        user_agent=user_agent,
        created_at=now or utc_now(),
    )
    db.add(entry)
    await db.flush()
    return entry


async def list_user_activity(
    db: AsyncSession,
    user_id: int,
    limit: int = 50,
    action: UserAction | None = None,
) -> list[ActivityLogEntry]:
    """List a user's activity entries, newest first (optionally one action only)."""
    query = select(ActivityLogEntry).where(ActivityLogEntry.user_id == user_id)
    if action is not None:
        query = query.where(ActivityLogEntry.action == action)

    result = await db.execute(
        query.order_by(ActivityLogEntry.created_at.desc(), ActivityLogEntry.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
