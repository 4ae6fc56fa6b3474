"""
ActivityLogEntry model — append-only audit trail of user actions.

Every security-relevant operation (login success and failure, logout,
registration, password and profile changes) writes exactly one row here as a
side effect. Rows are never updated or deleted, and the only ordering the
rest of the system relies on is created_at.

The structured payload lives in a JSON column named "metadata" in the
database. On the Python side it is exposed as `details`, because
`metadata` is reserved on declarative classes for the table registry.
"""

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import Integer, String, Text, DateTime, Enum, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column

from streaming_accounts.database import Base
from streaming_accounts.timeutils import utc_now


class UserAction(str, enum.Enum):
    """Kinds of audited user actions."""
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    REGISTER = "REGISTER"
    PROFILE_UPDATE = "PROFILE_UPDATE"
    PASSWORD_CHANGE = "PASSWORD_CHANGE"
    SUBSCRIPTION_CHANGE = "SUBSCRIPTION_CHANGE"
    CONTENT_VIEW = "CONTENT_VIEW"
    SEARCH = "SEARCH"
    REVIEW = "REVIEW"
    RATING = "RATING"


class ActivityLogEntry(Base):
    __tablename__ = "user_activity_log"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    action: Mapped[UserAction] = mapped_column(
        Enum(UserAction),
        nullable=False,
        index=True,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    details: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata",
        JSON,
        nullable=True,
    )

    ip_address: Mapped[str | None] = mapped_column(
        String(45),
        nullable=True,
    )

    user_agent: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )
