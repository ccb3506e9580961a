"""SQLAlchemy ORM models for append lists, their members, and notifications."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON, BigInteger, ForeignKey, Index, String, Text, UniqueConstraint, Uuid
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from appendlist_api.db.base import Base


# Column widths that identity values from the session must fit
DISPLAY_NAME_MAX_LENGTH = 255
EMAIL_MAX_LENGTH = 320


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Append Lists
# =============================================================================

class AppendList(Base):
    """
    A shareable sign-up sheet owned by the principal that created it.

    ``list_type`` is stored as written; legacy values ("nightslip", "names",
    NULL) are read as plain via ``core.list_types.normalize_list_type``.
    """
    __tablename__ = "append_lists"
    __table_args__ = (
        Index("idx_append_lists_owner_created", "owner_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    list_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    # Relationships
    people: Mapped[list["AppendListPerson"]] = relationship(
        back_populates="append_list",
        passive_deletes=True,
    )


class AppendListPerson(Base):
    """
    A member record on an append list.

    One table holds every person shape; ``partition`` records the list type
    the record was created under and decides which payload column is set:
    - plain: neither
    - github: github_username (required)
    - others: inputs (required, non-empty, original order)

    At most one record per (list, email_key) and per (list, display_name).
    """
    __tablename__ = "append_list_people"
    __table_args__ = (
        UniqueConstraint("list_id", "email_key", name="uq_append_list_people_email"),
        UniqueConstraint("list_id", "display_name", name="uq_append_list_people_name"),
        Index("idx_append_list_people_joined", "list_id", "joined_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    list_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("append_lists.id", ondelete="CASCADE"),
        nullable=False,
    )
    partition: Mapped[str] = mapped_column(String(20), nullable=False)
    display_name: Mapped[str] = mapped_column(String(DISPLAY_NAME_MAX_LENGTH), nullable=False)
    email_key: Mapped[str | None] = mapped_column(String(EMAIL_MAX_LENGTH), nullable=True)
    register_number: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Variant payload
    github_username: Mapped[str | None] = mapped_column(String(100), nullable=True)
    inputs: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    joined_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    # Relationships
    append_list: Mapped["AppendList"] = relationship(back_populates="people")


# =============================================================================
# Notifications (admin broadcast)
# =============================================================================

class Notification(Base):
    """Admin-created broadcast shown to every viewer until acknowledged."""
    __tablename__ = "notifications"
    __table_args__ = (
        Index("idx_notifications_created", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    created_by_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)


class NotificationAck(Base):
    """Marks a notification dismissed for one viewer."""
    __tablename__ = "notification_acks"
    __table_args__ = (
        UniqueConstraint(
            "viewer_id", "notification_id", name="uq_notification_acks_viewer"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    notification_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("notifications.id", ondelete="CASCADE"),
        nullable=False,
    )
    viewer_id: Mapped[str] = mapped_column(String(255), nullable=False)
    acknowledged_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)


class PushSubscription(Base):
    """Binds a viewer to a web-push delivery endpoint."""
    __tablename__ = "push_subscriptions"
    __table_args__ = (
        Index("idx_push_subscriptions_viewer", "viewer_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    viewer_id: Mapped[str] = mapped_column(String(255), nullable=False)
    endpoint: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    p256dh: Mapped[str] = mapped_column(Text, nullable=False)
    auth: Mapped[str] = mapped_column(Text, nullable=False)
    expiration_time: Mapped[int | None] = mapped_column(BigInteger, nullable=True)  # epoch ms
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
