from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from messaging_service.infrastructure.db.base import Base


class ConversationModel(Base):
    __tablename__ = "conversations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    kind: Mapped[str] = mapped_column(String(10), nullable=False)  # direct | group
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    creator_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    # Direct pair, stored normalized: direct_user_low < direct_user_high.
    direct_user_low: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    direct_user_high: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    last_activity_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    # relationships
    memberships = relationship(
        "MembershipModel",
        back_populates="conversation",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    messages = relationship("MessageModel", back_populates="conversation", lazy="noload")

    __table_args__ = (
        UniqueConstraint(
            "direct_user_low",
            "direct_user_high",
            name="uq_conversations_direct_pair",
        ),
        CheckConstraint(
            "(kind = 'direct' AND direct_user_low IS NOT NULL AND direct_user_high IS NOT NULL"
            " AND direct_user_low < direct_user_high AND creator_id IS NULL)"
            " OR (kind = 'group' AND direct_user_low IS NULL AND direct_user_high IS NULL)",
            name="ck_conversations_kind_shape",
        ),
        Index("ix_conversations_activity", "last_activity_at", "id"),
        Index("ix_conversations_direct_low", "direct_user_low"),
        Index("ix_conversations_direct_high", "direct_user_high"),
    )
