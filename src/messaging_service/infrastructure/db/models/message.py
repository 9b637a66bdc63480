from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, String, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from messaging_service.infrastructure.db.base import Base


class MessageModel(Base):
    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    conversation_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    receiver_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    content_type: Mapped[str] = mapped_column(String(10), nullable=False, default="TEXT")
    body: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))
    attachment_key: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    sent_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    is_read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )

    conversation = relationship("ConversationModel", back_populates="messages")

    __table_args__ = (
        CheckConstraint(
            "(body <> '' AND attachment_key IS NULL)"
            " OR (body = '' AND attachment_key IS NOT NULL)",
            name="ck_messages_body_xor_attachment",
        ),
        Index("ix_messages_conversation_timeline", "conversation_id", "sent_at", "id"),
        Index(
            "ix_messages_unread",
            "conversation_id",
            "receiver_id",
            postgresql_where=text("NOT is_read"),
        ),
    )
