import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formcraft.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Form(Base):
    """Form definition with an ordered JSONB fields array.

    Each entry in the fields array is a serialized ``FormField``:
        {
            "id": "field_3f2a9c1b7d04",
            "type": "text" | "email" | "number" | "select" | "checkbox" | "textarea" | "date",
            "label": "Full name",
            "required": true/false,
            "options": ["Option 1", "Option 2"],  # only meaningful for select
            "placeholder": "Jane Doe",
            "help_text": "As printed on your ID",
            "validation": {"min": null, "max": null, "min_length": 2, "max_length": 80}
        }

    Array order is display order and CSV column order.
    """

    __tablename__ = "forms"
    __table_args__ = (
        Index("ix_forms_owner_id", "owner_id"),
        Index("ix_forms_owner_created", "owner_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    fields: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    is_published: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    owner: Mapped["User"] = relationship(back_populates="forms")
    submissions: Mapped[list["Submission"]] = relationship(
        back_populates="form", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        state = "published" if self.is_published else "draft"
        return f"<Form {self.title} ({state})>"
