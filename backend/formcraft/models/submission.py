import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formcraft.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Submission(Base):
    """One respondent's answers to a form. Rows are never updated.

    The data field is a JSONB dict keyed by field id:
        {
            "field_3f2a9c1b7d04": "Jane Doe",   # text / email / textarea / date / select
            "field_81c0e2d94a11": "42",         # number, kept as submitted
            "field_0b7d4e6fa2c9": true          # checkbox, canonical boolean
        }
    Optional fields left blank are absent.
    """

    __tablename__ = "submissions"
    __table_args__ = (
        Index("ix_submissions_form_id", "form_id"),
        Index("ix_submissions_form_submitted", "form_id", "submitted_at"),
        UniqueConstraint("form_id", "position", name="uq_submissions_form_position"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    form_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("forms.id", ondelete="CASCADE"), nullable=False
    )
    # 1-based arrival order within the form, breaks submitted_at ties
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    data: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    form: Mapped["Form"] = relationship(back_populates="submissions")

    def __repr__(self) -> str:
        return f"<Submission form={self.form_id} at={self.submitted_at}>"
