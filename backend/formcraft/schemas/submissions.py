import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SubmissionSchema(BaseModel):
    """A stored submission. Immutable once written."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    form_id: uuid.UUID
    data: dict[str, Any]
    submitted_at: datetime


class SubmissionCreate(BaseModel):
    data: dict[str, Any] = Field(
        default_factory=dict,
        description="Map of field id to raw answer value",
    )


class FieldError(BaseModel):
    field_id: str
    label: str
    reason: str
    message: str


class FieldVerdict(BaseModel):
    field_id: str
    label: str
    accepted: bool
    reason: str | None = None
    message: str = ""


class ValidationPreviewOut(BaseModel):
    valid: bool
    results: list[FieldVerdict]


class SubmissionListOut(BaseModel):
    items: list[SubmissionSchema]
    total: int


# ---------------------------------------------------------------------------
# Analytics schemas
# ---------------------------------------------------------------------------


class AnswerBucket(BaseModel):
    value: str
    count: int
    percent: int


class FieldSummary(BaseModel):
    field_id: str
    label: str
    type: str
    total: int
    buckets: list[AnswerBucket]


class FormAnalyticsOut(BaseModel):
    form_id: uuid.UUID
    total_submissions: int
    fields: list[FieldSummary]
