import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from formcraft.schemas.fields import FieldType, FormField

MoveDirection = Literal["up", "down"]
IssueCode = Literal[
    "duplicate_id",
    "empty_label",
    "unsupported_type",
    "missing_options",
    "invalid_bounds",
    "invalid_length_bounds",
]


# ---------------------------------------------------------------------------
# Domain schema (unit of persistence)
# ---------------------------------------------------------------------------


class FormSchema(BaseModel):
    """Ordered fields plus form metadata, as exchanged with the store."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    description: str = ""
    fields: list[FormField] = Field(default_factory=list)
    is_published: bool = False
    created_at: datetime
    updated_at: datetime

    def get_field(self, field_id: str) -> FormField | None:
        return next((f for f in self.fields if f.id == field_id), None)


class SchemaIssue(BaseModel):
    """One builder-time consistency problem."""

    code: IssueCode
    message: str
    field_id: str | None = None

    def __str__(self) -> str:
        prefix = f"Field {self.field_id}: " if self.field_id else ""
        return f"{prefix}{self.message}"


# ---------------------------------------------------------------------------
# Form CRUD schemas
# ---------------------------------------------------------------------------


class FormCreate(BaseModel):
    title: str = Field("Untitled Form", min_length=1, max_length=255)
    description: str = ""
    fields: list[FormField] = Field(default_factory=list)
    is_published: bool = False


class FormUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    fields: list[FormField] | None = None


class FormOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    description: str
    fields: list[FormField]
    is_published: bool
    created_at: datetime
    updated_at: datetime


class FormDetailOut(FormOut):
    submission_count: int = 0


class PublicFormOut(BaseModel):
    """What a respondent sees: no owner reference."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: str
    fields: list[FormField]


class SchemaIssuesOut(BaseModel):
    publishable: bool
    issues: list[SchemaIssue]


# ---------------------------------------------------------------------------
# Field operation schemas
# ---------------------------------------------------------------------------


class FieldAdd(BaseModel):
    type: FieldType


class ValidationRulesUpdate(BaseModel):
    """Partial rule edit. Bounds are typed like ``ValidationRules``; null clears a rule."""

    model_config = ConfigDict(extra="forbid")

    min: float | None = None
    max: float | None = None
    min_length: int | None = Field(None, validation_alias=AliasChoices("min_length", "minLength"))
    max_length: int | None = Field(None, validation_alias=AliasChoices("max_length", "maxLength"))


class FieldUpdate(BaseModel):
    """Partial field edit. Only keys present in the request are applied."""

    type: FieldType | None = None
    label: str | None = Field(None, max_length=1000)
    required: bool | None = None
    options: list[str] | None = None
    placeholder: str | None = None
    help_text: str | None = Field(None, validation_alias=AliasChoices("help_text", "helpText"))
    validation: ValidationRulesUpdate | None = Field(
        None,
        description="Rule-by-rule merge; set a rule to null to clear it",
    )

    @field_validator("type", "label", "required", mode="before")
    @classmethod
    def _not_null(cls, value, info):
        # only runs for keys the client sent
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class FieldMove(BaseModel):
    index: int = Field(..., ge=0)
    direction: MoveDirection


class GenerateFieldsRequest(BaseModel):
    description: str = Field(..., min_length=1, max_length=2000)


class RejectedField(BaseModel):
    reason: str
    raw: Any = None


class GenerateFieldsResponse(BaseModel):
    form: FormOut
    accepted: list[FormField]
    rejected: list[RejectedField]


class FieldTypeOut(BaseModel):
    type: FieldType
    value_kind: str
    default_label: str
    supports_options: bool
    supports_numeric_bounds: bool
    supports_length_bounds: bool
    chartable: bool
