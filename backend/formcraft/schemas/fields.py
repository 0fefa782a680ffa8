from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class FieldType(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    SELECT = "select"
    CHECKBOX = "checkbox"
    TEXTAREA = "textarea"
    DATE = "date"


# ---------------------------------------------------------------------------
# Field definition schemas
# ---------------------------------------------------------------------------


class ValidationRules(BaseModel):
    """Optional bounds attached to a field.

    ``min``/``max`` only apply to number fields and ``min_length``/``max_length``
    only to text and textarea. Bounds on any other type are kept but ignored.
    """

    model_config = ConfigDict(populate_by_name=True)

    min: float | None = None
    max: float | None = None
    min_length: int | None = Field(None, validation_alias=AliasChoices("min_length", "minLength"))
    max_length: int | None = Field(None, validation_alias=AliasChoices("max_length", "maxLength"))

    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())


class FormField(BaseModel):
    """Single question/input definition within a form."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, max_length=100)
    type: FieldType
    label: str = Field("", max_length=1000)
    required: bool = False
    options: list[str] | None = Field(
        None,
        description="Answer options (used by select, ignored for other types)",
    )
    placeholder: str | None = None
    help_text: str | None = Field(None, validation_alias=AliasChoices("help_text", "helpText"))
    validation: ValidationRules = Field(default_factory=ValidationRules)

    @field_validator("validation", mode="before")
    @classmethod
    def _none_means_no_rules(cls, value):
        return {} if value is None else value
