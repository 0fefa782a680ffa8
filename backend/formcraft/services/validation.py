"""Validation engine: decide whether a raw value is acceptable for a field.

Pure and total: every (field, value) pair yields exactly one verdict and the
engine never raises. Used both when a respondent submits a form and when the
builder previews sample input against a draft schema.

Rule order:
1. required + empty            -> MissingRequired
2. optional + empty            -> accepted
3. type-specific shape check   -> InvalidFormat / UnsupportedType
4. numeric bounds (number)     -> BelowMin / AboveMax
5. length bounds (text/area)   -> TooShort / TooLong
"""

import math
import re
from datetime import date, datetime
from enum import Enum

from formcraft.schemas.fields import FieldType, FormField
from formcraft.services.field_types import effective_options, effective_rules, get_profile

# local@domain.tld: no whitespace, a single "@", dotted domain with non-empty labels
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s.]+(?:\.[^@\s.]+)+$")

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

CHECKBOX_TRUE_VALUES = frozenset({"yes", "true", "on"})
CHECKBOX_FALSE_VALUES = frozenset({"no", "false", "off"})


class ValidationReason(str, Enum):
    MISSING_REQUIRED = "MissingRequired"
    INVALID_FORMAT = "InvalidFormat"
    BELOW_MIN = "BelowMin"
    ABOVE_MAX = "AboveMax"
    TOO_SHORT = "TooShort"
    TOO_LONG = "TooLong"
    UNSUPPORTED_TYPE = "UnsupportedType"


class ValidationResult:
    """Verdict for a single field value."""

    __slots__ = ("accepted", "reason", "message")

    def __init__(self, accepted: bool, reason: ValidationReason | None = None, message: str = "") -> None:
        if accepted and reason is not None:
            raise ValueError("an accepted result cannot carry a rejection reason")
        if not accepted and reason is None:
            raise ValueError("a rejected result needs a reason")
        self.accepted = accepted
        self.reason = reason
        self.message = message

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(True)

    @classmethod
    def reject(cls, reason: ValidationReason, message: str) -> "ValidationResult":
        return cls(False, reason, message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationResult):
            return NotImplemented
        return self.accepted == other.accepted and self.reason == other.reason

    def __repr__(self) -> str:
        if self.accepted:
            return "<ValidationResult accepted>"
        return f"<ValidationResult rejected {self.reason.value}: {self.message}>"


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------


def is_empty(raw_value) -> bool:
    """Absent, blank string and ``False`` all count as "no answer"."""
    if raw_value is None or raw_value is False:
        return True
    if isinstance(raw_value, str):
        return not raw_value.strip()
    return False


def parse_number(raw_value) -> float | None:
    """Parse a finite number, or return None."""
    if isinstance(raw_value, bool):
        return None
    if not isinstance(raw_value, (int, float, str)):
        return None
    try:
        number = float(raw_value.strip() if isinstance(raw_value, str) else raw_value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def parse_date(raw_value) -> date | None:
    if isinstance(raw_value, datetime):
        return raw_value.date()
    if isinstance(raw_value, date):
        return raw_value
    if not isinstance(raw_value, str) or not _DATE_PATTERN.match(raw_value.strip()):
        return None
    try:
        return date.fromisoformat(raw_value.strip())
    except ValueError:
        return None


def parse_checkbox(raw_value) -> bool | None:
    """Map the accepted boolean-like forms onto a canonical bool."""
    if isinstance(raw_value, bool):
        return raw_value
    if isinstance(raw_value, str):
        lowered = raw_value.strip().lower()
        if lowered in CHECKBOX_TRUE_VALUES:
            return True
        if lowered in CHECKBOX_FALSE_VALUES:
            return False
    return None


def _format_bound(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


# ---------------------------------------------------------------------------
# Per-type shape checks
# ---------------------------------------------------------------------------


def _check_shape(field: FormField, raw_value) -> ValidationResult:
    field_type = FieldType(field.type)

    if field_type in (FieldType.TEXT, FieldType.TEXTAREA):
        if not isinstance(raw_value, str):
            return ValidationResult.reject(ValidationReason.INVALID_FORMAT, "Value must be text")
    elif field_type is FieldType.EMAIL:
        if not isinstance(raw_value, str) or not _EMAIL_PATTERN.match(raw_value.strip()):
            return ValidationResult.reject(ValidationReason.INVALID_FORMAT, "Enter a valid email address")
    elif field_type is FieldType.NUMBER:
        if parse_number(raw_value) is None:
            return ValidationResult.reject(ValidationReason.INVALID_FORMAT, "Value must be a number")
    elif field_type is FieldType.DATE:
        if parse_date(raw_value) is None:
            return ValidationResult.reject(ValidationReason.INVALID_FORMAT, "Enter a valid date (YYYY-MM-DD)")
    elif field_type is FieldType.SELECT:
        if not isinstance(raw_value, str) or raw_value not in effective_options(field):
            return ValidationResult.reject(ValidationReason.INVALID_FORMAT, f"'{raw_value}' is not a valid option")
    elif field_type is FieldType.CHECKBOX:
        if parse_checkbox(raw_value) is None:
            return ValidationResult.reject(ValidationReason.INVALID_FORMAT, "Value must be Yes or No")

    return ValidationResult.ok()


def _check_bounds(field: FormField, raw_value) -> ValidationResult:
    rules = effective_rules(field)

    if field.type == FieldType.NUMBER:
        number = parse_number(raw_value)
        if rules.min is not None and number < rules.min:
            return ValidationResult.reject(
                ValidationReason.BELOW_MIN, f"Value must be at least {_format_bound(rules.min)}"
            )
        if rules.max is not None and number > rules.max:
            return ValidationResult.reject(
                ValidationReason.ABOVE_MAX, f"Value must be at most {_format_bound(rules.max)}"
            )

    if field.type in (FieldType.TEXT, FieldType.TEXTAREA):
        length = len(raw_value)
        if rules.min_length is not None and length < rules.min_length:
            return ValidationResult.reject(
                ValidationReason.TOO_SHORT, f"Must be at least {rules.min_length} characters"
            )
        if rules.max_length is not None and length > rules.max_length:
            return ValidationResult.reject(
                ValidationReason.TOO_LONG, f"Must be at most {rules.max_length} characters"
            )

    return ValidationResult.ok()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_value(field: FormField, raw_value) -> ValidationResult:
    """Validate one raw value against one field definition."""
    empty = is_empty(raw_value)
    if field.type == FieldType.CHECKBOX and parse_checkbox(raw_value) is False:
        # an unticked box never satisfies "required"
        empty = True

    if field.required and empty:
        return ValidationResult.reject(ValidationReason.MISSING_REQUIRED, "This field is required")

    if empty:
        return ValidationResult.ok()

    if get_profile(field.type) is None:
        return ValidationResult.reject(
            ValidationReason.UNSUPPORTED_TYPE, f"Unsupported field type: {getattr(field.type, 'value', field.type)}"
        )

    shape = _check_shape(field, raw_value)
    if not shape.accepted:
        return shape

    return _check_bounds(field, raw_value)


def validate_submission(fields: list[FormField], data: dict) -> dict[str, ValidationResult]:
    """Validate a whole submission. Returns one verdict per field id, in schema order."""
    data = data or {}
    return {field.id: validate_value(field, data.get(field.id)) for field in fields}


def rejected_fields(verdicts: dict[str, ValidationResult]) -> dict[str, ValidationResult]:
    return {field_id: verdict for field_id, verdict in verdicts.items() if not verdict.accepted}


def normalize_value(field: FormField, raw_value):
    """Convert an accepted value to its stored form. Empty values become None."""
    if field.type == FieldType.CHECKBOX:
        return parse_checkbox(raw_value)
    if is_empty(raw_value):
        return None
    return raw_value if isinstance(raw_value, str) else str(raw_value)


def normalize_submission(fields: list[FormField], data: dict) -> dict:
    """Build the stored data mapping for an accepted submission.

    Keys not in the schema are dropped and blank optional answers are omitted.
    """
    data = data or {}
    normalized: dict = {}
    for field in fields:
        value = normalize_value(field, data.get(field.id))
        if value is not None:
            normalized[field.id] = value
    return normalized
