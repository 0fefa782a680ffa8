"""Field type registry: the capability table for every supported field type.

The editor uses it to decide which rule inputs to show, the validation engine
uses it to decide which rules to enforce, and the exporter uses it to decide
how a stored value is rendered as text.
"""

from dataclasses import dataclass
from enum import Enum

from formcraft.schemas.fields import FieldType, FormField, ValidationRules

CHECKBOX_TRUE_DISPLAY = "Yes"
CHECKBOX_FALSE_DISPLAY = "No"


class ValueKind(str, Enum):
    SCALAR = "scalar"
    BOOLEAN = "boolean"
    ENUMERATION = "enumeration"


@dataclass(frozen=True)
class FieldTypeProfile:
    field_type: FieldType
    value_kind: ValueKind
    supports_options: bool = False
    supports_numeric_bounds: bool = False
    supports_length_bounds: bool = False
    default_options: tuple[str, ...] = ()

    @property
    def default_label(self) -> str:
        return f"New {self.field_type.value} field"

    @property
    def chartable(self) -> bool:
        return self.value_kind in (ValueKind.BOOLEAN, ValueKind.ENUMERATION)


FIELD_TYPES: dict[FieldType, FieldTypeProfile] = {
    FieldType.TEXT: FieldTypeProfile(FieldType.TEXT, ValueKind.SCALAR, supports_length_bounds=True),
    FieldType.EMAIL: FieldTypeProfile(FieldType.EMAIL, ValueKind.SCALAR),
    FieldType.NUMBER: FieldTypeProfile(FieldType.NUMBER, ValueKind.SCALAR, supports_numeric_bounds=True),
    FieldType.SELECT: FieldTypeProfile(
        FieldType.SELECT,
        ValueKind.ENUMERATION,
        supports_options=True,
        default_options=("Option 1", "Option 2"),
    ),
    FieldType.CHECKBOX: FieldTypeProfile(FieldType.CHECKBOX, ValueKind.BOOLEAN),
    FieldType.TEXTAREA: FieldTypeProfile(FieldType.TEXTAREA, ValueKind.SCALAR, supports_length_bounds=True),
    FieldType.DATE: FieldTypeProfile(FieldType.DATE, ValueKind.SCALAR),
}


def get_profile(field_type: FieldType | str) -> FieldTypeProfile | None:
    """Look up a type's profile. Returns None for types outside the registry."""
    try:
        return FIELD_TYPES.get(FieldType(field_type))
    except ValueError:
        return None


def default_validation(field_type: FieldType | str) -> ValidationRules:
    return ValidationRules()


def effective_rules(field: FormField) -> ValidationRules:
    """Return only the rules the field's type actually enforces.

    Rules left over from a type change (e.g. ``min`` on a text field) are
    dropped here rather than on the stored field.
    """
    profile = get_profile(field.type)
    rules = field.validation or ValidationRules()
    if profile is None:
        return ValidationRules()
    return ValidationRules(
        min=rules.min if profile.supports_numeric_bounds else None,
        max=rules.max if profile.supports_numeric_bounds else None,
        min_length=rules.min_length if profile.supports_length_bounds else None,
        max_length=rules.max_length if profile.supports_length_bounds else None,
    )


def effective_options(field: FormField) -> list[str]:
    """Non-empty options for types that use them, otherwise an empty list."""
    profile = get_profile(field.type)
    if profile is None or not profile.supports_options:
        return []
    return [opt for opt in (field.options or []) if opt and opt.strip()]


def is_chartable(field_type: FieldType | str) -> bool:
    profile = get_profile(field_type)
    return profile is not None and profile.chartable


def display_value(field: FormField, value) -> str:
    """Render a stored value as display text (CSV cells, chart buckets)."""
    if value is None:
        return ""
    profile = get_profile(field.type)
    if isinstance(value, bool):
        if profile is not None and profile.value_kind is ValueKind.BOOLEAN:
            return CHECKBOX_TRUE_DISPLAY if value else CHECKBOX_FALSE_DISPLAY
        return "true" if value else "false"
    return str(value)
