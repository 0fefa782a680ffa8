"""Form builder operations: pure edits over an ordered list of fields.

Every operation returns a new list and leaves its input untouched. Field ids
are stable: only ``add_field`` and ``duplicate_field`` mint new ones, and no
operation changes the id of a field it did not create.
"""

import logging
import uuid
from collections import Counter
from typing import Any

from pydantic import ValidationError

from formcraft.schemas.fields import FieldType, FormField
from formcraft.schemas.forms import RejectedField, SchemaIssue
from formcraft.services.field_types import (
    default_validation,
    effective_options,
    effective_rules,
    get_profile,
)

logger = logging.getLogger(__name__)

COPY_LABEL_SUFFIX = " (Copy)"

_RULE_ALIASES = {"minLength": "min_length", "maxLength": "max_length"}


def new_field_id(existing_ids: set[str] | None = None) -> str:
    """Mint a field id that does not collide with ``existing_ids``."""
    existing_ids = existing_ids or set()
    while True:
        candidate = f"field_{uuid.uuid4().hex[:12]}"
        if candidate not in existing_ids:
            return candidate


def _index_of(fields: list[FormField], field_id: str) -> int | None:
    return next((i for i, f in enumerate(fields) if f.id == field_id), None)


# ---------------------------------------------------------------------------
# Field operations
# ---------------------------------------------------------------------------


def add_field(fields: list[FormField], field_type: FieldType) -> list[FormField]:
    """Append a new field with the type's defaults."""
    profile = get_profile(field_type)
    if profile is None:
        raise ValueError(f"Unsupported field type: {field_type!r}")

    field = FormField(
        id=new_field_id({f.id for f in fields}),
        type=profile.field_type,
        label=profile.default_label,
        required=False,
        options=list(profile.default_options) if profile.supports_options else None,
        placeholder="",
        help_text="",
        validation=default_validation(profile.field_type),
    )
    return [*fields, field]


def duplicate_field(fields: list[FormField], field_id: str) -> list[FormField]:
    """Insert a deep copy of the field directly after the original."""
    index = _index_of(fields, field_id)
    if index is None:
        return list(fields)

    source = fields[index]
    copy = source.model_copy(
        deep=True,
        update={
            "id": new_field_id({f.id for f in fields}),
            "label": f"{source.label}{COPY_LABEL_SUFFIX}",
        },
    )
    return [*fields[: index + 1], copy, *fields[index + 1 :]]


def move_field(fields: list[FormField], index: int, direction: str) -> list[FormField]:
    """Swap the field at ``index`` with its neighbour. No-op at either end."""
    if direction not in ("up", "down"):
        raise ValueError(f"direction must be 'up' or 'down', got {direction!r}")

    result = list(fields)
    if index < 0 or index >= len(result):
        return result

    target = index - 1 if direction == "up" else index + 1
    if target < 0 or target >= len(result):
        return result

    result[index], result[target] = result[target], result[index]
    return result


def remove_field(fields: list[FormField], field_id: str) -> list[FormField]:
    return [f for f in fields if f.id != field_id]


def update_field(fields: list[FormField], field_id: str, changes: dict[str, Any]) -> list[FormField]:
    """Merge ``changes`` into one field.

    ``validation`` is merged rule by rule (``None`` clears a rule). A type change
    keeps existing options and rules; the registry makes incompatible ones inert.
    """
    index = _index_of(fields, field_id)
    if index is None:
        return list(fields)

    current = fields[index]
    merged = current.model_dump()
    for key, value in changes.items():
        if key == "id":
            continue
        if key == "validation":
            rules = dict(merged["validation"])
            for rule, bound in (value or {}).items():
                rules[_RULE_ALIASES.get(rule, rule)] = bound
            merged["validation"] = rules
        elif key in FormField.model_fields:
            merged[key] = value

    updated = FormField.model_validate(merged)
    return [*fields[:index], updated, *fields[index + 1 :]]


# ---------------------------------------------------------------------------
# Schema consistency
# ---------------------------------------------------------------------------


def check_field(field: FormField) -> list[SchemaIssue]:
    """Builder-time checks for a single field."""
    issues: list[SchemaIssue] = []
    profile = get_profile(field.type)

    if profile is None:
        issues.append(
            SchemaIssue(
                code="unsupported_type",
                field_id=field.id,
                message=f"unsupported field type {getattr(field.type, 'value', field.type)!r}",
            )
        )
        return issues

    if not (field.label or "").strip():
        issues.append(SchemaIssue(code="empty_label", field_id=field.id, message="label must not be empty"))

    if profile.supports_options and not effective_options(field):
        issues.append(
            SchemaIssue(
                code="missing_options",
                field_id=field.id,
                message="select requires at least one non-empty option",
            )
        )

    rules = effective_rules(field)
    if rules.min is not None and rules.max is not None and rules.min > rules.max:
        issues.append(SchemaIssue(code="invalid_bounds", field_id=field.id, message="min is greater than max"))

    if any(bound is not None and bound < 0 for bound in (rules.min_length, rules.max_length)):
        issues.append(
            SchemaIssue(
                code="invalid_length_bounds",
                field_id=field.id,
                message="length bounds must not be negative",
            )
        )
    elif (
        rules.min_length is not None
        and rules.max_length is not None
        and rules.min_length > rules.max_length
    ):
        issues.append(
            SchemaIssue(
                code="invalid_length_bounds",
                field_id=field.id,
                message="min_length is greater than max_length",
            )
        )

    return issues


def duplicate_id_issues(fields: list[FormField]) -> list[SchemaIssue]:
    counts = Counter(f.id for f in fields)
    return [
        SchemaIssue(code="duplicate_id", field_id=field_id, message=f"id used by {count} fields")
        for field_id, count in counts.items()
        if count > 1
    ]


def check_schema(fields: list[FormField]) -> list[SchemaIssue]:
    """All consistency issues for a schema. Empty means publishable."""
    issues = duplicate_id_issues(fields)
    for field in fields:
        issues.extend(check_field(field))
    return issues


# ---------------------------------------------------------------------------
# Generated-field gate
# ---------------------------------------------------------------------------


def accept_generated_fields(
    existing: list[FormField],
    raw_fields: list[Any],
) -> tuple[list[FormField], list[RejectedField]]:
    """Gate externally generated fields before they join a schema.

    Generated ids are never trusted: every accepted field gets a fresh id. A
    field must parse and pass ``check_field`` on its own to be accepted.
    """
    taken = {f.id for f in existing}
    accepted: list[FormField] = []
    rejected: list[RejectedField] = []

    for raw in raw_fields:
        if not isinstance(raw, dict):
            rejected.append(RejectedField(reason="not an object", raw=raw))
            continue

        candidate = {**raw, "id": new_field_id(taken)}
        try:
            field = FormField.model_validate(candidate)
        except ValidationError as exc:
            reason = "; ".join(err["msg"] for err in exc.errors())
            logger.warning("Rejected generated field %r: %s", raw.get("label"), reason)
            rejected.append(RejectedField(reason=reason, raw=raw))
            continue

        issues = check_field(field)
        if issues:
            reason = "; ".join(issue.message for issue in issues)
            logger.warning("Rejected generated field %r: %s", field.label, reason)
            rejected.append(RejectedField(reason=reason, raw=raw))
            continue

        if not get_profile(field.type).supports_options:
            field = field.model_copy(update={"options": None})
        accepted.append(field)
        taken.add(field.id)

    return accepted, rejected
