"""Form service: lifecycle orchestration over the store.

Ties the builder operations, the consistency check and the validation
engine to persistence. Raises domain exceptions; routers translate them.
"""

import logging
import uuid

from formcraft.schemas.fields import FormField
from formcraft.schemas.forms import FormSchema, RejectedField
from formcraft.schemas.submissions import FieldVerdict, SubmissionSchema
from formcraft.services.exceptions import (
    OwnershipViolationError,
    SchemaValidationError,
    SubmissionRejectedError,
)
from formcraft.services.form_builder import (
    accept_generated_fields,
    check_schema,
    duplicate_id_issues,
)
from formcraft.services.schema_generator import BaseSchemaGenerator
from formcraft.services.store import FormStore
from formcraft.services.validation import normalize_submission, validate_submission

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Ownership
# ---------------------------------------------------------------------------


def ensure_owner(form: FormSchema, user_id: uuid.UUID) -> FormSchema:
    if form.owner_id != user_id:
        raise OwnershipViolationError(form.id, user_id)
    return form


def get_owned_form(store: FormStore, form_id: uuid.UUID, user_id: uuid.UUID) -> FormSchema:
    """Fetch a form the user owns. Raises FormNotFoundError / OwnershipViolationError."""
    return ensure_owner(store.get_form(form_id), user_id)


# ---------------------------------------------------------------------------
# Saving and publishing
# ---------------------------------------------------------------------------


def _check_saveable(fields: list[FormField], is_published: bool) -> None:
    """Drafts only need unique ids; a published form must stay fully consistent."""
    issues = check_schema(fields) if is_published else duplicate_id_issues(fields)
    if issues:
        raise SchemaValidationError(issues)


def create_form(
    store: FormStore,
    owner_id: uuid.UUID,
    *,
    title: str,
    description: str = "",
    fields: list[FormField] | None = None,
    is_published: bool = False,
) -> FormSchema:
    fields = fields or []
    _check_saveable(fields, is_published)
    return store.create_form(
        owner_id,
        title=title,
        description=description,
        fields=fields,
        is_published=is_published,
    )


def save_form(
    store: FormStore,
    form: FormSchema,
    *,
    title: str | None = None,
    description: str | None = None,
    fields: list[FormField] | None = None,
) -> FormSchema:
    """Explicit save of metadata and/or the full ordered field list."""
    updates: dict = {}
    if title is not None:
        updates["title"] = title
    if description is not None:
        updates["description"] = description
    if fields is not None:
        updates["fields"] = fields

    updated = form.model_copy(update=updates)
    _check_saveable(updated.fields, updated.is_published)
    return store.save_form(updated)


def publish_form(store: FormStore, form: FormSchema) -> FormSchema:
    issues = check_schema(form.fields)
    if issues:
        raise SchemaValidationError(issues)
    published = store.save_form(form.model_copy(update={"is_published": True}))
    logger.info("Published form %s (%d fields)", form.id, len(form.fields))
    return published


def unpublish_form(store: FormStore, form: FormSchema) -> FormSchema:
    draft = store.save_form(form.model_copy(update={"is_published": False}))
    logger.info("Unpublished form %s", form.id)
    return draft


# ---------------------------------------------------------------------------
# AI generation
# ---------------------------------------------------------------------------


async def generate_fields(
    store: FormStore,
    form: FormSchema,
    generator: BaseSchemaGenerator,
    description: str,
) -> tuple[FormSchema, list[FormField], list[RejectedField]]:
    """Append gated AI suggestions to a form and save it."""
    raw_fields = await generator.suggest_fields(description)
    accepted, rejected = accept_generated_fields(form.fields, raw_fields)

    if rejected:
        logger.warning("Dropped %d generated field(s) for form %s", len(rejected), form.id)

    if not accepted:
        return form, accepted, rejected

    saved = save_form(store, form, fields=[*form.fields, *accepted])
    logger.info("Added %d generated field(s) to form %s", len(accepted), form.id)
    return saved, accepted, rejected


# ---------------------------------------------------------------------------
# Submissions
# ---------------------------------------------------------------------------


def preview_validation(form: FormSchema, data: dict) -> list[FieldVerdict]:
    """Run the validation engine without storing anything."""
    verdicts = validate_submission(form.fields, data)
    return [
        FieldVerdict(
            field_id=field.id,
            label=field.label,
            accepted=verdicts[field.id].accepted,
            reason=verdicts[field.id].reason.value if verdicts[field.id].reason else None,
            message=verdicts[field.id].message,
        )
        for field in form.fields
    ]


def submit(store: FormStore, form: FormSchema, data: dict) -> SubmissionSchema:
    """Validate, normalize and append a public submission."""
    errors = [
        {
            "field_id": verdict.field_id,
            "label": verdict.label,
            "reason": verdict.reason,
            "message": verdict.message,
        }
        for verdict in preview_validation(form, data)
        if not verdict.accepted
    ]
    if errors:
        logger.warning(
            "Rejected submission for form %s: %s",
            form.id,
            ", ".join(f"{e['field_id']}={e['reason']}" for e in errors),
        )
        raise SubmissionRejectedError(errors)

    submission = store.append_submission(form.id, normalize_submission(form.fields, data))
    logger.info("Accepted submission %s for form %s", submission.id, form.id)
    return submission
