"""Shared router helpers: translate form-service exceptions into HTTP errors."""

import uuid

from fastapi import HTTPException, status

from formcraft.schemas.forms import FormSchema
from formcraft.services.exceptions import (
    FormNotFoundError,
    OwnershipViolationError,
    SchemaValidationError,
)
from formcraft.services.forms import get_owned_form
from formcraft.services.store import FormStore


def get_owned_form_or_404(store: FormStore, form_id: uuid.UUID, user_id: uuid.UUID) -> FormSchema:
    try:
        return get_owned_form(store, form_id, user_id)
    except FormNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    except OwnershipViolationError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this form",
        )


def get_published_form_or_404(store: FormStore, form_id: uuid.UUID) -> FormSchema:
    """Public lookup. Drafts are indistinguishable from missing forms."""
    try:
        form = store.get_form(form_id)
    except FormNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    if not form.is_published:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    return form


def schema_error(exc: SchemaValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={
            "message": "Form schema is not valid",
            "issues": [issue.model_dump() for issue in exc.issues],
        },
    )
