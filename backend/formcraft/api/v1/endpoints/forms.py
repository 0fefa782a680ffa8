"""Form builder API: CRUD, publishing, field operations and AI generation."""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from formcraft.api.v1.deps import get_owned_form_or_404, schema_error
from formcraft.core.auth import get_current_user
from formcraft.models.user import User
from formcraft.schemas.forms import (
    FieldAdd,
    FieldMove,
    FieldUpdate,
    FormCreate,
    FormDetailOut,
    FormOut,
    FormSchema,
    FormUpdate,
    GenerateFieldsRequest,
    GenerateFieldsResponse,
    SchemaIssuesOut,
)
from formcraft.schemas.submissions import SubmissionCreate, ValidationPreviewOut
from formcraft.services import forms as form_service
from formcraft.services.exceptions import SchemaGenerationError, SchemaValidationError
from formcraft.services.form_builder import (
    add_field,
    check_schema,
    duplicate_field,
    move_field,
    remove_field,
    update_field,
)
from formcraft.services.schema_generator import BaseSchemaGenerator, get_schema_generator
from formcraft.services.store import FormStore, get_form_store

router = APIRouter()


def _save_fields(store: FormStore, form: FormSchema, fields) -> FormSchema:
    try:
        return form_service.save_form(store, form, fields=fields)
    except SchemaValidationError as exc:
        raise schema_error(exc)


# ---------------------------------------------------------------------------
# Form CRUD
# ---------------------------------------------------------------------------


@router.get("/", response_model=list[FormOut])
def list_forms(
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    return store.list_forms(current_user.id)


@router.post("/", response_model=FormOut, status_code=201)
def create_form(
    payload: FormCreate,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    try:
        return form_service.create_form(
            store,
            current_user.id,
            title=payload.title,
            description=payload.description,
            fields=payload.fields,
            is_published=payload.is_published,
        )
    except SchemaValidationError as exc:
        raise schema_error(exc)


@router.get("/{form_id}", response_model=FormDetailOut)
def get_form(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    form = get_owned_form_or_404(store, form_id, current_user.id)
    return FormDetailOut(**form.model_dump(), submission_count=store.count_submissions(form.id))


@router.put("/{form_id}", response_model=FormOut)
def update_form(
    form_id: uuid.UUID,
    payload: FormUpdate,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    form = get_owned_form_or_404(store, form_id, current_user.id)

    update_data = payload.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=422, detail="No fields to update")

    try:
        return form_service.save_form(
            store,
            form,
            title=payload.title,
            description=payload.description,
            fields=payload.fields,
        )
    except SchemaValidationError as exc:
        raise schema_error(exc)


@router.delete("/{form_id}", status_code=204)
def delete_form(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    form = get_owned_form_or_404(store, form_id, current_user.id)
    store.delete_form(form.id)


# ---------------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------------


@router.get("/{form_id}/issues", response_model=SchemaIssuesOut)
def get_schema_issues(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    form = get_owned_form_or_404(store, form_id, current_user.id)
    issues = check_schema(form.fields)
    return SchemaIssuesOut(publishable=not issues, issues=issues)


@router.post("/{form_id}/publish", response_model=FormOut)
def publish_form(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    form = get_owned_form_or_404(store, form_id, current_user.id)
    try:
        return form_service.publish_form(store, form)
    except SchemaValidationError as exc:
        raise schema_error(exc)


@router.post("/{form_id}/unpublish", response_model=FormOut)
def unpublish_form(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    form = get_owned_form_or_404(store, form_id, current_user.id)
    return form_service.unpublish_form(store, form)


# ---------------------------------------------------------------------------
# Field operations
# ---------------------------------------------------------------------------


@router.post("/{form_id}/fields", response_model=FormOut, status_code=201)
def add_form_field(
    form_id: uuid.UUID,
    payload: FieldAdd,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    form = get_owned_form_or_404(store, form_id, current_user.id)
    return _save_fields(store, form, add_field(form.fields, payload.type))


@router.post("/{form_id}/fields/move", response_model=FormOut)
def move_form_field(
    form_id: uuid.UUID,
    payload: FieldMove,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    form = get_owned_form_or_404(store, form_id, current_user.id)
    return _save_fields(store, form, move_field(form.fields, payload.index, payload.direction))


@router.post("/{form_id}/fields/generate", response_model=GenerateFieldsResponse)
async def generate_form_fields(
    form_id: uuid.UUID,
    payload: GenerateFieldsRequest,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
    generator: BaseSchemaGenerator = Depends(get_schema_generator),
):
    form = get_owned_form_or_404(store, form_id, current_user.id)
    try:
        saved, accepted, rejected = await form_service.generate_fields(store, form, generator, payload.description)
    except SchemaGenerationError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    except SchemaValidationError as exc:
        raise schema_error(exc)

    return GenerateFieldsResponse(form=FormOut.model_validate(saved.model_dump()), accepted=accepted, rejected=rejected)


@router.patch("/{form_id}/fields/{field_id}", response_model=FormOut)
def update_form_field(
    form_id: uuid.UUID,
    field_id: str,
    payload: FieldUpdate,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    form = get_owned_form_or_404(store, form_id, current_user.id)
    if form.get_field(field_id) is None:
        raise HTTPException(status_code=404, detail="Field not found")

    changes = payload.model_dump(exclude_unset=True)
    try:
        fields = update_field(form.fields, field_id, changes)
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=[{"loc": err["loc"], "msg": err["msg"], "type": err["type"]} for err in exc.errors()],
        )
    return _save_fields(store, form, fields)


@router.delete("/{form_id}/fields/{field_id}", response_model=FormOut)
def remove_form_field(
    form_id: uuid.UUID,
    field_id: str,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    form = get_owned_form_or_404(store, form_id, current_user.id)
    return _save_fields(store, form, remove_field(form.fields, field_id))


@router.post("/{form_id}/fields/{field_id}/duplicate", response_model=FormOut, status_code=201)
def duplicate_form_field(
    form_id: uuid.UUID,
    field_id: str,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    form = get_owned_form_or_404(store, form_id, current_user.id)
    if form.get_field(field_id) is None:
        raise HTTPException(status_code=404, detail="Field not found")
    return _save_fields(store, form, duplicate_field(form.fields, field_id))


# ---------------------------------------------------------------------------
# Builder preview
# ---------------------------------------------------------------------------


@router.post("/{form_id}/validate", response_model=ValidationPreviewOut)
def validate_sample(
    form_id: uuid.UUID,
    payload: SubmissionCreate,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    """Check sample answers against the saved schema without storing them."""
    form = get_owned_form_or_404(store, form_id, current_user.id)
    results = form_service.preview_validation(form, payload.data)
    return ValidationPreviewOut(valid=all(r.accepted for r in results), results=results)
