"""Public respondent API: no authentication."""

import uuid

from fastapi import APIRouter, Depends, HTTPException

from formcraft.api.v1.deps import get_published_form_or_404
from formcraft.schemas.forms import PublicFormOut
from formcraft.schemas.submissions import SubmissionCreate, SubmissionSchema
from formcraft.services import forms as form_service
from formcraft.services.exceptions import FormNotFoundError, SubmissionRejectedError
from formcraft.services.store import FormStore, get_form_store

router = APIRouter()


@router.get("/forms/{form_id}", response_model=PublicFormOut)
def get_public_form(form_id: uuid.UUID, store: FormStore = Depends(get_form_store)):
    return get_published_form_or_404(store, form_id)


@router.post("/forms/{form_id}/submit", response_model=SubmissionSchema, status_code=201)
def submit_form(
    form_id: uuid.UUID,
    payload: SubmissionCreate,
    store: FormStore = Depends(get_form_store),
):
    form = get_published_form_or_404(store, form_id)
    try:
        return form_service.submit(store, form, payload.data)
    except SubmissionRejectedError as exc:
        raise HTTPException(
            status_code=422,
            detail={"message": "Submission failed validation", "errors": exc.errors},
        )
    except FormNotFoundError:
        raise HTTPException(status_code=404, detail="Form not found")
