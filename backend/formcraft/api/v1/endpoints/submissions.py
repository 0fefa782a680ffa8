"""Submission results API: listing, analytics and CSV export (owner only)."""

import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from formcraft.api.v1.deps import get_owned_form_or_404
from formcraft.core.auth import get_current_user
from formcraft.models.user import User
from formcraft.schemas.submissions import FormAnalyticsOut, SubmissionListOut
from formcraft.services.aggregation import summarize_form
from formcraft.services.export import export_filename, to_csv
from formcraft.services.store import FormStore, get_form_store

router = APIRouter()


@router.get("/{form_id}/submissions", response_model=SubmissionListOut)
def list_submissions(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    form = get_owned_form_or_404(store, form_id, current_user.id)
    submissions = store.list_submissions(form.id)
    return SubmissionListOut(items=submissions, total=len(submissions))


@router.get("/{form_id}/analytics", response_model=FormAnalyticsOut)
def get_form_analytics(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    form = get_owned_form_or_404(store, form_id, current_user.id)
    submissions = store.list_submissions(form.id)
    return FormAnalyticsOut(
        form_id=form.id,
        total_submissions=len(submissions),
        fields=summarize_form(form, submissions),
    )


@router.get("/{form_id}/export")
def export_submissions(
    form_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    store: FormStore = Depends(get_form_store),
):
    """Export all submissions as CSV, newest first."""
    form = get_owned_form_or_404(store, form_id, current_user.id)
    content = to_csv(form, store.list_submissions(form.id))

    filename = export_filename(form.title)
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
