"""Form and submission persistence behind a single store interface.

``SQLFormStore`` is the production implementation on top of a SQLAlchemy
session. ``InMemoryFormStore`` keeps everything in process memory and is used
for local tooling and tests. Callers only ever see ``FormSchema`` and
``SubmissionSchema`` snapshots, never ORM rows.
"""

import copy
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from formcraft.core.database import get_db
from formcraft.models.form import Form
from formcraft.models.submission import Submission
from formcraft.schemas.fields import FormField
from formcraft.schemas.forms import FormSchema
from formcraft.schemas.submissions import SubmissionSchema
from formcraft.services.exceptions import FormNotFoundError

logger = logging.getLogger(__name__)


def _dump_fields(fields: list[FormField]) -> list[dict]:
    return [field.model_dump(mode="json") for field in fields]


class FormStore(ABC):
    """Abstract store for forms and their append-only submissions."""

    @abstractmethod
    def list_forms(self, owner_id: uuid.UUID) -> list[FormSchema]:
        """Forms owned by ``owner_id``, newest first."""

    @abstractmethod
    def get_form(self, form_id: uuid.UUID) -> FormSchema:
        """Fetch one form. Raises FormNotFoundError."""

    @abstractmethod
    def create_form(
        self,
        owner_id: uuid.UUID,
        *,
        title: str,
        description: str = "",
        fields: list[FormField] | None = None,
        is_published: bool = False,
    ) -> FormSchema:
        """Insert a new form and return the stored snapshot."""

    @abstractmethod
    def save_form(self, form: FormSchema) -> FormSchema:
        """Insert, or fully overwrite the form with the same id."""

    @abstractmethod
    def delete_form(self, form_id: uuid.UUID) -> None:
        """Delete a form and all of its submissions. Raises FormNotFoundError."""

    @abstractmethod
    def append_submission(self, form_id: uuid.UUID, data: dict) -> SubmissionSchema:
        """Store one submission. Raises FormNotFoundError."""

    @abstractmethod
    def list_submissions(self, form_id: uuid.UUID) -> list[SubmissionSchema]:
        """Submissions for a form, newest first. Raises FormNotFoundError."""

    @abstractmethod
    def count_submissions(self, form_id: uuid.UUID) -> int:
        """Number of submissions stored for a form."""


# ---------------------------------------------------------------------------
# SQLAlchemy store
# ---------------------------------------------------------------------------


class SQLFormStore(FormStore):
    def __init__(self, db: Session) -> None:
        self.db = db

    def _get_row(self, form_id: uuid.UUID) -> Form:
        form = self.db.get(Form, form_id)
        if form is None:
            raise FormNotFoundError(form_id)
        return form

    def list_forms(self, owner_id: uuid.UUID) -> list[FormSchema]:
        rows = (
            self.db.execute(
                select(Form)
                .where(Form.owner_id == owner_id)
                .order_by(Form.created_at.desc(), Form.id.desc())
            )
            .scalars()
            .all()
        )
        return [FormSchema.model_validate(row) for row in rows]

    def get_form(self, form_id: uuid.UUID) -> FormSchema:
        return FormSchema.model_validate(self._get_row(form_id))

    def create_form(
        self,
        owner_id: uuid.UUID,
        *,
        title: str,
        description: str = "",
        fields: list[FormField] | None = None,
        is_published: bool = False,
    ) -> FormSchema:
        form = Form(
            owner_id=owner_id,
            title=title,
            description=description or "",
            fields=_dump_fields(fields or []),
            is_published=is_published,
        )
        self.db.add(form)
        self.db.commit()
        self.db.refresh(form)
        logger.info("Created form %s for owner %s", form.id, owner_id)
        return FormSchema.model_validate(form)

    def save_form(self, form: FormSchema) -> FormSchema:
        row = self.db.get(Form, form.id)
        if row is None:
            row = Form(id=form.id, owner_id=form.owner_id, created_at=form.created_at)
            self.db.add(row)
        row.owner_id = form.owner_id
        row.title = form.title
        row.description = form.description or ""
        row.fields = _dump_fields(form.fields)
        row.is_published = form.is_published
        self.db.commit()
        self.db.refresh(row)
        return FormSchema.model_validate(row)

    def delete_form(self, form_id: uuid.UUID) -> None:
        form = self._get_row(form_id)
        # explicit delete so SQLite (no FK enforcement) matches Postgres cascade
        self.db.query(Submission).filter(Submission.form_id == form_id).delete(synchronize_session=False)
        self.db.delete(form)
        self.db.commit()
        logger.info("Deleted form %s and its submissions", form_id)

    def append_submission(self, form_id: uuid.UUID, data: dict) -> SubmissionSchema:
        # row lock serializes appends per form so positions stay unique
        locked = self.db.execute(
            select(Form.id).where(Form.id == form_id).with_for_update()
        ).scalar_one_or_none()
        if locked is None:
            raise FormNotFoundError(form_id)

        last = self.db.execute(
            select(func.coalesce(func.max(Submission.position), 0)).where(Submission.form_id == form_id)
        ).scalar_one()
        submission = Submission(form_id=form_id, position=last + 1, data=dict(data))
        self.db.add(submission)
        self.db.commit()
        self.db.refresh(submission)
        return SubmissionSchema.model_validate(submission)

    def list_submissions(self, form_id: uuid.UUID) -> list[SubmissionSchema]:
        self._get_row(form_id)
        rows = (
            self.db.execute(
                select(Submission)
                .where(Submission.form_id == form_id)
                .order_by(Submission.submitted_at.desc(), Submission.position.desc())
            )
            .scalars()
            .all()
        )
        return [SubmissionSchema.model_validate(row) for row in rows]

    def count_submissions(self, form_id: uuid.UUID) -> int:
        return self.db.execute(
            select(func.count()).select_from(Submission).where(Submission.form_id == form_id)
        ).scalar_one()


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class InMemoryFormStore(FormStore):
    """Process-local store. Returns copies so callers cannot mutate stored state."""

    def __init__(self) -> None:
        self._forms: dict[uuid.UUID, FormSchema] = {}
        self._submissions: dict[uuid.UUID, list[SubmissionSchema]] = {}

    def _require(self, form_id: uuid.UUID) -> FormSchema:
        form = self._forms.get(form_id)
        if form is None:
            raise FormNotFoundError(form_id)
        return form

    def list_forms(self, owner_id: uuid.UUID) -> list[FormSchema]:
        owned = [f for f in self._forms.values() if f.owner_id == owner_id]
        owned.sort(key=lambda f: (f.created_at, f.id), reverse=True)
        return [f.model_copy(deep=True) for f in owned]

    def get_form(self, form_id: uuid.UUID) -> FormSchema:
        return self._require(form_id).model_copy(deep=True)

    def create_form(
        self,
        owner_id: uuid.UUID,
        *,
        title: str,
        description: str = "",
        fields: list[FormField] | None = None,
        is_published: bool = False,
    ) -> FormSchema:
        now = datetime.now(timezone.utc)
        form = FormSchema(
            id=uuid.uuid4(),
            owner_id=owner_id,
            title=title,
            description=description or "",
            fields=copy.deepcopy(fields or []),
            is_published=is_published,
            created_at=now,
            updated_at=now,
        )
        self._forms[form.id] = form
        self._submissions[form.id] = []
        return form.model_copy(deep=True)

    def save_form(self, form: FormSchema) -> FormSchema:
        stored = form.model_copy(deep=True, update={"updated_at": datetime.now(timezone.utc)})
        self._forms[stored.id] = stored
        self._submissions.setdefault(stored.id, [])
        return stored.model_copy(deep=True)

    def delete_form(self, form_id: uuid.UUID) -> None:
        self._require(form_id)
        del self._forms[form_id]
        self._submissions.pop(form_id, None)

    def append_submission(self, form_id: uuid.UUID, data: dict) -> SubmissionSchema:
        self._require(form_id)
        submission = SubmissionSchema(
            id=uuid.uuid4(),
            form_id=form_id,
            data=copy.deepcopy(dict(data)),
            submitted_at=datetime.now(timezone.utc),
        )
        self._submissions[form_id].append(submission)
        return submission.model_copy(deep=True)

    def list_submissions(self, form_id: uuid.UUID) -> list[SubmissionSchema]:
        self._require(form_id)
        # appended in time order, so reversing gives newest first even on equal timestamps
        return [s.model_copy(deep=True) for s in reversed(self._submissions[form_id])]

    def count_submissions(self, form_id: uuid.UUID) -> int:
        return len(self._submissions.get(form_id, []))


def get_form_store(db: Session = Depends(get_db)) -> FormStore:
    """FastAPI dependency: the request-scoped store."""
    return SQLFormStore(db)
