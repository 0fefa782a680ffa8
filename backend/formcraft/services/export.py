"""CSV export of a form's submissions.

Layout:
    Submitted At,"<label 1>","<label 2>",...
    2026-03-01T10:15:00+00:00,"<value>","<value>",...

Every label and value cell is wrapped in double quotes with inner quotes
doubled. Nothing else is escaped, so commas and newlines survive inside the
quotes. Rows are joined with ``\\n`` and there is no trailing newline.
"""

import re
from collections.abc import Sequence

from formcraft.schemas.forms import FormSchema
from formcraft.schemas.submissions import SubmissionSchema
from formcraft.services.field_types import display_value

SUBMITTED_AT_HEADER = "Submitted At"
FILENAME_SUFFIX = "_submissions.csv"

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")


def quote_cell(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def _header_row(form: FormSchema) -> str:
    return ",".join([SUBMITTED_AT_HEADER, *(quote_cell(field.label) for field in form.fields)])


def _data_row(form: FormSchema, submission: SubmissionSchema) -> str:
    data = submission.data or {}
    cells = [submission.submitted_at.isoformat()]
    cells.extend(quote_cell(display_value(field, data.get(field.id))) for field in form.fields)
    return ",".join(cells)


def to_csv(form: FormSchema, submissions: Sequence[SubmissionSchema]) -> str:
    """Serialize submissions in the order given. No submissions -> header only."""
    rows = [_header_row(form)]
    rows.extend(_data_row(form, submission) for submission in submissions)
    return "\n".join(rows)


def export_filename(title: str) -> str:
    """``"Customer Survey (2026)"`` -> ``"Customer_Survey_2026_submissions.csv"``."""
    stem = _NON_ALNUM.sub("_", title or "").strip("_") or "form"
    return f"{stem}{FILENAME_SUFFIX}"
