"""Aggregation engine: answer frequency summaries for chartable fields.

Only select and checkbox fields are summarized. Each submission contributes
exactly one answer per field; blank or missing answers are counted under
``NO_ANSWER`` so bucket counts always add up to the number of submissions.
"""

import math
from collections.abc import Sequence

from formcraft.schemas.fields import FormField
from formcraft.schemas.forms import FormSchema
from formcraft.schemas.submissions import AnswerBucket, FieldSummary, SubmissionSchema
from formcraft.services.field_types import display_value, is_chartable

NO_ANSWER = "No Answer"


def _percent(count: int, total: int) -> int:
    # Round half up, not Python's banker's rounding
    return math.floor(100 * count / total + 0.5)


def _bucket_key(field: FormField, value) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        return NO_ANSWER
    return display_value(field, value)


def summarize(field: FormField, submissions: Sequence[SubmissionSchema]) -> list[AnswerBucket]:
    """Count answers for one field, most frequent first.

    Ties keep first-seen order. An empty submission list yields an empty
    result rather than a division by zero.
    """
    if not is_chartable(field.type):
        raise ValueError(f"Field {field.id} ({field.type}) is not chartable")

    total = len(submissions)
    if total == 0:
        return []

    counts: dict[str, int] = {}
    for submission in submissions:
        key = _bucket_key(field, (submission.data or {}).get(field.id))
        counts[key] = counts.get(key, 0) + 1

    # dicts keep insertion order and sorted() is stable, so ties stay first-seen
    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [AnswerBucket(value=value, count=count, percent=_percent(count, total)) for value, count in ordered]


def summarize_form(form: FormSchema, submissions: Sequence[SubmissionSchema]) -> list[FieldSummary]:
    """Summaries for every chartable field, in schema order."""
    if not submissions:
        return []

    return [
        FieldSummary(
            field_id=field.id,
            label=field.label,
            type=getattr(field.type, "value", field.type),
            total=len(submissions),
            buckets=summarize(field, submissions),
        )
        for field in form.fields
        if is_chartable(field.type)
    ]
