"""Form service exceptions."""

import uuid


class FormError(Exception):
    """Base exception for form operations."""


class FormNotFoundError(FormError):
    """Raised when a form does not exist in the store."""

    def __init__(self, form_id: uuid.UUID | str) -> None:
        self.form_id = form_id
        super().__init__(f"Form {form_id} not found")


class OwnershipViolationError(FormError):
    """Raised when a user acts on a form they do not own."""

    def __init__(self, form_id: uuid.UUID | str, user_id: uuid.UUID | str) -> None:
        self.form_id = form_id
        self.user_id = user_id
        super().__init__(f"User {user_id} does not own form {form_id}")


class SchemaValidationError(FormError):
    """Raised when a schema fails its consistency check on save or publish."""

    def __init__(self, issues: list) -> None:
        self.issues = issues
        super().__init__("; ".join(str(issue) for issue in issues))


class SubmissionRejectedError(FormError):
    """Raised when one or more submitted values fail validation."""

    def __init__(self, errors: list[dict]) -> None:
        self.errors = errors
        super().__init__(f"{len(errors)} field(s) failed validation")


class SchemaGenerationError(FormError):
    """Raised when AI field generation fails (API error, parse error, etc.)."""
