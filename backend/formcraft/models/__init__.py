from formcraft.models.form import Form
from formcraft.models.submission import Submission
from formcraft.models.user import User

__all__ = [
    "Form",
    "Submission",
    "User",
]
