from fastapi import APIRouter

from formcraft.schemas.forms import FieldTypeOut
from formcraft.services.field_types import FIELD_TYPES

router = APIRouter()


@router.get("/", response_model=list[FieldTypeOut])
def list_field_types():
    """Capability table the editor uses to show or hide rule inputs."""
    return [
        FieldTypeOut(
            type=profile.field_type,
            value_kind=profile.value_kind.value,
            default_label=profile.default_label,
            supports_options=profile.supports_options,
            supports_numeric_bounds=profile.supports_numeric_bounds,
            supports_length_bounds=profile.supports_length_bounds,
            chartable=profile.chartable,
        )
        for profile in FIELD_TYPES.values()
    ]
