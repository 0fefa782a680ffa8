from fastapi import APIRouter

from formcraft.api.v1.endpoints import (
    auth,
    field_types,
    forms,
    public,
    submissions,
)

api_v1_router = APIRouter()

api_v1_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_v1_router.include_router(field_types.router, prefix="/field-types", tags=["field-types"])
api_v1_router.include_router(forms.router, prefix="/forms", tags=["forms"])
api_v1_router.include_router(submissions.router, prefix="/forms", tags=["submissions"])
api_v1_router.include_router(public.router, prefix="/public", tags=["public"])
