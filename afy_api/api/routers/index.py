from __future__ import annotations

from fastapi import APIRouter, Depends

from afy_api.api.deps import get_optional_identity
from afy_api.api.schemas.index import HealthResponse, RootResponse
from afy_api.application.dto.auth import AuthenticatedIdentity


router = APIRouter()


@router.get("/", response_model=RootResponse)
def root(identity: AuthenticatedIdentity | None = Depends(get_optional_identity)):
    return RootResponse(
        message="Agent For You API",
        status="ok",
        authenticated=identity is not None,
    )


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="healthy")
