"""
Admin login route.
"""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from platelog.api.deps import AppSettingsSvc, RateLimited
from platelog.core.config import get_settings

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    password: str = Field(..., max_length=72)


class TokenResponse(BaseModel):
    """Bearer token for admin-only endpoints."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Lifetime in seconds")


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Admin login",
    responses={401: {"description": "Wrong password"}},
)
async def login(
    request: LoginRequest,
    service: AppSettingsSvc,
    _: RateLimited,
) -> TokenResponse:
    token = await service.login(request.password)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenResponse(
        access_token=token,
        expires_in=get_settings().access_token_expire_minutes * 60,
    )
