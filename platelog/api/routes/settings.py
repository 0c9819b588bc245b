"""
App settings API routes.

Rates are readable by capture clients; changing them needs an admin token.
The admin password is write-only.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from platelog.api.deps import AdminUser, ApiKeyAuth, AppSettingsSvc
from platelog.core.logging import get_logger
from platelog.domain.models import AppSettings

logger = get_logger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingsResponse(BaseModel):
    """Current rates. The password hash is never returned."""

    car_rate: float = Field(examples=[90])
    motorcycle_rate: float = Field(examples=[70])
    win_rate: float = Field(examples=[70])
    admin_password_set: bool

    @classmethod
    def from_domain(cls, settings: AppSettings) -> "SettingsResponse":
        return cls(
            car_rate=settings.car_rate,
            motorcycle_rate=settings.motorcycle_rate,
            win_rate=settings.win_rate,
            admin_password_set=bool(settings.admin_password),
        )


class SettingsUpdateRequest(BaseModel):
    """Full replacement of the settings record."""

    car_rate: float = Field(..., ge=0)
    motorcycle_rate: float = Field(..., ge=0)
    win_rate: float = Field(..., ge=0)
    admin_password: str | None = Field(
        default=None,
        min_length=4,
        max_length=72,
        description="New admin password; omit to keep the current one",
    )


@router.get(
    "",
    response_model=SettingsResponse,
    summary="Get rates",
)
async def get_settings(
    service: AppSettingsSvc,
    _: ApiKeyAuth,
) -> SettingsResponse:
    return SettingsResponse.from_domain(await service.get())


@router.put(
    "",
    response_model=SettingsResponse,
    summary="Save rates",
    description="Overwrite rates and optionally the admin password. Admin only.",
)
async def update_settings(
    request: SettingsUpdateRequest,
    service: AppSettingsSvc,
    admin: AdminUser,
) -> SettingsResponse:
    settings = await service.save(
        car_rate=request.car_rate,
        motorcycle_rate=request.motorcycle_rate,
        win_rate=request.win_rate,
        admin_password=request.admin_password,
    )
    logger.info("settings_updated", user=admin.username)
    return SettingsResponse.from_domain(settings)
