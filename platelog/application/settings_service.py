"""
Settings and admin login use case.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from platelog.core.logging import get_logger
from platelog.core.security import (
    ADMIN_SUBJECT,
    check_admin_password,
    create_access_token,
    hash_password,
)
from platelog.domain.models import AppSettings
from platelog.infrastructure.db.repository import SettingsRepository

logger = get_logger(__name__)


class SettingsService:
    """Reads and saves the app settings record and logs admins in."""

    def __init__(self, session: AsyncSession):
        self._settings_repo = SettingsRepository(session)

    async def get(self) -> AppSettings:
        return await self._settings_repo.get()

    async def save(
        self,
        car_rate: float,
        motorcycle_rate: float,
        win_rate: float,
        admin_password: str | None = None,
    ) -> AppSettings:
        """
        Replace the settings record.

        Args:
            car_rate: Daily rate for car entries.
            motorcycle_rate: Daily rate for motorcycle and walk-in entries.
            win_rate: Stored for display; not used by the cost report.
            admin_password: New admin password. When omitted the current
                hash is carried over into the new record.

        Returns:
            AppSettings: The record as saved.
        """
        current = await self._settings_repo.get()
        password_hash = (
            hash_password(admin_password) if admin_password else current.admin_password
        )

        settings = AppSettings(
            car_rate=car_rate,
            motorcycle_rate=motorcycle_rate,
            win_rate=win_rate,
            admin_password=password_hash,
        )
        await self._settings_repo.set(settings)

        logger.info(
            "settings_saved",
            car_rate=settings.car_rate,
            motorcycle_rate=settings.motorcycle_rate,
            win_rate=settings.win_rate,
            password_changed=bool(admin_password),
        )
        return settings

    async def login(self, password: str) -> str | None:
        """
        Check the admin password.

        Returns:
            str: A signed admin access token, or None if the password is wrong.
        """
        if not password:
            return None

        settings = await self._settings_repo.get()
        if not check_admin_password(password, settings.admin_password):
            logger.warning("admin_login_failed")
            return None

        logger.info("admin_login_succeeded")
        return create_access_token({"sub": ADMIN_SUBJECT})
