"""Core configuration and utilities package."""

from platelog.core.config import Settings, get_settings
from platelog.core.logging import get_logger, set_correlation_id, setup_logging
from platelog.core.security import (
    User,
    check_admin_password,
    check_rate_limit,
    create_access_token,
    hash_password,
    verify_admin_token,
    verify_api_key,
    verify_password,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "get_logger",
    "set_correlation_id",
    "setup_logging",
    # Security
    "User",
    "check_admin_password",
    "check_rate_limit",
    "create_access_token",
    "hash_password",
    "verify_admin_token",
    "verify_api_key",
    "verify_password",
]
