"""Database infrastructure package."""

from platelog.infrastructure.db.models import (
    AppSettingDB,
    Base,
    EmployeeDB,
    ScanLogDB,
    VehicleDB,
)
from platelog.infrastructure.db.repository import (
    DuplicateRecordError,
    EmployeeRepository,
    RecordNotFoundError,
    ScanLogRepository,
    SettingsRepository,
    VehicleRepository,
)
from platelog.infrastructure.db.session import (
    close_db,
    get_session,
    init_db,
    ping_db,
)

__all__ = [
    # Models
    "Base",
    "EmployeeDB",
    "VehicleDB",
    "ScanLogDB",
    "AppSettingDB",
    # Repositories
    "EmployeeRepository",
    "VehicleRepository",
    "ScanLogRepository",
    "SettingsRepository",
    "RecordNotFoundError",
    "DuplicateRecordError",
    # Session
    "get_session",
    "init_db",
    "ping_db",
    "close_db",
]
