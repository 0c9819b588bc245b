"""Infrastructure layer package."""

from platelog.infrastructure.db import (
    EmployeeRepository,
    ScanLogRepository,
    SettingsRepository,
    VehicleRepository,
    close_db,
    get_session,
    init_db,
)
from platelog.infrastructure.recognition import (
    PlateRecognizer,
    RecognitionError,
    get_plate_recognizer,
)

__all__ = [
    # Database
    "get_session",
    "init_db",
    "close_db",
    "EmployeeRepository",
    "VehicleRepository",
    "ScanLogRepository",
    "SettingsRepository",
    # Recognition
    "PlateRecognizer",
    "RecognitionError",
    "get_plate_recognizer",
]
