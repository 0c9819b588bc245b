"""Domain layer package - business rules and core models."""

from platelog.domain.models import (
    UNSPECIFIED_PROVINCE,
    AppSettings,
    DominantType,
    Employee,
    EmployeeReportRow,
    PlateRecognition,
    ScanLog,
    ScanType,
    UsageStats,
    Vehicle,
    VehicleType,
    VehicleWithOwner,
)
from platelog.domain.reporting import build_report, build_stats
from platelog.domain.services import (
    PlateMatcher,
    PlateNormalizer,
    find_vehicle_by_plate,
    normalize_plate,
)

__all__ = [
    # Models
    "UNSPECIFIED_PROVINCE",
    "AppSettings",
    "DominantType",
    "Employee",
    "EmployeeReportRow",
    "PlateRecognition",
    "ScanLog",
    "ScanType",
    "UsageStats",
    "Vehicle",
    "VehicleType",
    "VehicleWithOwner",
    # Services
    "PlateMatcher",
    "PlateNormalizer",
    "find_vehicle_by_plate",
    "normalize_plate",
    # Reporting
    "build_report",
    "build_stats",
]
