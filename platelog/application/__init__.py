"""Application layer package - use cases and services."""

from platelog.application.directory_service import DirectoryService, EmployeeEntry
from platelog.application.report_service import CostReport, ReportService
from platelog.application.scan_service import PlateLookupResult, ScanResult, ScanService
from platelog.application.settings_service import SettingsService

__all__ = [
    "ScanService",
    "ScanResult",
    "PlateLookupResult",
    "DirectoryService",
    "EmployeeEntry",
    "ReportService",
    "CostReport",
    "SettingsService",
]
