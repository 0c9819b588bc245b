"""
Report service for the admin travel cost report.
"""

from dataclasses import dataclass
from datetime import date, datetime, time

from sqlalchemy.ext.asyncio import AsyncSession

from platelog.core.logging import get_logger
from platelog.domain.models import AppSettings, EmployeeReportRow
from platelog.domain.reporting import build_report
from platelog.infrastructure.db.repository import ScanLogRepository, SettingsRepository

logger = get_logger(__name__)

DAY_END = time(23, 59, 59)


@dataclass(frozen=True)
class CostReport:
    """Report rows for a date range plus the rates they were billed at."""

    start_date: date
    end_date: date
    rates: AppSettings
    rows: list[EmployeeReportRow]

    @property
    def total_cost(self) -> float:
        return sum(row.cost for row in self.rows)


class ReportService:
    """
    Builds reports from stored scan logs.

    Logs and rates are fetched first; the pure aggregation then runs on
    that snapshot. Fetch errors propagate unchanged.
    """

    def __init__(self, session: AsyncSession):
        self._scan_log_repo = ScanLogRepository(session)
        self._settings_repo = SettingsRepository(session)

    async def cost_report(self, start_date: date, end_date: date) -> CostReport:
        """
        Build the cost report for whole days ``start_date`` to ``end_date``.

        Raises:
            ValueError: If ``start_date`` is after ``end_date``.
        """
        if start_date > end_date:
            raise ValueError("start_date must not be after end_date")

        start = datetime.combine(start_date, time.min)
        end = datetime.combine(end_date, DAY_END)

        logs = await self._scan_log_repo.list_between(start, end)
        rates = await self._settings_repo.get()
        rows = build_report(logs, rates)

        logger.info(
            "cost_report_built",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
            log_count=len(logs),
            employee_count=len(rows),
        )
        return CostReport(start_date=start_date, end_date=end_date, rates=rates, rows=rows)
