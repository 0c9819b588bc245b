"""
Admin report API routes.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from platelog.api.deps import AdminUser, Reports
from platelog.api.schemas import EmployeeSummary
from platelog.core.logging import get_logger
from platelog.domain.models import DominantType

logger = get_logger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


class CostReportRow(BaseModel):
    """One employee's line in the cost report."""

    employee_id: int = Field(description="Employee surrogate key")
    employee: EmployeeSummary | None = None
    car_days: int
    moto_days: int = Field(description="Motorcycle and walk-in entries")
    total_days: int
    cost: float
    car_percent: float = Field(ge=0.0, le=100.0, examples=[66.7])
    dominant: DominantType = Field(examples=["mixed"])


class CostReportResponse(BaseModel):
    """Travel cost report for a date range."""

    start_date: date
    end_date: date
    car_rate: float
    motorcycle_rate: float
    rows: list[CostReportRow]
    total_days: int
    total_cost: float


@router.get(
    "/cost",
    response_model=CostReportResponse,
    summary="Travel cost report",
    description="Per-employee entry days and travel cost. Admin only.",
    responses={
        401: {"description": "Admin login required"},
        422: {"description": "start_date is after end_date"},
    },
)
async def cost_report(
    reports: Reports,
    admin: AdminUser,
    start_date: Annotated[date, Query(description="First day, inclusive")],
    end_date: Annotated[date, Query(description="Last day, inclusive")],
) -> CostReportResponse:
    """
    Build the cost report.

    **Authentication**: Requires an admin bearer token from ``/auth/login``.

    Rows follow each employee's first entry in the range. Walk-in entries
    are billed at the motorcycle rate.
    """
    try:
        report = await reports.cost_report(start_date, end_date)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e

    logger.info("cost_report_requested", user=admin.username, rows=len(report.rows))

    return CostReportResponse(
        start_date=report.start_date,
        end_date=report.end_date,
        car_rate=report.rates.car_rate,
        motorcycle_rate=report.rates.motorcycle_rate,
        rows=[
            CostReportRow(
                employee_id=row.employee_id,
                employee=EmployeeSummary.model_validate(row.employee) if row.employee else None,
                car_days=row.car_days,
                moto_days=row.moto_days,
                total_days=row.total_days,
                cost=row.cost,
                car_percent=round(row.car_percent, 1),
                dominant=row.dominant,
            )
            for row in report.rows
        ],
        total_days=sum(row.total_days for row in report.rows),
        total_cost=report.total_cost,
    )
