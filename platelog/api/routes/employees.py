"""
Employee directory API routes.
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, status
from pydantic import BaseModel, Field

from platelog.api.deps import ApiKeyAuth, Directory
from platelog.api.schemas import EmployeeSummary, VehicleSummary
from platelog.core.logging import get_logger
from platelog.domain.models import Employee
from platelog.infrastructure.db.repository import DuplicateRecordError, RecordNotFoundError

logger = get_logger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


class UsageStatsResponse(BaseModel):
    """All-time entry counts by travel mode."""

    car: int = 0
    motorcycle: int = 0
    win: int = 0
    total: int = 0


class EmployeeListItem(EmployeeSummary):
    """Directory row with vehicle count and usage stats."""

    vehicle_count: int = Field(description="Registered vehicles")
    stats: UsageStatsResponse


class EmployeeListResponse(BaseModel):
    """Response for listing employees."""

    employees: list[EmployeeListItem]
    count: int


class EmployeeCreateRequest(BaseModel):
    """Request to add an employee. A badge id is generated when omitted."""

    employee_id: str = Field(default="", max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    department: str = Field(default="", max_length=100)
    position: str = Field(default="", max_length=100)
    photo_url: str | None = Field(default=None, max_length=500)


@router.get(
    "",
    response_model=EmployeeListResponse,
    summary="List employees",
    description="Directory ordered by first name, with vehicle counts and usage stats.",
)
async def list_employees(
    directory: Directory,
    _: ApiKeyAuth,
) -> EmployeeListResponse:
    entries = await directory.list_employees()

    return EmployeeListResponse(
        employees=[
            EmployeeListItem(
                **EmployeeSummary.model_validate(entry.employee).model_dump(),
                vehicle_count=entry.vehicle_count,
                stats=UsageStatsResponse(
                    car=entry.usage.car,
                    motorcycle=entry.usage.motorcycle,
                    win=entry.usage.win,
                    total=entry.usage.total,
                ),
            )
            for entry in entries
        ],
        count=len(entries),
    )


@router.post(
    "",
    response_model=EmployeeSummary,
    status_code=status.HTTP_201_CREATED,
    summary="Add employee",
)
async def create_employee(
    request: EmployeeCreateRequest,
    directory: Directory,
    _: ApiKeyAuth,
) -> EmployeeSummary:
    """Add an employee to the directory."""
    try:
        employee = await directory.create_employee(Employee(**request.model_dump()))
    except DuplicateRecordError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Employee id already exists",
        ) from e

    return EmployeeSummary.model_validate(employee)


@router.get(
    "/{employee_pk}/vehicles",
    response_model=list[VehicleSummary],
    summary="List an employee's vehicles",
)
async def list_employee_vehicles(
    employee_pk: Annotated[int, Path(description="Employee surrogate key")],
    directory: Directory,
    _: ApiKeyAuth,
) -> list[VehicleSummary]:
    try:
        vehicles = await directory.list_employee_vehicles(employee_pk)
    except RecordNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found",
        ) from e

    return [VehicleSummary.model_validate(v) for v in vehicles]
