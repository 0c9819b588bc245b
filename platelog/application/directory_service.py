"""
Directory service for employees and their registered vehicles.
"""

import secrets
import string
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from platelog.core.logging import get_logger
from platelog.domain.models import (
    Employee,
    ScanLog,
    UsageStats,
    Vehicle,
    VehicleWithOwner,
)
from platelog.domain.reporting import build_stats
from platelog.infrastructure.db.repository import (
    EmployeeRepository,
    RecordNotFoundError,
    ScanLogRepository,
    VehicleRepository,
)

logger = get_logger(__name__)

EMPLOYEE_ID_ALPHABET = string.ascii_lowercase + string.digits
EMPLOYEE_ID_LENGTH = 6


def generate_employee_id() -> str:
    """Random 6-character badge id (lowercase base36)."""
    return "".join(secrets.choice(EMPLOYEE_ID_ALPHABET) for _ in range(EMPLOYEE_ID_LENGTH))


@dataclass(frozen=True)
class EmployeeEntry:
    """Employee listing row with vehicle count and usage totals."""

    employee: Employee
    vehicle_count: int
    usage: UsageStats


class DirectoryService:
    """Manages the employee directory and vehicle registry."""

    def __init__(self, session: AsyncSession):
        self._employee_repo = EmployeeRepository(session)
        self._vehicle_repo = VehicleRepository(session)
        self._scan_log_repo = ScanLogRepository(session)

    async def list_employees(self) -> list[EmployeeEntry]:
        """List employees with vehicle counts and all-time usage stats."""
        employees = await self._employee_repo.list_all()
        vehicle_counts = await self._employee_repo.count_vehicles()
        stats = build_stats(await self._scan_log_repo.list_all())

        return [
            EmployeeEntry(
                employee=employee,
                vehicle_count=vehicle_counts.get(employee.id, 0),
                usage=stats.get(employee.id, UsageStats()),
            )
            for employee in employees
        ]

    async def create_employee(self, employee: Employee) -> Employee:
        """
        Add an employee, generating a badge id when none is given.

        Raises:
            DuplicateRecordError: If the badge id is already taken.
        """
        if not employee.employee_id.strip():
            employee.employee_id = generate_employee_id()
        else:
            employee.employee_id = employee.employee_id.strip()

        created = await self._employee_repo.create(employee)
        logger.info("employee_created", employee_pk=created.id, employee_id=created.employee_id)
        return created

    async def list_vehicles(self) -> Sequence[VehicleWithOwner]:
        return await self._vehicle_repo.list_with_owner()

    async def list_employee_vehicles(self, employee_pk: int) -> Sequence[Vehicle]:
        """
        Raises:
            RecordNotFoundError: If the employee does not exist.
        """
        if await self._employee_repo.get_by_id(employee_pk) is None:
            raise RecordNotFoundError(f"Employee {employee_pk} not found")
        return await self._vehicle_repo.list_by_employee(employee_pk)

    async def register_vehicle(self, vehicle: Vehicle) -> Vehicle:
        """
        Register a vehicle for an existing employee.

        Raises:
            RecordNotFoundError: If the owner does not exist.
            ValueError: If the plate is empty after normalization.
        """
        created = await self._vehicle_repo.create(vehicle)
        logger.info(
            "vehicle_registered",
            vehicle_id=created.id,
            employee_pk=created.employee_id,
            plate=created.license_plate,
            vehicle_type=created.type.value,
        )
        return created

    async def vehicle_history(self, vehicle_id: int, limit: int = 50) -> Sequence[ScanLog]:
        """
        Recent scans of one vehicle, newest first.

        Raises:
            RecordNotFoundError: If the vehicle does not exist.
        """
        if await self._vehicle_repo.get_by_id(vehicle_id) is None:
            raise RecordNotFoundError(f"Vehicle {vehicle_id} not found")
        return await self._scan_log_repo.list_by_vehicle(vehicle_id, limit=limit)
