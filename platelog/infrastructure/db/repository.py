"""
Repository pattern implementations for data access.

Repositories abstract database operations and provide
a clean interface for the application layer. Rows are converted to
domain models here, so record shapes are checked at this boundary and
the domain aggregators can trust what they receive.
"""

import json
from dataclasses import asdict
from datetime import datetime
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from platelog.domain.models import (
    UNSPECIFIED_PROVINCE,
    AppSettings,
    Employee,
    ScanLog,
    Vehicle,
    VehicleWithOwner,
)
from platelog.domain.services import normalize_plate
from platelog.infrastructure.db.models import AppSettingDB, EmployeeDB, ScanLogDB, VehicleDB


class RecordNotFoundError(LookupError):
    """Raised when a referenced record does not exist."""

    pass


class DuplicateRecordError(ValueError):
    """Raised when an insert violates a uniqueness rule."""

    pass


def employee_to_domain(db_employee: EmployeeDB) -> Employee:
    """Convert an employee row to its domain model."""
    return Employee(
        id=db_employee.id,
        employee_id=db_employee.employee_id,
        first_name=db_employee.first_name,
        last_name=db_employee.last_name,
        department=db_employee.department or "",
        position=db_employee.position or "",
        photo_url=db_employee.photo_url,
        created_at=db_employee.created_at,
    )


def vehicle_to_domain(db_vehicle: VehicleDB) -> Vehicle:
    """Convert a vehicle row to its domain model."""
    return Vehicle(
        id=db_vehicle.id,
        employee_id=db_vehicle.employee_id,
        license_plate=db_vehicle.license_plate,
        province=db_vehicle.province or UNSPECIFIED_PROVINCE,
        type=db_vehicle.type,
        make=db_vehicle.make or "",
        model=db_vehicle.model or "",
        color=db_vehicle.color or "",
        photo_url=db_vehicle.photo_url,
        created_at=db_vehicle.created_at,
    )


class EmployeeRepository:
    """
    Repository for the employee directory.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self._session = session

    async def list_all(self) -> Sequence[Employee]:
        """List every employee ordered by first name."""
        stmt = select(EmployeeDB).order_by(EmployeeDB.first_name, EmployeeDB.id)
        result = await self._session.execute(stmt)
        return [employee_to_domain(e) for e in result.scalars().all()]

    async def get_by_id(self, employee_pk: int) -> Employee | None:
        """Get an employee by surrogate key."""
        db_employee = await self._session.get(EmployeeDB, employee_pk)
        if db_employee is None:
            return None
        return employee_to_domain(db_employee)

    async def get_by_business_id(self, employee_id: str) -> Employee | None:
        """Get an employee by badge number."""
        stmt = select(EmployeeDB).where(EmployeeDB.employee_id == employee_id)
        result = await self._session.execute(stmt)
        db_employee = result.scalar_one_or_none()
        if db_employee is None:
            return None
        return employee_to_domain(db_employee)

    async def create(self, employee: Employee) -> Employee:
        """
        Create a new employee.

        Args:
            employee: Domain model to persist.

        Returns:
            Employee: Created employee with ID and timestamps populated.

        Raises:
            DuplicateRecordError: If the business id is already taken.
        """
        if await self.get_by_business_id(employee.employee_id) is not None:
            raise DuplicateRecordError(
                f"Employee id {employee.employee_id!r} already exists"
            )

        db_employee = EmployeeDB(
            employee_id=employee.employee_id,
            first_name=employee.first_name,
            last_name=employee.last_name,
            department=employee.department,
            position=employee.position,
            photo_url=employee.photo_url,
        )
        self._session.add(db_employee)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise DuplicateRecordError(str(e.orig)) from e
        await self._session.refresh(db_employee)

        return employee_to_domain(db_employee)

    async def count_vehicles(self) -> dict[int, int]:
        """Number of registered vehicles per employee (absent means zero)."""
        stmt = select(VehicleDB.employee_id, func.count(VehicleDB.id)).group_by(
            VehicleDB.employee_id
        )
        result = await self._session.execute(stmt)
        return {employee_pk: count for employee_pk, count in result.all()}


class VehicleRepository:
    """
    Repository for registered vehicles.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_with_owner(self) -> Sequence[VehicleWithOwner]:
        """
        List every vehicle with its owner, newest first.

        This ordering is also the priority order used by plate matching.
        """
        stmt = (
            select(VehicleDB)
            .options(joinedload(VehicleDB.employee))
            .order_by(VehicleDB.created_at.desc(), VehicleDB.id.desc())
        )
        result = await self._session.execute(stmt)
        return [
            VehicleWithOwner(
                vehicle=vehicle_to_domain(v),
                employee=employee_to_domain(v.employee) if v.employee else None,
            )
            for v in result.scalars().all()
        ]

    async def list_by_employee(self, employee_pk: int) -> Sequence[Vehicle]:
        """List vehicles owned by one employee."""
        stmt = (
            select(VehicleDB)
            .where(VehicleDB.employee_id == employee_pk)
            .order_by(VehicleDB.id)
        )
        result = await self._session.execute(stmt)
        return [vehicle_to_domain(v) for v in result.scalars().all()]

    async def get_by_id(self, vehicle_id: int) -> VehicleWithOwner | None:
        """Get a vehicle and its owner by surrogate key."""
        stmt = (
            select(VehicleDB)
            .options(joinedload(VehicleDB.employee))
            .where(VehicleDB.id == vehicle_id)
        )
        result = await self._session.execute(stmt)
        db_vehicle = result.scalar_one_or_none()

        if db_vehicle is None:
            return None

        return VehicleWithOwner(
            vehicle=vehicle_to_domain(db_vehicle),
            employee=employee_to_domain(db_vehicle.employee) if db_vehicle.employee else None,
        )

    async def create(self, vehicle: Vehicle) -> Vehicle:
        """
        Register a vehicle.

        The plate is normalized before it is written.

        Raises:
            ValueError: If the plate is empty once normalized.
            RecordNotFoundError: If the owning employee does not exist.
        """
        plate = normalize_plate(vehicle.license_plate)
        if not plate:
            raise ValueError("License plate must not be empty")

        owner = await self._session.get(EmployeeDB, vehicle.employee_id)
        if owner is None:
            raise RecordNotFoundError(f"Employee {vehicle.employee_id} not found")

        db_vehicle = VehicleDB(
            employee_id=vehicle.employee_id,
            license_plate=plate,
            province=vehicle.province or UNSPECIFIED_PROVINCE,
            type=vehicle.type.value,
            make=vehicle.make,
            model=vehicle.model,
            color=vehicle.color,
            photo_url=vehicle.photo_url,
        )
        self._session.add(db_vehicle)
        await self._session.flush()
        await self._session.refresh(db_vehicle)

        return vehicle_to_domain(db_vehicle)


class ScanLogRepository:
    """
    Repository for scan logs. Logs are append-only: there is no update
    or delete method.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, log: ScanLog) -> ScanLog:
        """
        Append a scan log.

        Args:
            log: Domain model to persist.

        Returns:
            ScanLog: The same log with ``id`` populated.
        """
        db_log = ScanLogDB(
            vehicle_id=log.vehicle_id,
            employee_id=log.employee_id,
            timestamp=log.timestamp,
            image_url=log.image_url,
            vehicle_type=getattr(log.vehicle_type, "value", log.vehicle_type),
        )
        self._session.add(db_log)
        await self._session.flush()

        log.id = db_log.id
        return log

    async def list_between(self, start: datetime, end: datetime) -> Sequence[ScanLog]:
        """
        List logs with ``start <= timestamp <= end``, employee joined.

        Returned in timestamp order so report rows follow first appearance.
        """
        stmt = (
            select(ScanLogDB)
            .options(joinedload(ScanLogDB.employee))
            .where(ScanLogDB.timestamp >= start, ScanLogDB.timestamp <= end)
            .order_by(ScanLogDB.timestamp, ScanLogDB.id)
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(log, with_employee=True) for log in result.scalars().all()]

    async def list_all(self) -> Sequence[ScanLog]:
        """List every log (used for directory usage stats)."""
        stmt = select(ScanLogDB).order_by(ScanLogDB.id)
        result = await self._session.execute(stmt)
        return [self._to_domain(log) for log in result.scalars().all()]

    async def list_by_vehicle(self, vehicle_id: int, limit: int = 50) -> Sequence[ScanLog]:
        """Scan history of one vehicle, newest first."""
        stmt = (
            select(ScanLogDB)
            .where(ScanLogDB.vehicle_id == vehicle_id)
            .order_by(ScanLogDB.timestamp.desc(), ScanLogDB.id.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(log) for log in result.scalars().all()]

    def _to_domain(self, db_log: ScanLogDB, with_employee: bool = False) -> ScanLog:
        """Convert database model to domain model."""
        employee = None
        if with_employee and db_log.employee is not None:
            employee = employee_to_domain(db_log.employee)

        return ScanLog(
            id=db_log.id,
            vehicle_id=db_log.vehicle_id,
            employee_id=db_log.employee_id,
            timestamp=db_log.timestamp,
            image_url=db_log.image_url,
            vehicle_type=db_log.vehicle_type,
            employee=employee,
        )


class SettingsRepository:
    """
    Key-value settings store.

    The whole ``AppSettings`` record is kept as one JSON value and is
    replaced wholesale on every save.
    """

    SETTINGS_KEY = "app_settings"

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self) -> AppSettings:
        """Return saved settings, or defaults if nothing was saved yet."""
        db_setting = await self._session.get(AppSettingDB, self.SETTINGS_KEY)
        if db_setting is None:
            return AppSettings()

        data = json.loads(db_setting.value)
        defaults = asdict(AppSettings())
        return AppSettings(**{k: data.get(k, v) for k, v in defaults.items()})

    async def set(self, settings: AppSettings) -> None:
        """Overwrite the saved settings."""
        value = json.dumps(asdict(settings), ensure_ascii=False)

        db_setting = await self._session.get(AppSettingDB, self.SETTINGS_KEY)
        if db_setting is None:
            self._session.add(AppSettingDB(key=self.SETTINGS_KEY, value=value))
        else:
            db_setting.value = value

        await self._session.flush()
