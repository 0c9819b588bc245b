"""
Integration tests for repositories against an in-memory database.
"""

from datetime import datetime

import pytest

from platelog.domain.models import AppSettings, Employee, ScanLog, Vehicle, VehicleType
from platelog.infrastructure.db.repository import (
    DuplicateRecordError,
    EmployeeRepository,
    RecordNotFoundError,
    ScanLogRepository,
    SettingsRepository,
    VehicleRepository,
)


async def add_employee(session, employee_id: str = "e0001", first_name: str = "Somchai") -> Employee:
    repo = EmployeeRepository(session)
    return await repo.create(
        Employee(employee_id=employee_id, first_name=first_name, last_name="Jaidee")
    )


class TestEmployeeRepository:
    """Tests for EmployeeRepository."""

    @pytest.mark.asyncio
    async def test_create_sets_keys(self, db_session):
        employee = await add_employee(db_session)

        assert employee.id is not None
        assert employee.created_at is not None
        assert employee.full_name == "Somchai Jaidee"

    @pytest.mark.asyncio
    async def test_duplicate_business_id(self, db_session):
        await add_employee(db_session, employee_id="dup001")

        with pytest.raises(DuplicateRecordError):
            await add_employee(db_session, employee_id="dup001", first_name="Other")

    @pytest.mark.asyncio
    async def test_list_ordered_by_first_name(self, db_session):
        await add_employee(db_session, "e1", "Wichai")
        await add_employee(db_session, "e2", "Anong")
        await add_employee(db_session, "e3", "Malee")

        employees = await EmployeeRepository(db_session).list_all()

        assert [e.first_name for e in employees] == ["Anong", "Malee", "Wichai"]

    @pytest.mark.asyncio
    async def test_get_by_business_id(self, db_session):
        created = await add_employee(db_session, "abc123")
        repo = EmployeeRepository(db_session)

        assert (await repo.get_by_business_id("abc123")).id == created.id
        assert await repo.get_by_business_id("missing") is None
        assert await repo.get_by_id(9999) is None

    @pytest.mark.asyncio
    async def test_count_vehicles(self, db_session):
        owner = await add_employee(db_session, "e1")
        other = await add_employee(db_session, "e2", "Anong")
        vehicles = VehicleRepository(db_session)
        await vehicles.create(Vehicle(employee_id=owner.id, license_plate="1กข1234", type="car"))
        await vehicles.create(
            Vehicle(employee_id=owner.id, license_plate="2คง5678", type="motorcycle")
        )

        counts = await EmployeeRepository(db_session).count_vehicles()

        assert counts == {owner.id: 2}
        assert counts.get(other.id, 0) == 0


class TestVehicleRepository:
    """Tests for VehicleRepository."""

    @pytest.mark.asyncio
    async def test_plate_normalized_on_write(self, db_session):
        owner = await add_employee(db_session)

        vehicle = await VehicleRepository(db_session).create(
            Vehicle(employee_id=owner.id, license_plate="1 กข-1234", type=VehicleType.CAR)
        )

        assert vehicle.license_plate == "1กข1234"
        assert vehicle.province == "ไม่ระบุ"

    @pytest.mark.asyncio
    async def test_unknown_owner(self, db_session):
        with pytest.raises(RecordNotFoundError):
            await VehicleRepository(db_session).create(
                Vehicle(employee_id=404, license_plate="1กข1234", type="car")
            )

    @pytest.mark.asyncio
    async def test_blank_plate_rejected(self, db_session):
        owner = await add_employee(db_session)

        with pytest.raises(ValueError):
            await VehicleRepository(db_session).create(
                Vehicle(employee_id=owner.id, license_plate=" - ", type="car")
            )

    @pytest.mark.asyncio
    async def test_list_with_owner_newest_first(self, db_session):
        owner = await add_employee(db_session)
        repo = VehicleRepository(db_session)
        first = await repo.create(Vehicle(employee_id=owner.id, license_plate="AAAA1", type="car"))
        second = await repo.create(Vehicle(employee_id=owner.id, license_plate="BBBB2", type="car"))

        items = await repo.list_with_owner()

        assert [i.vehicle.id for i in items] == [second.id, first.id]
        assert items[0].employee.employee_id == owner.employee_id

    @pytest.mark.asyncio
    async def test_get_by_id(self, db_session):
        owner = await add_employee(db_session)
        repo = VehicleRepository(db_session)
        created = await repo.create(
            Vehicle(employee_id=owner.id, license_plate="1กข1234", type="motorcycle", make="Honda")
        )

        found = await repo.get_by_id(created.id)

        assert found.vehicle.type == VehicleType.MOTORCYCLE
        assert found.vehicle.make == "Honda"
        assert found.employee.id == owner.id
        assert await repo.get_by_id(created.id + 100) is None


class TestScanLogRepository:
    """Tests for ScanLogRepository."""

    @pytest.mark.asyncio
    async def test_list_between_inclusive_and_ordered(self, db_session):
        owner = await add_employee(db_session)
        repo = ScanLogRepository(db_session)
        for ts, kind in [
            (datetime(2024, 5, 2, 9, 0), "motorcycle"),
            (datetime(2024, 5, 1, 0, 0), "car"),
            (datetime(2024, 5, 3, 0, 0), "car"),
            (datetime(2024, 4, 30, 23, 59, 59), "car"),
        ]:
            await repo.create(ScanLog(employee_id=owner.id, vehicle_type=kind, timestamp=ts))

        logs = await repo.list_between(datetime(2024, 5, 1), datetime(2024, 5, 2, 23, 59, 59))

        assert [log.timestamp.day for log in logs] == [1, 2]
        assert logs[0].employee.first_name == "Somchai"

    @pytest.mark.asyncio
    async def test_list_by_vehicle_newest_first(self, db_session):
        owner = await add_employee(db_session)
        vehicle = await VehicleRepository(db_session).create(
            Vehicle(employee_id=owner.id, license_plate="1กข1234", type="car")
        )
        repo = ScanLogRepository(db_session)
        for day in (1, 3, 2):
            await repo.create(
                ScanLog(
                    employee_id=owner.id,
                    vehicle_id=vehicle.id,
                    vehicle_type="car",
                    timestamp=datetime(2024, 5, day, 8, 0),
                )
            )
        await repo.create(
            ScanLog(employee_id=owner.id, vehicle_type="win", timestamp=datetime(2024, 5, 4))
        )

        history = await repo.list_by_vehicle(vehicle.id, limit=2)

        assert [log.timestamp.day for log in history] == [3, 2]


class TestSettingsRepository:
    """Tests for SettingsRepository."""

    @pytest.mark.asyncio
    async def test_defaults_when_empty(self, db_session):
        settings = await SettingsRepository(db_session).get()
        assert settings == AppSettings(car_rate=90, motorcycle_rate=70, win_rate=70)
        assert settings.admin_password is None

    @pytest.mark.asyncio
    async def test_overwrite(self, db_session):
        repo = SettingsRepository(db_session)
        await repo.set(AppSettings(car_rate=100, motorcycle_rate=60, win_rate=50, admin_password="h"))
        await repo.set(AppSettings(car_rate=120, motorcycle_rate=65, win_rate=55))

        settings = await repo.get()

        assert settings.car_rate == 120
        assert settings.motorcycle_rate == 65
        assert settings.admin_password is None
