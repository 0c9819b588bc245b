"""Builders for domain records used across tests."""

from datetime import datetime

from platelog.domain.models import Employee, ScanLog, Vehicle, VehicleWithOwner


def make_employee(pk: int, first_name: str = "Somchai", **kwargs) -> Employee:
    """Build an employee as it would come back from the database."""
    kwargs.setdefault("employee_id", f"e{pk:05d}")
    kwargs.setdefault("last_name", "Jaidee")
    return Employee(id=pk, first_name=first_name, **kwargs)


def make_vehicle(
    pk: int,
    plate: str,
    owner: Employee | None = None,
    vehicle_type: str = "car",
) -> VehicleWithOwner:
    """Build a vehicle with owner for matcher tests."""
    owner = owner or make_employee(pk)
    vehicle = Vehicle(
        id=pk,
        employee_id=owner.id,
        license_plate=plate,
        type=vehicle_type,
    )
    return VehicleWithOwner(vehicle=vehicle, employee=owner)


def make_log(employee_id: int | None, vehicle_type: str, **kwargs) -> ScanLog:
    kwargs.setdefault("timestamp", datetime(2024, 5, 1, 8, 30))
    return ScanLog(employee_id=employee_id, vehicle_type=vehicle_type, **kwargs)
