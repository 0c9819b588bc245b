"""
Response models shared by several route modules.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from platelog.domain.models import VehicleType, VehicleWithOwner


class EmployeeSummary(BaseModel):
    """Employee fields returned wherever an owner is shown."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Employee surrogate key")
    employee_id: str = Field(description="Badge number", examples=["a1b2c3"])
    first_name: str
    last_name: str
    department: str = ""
    position: str = ""
    photo_url: str | None = None


class VehicleSummary(BaseModel):
    """Registered vehicle fields."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="Vehicle surrogate key")
    employee_id: int = Field(description="Owner surrogate key")
    license_plate: str = Field(description="Normalized plate", examples=["1กข1234"])
    province: str
    type: VehicleType
    make: str = ""
    model: str = ""
    color: str = ""
    photo_url: str | None = None
    created_at: datetime | None = None


class VehicleWithOwnerResponse(VehicleSummary):
    """Vehicle with its owner joined."""

    owner: EmployeeSummary | None = None

    @classmethod
    def from_domain(cls, item: VehicleWithOwner) -> "VehicleWithOwnerResponse":
        data = VehicleSummary.model_validate(item.vehicle).model_dump()
        owner = EmployeeSummary.model_validate(item.employee) if item.employee else None
        return cls(**data, owner=owner)


class ScanLogEntry(BaseModel):
    """One recorded entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int | None
    vehicle_id: int | None
    vehicle_type: str = Field(examples=["car", "motorcycle", "win"])
    timestamp: datetime
    image_url: str | None = None
