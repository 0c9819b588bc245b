"""
Domain models for the vehicle entry log.

These are pure domain objects with no infrastructure dependencies.
They represent the core business concepts and rules.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

# Province value used when the plate's province could not be read
UNSPECIFIED_PROVINCE = "ไม่ระบุ"


class VehicleType(str, Enum):
    """Closed set of registrable vehicle kinds."""

    CAR = "car"
    MOTORCYCLE = "motorcycle"


class ScanType(str, Enum):
    """
    Type tag recorded on a scan log.

    WIN marks a walk-in entry: the employee arrived by hired motorcycle
    taxi or other third-party transport, so no vehicle is attached.
    """

    CAR = "car"
    MOTORCYCLE = "motorcycle"
    WIN = "win"


class DominantType(str, Enum):
    """Per-employee label summarising travel mode over a report period."""

    PRIMARILY_CAR = "primarily car"
    MIXED = "mixed"


@dataclass
class Employee:
    """
    Directory record for an employee.

    Attributes:
        employee_id: Unique business identifier (badge number).
        first_name: Given name.
        last_name: Family name.
        department: Department name.
        position: Job title.
        photo_url: Optional portrait reference.
        created_at: When the record was created (set by database).
        id: Surrogate key (set by database).
    """

    employee_id: str
    first_name: str
    last_name: str
    department: str = ""
    position: str = ""
    photo_url: str | None = None
    created_at: datetime | None = None
    id: int | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class Vehicle:
    """
    A vehicle registered to exactly one employee.

    ``license_plate`` is stored normalized (no whitespace, no dashes).

    Attributes:
        employee_id: Surrogate key of the owning employee.
        license_plate: Normalized plate text.
        type: Car or motorcycle.
        province: Registration province as printed on the plate.
        make: Free-text manufacturer.
        model: Free-text model.
        color: Free-text color.
        photo_url: Optional photo reference.
        created_at: When the record was created (set by database).
        id: Surrogate key (set by database).
    """

    employee_id: int
    license_plate: str
    type: VehicleType
    province: str = UNSPECIFIED_PROVINCE
    make: str = ""
    model: str = ""
    color: str = ""
    photo_url: str | None = None
    created_at: datetime | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        """Coerce the type tag so unknown kinds fail at construction."""
        self.type = VehicleType(self.type)


@dataclass(frozen=True)
class VehicleWithOwner:
    """A vehicle joined with its owning employee."""

    vehicle: Vehicle
    employee: Employee | None


@dataclass
class ScanLog:
    """
    Append-only record of one employee entry.

    ``vehicle_type`` is kept as the raw stored tag; the aggregators decide
    how to bucket unrecognised values.

    Attributes:
        employee_id: Surrogate key of the employee (denormalized).
        vehicle_type: Type tag, normally one of ``ScanType``.
        timestamp: When the entry was recorded.
        vehicle_id: Vehicle scanned, None for walk-in entries.
        image_url: Optional captured frame reference.
        id: Surrogate key (set by database).
        employee: Joined employee, present when fetched for reports.
    """

    employee_id: int | None
    vehicle_type: str
    timestamp: datetime
    vehicle_id: int | None = None
    image_url: str | None = None
    id: int | None = None
    employee: Employee | None = None


@dataclass
class AppSettings:
    """
    Deployment-wide configuration record.

    Rates are currency units per day. ``admin_password`` holds a bcrypt
    hash once an admin password has been saved.
    """

    car_rate: float = 90
    motorcycle_rate: float = 70
    win_rate: float = 70
    admin_password: str | None = None

    def __post_init__(self) -> None:
        """Coerce rates to numbers; stored JSON may hold strings."""
        self.car_rate = float(self.car_rate)
        self.motorcycle_rate = float(self.motorcycle_rate)
        self.win_rate = float(self.win_rate)


@dataclass(frozen=True)
class EmployeeReportRow:
    """
    One employee's line in the travel cost report.

    Attributes:
        employee_id: Surrogate key of the employee.
        employee: Joined employee record, if the log fetch included it.
        car_days: Entries recorded as car.
        moto_days: Every other entry (motorcycle and walk-in).
        total_days: car_days + moto_days.
        cost: car_days * car_rate + moto_days * motorcycle_rate.
        car_percent: Share of car entries, 0-100.
        dominant: PRIMARILY_CAR at 80% car or more, otherwise MIXED.
    """

    employee_id: int
    employee: Employee | None
    car_days: int
    moto_days: int
    total_days: int
    cost: float
    car_percent: float
    dominant: DominantType


@dataclass
class UsageStats:
    """Per-employee entry counts by travel mode."""

    car: int = 0
    motorcycle: int = 0
    win: int = 0

    @property
    def total(self) -> int:
        return self.car + self.motorcycle + self.win


@dataclass(frozen=True)
class PlateRecognition:
    """
    Plate read from a captured image by the external recognizer.

    Attributes:
        plate: Plate text as returned (may still contain spaces).
        province: Province name, or UNSPECIFIED_PROVINCE.
        make: Vehicle make if the recognizer reported one.
        color: Vehicle color if the recognizer reported one.
    """

    plate: str
    province: str = UNSPECIFIED_PROVINCE
    make: str | None = None
    color: str | None = None
