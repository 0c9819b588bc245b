"""
SQLAlchemy ORM models for database tables.

These models define the database schema and provide
persistence for domain entities.
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class EmployeeDB(Base):
    """Database model for the employee directory."""

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    vehicles: Mapped[list["VehicleDB"]] = relationship(
        "VehicleDB",
        back_populates="employee",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Employee(employee_id={self.employee_id}, name={self.first_name})>"


class VehicleDB(Base):
    """
    Database model for registered vehicles.

    ``license_plate`` is written already normalized.
    """

    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    license_plate: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    province: Mapped[str | None] = mapped_column(String(100), nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    make: Mapped[str | None] = mapped_column(String(100), nullable=True)
    model: Mapped[str | None] = mapped_column(String(100), nullable=True)
    color: Mapped[str | None] = mapped_column(String(50), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    employee: Mapped["EmployeeDB"] = relationship(
        "EmployeeDB",
        back_populates="vehicles",
    )

    __table_args__ = (
        CheckConstraint("type IN ('car', 'motorcycle')", name="ck_vehicles_type"),
    )

    def __repr__(self) -> str:
        return f"<Vehicle(plate={self.license_plate}, type={self.type})>"


class ScanLogDB(Base):
    """
    Database model for scan log entries.

    Rows are only ever inserted. ``vehicle_id`` is NULL for walk-in entries.
    """

    __tablename__ = "scan_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vehicle_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("vehicles.id"),
        nullable=True,
        index=True,
    )
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employees.id"),
        nullable=False,
    )
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    vehicle_type: Mapped[str] = mapped_column(String(20), nullable=False)

    employee: Mapped["EmployeeDB"] = relationship("EmployeeDB")
    vehicle: Mapped["VehicleDB"] = relationship("VehicleDB")

    __table_args__ = (
        Index("ix_scan_logs_employee_time", "employee_id", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<ScanLog(employee={self.employee_id}, type={self.vehicle_type})>"


class AppSettingDB(Base):
    """Key-value store for deployment settings (JSON encoded values)."""

    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<AppSetting(key={self.key})>"
