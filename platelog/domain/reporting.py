"""
Aggregations over scan logs.

Both functions are single-pass transforms over logs that have already
been fetched; they do no I/O and raise nothing for well-formed input.
"""

from collections.abc import Iterable
from enum import Enum

from platelog.domain.models import (
    AppSettings,
    DominantType,
    EmployeeReportRow,
    ScanLog,
    ScanType,
    UsageStats,
)

# Car share (percent) at or above which an employee counts as a car commuter
PRIMARILY_CAR_PERCENT = 80

MOTORCYCLE_TAGS = frozenset({"motorcycle", "bike"})


def build_report(
    logs: Iterable[ScanLog],
    rates: AppSettings,
) -> list[EmployeeReportRow]:
    """
    Build the per-employee travel cost report.

    Logs are grouped by employee in order of first appearance. Car
    entries are billed at ``car_rate``; every other entry, walk-ins
    included, is billed at ``motorcycle_rate``. ``win_rate`` is not
    used here.

    Args:
        logs: Scan logs for the report period, ideally with ``employee``
            joined so rows can show names.
        rates: Daily rates to bill with.

    Returns:
        list: One row per employee seen, in first-seen order.
    """
    groups: dict[int, dict] = {}

    for log in logs:
        group = groups.get(log.employee_id)
        if group is None:
            group = groups[log.employee_id] = {
                "employee": log.employee,
                "car_days": 0,
                "moto_days": 0,
            }
        elif group["employee"] is None:
            group["employee"] = log.employee

        if log.vehicle_type == ScanType.CAR:
            group["car_days"] += 1
        else:
            group["moto_days"] += 1

    rows = []
    for employee_id, group in groups.items():
        car_days = group["car_days"]
        moto_days = group["moto_days"]
        total_days = car_days + moto_days

        car_percent = car_days / total_days * 100
        dominant = (
            DominantType.PRIMARILY_CAR
            if car_percent >= PRIMARILY_CAR_PERCENT
            else DominantType.MIXED
        )

        rows.append(
            EmployeeReportRow(
                employee_id=employee_id,
                employee=group["employee"],
                car_days=car_days,
                moto_days=moto_days,
                total_days=total_days,
                cost=car_days * rates.car_rate + moto_days * rates.motorcycle_rate,
                car_percent=car_percent,
                dominant=dominant,
            )
        )

    return rows


def _type_tag(value: str | None) -> str:
    if isinstance(value, Enum):
        value = value.value
    return (value or "").lower()


def build_stats(logs: Iterable[ScanLog]) -> dict[int, UsageStats]:
    """
    Count each employee's entries by travel mode.

    Type tags are matched case-insensitively: "car" goes to the car
    bucket, "motorcycle" or "bike" to the motorcycle bucket, anything
    else (walk-ins, unknown tags) to the win bucket. Logs without an
    employee are skipped. Employees with no logs are absent from the
    result; use ``stats.get(id, UsageStats())`` when reading.
    """
    stats: dict[int, UsageStats] = {}

    for log in logs:
        if log.employee_id is None:
            continue

        entry = stats.setdefault(log.employee_id, UsageStats())
        tag = _type_tag(log.vehicle_type)

        if tag == ScanType.CAR.value:
            entry.car += 1
        elif tag in MOTORCYCLE_TAGS:
            entry.motorcycle += 1
        else:
            entry.win += 1

    return stats
