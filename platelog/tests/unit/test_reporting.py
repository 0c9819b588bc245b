"""
Unit tests for the cost report and usage stats aggregations.
"""

import pytest

from platelog.domain.models import AppSettings, DominantType, ScanType, UsageStats
from platelog.domain.reporting import build_report, build_stats
from platelog.tests.factories import make_employee, make_log


@pytest.fixture
def rates() -> AppSettings:
    return AppSettings(car_rate=90, motorcycle_rate=70, win_rate=70)


class TestBuildReport:
    """Tests for build_report."""

    def test_mixed_employee(self, rates: AppSettings):
        """Two car days and one motorcycle day cost 250 and read as mixed."""
        logs = [make_log(1, "car"), make_log(1, "car"), make_log(1, "motorcycle")]

        [row] = build_report(logs, rates)

        assert row.employee_id == 1
        assert row.car_days == 2
        assert row.moto_days == 1
        assert row.total_days == 3
        assert row.cost == 250
        assert row.car_percent == pytest.approx(66.67, abs=0.01)
        assert row.dominant == DominantType.MIXED

    def test_eighty_percent_is_primarily_car(self, rates: AppSettings):
        logs = [make_log(1, "car")] * 4 + [make_log(1, "motorcycle")]

        [row] = build_report(logs, rates)

        assert row.car_percent == pytest.approx(80)
        assert row.dominant == DominantType.PRIMARILY_CAR

    def test_just_below_threshold_is_mixed(self, rates: AppSettings):
        logs = [make_log(1, "car")] * 3 + [make_log(1, "motorcycle")]
        logs += [make_log(1, "car")] * 3 + [make_log(1, "win")] * 2

        [row] = build_report(logs, rates)

        assert row.car_days == 6
        assert row.car_percent == pytest.approx(66.67, abs=0.01)
        assert row.dominant == DominantType.MIXED

    def test_walk_in_billed_at_motorcycle_rate(self):
        """win_rate is stored but the report bills walk-ins as motorcycle days."""
        rates = AppSettings(car_rate=100, motorcycle_rate=50, win_rate=999)
        logs = [make_log(1, "win"), make_log(1, "win")]

        [row] = build_report(logs, rates)

        assert row.moto_days == 2
        assert row.cost == 100
        assert row.car_percent == 0
        assert row.dominant == DominantType.MIXED

    def test_enum_type_tags(self, rates: AppSettings):
        logs = [make_log(1, ScanType.CAR), make_log(1, ScanType.MOTORCYCLE)]

        [row] = build_report(logs, rates)

        assert row.car_days == 1
        assert row.moto_days == 1

    def test_rows_in_first_seen_order(self, rates: AppSettings):
        logs = [
            make_log(3, "car"),
            make_log(1, "car"),
            make_log(3, "motorcycle"),
            make_log(2, "win"),
        ]

        rows = build_report(logs, rates)

        assert [r.employee_id for r in rows] == [3, 1, 2]
        assert rows[0].total_days == 2

    def test_employee_carried_onto_row(self, rates: AppSettings):
        employee = make_employee(5, first_name="Malee", department="Finance")
        logs = [make_log(5, "car"), make_log(5, "car", employee=employee)]

        [row] = build_report(logs, rates)

        assert row.employee is employee

    def test_uses_given_rates(self):
        rates = AppSettings(car_rate=120.5, motorcycle_rate=40)
        logs = [make_log(1, "car"), make_log(1, "motorcycle")]

        [row] = build_report(logs, rates)

        assert row.cost == pytest.approx(160.5)

    def test_empty_logs(self, rates: AppSettings):
        assert build_report([], rates) == []


class TestBuildStats:
    """Tests for build_stats."""

    def test_buckets_by_type(self):
        logs = [
            make_log(1, "car"),
            make_log(1, "Bike"),
            make_log(1, "win"),
            make_log(2, "motorcycle"),
        ]

        stats = build_stats(logs)

        assert stats == {
            1: UsageStats(car=1, motorcycle=1, win=1),
            2: UsageStats(car=0, motorcycle=1, win=0),
        }

    def test_case_insensitive(self):
        stats = build_stats([make_log(1, "CAR"), make_log(1, "Motorcycle")])
        assert stats[1] == UsageStats(car=1, motorcycle=1)

    def test_unknown_tags_count_as_win(self):
        stats = build_stats([make_log(1, "truck"), make_log(1, "")])
        assert stats[1].win == 2

    def test_logs_without_employee_skipped(self):
        stats = build_stats([make_log(None, "car"), make_log(4, "car")])
        assert list(stats) == [4]

    def test_absent_employee_defaults_to_zero(self):
        stats = build_stats([make_log(1, "car")])
        usage = stats.get(99, UsageStats())
        assert (usage.car, usage.motorcycle, usage.win, usage.total) == (0, 0, 0, 0)

    def test_enum_tags(self):
        stats = build_stats([make_log(1, ScanType.WIN), make_log(1, ScanType.CAR)])
        assert stats[1] == UsageStats(car=1, win=1)

    def test_empty_logs(self):
        assert build_stats([]) == {}
