#!/usr/bin/env python3
"""Tests for the upcoming maintenance and expense views."""
from datetime import date

import pytest

from fleetlog import (
    DateThresholds,
    ExpenseRecord,
    MaintenanceRecord,
    RecurringExpenseRecord,
    UrgencyTier,
    VehicleRef,
    count_maintenance,
    summarize_upcoming_expenses,
    upcoming_expenses,
    upcoming_maintenance,
)
from fleetlog.loader import load_records
from fleetlog.upcoming import classify_maintenance

TODAY = date(2025, 3, 1)


@pytest.fixture
def civic():
    return VehicleRef("civic", "Honda", 2018, kilometraje_inicial=42000, kilometraje_total=45850)


def service(vehicle, tipo, fecha=None, km=None):
    return MaintenanceRecord(
        vehicle.alias if vehicle else "ghost",
        tipo,
        proximo_servicio_fecha=fecha,
        proximo_servicio_km=km,
        vehicle=vehicle,
    )


class TestClassifyMaintenance:
    """Tests for classify_maintenance."""

    def test_date_only(self, civic):
        item = classify_maintenance(service(civic, "Frenos", fecha="2025-03-05"), TODAY)
        assert item.tier == UrgencyTier.URGENT
        assert item.days_until == 4
        assert item.km_remaining is None

    def test_km_only(self, civic):
        item = classify_maintenance(service(civic, "Aceite", km=46200), TODAY)
        assert item.tier == UrgencyTier.URGENT
        assert item.km_remaining == 350
        assert item.days_until is None

    def test_km_exceeded(self, civic):
        item = classify_maintenance(service(civic, "Aceite", km=45000), TODAY)
        assert item.tier == UrgencyTier.OVERDUE
        assert item.km_remaining == -850

    def test_most_severe_wins(self, civic):
        """A distant date does not hide an exceeded odometer target."""
        item = classify_maintenance(service(civic, "Aceite", fecha="2025-09-01", km=45500), TODAY)
        assert item.date_urgency.tier == UrgencyTier.SCHEDULED
        assert item.distance_urgency.tier == UrgencyTier.OVERDUE
        assert item.tier == UrgencyTier.OVERDUE

    def test_date_more_severe_than_km(self, civic):
        item = classify_maintenance(service(civic, "Aceite", fecha="2025-02-27", km=60000), TODAY)
        assert item.tier == UrgencyTier.OVERDUE
        assert item.days_until == -2

    def test_km_without_odometer_is_skipped(self):
        vehicle = VehicleRef("old", kilometraje_inicial=1000)
        assert classify_maintenance(service(vehicle, "Aceite", km=2000), TODAY) is None

    def test_km_without_vehicle_is_skipped(self):
        assert classify_maintenance(service(None, "Aceite", km=2000), TODAY) is None

    def test_no_target(self, civic):
        assert classify_maintenance(service(civic, "Aceite"), TODAY) is None

    def test_backend_timestamp_due_today(self):
        """A UTC-midnight due date is due today, whatever the local zone."""
        records = load_records(
            [
                {
                    "tipo": "Frenos",
                    "vehicleAlias": "civic",
                    "proximoServicioFecha": "2026-10-20T00:00:00.000Z",
                }
            ]
        )
        item = classify_maintenance(records[0], date(2026, 10, 20))
        assert item.days_until == 0
        assert item.tier == UrgencyTier.URGENT


class TestStatusLabel:
    """Tests for UpcomingMaintenance.status_label."""

    def test_km_only_overdue_reads_exceeded(self, civic):
        item = classify_maintenance(service(civic, "Aceite", km=45000), TODAY)
        assert item.status_label == "Excedido"

    def test_km_overdue_with_future_date_reads_exceeded(self, civic):
        item = classify_maintenance(service(civic, "Aceite", fecha="2025-09-01", km=45000), TODAY)
        assert item.tier == UrgencyTier.OVERDUE
        assert item.status_label == "Excedido"

    def test_date_overdue_reads_overdue(self, civic):
        item = classify_maintenance(service(civic, "Aceite", fecha="2025-02-20", km=45000), TODAY)
        assert item.status_label == "Vencido"

    def test_other_tiers_use_tier_label(self, civic):
        item = classify_maintenance(service(civic, "Aceite", fecha="2025-03-20"), TODAY)
        assert item.status_label == "Próximo"


class TestUpcomingMaintenance:
    """Tests for upcoming_maintenance."""

    def test_sorted_most_urgent_first(self, civic):
        records = [
            service(civic, "Programado", fecha="2025-06-01"),
            service(civic, "Pronto", fecha="2025-03-20"),
            service(civic, "Vencido", fecha="2025-02-01"),
            service(civic, "Urgente", fecha="2025-03-03"),
            service(civic, "Sin fecha"),
        ]
        items = upcoming_maintenance(records, TODAY)
        assert [i.record.tipo for i in items] == ["Vencido", "Urgente", "Pronto", "Programado"]
        assert [i.tier for i in items] == [
            UrgencyTier.OVERDUE,
            UrgencyTier.URGENT,
            UrgencyTier.SOON,
            UrgencyTier.SCHEDULED,
        ]

    def test_same_tier_ordered_by_days(self, civic):
        records = [
            service(civic, "b", fecha="2025-03-07"),
            service(civic, "a", fecha="2025-03-02"),
        ]
        items = upcoming_maintenance(records, TODAY)
        assert [i.record.tipo for i in items] == ["a", "b"]

    def test_filter_by_vehicle(self, civic):
        hilux = VehicleRef("hilux", kilometraje_total=120340)
        records = [
            service(civic, "Aceite", fecha="2025-03-05"),
            service(hilux, "Frenos", km=120200),
        ]
        items = upcoming_maintenance(records, TODAY, vehicle_alias="hilux")
        assert [i.record.tipo for i in items] == ["Frenos"]

    def test_custom_thresholds(self, civic):
        records = [service(civic, "Aceite", fecha="2025-03-05")]
        items = upcoming_maintenance(records, TODAY, DateThresholds(1, 3))
        assert items[0].tier == UrgencyTier.SCHEDULED

    def test_counts(self, civic):
        records = [
            service(civic, "a", fecha="2025-02-01"),
            service(civic, "b", km=45000),
            service(civic, "c", fecha="2025-03-03"),
            service(civic, "d", fecha="2025-12-01"),
        ]
        counts = count_maintenance(upcoming_maintenance(records, TODAY))
        assert counts.overdue == 2
        assert counts.urgent == 1
        assert counts.soon == 0
        assert counts.scheduled == 1
        assert counts.total == 4


def recurring(categoria, proximo, monto=100, alias="civic", frecuencia="Mensual"):
    return RecurringExpenseRecord(alias, categoria, monto, proximo, frecuencia)


class TestUpcomingExpenses:
    """Tests for upcoming_expenses with the 7/14 day thresholds."""

    @pytest.fixture
    def records(self):
        return [
            recurring("Seguro", "2025-02-25", 450),
            recurring("Parqueo", "2025-03-01", 50),
            ExpenseRecord("civic", "Peajes", 30, "2025-02-28"),
            recurring("Impuestos", "2025-03-20", 900, alias="hilux", frecuencia="Anual"),
            recurring("Lavado", "2025-03-12", 60),
        ]

    def test_skips_non_recurring_and_sorts_by_date(self, records):
        items = upcoming_expenses(records, TODAY)
        assert [i.record.categoria for i in items] == ["Seguro", "Parqueo", "Lavado", "Impuestos"]
        assert [i.days_until for i in items] == [-4, 0, 11, 19]
        assert [i.tier for i in items] == [
            UrgencyTier.OVERDUE,
            UrgencyTier.URGENT,
            UrgencyTier.SOON,
            UrgencyTier.SCHEDULED,
        ]

    def test_days_window_keeps_overdue(self, records):
        items = upcoming_expenses(records, TODAY, days=15)
        assert [i.record.categoria for i in items] == ["Seguro", "Parqueo", "Lavado"]

    def test_filter_by_vehicle(self, records):
        items = upcoming_expenses(records, TODAY, vehicle_alias="hilux")
        assert [i.record.categoria for i in items] == ["Impuestos"]

    def test_following_payment(self, records):
        items = upcoming_expenses(records, TODAY, vehicle_alias="hilux")
        assert items[0].following_payment == date(2026, 3, 20)

    def test_summary(self, records):
        summary = summarize_upcoming_expenses(upcoming_expenses(records, TODAY))
        assert summary.count == 4
        assert summary.total_amount == 1460
        assert summary.due_this_week == 2
        assert summary.due_this_month == 4

    def test_empty_summary(self):
        summary = summarize_upcoming_expenses([])
        assert summary.count == 0
        assert summary.total_amount == 0
