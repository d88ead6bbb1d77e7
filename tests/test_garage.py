#!/usr/bin/env python3
"""Tests for garage CLI formatting helpers and commands."""
import argparse
from datetime import date
from unittest import mock

import pytest

from fleetlog import (
    DateUrgency,
    DistanceUrgency,
    MaintenanceRecord,
    RecurringExpenseRecord,
    UpcomingExpense,
    UpcomingMaintenance,
    UrgencyTier,
    VehicleRef,
    load_snapshot,
)
from garage import (
    format_days,
    format_km,
    format_km_remaining,
    format_money,
    format_percent,
    main,
    parse_field,
    make_expense_table,
    make_maintenance_table,
    truncate,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("FLEETLOG_API_BASE_URL", raising=False)


class TestFormatting:
    """Tests for the formatting helpers."""

    def test_format_km(self):
        assert format_km(45850) == "45,850"
        assert format_km(None) == "-"

    def test_format_money(self):
        assert format_money(1380) == "Q 1,380.00"
        assert format_money(0) == "Q 0.00"
        assert format_money(None) == "-"

    def test_format_percent(self):
        assert format_percent(25) == "25.0%"

    def test_format_km_remaining(self):
        assert format_km_remaining(None) == "-"
        assert format_km_remaining(4150) == "4,150"
        assert format_km_remaining(-140) == "-140 (excedido)"

    def test_format_days(self):
        assert format_days(None) == "-"
        assert format_days(-3) == "-3d"
        assert format_days(0) == "Hoy"
        assert format_days(1) == "Mañana"
        assert format_days(12) == "12d"

    def test_truncate(self):
        assert truncate(None) == "-"
        assert truncate("short") == "short"
        assert truncate("a" * 40, 10) == "aaaaaaa..."


class TestTables:
    """Tests for the table builders."""

    def test_km_only_overdue_reads_exceeded(self):
        record = MaintenanceRecord("hilux", "Frenos", proximo_servicio_km=120200)
        item = UpcomingMaintenance(
            record, UrgencyTier.OVERDUE, distance_urgency=DistanceUrgency(-140, UrgencyTier.OVERDUE)
        )
        row = make_maintenance_table([item])[0]
        assert row == ["hilux", "Frenos", "-", "-", "120,200", "-140 (excedido)", "Excedido"]

    def test_date_overdue_reads_overdue(self):
        record = MaintenanceRecord("civic", "Aceite", proximo_servicio_fecha="2025-02-20")
        item = UpcomingMaintenance(
            record, UrgencyTier.OVERDUE, date_urgency=DateUrgency(-9, UrgencyTier.OVERDUE)
        )
        assert make_maintenance_table([item])[0][6] == "Vencido"
        assert make_maintenance_table([item])[0][2:4] == ["2025-02-20", "-9d"]

    def test_expense_row(self):
        record = RecurringExpenseRecord(
            "civic", "Seguro", 450, "2025-02-01", "Mensual", descripcion="Póliza anual"
        )
        item = UpcomingExpense(record, DateUrgency(4, UrgencyTier.URGENT))
        row = make_expense_table([item])[0]
        assert row == [
            "civic",
            "Seguro",
            "Q 450.00",
            "Mensual",
            "2025-02-01",
            "4d",
            "2025-03-01",
            "Póliza anual",
        ]

    def test_overdue_expense_row(self):
        record = RecurringExpenseRecord("civic", "Seguro", 450, "2025-02-01", None)
        item = UpcomingExpense(record, DateUrgency(-2, UrgencyTier.OVERDUE))
        row = make_expense_table([item])[0]
        assert row[3] == "-"
        assert row[5] == "Vencido"
        assert row[6] == "-"


class TestCommands:
    """End-to-end runs of main() against the fixture snapshot."""

    def test_upcoming(self, snapshot_file, capsys):
        assert main(["-f", str(snapshot_file), "--today", "2025-03-01", "upcoming"]) == 0
        out = capsys.readouterr().out
        assert "Vencidos: 1  Urgentes: 0  Próximos: 0  Programados: 1" in out
        assert "Excedido" in out
        assert out.index("Frenos") < out.index("Cambio de aceite")
        assert "Inspección" not in out

    def test_upcoming_for_one_vehicle(self, snapshot_file, capsys):
        main(["-f", str(snapshot_file), "--today", "2025-03-01", "upcoming", "--vehicle", "civic"])
        out = capsys.readouterr().out
        assert "Frenos" not in out
        assert "Cambio de aceite" in out

    def test_expenses_window(self, snapshot_file, capsys):
        assert main(["-f", str(snapshot_file), "--today", "2025-01-28", "expenses", "--days", "30"]) == 0
        out = capsys.readouterr().out
        assert "Total próximo: Q 450.00 (1 pagos)" in out
        assert "Seguro" in out
        assert "2025-03-01" in out
        assert "Impuestos" not in out

    def test_summary(self, snapshot_file, capsys):
        assert main(["-f", str(snapshot_file), "summary"]) == 0
        out = capsys.readouterr().out
        assert "Total: Q 1,380.00 (3 gastos)" in out
        assert "Impuestos" in out

    def test_summary_period(self, snapshot_file, capsys):
        main(["-f", str(snapshot_file), "summary", "--since", "2025-01-10", "--until", "2025-01-31"])
        out = capsys.readouterr().out
        assert "Period: 2025-01-10 to 2025-01-31" in out
        assert "Total: Q 30.00 (1 gastos)" in out

    def test_stats(self, snapshot_file, capsys):
        assert main(["-f", str(snapshot_file), "stats", "civic"]) == 0
        out = capsys.readouterr().out
        assert "Vehicle: civic (Honda 2018)" in out
        assert "Q 1,395.00" in out
        assert "Q 6.975" in out

    def test_fuel(self, snapshot_file, capsys):
        assert main(["-f", str(snapshot_file), "fuel", "civic"]) == 0
        out = capsys.readouterr().out
        assert "Avg price per gallon: Q 36.00" in out
        assert "Super" in out
        assert "Diesel" not in out

    def test_unknown_vehicle(self, snapshot_file, capsys):
        assert main(["-f", str(snapshot_file), "stats", "tesla"]) == 1
        assert "Unknown vehicle 'tesla'" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main(["-f", str(tmp_path / "nope.yaml"), "upcoming"]) == 1
        assert "File not found" in capsys.readouterr().out

    def test_update_km(self, snapshot_file, capsys):
        assert main(["-f", str(snapshot_file), "update-km", "civic", "46000"]) == 0
        assert "Odometer updated." in capsys.readouterr().out
        assert load_snapshot(snapshot_file).get_vehicle("civic").kilometraje_total == 46000

    def test_update_km_dry_run(self, snapshot_file, capsys):
        main(["-f", str(snapshot_file), "update-km", "civic", "46000", "--dry-run"])
        assert "dry run" in capsys.readouterr().out
        assert load_snapshot(snapshot_file).get_vehicle("civic").kilometraje_total == 45850

    def test_update_km_backwards(self, snapshot_file, capsys):
        assert main(["-f", str(snapshot_file), "update-km", "civic", "100"]) == 1
        assert "cannot go back" in capsys.readouterr().out

    def test_options_in_any_order(self, snapshot_file, capsys):
        assert main(["--today", "2025-03-01", "-f", str(snapshot_file), "upcoming"]) == 0
        assert "Vencidos: 1" in capsys.readouterr().out

    def test_today_defaults_to_configured_zone(self, snapshot_file, monkeypatch, capsys):
        monkeypatch.setattr("fleetlog.config.Settings.today", lambda self: date(2025, 3, 1))
        assert main(["-f", str(snapshot_file), "upcoming"]) == 0
        assert "Vencidos: 1  Urgentes: 0  Próximos: 0  Programados: 1" in capsys.readouterr().out

    def test_snapshot_and_api_are_exclusive(self, snapshot_file):
        with pytest.raises(SystemExit):
            main(["-f", str(snapshot_file), "--api", "upcoming"])

    def test_add_expense(self, snapshot_file, capsys):
        argv = [
            "-f",
            str(snapshot_file),
            "add",
            "expenses",
            "vehicleAlias=CIVIC",
            "categoria=Lavado",
            "monto=40",
            "fecha=2025-02-02",
        ]
        assert main(argv) == 0
        out = capsys.readouterr().out
        assert "Adding expenses record" in out
        assert "Record saved." in out
        snapshot = load_snapshot(snapshot_file)
        added = snapshot.expenses[-1]
        assert (added.vehicle_alias, added.categoria, added.monto) == ("civic", "Lavado", 40)
        assert added.fecha == date(2025, 2, 2)

    def test_add_dry_run(self, snapshot_file, capsys):
        argv = ["-f", str(snapshot_file), "add", "expenses", "categoria=Lavado", "monto=40", "--dry-run"]
        assert main(argv) == 0
        assert "dry run" in capsys.readouterr().out
        assert len(load_snapshot(snapshot_file).expenses) == 3

    def test_add_rejects_record_of_another_section(self, snapshot_file, capsys):
        argv = ["-f", str(snapshot_file), "add", "routes", "categoria=Lavado", "monto=40"]
        assert main(argv) == 1
        assert "not a valid routes record" in capsys.readouterr().out
        assert len(load_snapshot(snapshot_file).routes) == 3

    def test_add_unknown_vehicle(self, snapshot_file, capsys):
        argv = ["-f", str(snapshot_file), "add", "expenses", "vehicleAlias=tesla", "categoria=Lavado", "monto=40"]
        assert main(argv) == 1
        assert "Unknown vehicle 'tesla'" in capsys.readouterr().out
        assert len(load_snapshot(snapshot_file).expenses) == 3

    def test_add_needs_a_file(self, capsys):
        assert main(["--api", "add", "expenses", "categoria=Lavado", "monto=40"]) == 1
        assert "only works on snapshot files" in capsys.readouterr().out

    def test_api_without_base_url(self, capsys):
        assert main(["--api", "upcoming"]) == 1
        assert "FLEETLOG_API_BASE_URL" in capsys.readouterr().out

    def test_api_source(self, monkeypatch, capsys):
        client = mock.Mock()
        client.upcoming_maintenance.return_value = [
            MaintenanceRecord(
                "civic",
                "Frenos",
                proximo_servicio_km=50000,
                vehicle=VehicleRef("civic", kilometraje_total=49800),
            )
        ]
        monkeypatch.setattr("garage.ApiClient.from_settings", lambda settings: client)

        assert main(["--api", "--today", "2025-03-01", "upcoming"]) == 0
        out = capsys.readouterr().out
        assert "Urgentes: 1" in out
        assert "Urgente" in out


class TestParseField:
    """Tests for FIELD=VALUE argument parsing."""

    def test_numbers(self):
        assert parse_field("monto=40") == ("monto", 40)
        assert parse_field("galones=10.5") == ("galones", 10.5)

    def test_booleans(self):
        assert parse_field("esRecurrente=true") == ("esRecurrente", True)
        assert parse_field("esDeducibleImpuestos=false") == ("esDeducibleImpuestos", False)

    def test_text_keeps_everything_after_first_equals(self):
        assert parse_field("fecha=2025-02-02") == ("fecha", "2025-02-02")
        assert parse_field("descripcion=a=b") == ("descripcion", "a=b")

    def test_missing_equals(self):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_field("monto")
        with pytest.raises(argparse.ArgumentTypeError):
            parse_field("=40")
