#!/usr/bin/env python3
"""
Unified CLI for vehicle expense and maintenance tracking.

Commands:
  upcoming   - Show scheduled maintenance by urgency
  expenses   - Show recurring expenses coming due
  summary    - Spending per category
  stats      - Statistics for one vehicle
  fuel       - Fuel spend and volume for one vehicle
  update-km  - Update a vehicle's current odometer (snapshot files only)
  add        - Append a record to a snapshot section (snapshot files only)

Data comes from a snapshot YAML file, or from the REST backend with --api.
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from fleetlog import (
    SECTIONS,
    ApiClient,
    FleetlogError,
    UpcomingExpense,
    UpcomingMaintenance,
    analyze_refuels,
    append_record,
    compute_vehicle_stats,
    count_maintenance,
    load_settings,
    load_snapshot,
    parse_date,
    relative_day_label,
    save_current_km,
    summarize_expenses,
    summarize_upcoming_expenses,
    upcoming_expenses,
    upcoming_maintenance,
)

logger = logging.getLogger("garage")

# =============================================================================
# Formatting helpers
# =============================================================================


def format_km(km: Optional[float]) -> str:
    """Format kilometres for display."""
    return f"{km:,.0f}" if km is not None else "-"


def format_money(amount: Optional[float]) -> str:
    """Format an amount in quetzales."""
    return f"Q {amount:,.2f}" if amount is not None else "-"


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


def format_km_remaining(km: Optional[int]) -> str:
    """Format remaining kilometres; negative means exceeded."""
    if km is None:
        return "-"
    if km < 0:
        return f"-{abs(km):,} (excedido)"
    return f"{km:,}"


def format_days(days: Optional[int]) -> str:
    """Format remaining days (e.g. 'Hoy', 'Mañana', '-3d')."""
    if days is None:
        return "-"
    if days < 0:
        return f"-{abs(days)}d"
    if days <= 1:
        return relative_day_label(days)
    return f"{days}d"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


# =============================================================================
# Data source
# =============================================================================


def open_source(args, settings):
    """Return (snapshot, client); exactly one is set."""
    if args.api:
        return None, ApiClient.from_settings(settings)
    if args.snapshot is None:
        raise FleetlogError("A snapshot file is required unless --api is given")
    if not args.snapshot.exists():
        raise FleetlogError(f"File not found: {args.snapshot}")
    return load_snapshot(args.snapshot), None


def find_vehicle(snapshot, alias: str):
    vehicle = snapshot.get_vehicle(alias)
    if vehicle is None:
        known = ", ".join(v.alias for v in snapshot.vehicles) or "none"
        raise FleetlogError(f"Unknown vehicle '{alias}' (known: {known})")
    return vehicle


# =============================================================================
# Upcoming maintenance command
# =============================================================================


def make_maintenance_table(items: List[UpcomingMaintenance]) -> List[List[str]]:
    """Convert classified services to table rows."""
    rows = []
    for item in items:
        record = item.record
        rows.append(
            [
                record.vehicle_alias or "-",
                record.tipo,
                record.proximo_servicio_fecha.isoformat() if record.proximo_servicio_fecha else "-",
                format_days(item.days_until),
                format_km(record.proximo_servicio_km),
                format_km_remaining(item.km_remaining),
                item.status_label,
            ]
        )
    return rows


def cmd_upcoming(args, settings):
    """Show scheduled maintenance by urgency."""
    snapshot, client = open_source(args, settings)
    records = snapshot.maintenance if snapshot else client.upcoming_maintenance()

    items = upcoming_maintenance(
        records,
        args.today,
        settings.maintenance_dates,
        settings.distances,
        vehicle_alias=args.vehicle,
    )
    counts = count_maintenance(items)

    print(f"As of: {args.today.isoformat()}")
    print(
        f"Vencidos: {counts.overdue}  Urgentes: {counts.urgent}  "
        f"Próximos: {counts.soon}  Programados: {counts.scheduled}"
    )
    print()

    if not items:
        print("No hay mantenimientos programados.")
        return 0

    headers = ["Vehicle", "Service", "Due date", "In", "Due km", "Km left", "Status"]
    print(tabulate(make_maintenance_table(items), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Upcoming expenses command
# =============================================================================


def make_expense_table(items: List[UpcomingExpense]) -> List[List[str]]:
    rows = []
    for item in items:
        record = item.record
        frequency = record.frecuencia_recurrencia
        rows.append(
            [
                record.vehicle_alias or "-",
                record.categoria,
                format_money(record.monto),
                frequency.label if frequency else "-",
                record.proximo_pago.isoformat(),
                relative_day_label(item.days_until)
                if item.days_until < 0
                else format_days(item.days_until),
                item.following_payment.isoformat() if item.following_payment else "-",
                truncate(record.descripcion),
            ]
        )
    return rows


def cmd_expenses(args, settings):
    """Show recurring expenses coming due."""
    snapshot, client = open_source(args, settings)
    if snapshot:
        records = snapshot.recurring_expenses
    else:
        records = client.upcoming_expenses(args.vehicle, args.days)

    items = upcoming_expenses(
        records,
        args.today,
        settings.expense_dates,
        days=args.days,
        vehicle_alias=args.vehicle,
    )
    summary = summarize_upcoming_expenses(items)

    print(f"As of: {args.today.isoformat()}")
    print(f"Total próximo: {format_money(summary.total_amount)} ({summary.count} pagos)")
    print(f"Esta semana: {summary.due_this_week}  Este mes: {summary.due_this_month}")
    print()

    if not items:
        print("No hay gastos próximos.")
        return 0

    headers = ["Vehicle", "Category", "Amount", "Every", "Due", "In", "Then", "Notes"]
    print(tabulate(make_expense_table(items), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Summary command
# =============================================================================


def make_summary_table(summary) -> List[List[str]]:
    rows = []
    for category, result in summary.by_category.items():
        rows.append(
            [
                category,
                result.count,
                format_money(result.total_amount),
                format_money(result.average),
                format_percent(result.percentage_of_grand_total),
            ]
        )
    return rows


def cmd_summary(args, settings):
    """Spending per category."""
    snapshot, client = open_source(args, settings)
    if snapshot:
        expenses = snapshot.expenses
    else:
        expenses = client.expenses(args.vehicle, args.since, args.until)

    summary = summarize_expenses(expenses, args.vehicle, args.since, args.until)

    if args.vehicle:
        print(f"Vehicle: {args.vehicle}")
    if args.since or args.until:
        since = args.since.isoformat() if args.since else "..."
        until = args.until.isoformat() if args.until else "..."
        print(f"Period: {since} to {until}")
    print(f"Total: {format_money(summary.total.total_amount)} ({summary.total.count} gastos)")
    print()

    if not summary.by_category:
        print("No hay gastos registrados.")
        return 0

    headers = ["Category", "Count", "Total", "Average", "Share"]
    print(tabulate(make_summary_table(summary), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Stats command
# =============================================================================


def cmd_stats(args, settings):
    """Statistics for one vehicle."""
    snapshot, client = open_source(args, settings)
    if snapshot:
        vehicle = find_vehicle(snapshot, args.alias)
        stats = compute_vehicle_stats(
            vehicle,
            snapshot.routes,
            snapshot.refuels,
            snapshot.expenses,
            snapshot.maintenance,
        )
    else:
        stats = client.vehicle_stats(args.alias)

    name = stats.vehicle.name if stats.vehicle else args.alias
    print(f"Vehicle: {name}")
    if stats.vehicle and stats.vehicle.current_km is not None:
        print(f"Odometer: {format_km(stats.vehicle.current_km)} km")
    print()

    s, c, e = stats.statistics, stats.costs, stats.efficiency
    rows = [
        ["Routes", s.total_routes],
        ["Distance (km)", format_km(s.total_distance)],
        ["Avg per route (km)", f"{e.avg_distance_per_route:.1f}"],
        ["Refuels", s.total_refuels],
        ["Expenses", s.total_expenses],
        ["Maintenances", s.total_maintenances],
        ["Fuel", format_money(c.fuel)],
        ["Maintenance", format_money(c.maintenance)],
        ["Other expenses", format_money(c.other_expenses)],
        ["Total", format_money(c.total)],
        ["Cost per km", f"Q {c.cost_per_km:.3f}"],
        ["Km per litre", f"{e.km_per_liter:.2f}"],
        ["Km per gallon", f"{e.km_per_gallon:.2f}"],
        ["Total cost of ownership", format_money(stats.total_cost_of_ownership)],
    ]
    print(tabulate(rows, tablefmt="simple"))
    return 0


# =============================================================================
# Fuel command
# =============================================================================


def cmd_fuel(args, settings):
    """Fuel spend and volume for one vehicle."""
    snapshot, client = open_source(args, settings)
    if snapshot:
        vehicle = find_vehicle(snapshot, args.alias)
        analysis = analyze_refuels(snapshot.refuels, vehicle)
    else:
        refuels = client.refuels(args.alias)
        analysis = analyze_refuels([r for r in refuels if r.vehicle_alias == args.alias])

    summary = analysis.summary
    print(f"Vehicle: {args.alias}")
    print(f"Refuels: {summary.total_refuels}")
    print(f"Spent: {format_money(summary.total_spent)}")
    print(f"Gallons: {summary.total_gallons:,.2f}")
    print(f"Avg price per gallon: {format_money(summary.avg_price_per_gallon)}")
    print()

    if not analysis.by_fuel_type:
        print("No hay reabastecimientos registrados.")
        return 0

    rows = [
        [
            fuel_type,
            breakdown.count,
            format_money(breakdown.spent),
            f"{breakdown.gallons:,.2f}",
            format_money(breakdown.price_per_gallon) if breakdown.gallons else "-",
        ]
        for fuel_type, breakdown in analysis.by_fuel_type.items()
    ]
    headers = ["Fuel", "Count", "Spent", "Gallons", "Per gallon"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Update km command
# =============================================================================


def cmd_update_km(args, settings):
    """Update a vehicle's current odometer."""
    if args.api:
        raise FleetlogError("update-km only works on snapshot files")
    snapshot, _ = open_source(args, settings)
    vehicle = find_vehicle(snapshot, args.alias)

    print(f"Vehicle: {vehicle.name}")
    print(f"Current km: {format_km(vehicle.current_km)}")
    print(f"New km:     {format_km(args.km)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_current_km(args.snapshot, vehicle.alias, args.km)
    print("Odometer updated.")
    return 0


# =============================================================================
# Add command
# =============================================================================


def parse_field(text: str):
    """argparse type for FIELD=VALUE; numbers and booleans are converted."""
    name, sep, raw = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"Expected FIELD=VALUE, got '{text}'")
    if raw in ("true", "false"):
        return name, raw == "true"
    for cast in (int, float):
        try:
            return name, cast(raw)
        except ValueError:
            pass
    return name, raw


def cmd_add(args, settings):
    """Append a record to one section of a snapshot file."""
    if args.api:
        raise FleetlogError("add only works on snapshot files")
    snapshot, _ = open_source(args, settings)
    payload = dict(args.fields)
    if payload.get("vehicleAlias"):
        payload["vehicleAlias"] = find_vehicle(snapshot, payload["vehicleAlias"]).alias

    print(f"Adding {args.section} record to {args.snapshot}:")
    for name, value in payload.items():
        print(f"  {name}: {value}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    append_record(args.snapshot, args.section, payload)
    print("Record saved.")
    return 0


# =============================================================================
# Main
# =============================================================================


def iso_date(value: str) -> date:
    """argparse type for YYYY-MM-DD dates."""
    try:
        return parse_date(value)
    except FleetlogError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Vehicle expense and maintenance tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -f snapshots/demo.yaml upcoming
  %(prog)s -f snapshots/demo.yaml --today 2025-03-01 expenses --days 30
  %(prog)s -f snapshots/demo.yaml summary --since 2025-01-01
  %(prog)s -f snapshots/demo.yaml stats civic
  %(prog)s -f snapshots/demo.yaml fuel civic
  %(prog)s -f snapshots/demo.yaml update-km civic 45200
  %(prog)s -f snapshots/demo.yaml add expenses vehicleAlias=civic \\
      categoria=Lavado monto=40 fecha=2025-02-02
  %(prog)s --api upcoming
""",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "-f",
        "--snapshot",
        type=Path,
        help="Path to snapshot YAML file",
    )
    source.add_argument(
        "--api",
        action="store_true",
        help="Read from the REST backend (FLEETLOG_API_BASE_URL) instead of a file",
    )
    parser.add_argument(
        "--today",
        type=iso_date,
        help="Reference date in YYYY-MM-DD format (default: today in FLEETLOG_TIMEZONE)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        help="Load settings from this .env file",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    upcoming_parser = subparsers.add_parser(
        "upcoming", help="Show scheduled maintenance by urgency"
    )
    upcoming_parser.add_argument("--vehicle", type=str, help="Only this vehicle alias")

    expenses_parser = subparsers.add_parser(
        "expenses", help="Show recurring expenses coming due"
    )
    expenses_parser.add_argument("--vehicle", type=str, help="Only this vehicle alias")
    expenses_parser.add_argument(
        "--days",
        type=int,
        help="Only payments due within this many days (overdue always shown)",
    )

    summary_parser = subparsers.add_parser("summary", help="Spending per category")
    summary_parser.add_argument("--vehicle", type=str, help="Only this vehicle alias")
    summary_parser.add_argument("--since", type=iso_date, help="Start date (YYYY-MM-DD)")
    summary_parser.add_argument("--until", type=iso_date, help="End date (YYYY-MM-DD)")

    stats_parser = subparsers.add_parser("stats", help="Statistics for one vehicle")
    stats_parser.add_argument("alias", type=str, help="Vehicle alias")

    fuel_parser = subparsers.add_parser("fuel", help="Fuel analysis for one vehicle")
    fuel_parser.add_argument("alias", type=str, help="Vehicle alias")

    update_km_parser = subparsers.add_parser(
        "update-km", help="Update a vehicle's current odometer"
    )
    update_km_parser.add_argument("alias", type=str, help="Vehicle alias")
    update_km_parser.add_argument("km", type=float, help="Current odometer reading")
    update_km_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be updated without saving",
    )

    add_parser = subparsers.add_parser(
        "add", help="Append a record to a snapshot section"
    )
    add_parser.add_argument("section", choices=SECTIONS, help="Snapshot section")
    add_parser.add_argument(
        "fields",
        type=parse_field,
        nargs="+",
        metavar="FIELD=VALUE",
        help="Record fields, named as in the snapshot file",
    )
    add_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be added without saving",
    )

    return parser


COMMANDS = {
    "upcoming": cmd_upcoming,
    "expenses": cmd_expenses,
    "summary": cmd_summary,
    "stats": cmd_stats,
    "fuel": cmd_fuel,
    "update-km": cmd_update_km,
    "add": cmd_add,
}


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.env_file)
        if args.today is None:
            args.today = settings.today()
        return COMMANDS[args.command](args, settings)
    except FleetlogError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
