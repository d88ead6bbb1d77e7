"""Flask web application for vehicle expense and maintenance tracking."""

import logging
from pathlib import Path
from typing import Optional

from flask import (
    Blueprint,
    Flask,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)

# Add parent directory to path for package imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from fleetlog import (
    FleetlogError,
    Settings,
    UrgencyTier,
    analyze_refuels,
    compute_vehicle_stats,
    count_maintenance,
    load_settings,
    load_snapshot,
    parse_date,
    relative_day_label,
    append_record,
    save_current_km,
    summarize_expenses,
    summarize_upcoming_expenses,
    upcoming_expenses,
    upcoming_maintenance,
)

logger = logging.getLogger(__name__)

bp = Blueprint("fleet", __name__)


def get_settings() -> Settings:
    return current_app.config["FLEETLOG_SETTINGS"]


def get_snapshot_files():
    """Get all snapshot YAML files."""
    return sorted(get_settings().snapshot_dir.glob("*.yaml"))


def get_snapshot_path(fleet_id: str) -> Path:
    """Get full path for a fleet ID (filename without extension)."""
    return get_settings().snapshot_dir / f"{fleet_id}.yaml"


def today():
    """Today's date in the configured timezone."""
    return get_settings().today()


def load_fleet(fleet_id: str):
    """Load a snapshot, or None (with a flashed message) if it can't be read."""
    path = get_snapshot_path(fleet_id)
    if not path.exists():
        flash(f"Fleet '{fleet_id}' not found", "error")
        return None
    try:
        return load_snapshot(path)
    except FleetlogError as e:
        logger.warning("Could not load %s: %s", path, e)
        flash(f"Could not read fleet '{fleet_id}': {e}", "error")
        return None


def query_date(name: str):
    """Optional YYYY-MM-DD query parameter; bad values are flashed and ignored."""
    raw = request.args.get(name, "")
    try:
        return parse_date(raw)
    except FleetlogError:
        flash(f"Invalid date for {name}: {raw}", "error")
        return None


# =============================================================================
# Template filters
# =============================================================================


def format_km(km):
    """Format kilometres with comma separator."""
    if km is None:
        return "—"
    return f"{km:,.0f}"


def format_money(amount):
    if amount is None:
        return "—"
    return f"Q {amount:,.2f}"


def format_date(value):
    if value is None:
        return "—"
    return value.isoformat()


def tier_label(tier: Optional[UrgencyTier]) -> str:
    return tier.label if tier is not None else "N/A"


def tier_color(tier: Optional[UrgencyTier]) -> str:
    """Get Tailwind color classes for an urgency tier."""
    colors = {
        UrgencyTier.OVERDUE: "bg-red-100 text-red-800 border-red-200",
        UrgencyTier.URGENT: "bg-yellow-100 text-yellow-800 border-yellow-200",
        UrgencyTier.SOON: "bg-yellow-50 text-yellow-700 border-yellow-100",
        UrgencyTier.SCHEDULED: "bg-blue-100 text-blue-800 border-blue-200",
    }
    return colors.get(tier, "bg-gray-100 text-gray-800")


# =============================================================================
# Routes
# =============================================================================


@bp.route("/")
def index():
    """Dashboard showing every fleet snapshot."""
    settings = get_settings()
    fleets = []
    for path in get_snapshot_files():
        try:
            snapshot = load_snapshot(path)
        except FleetlogError as e:
            logger.warning("Skipping %s: %s", path, e)
            flash(f"Could not read {path.name}: {e}", "error")
            continue
        items = upcoming_maintenance(
            snapshot.maintenance, today(), settings.maintenance_dates, settings.distances
        )
        expenses = upcoming_expenses(
            snapshot.recurring_expenses, today(), settings.expense_dates
        )
        fleets.append({
            "id": path.stem,
            "vehicles": len(snapshot.active_vehicles),
            "maintenance": count_maintenance(items),
            "expenses": summarize_upcoming_expenses(expenses),
        })

    return render_template("index.html", fleets=fleets)


@bp.route("/fleet/<fleet_id>/upcoming-maintenance")
def upcoming_maintenance_view(fleet_id: str):
    snapshot = load_fleet(fleet_id)
    if snapshot is None:
        return redirect(url_for("fleet.index"))

    settings = get_settings()
    vehicle_alias = request.args.get("vehicle") or None
    items = upcoming_maintenance(
        snapshot.maintenance,
        today(),
        settings.maintenance_dates,
        settings.distances,
        vehicle_alias=vehicle_alias,
    )

    return render_template(
        "upcoming_maintenance.html",
        fleet_id=fleet_id,
        items=items,
        counts=count_maintenance(items),
        vehicles=snapshot.vehicles,
        vehicle_alias=vehicle_alias,
    )


@bp.route("/fleet/<fleet_id>/upcoming-expenses")
def upcoming_expenses_view(fleet_id: str):
    snapshot = load_fleet(fleet_id)
    if snapshot is None:
        return redirect(url_for("fleet.index"))

    vehicle_alias = request.args.get("vehicle") or None
    days = request.args.get("days", type=int)
    items = upcoming_expenses(
        snapshot.recurring_expenses,
        today(),
        get_settings().expense_dates,
        days=days,
        vehicle_alias=vehicle_alias,
    )

    return render_template(
        "upcoming_expenses.html",
        fleet_id=fleet_id,
        items=items,
        summary=summarize_upcoming_expenses(items),
        vehicles=snapshot.vehicles,
        vehicle_alias=vehicle_alias,
        days=days,
    )


@bp.route("/fleet/<fleet_id>/expenses-summary")
def expenses_summary_view(fleet_id: str):
    snapshot = load_fleet(fleet_id)
    if snapshot is None:
        return redirect(url_for("fleet.index"))

    vehicle_alias = request.args.get("vehicle") or None
    since = query_date("since")
    until = query_date("until")
    summary = summarize_expenses(snapshot.expenses, vehicle_alias, since, until)

    return render_template(
        "expenses_summary.html",
        fleet_id=fleet_id,
        summary=summary,
        vehicles=snapshot.vehicles,
        vehicle_alias=vehicle_alias,
        since=since,
        until=until,
    )


@bp.route("/fleet/<fleet_id>/vehicle-stats/<alias>")
def vehicle_stats_view(fleet_id: str, alias: str):
    snapshot = load_fleet(fleet_id)
    if snapshot is None:
        return redirect(url_for("fleet.index"))

    vehicle = snapshot.get_vehicle(alias)
    if vehicle is None:
        flash(f"Vehicle '{alias}' not found", "error")
        return redirect(url_for("fleet.index"))

    stats = compute_vehicle_stats(
        vehicle,
        snapshot.routes,
        snapshot.refuels,
        snapshot.expenses,
        snapshot.maintenance,
    )
    return render_template("vehicle_stats.html", fleet_id=fleet_id, stats=stats)


@bp.route("/fleet/<fleet_id>/fuel-analysis/<alias>")
def fuel_analysis_view(fleet_id: str, alias: str):
    snapshot = load_fleet(fleet_id)
    if snapshot is None:
        return redirect(url_for("fleet.index"))

    vehicle = snapshot.get_vehicle(alias)
    if vehicle is None:
        flash(f"Vehicle '{alias}' not found", "error")
        return redirect(url_for("fleet.index"))

    analysis = analyze_refuels(snapshot.refuels, vehicle)
    return render_template("fuel_analysis.html", fleet_id=fleet_id, analysis=analysis)


@bp.route("/fleet/<fleet_id>/vehicle/<alias>/km", methods=["POST"])
def update_km(fleet_id: str, alias: str):
    """Handle odometer update form submission."""
    path = get_snapshot_path(fleet_id)
    back = url_for("fleet.vehicle_stats_view", fleet_id=fleet_id, alias=alias)

    km = request.form.get("km")
    if not km:
        flash("Please enter the odometer reading", "error")
        return redirect(back)

    try:
        value = float(km)
        save_current_km(path, alias, value)
    except ValueError as e:
        flash(f"Invalid odometer value: {e}", "error")
        return redirect(back)
    except (KeyError, FileNotFoundError):
        flash(f"Vehicle '{alias}' not found", "error")
        return redirect(url_for("fleet.index"))

    flash(f"Updated odometer to {value:,.0f} km", "success")
    return redirect(back)


# Form fields copied into a new expense record
EXPENSE_FORM_FIELDS = ("vehicleAlias", "categoria", "monto", "fecha", "descripcion")


@bp.route("/fleet/<fleet_id>/expenses", methods=["POST"])
def add_expense(fleet_id: str):
    """Handle the new expense form on the summary page."""
    path = get_snapshot_path(fleet_id)
    back = url_for("fleet.expenses_summary_view", fleet_id=fleet_id)
    if not path.exists():
        flash(f"Fleet '{fleet_id}' not found", "error")
        return redirect(url_for("fleet.index"))

    payload = {
        name: request.form[name].strip()
        for name in EXPENSE_FORM_FIELDS
        if request.form.get(name, "").strip()
    }
    if "categoria" not in payload or "monto" not in payload:
        flash("Please enter a category and an amount", "error")
        return redirect(back)

    try:
        payload["monto"] = float(payload["monto"])
        append_record(path, "expenses", payload)
    except ValueError as e:
        flash(f"Invalid expense: {e}", "error")
        return redirect(back)

    flash(f"Added {payload['categoria']} expense of Q {payload['monto']:,.2f}", "success")
    return redirect(back)


def create_app(settings: Optional[Settings] = None) -> Flask:
    """Build the Flask app around explicit settings."""
    settings = settings or load_settings()
    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config["FLEETLOG_SETTINGS"] = settings

    # Register template filters
    app.jinja_env.filters["format_km"] = format_km
    app.jinja_env.filters["format_money"] = format_money
    app.jinja_env.filters["format_date"] = format_date
    app.jinja_env.filters["tier_label"] = tier_label
    app.jinja_env.filters["tier_color"] = tier_color
    app.jinja_env.filters["day_label"] = relative_day_label

    app.register_blueprint(bp)
    return app


if __name__ == "__main__":
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    logging.basicConfig(level=logging.INFO)
    create_app().run(debug=True, host="0.0.0.0", port=5001)
