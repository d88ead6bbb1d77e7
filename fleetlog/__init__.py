"""
Vehicle expense, fuel and maintenance tracking.

This package provides:
- UrgencyTier: severity buckets (OVERDUE, URGENT, SOON, SCHEDULED)
- classify_by_date / classify_by_distance: urgency of a scheduled event
- accumulate: totals, averages and category shares of expenses
- Records: VehicleRef, MaintenanceRecord, ExpenseRecord, RefuelRecord, RouteRecord
- Snapshot: all records of a fleet, loaded from YAML
- VehicleStats: canonical per-vehicle statistics
- ApiClient: REST client for the fleet backend
"""

from .urgency import UrgencyTier, most_severe
from .errors import (
    FleetlogError,
    ValidationError,
    ParseError,
    ConfigError,
    ApiError,
    AuthError,
)
from .calculations import (
    DateThresholds,
    DistanceThresholds,
    DateUrgency,
    DistanceUrgency,
    MAINTENANCE_DATE_THRESHOLDS,
    EXPENSE_DATE_THRESHOLDS,
    DISTANCE_THRESHOLDS,
    parse_date,
    days_until,
    classify_by_date,
    classify_by_distance,
    relative_day_label,
    calc_next_payment,
)
from .aggregates import (
    AggregateResult,
    accumulate,
    safe_ratio,
    average_per_item,
    percentage_of,
    cost_per_distance,
    distance_per_fuel_unit,
)
from .vehicle_ref import VehicleRef
from .maintenance_record import MaintenanceRecord
from .expense_record import ExpenseRecord, RecurringExpenseRecord, Frequency
from .refuel_record import RefuelRecord
from .route_record import RouteRecord
from .snapshot import Snapshot
from .upcoming import (
    UpcomingMaintenance,
    UpcomingExpense,
    MaintenanceCounts,
    UpcomingExpenseSummary,
    upcoming_maintenance,
    upcoming_expenses,
    count_maintenance,
    summarize_upcoming_expenses,
)
from .loader import SECTIONS, load_snapshot, save_current_km, append_record
from .stats import (
    VehicleStats,
    FuelAnalysis,
    ExpenseSummary,
    normalize_stats,
    compute_vehicle_stats,
    analyze_refuels,
    summarize_expenses,
)
from .config import Settings, load_settings
from .client import ApiClient

__all__ = [
    "UrgencyTier",
    "most_severe",
    "FleetlogError",
    "ValidationError",
    "ParseError",
    "ConfigError",
    "ApiError",
    "AuthError",
    "DateThresholds",
    "DistanceThresholds",
    "DateUrgency",
    "DistanceUrgency",
    "MAINTENANCE_DATE_THRESHOLDS",
    "EXPENSE_DATE_THRESHOLDS",
    "DISTANCE_THRESHOLDS",
    "parse_date",
    "days_until",
    "classify_by_date",
    "classify_by_distance",
    "relative_day_label",
    "calc_next_payment",
    "AggregateResult",
    "accumulate",
    "safe_ratio",
    "average_per_item",
    "percentage_of",
    "cost_per_distance",
    "distance_per_fuel_unit",
    "VehicleRef",
    "MaintenanceRecord",
    "ExpenseRecord",
    "RecurringExpenseRecord",
    "Frequency",
    "RefuelRecord",
    "RouteRecord",
    "Snapshot",
    "UpcomingMaintenance",
    "UpcomingExpense",
    "MaintenanceCounts",
    "UpcomingExpenseSummary",
    "upcoming_maintenance",
    "upcoming_expenses",
    "count_maintenance",
    "summarize_upcoming_expenses",
    "SECTIONS",
    "load_snapshot",
    "save_current_km",
    "append_record",
    "VehicleStats",
    "FuelAnalysis",
    "ExpenseSummary",
    "normalize_stats",
    "compute_vehicle_stats",
    "analyze_refuels",
    "summarize_expenses",
    "Settings",
    "load_settings",
    "ApiClient",
]
