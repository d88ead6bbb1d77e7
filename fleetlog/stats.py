"""Vehicle statistics, fuel analysis and expense summaries."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .aggregates import (
    AggregateResult,
    accumulate,
    cost_per_distance,
    distance_per_fuel_unit,
    average_per_item,
    liters_from_gallons,
    safe_ratio,
)
from .calculations import optional_number
from .expense_record import ExpenseRecord
from .maintenance_record import MaintenanceRecord
from .loader import parse_vehicle
from .refuel_record import RefuelRecord
from .route_record import RouteRecord
from .vehicle_ref import VehicleRef


@dataclass
class Statistics:
    total_routes: int = 0
    total_distance: float = 0.0
    total_refuels: int = 0
    total_expenses: int = 0
    total_maintenances: int = 0


@dataclass
class Costs:
    fuel: float = 0.0
    maintenance: float = 0.0
    other_expenses: float = 0.0
    total: float = 0.0
    cost_per_km: float = 0.0


@dataclass
class Efficiency:
    km_per_liter: float = 0.0
    km_per_gallon: float = 0.0
    avg_distance_per_route: float = 0.0


@dataclass
class VehicleStats:
    """Canonical statistics for one vehicle, whatever shape the backend sent."""

    vehicle: Optional[VehicleRef]
    statistics: Statistics = field(default_factory=Statistics)
    costs: Costs = field(default_factory=Costs)
    efficiency: Efficiency = field(default_factory=Efficiency)
    total_cost_of_ownership: float = 0.0

    @property
    def average_cost_per_km(self) -> float:
        return cost_per_distance(self.total_cost_of_ownership, self.statistics.total_distance)


@dataclass
class FuelTypeBreakdown:
    count: int = 0
    spent: float = 0.0
    gallons: float = 0.0

    @property
    def price_per_gallon(self) -> float:
        return safe_ratio(self.spent, self.gallons)


@dataclass
class FuelSummary:
    total_refuels: int = 0
    total_spent: float = 0.0
    total_gallons: float = 0.0
    avg_price_per_gallon: float = 0.0


@dataclass
class FuelAnalysis:
    vehicle: Optional[VehicleRef]
    summary: FuelSummary
    by_fuel_type: Dict[str, FuelTypeBreakdown]


@dataclass
class ExpenseSummary:
    """Spending per category plus the grand total."""

    by_category: Dict[str, AggregateResult]
    total: AggregateResult


def _number(value, field_name: str) -> float:
    return optional_number(value, field_name) or 0.0


def _first(payload: Dict[str, Any], *keys: str):
    """First present (non-None) value among the given keys."""
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


def normalize_stats(payload: Dict[str, Any], vehicle: Optional[VehicleRef] = None) -> VehicleStats:
    """
    Build VehicleStats from a /vehicles/{alias}/stats response.

    Accepts both the nested shape (statistics/costs/efficiency) and the
    older flat shape (totalRoutes, totalDistancia, totalGastoCombustible...).
    Missing figures default to 0; derived ratios are recomputed when absent.
    """
    stats = payload.get("statistics") or {}
    costs = payload.get("costs") or {}
    efficiency = payload.get("efficiency") or {}

    statistics = Statistics(
        total_routes=int(_number(_first(stats, "totalRoutes") or payload.get("totalRoutes"), "totalRoutes")),
        total_distance=_number(
            _first(stats, "totalDistancia") or payload.get("totalDistancia"), "totalDistancia"
        ),
        total_refuels=int(
            _number(_first(stats, "totalRefuels") or payload.get("totalRefuels"), "totalRefuels")
        ),
        total_expenses=int(_number(stats.get("totalExpenses"), "totalExpenses")),
        total_maintenances=int(_number(stats.get("totalMaintenances"), "totalMaintenances")),
    )

    fuel = _number(
        _first(costs, "combustible") or payload.get("totalGastoCombustible"), "combustible"
    )
    maintenance = _number(costs.get("mantenimiento"), "mantenimiento")
    other = _number(costs.get("gastosOtros"), "gastosOtros")
    total = _number(costs.get("total"), "total") or fuel + maintenance + other
    per_km = _number(costs.get("costoPorKm"), "costoPorKm") or cost_per_distance(
        total, statistics.total_distance
    )

    avg_route = _number(
        _first(efficiency, "promedioDistanciaPorRuta") or payload.get("promedioDistanciaPorRuta"),
        "promedioDistanciaPorRuta",
    ) or average_per_item(statistics.total_distance, statistics.total_routes)

    tco = optional_number(payload.get("totalCostOfOwnership"), "totalCostOfOwnership")

    if vehicle is None and isinstance(payload.get("vehicle"), dict):
        vehicle = parse_vehicle(payload["vehicle"])

    return VehicleStats(
        vehicle=vehicle,
        statistics=statistics,
        costs=Costs(
            fuel=fuel,
            maintenance=maintenance,
            other_expenses=other,
            total=total,
            cost_per_km=per_km,
        ),
        efficiency=Efficiency(
            km_per_liter=_number(efficiency.get("kmPorLitro"), "kmPorLitro"),
            km_per_gallon=_number(efficiency.get("kmPorGalon"), "kmPorGalon"),
            avg_distance_per_route=avg_route,
        ),
        total_cost_of_ownership=tco if tco is not None else total,
    )


def _for_vehicle(records: Iterable, alias: str) -> List:
    return [r for r in records if r.vehicle_alias == alias]


def compute_vehicle_stats(
    vehicle: VehicleRef,
    routes: Iterable[RouteRecord] = (),
    refuels: Iterable[RefuelRecord] = (),
    expenses: Iterable[ExpenseRecord] = (),
    maintenances: Iterable[MaintenanceRecord] = (),
) -> VehicleStats:
    """Compute VehicleStats locally from raw records of one vehicle."""
    routes = _for_vehicle(routes, vehicle.alias)
    refuels = _for_vehicle(refuels, vehicle.alias)
    expenses = _for_vehicle(expenses, vehicle.alias)
    maintenances = _for_vehicle(maintenances, vehicle.alias)

    distance = accumulate(routes)
    fuel = accumulate(refuels)
    maintenance = accumulate(maintenances)
    other = accumulate(expenses)
    gallons = sum(r.galones or 0 for r in refuels)

    total = fuel.total_amount + maintenance.total_amount + other.total_amount

    return VehicleStats(
        vehicle=vehicle,
        statistics=Statistics(
            total_routes=distance.count,
            total_distance=distance.total_amount,
            total_refuels=fuel.count,
            total_expenses=other.count,
            total_maintenances=maintenance.count,
        ),
        costs=Costs(
            fuel=fuel.total_amount,
            maintenance=maintenance.total_amount,
            other_expenses=other.total_amount,
            total=total,
            cost_per_km=cost_per_distance(total, distance.total_amount),
        ),
        efficiency=Efficiency(
            km_per_liter=distance_per_fuel_unit(distance.total_amount, liters_from_gallons(gallons)),
            km_per_gallon=distance_per_fuel_unit(distance.total_amount, gallons),
            avg_distance_per_route=distance.average,
        ),
        total_cost_of_ownership=total,
    )


def analyze_refuels(
    refuels: Iterable[RefuelRecord], vehicle: Optional[VehicleRef] = None
) -> FuelAnalysis:
    """Fuel spend and volume overall and per fuel type (first-seen order)."""
    if vehicle is not None:
        refuels = _for_vehicle(refuels, vehicle.alias)

    by_type: Dict[str, FuelTypeBreakdown] = {}
    summary = FuelSummary()
    for refuel in refuels:
        breakdown = by_type.setdefault(refuel.tipo_combustible, FuelTypeBreakdown())
        breakdown.count += 1
        breakdown.spent += refuel.cantidad_gastada
        breakdown.gallons += refuel.galones or 0
        summary.total_refuels += 1
        summary.total_spent += refuel.cantidad_gastada
        summary.total_gallons += refuel.galones or 0

    summary.avg_price_per_gallon = safe_ratio(summary.total_spent, summary.total_gallons)
    return FuelAnalysis(vehicle=vehicle, summary=summary, by_fuel_type=by_type)


def filter_by_period(
    records: Iterable,
    vehicle_alias: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List:
    """Keep records of one vehicle and/or within an inclusive date range."""
    kept = []
    for record in records:
        if vehicle_alias and record.vehicle_alias != vehicle_alias:
            continue
        if start and (record.fecha is None or record.fecha < start):
            continue
        if end and (record.fecha is None or record.fecha > end):
            continue
        kept.append(record)
    return kept


def summarize_expenses(
    expenses: Iterable[ExpenseRecord],
    vehicle_alias: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> ExpenseSummary:
    """Group expenses by category with share of the grand total."""
    selected = filter_by_period(expenses, vehicle_alias, start, end)
    return ExpenseSummary(
        by_category=accumulate(selected, grouped=True),
        total=accumulate(selected),
    )
