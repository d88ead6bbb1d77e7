"""Upcoming maintenance and expense views with urgency classification."""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, TYPE_CHECKING

from .calculations import (
    DateThresholds,
    DateUrgency,
    DistanceThresholds,
    DistanceUrgency,
    DISTANCE_THRESHOLDS,
    EXPENSE_DATE_THRESHOLDS,
    MAINTENANCE_DATE_THRESHOLDS,
    classify_by_date,
    classify_by_distance,
)
from .urgency import UrgencyTier, most_severe

if TYPE_CHECKING:
    from .expense_record import RecurringExpenseRecord
    from .maintenance_record import MaintenanceRecord


@dataclass
class UpcomingMaintenance:
    """A scheduled service with its date and/or odometer urgency."""

    record: "MaintenanceRecord"
    tier: UrgencyTier
    date_urgency: Optional[DateUrgency] = None
    distance_urgency: Optional[DistanceUrgency] = None

    @property
    def days_until(self) -> Optional[int]:
        return self.date_urgency.days_offset if self.date_urgency else None

    @property
    def km_remaining(self) -> Optional[int]:
        return self.distance_urgency.km_remaining if self.distance_urgency else None

    @property
    def status_label(self) -> str:
        """Tier label; a service overdue by odometer alone reads as exceeded."""
        date_overdue = (
            self.date_urgency is not None and self.date_urgency.tier == UrgencyTier.OVERDUE
        )
        if self.tier == UrgencyTier.OVERDUE and not date_overdue:
            return "Excedido"
        return self.tier.label


@dataclass
class MaintenanceCounts:
    overdue: int = 0
    urgent: int = 0
    soon: int = 0
    scheduled: int = 0

    @property
    def total(self) -> int:
        return self.overdue + self.urgent + self.soon + self.scheduled


@dataclass
class UpcomingExpense:
    """A recurring expense with the urgency of its next payment."""

    record: "RecurringExpenseRecord"
    urgency: DateUrgency

    @property
    def tier(self) -> UrgencyTier:
        return self.urgency.tier

    @property
    def days_until(self) -> int:
        return self.urgency.days_offset

    @property
    def following_payment(self) -> Optional[date]:
        return self.record.following_payment


@dataclass
class UpcomingExpenseSummary:
    total_amount: float = 0.0
    count: int = 0
    due_this_week: int = 0
    due_this_month: int = 0


def classify_maintenance(
    record: "MaintenanceRecord",
    today: date,
    date_thresholds: DateThresholds = MAINTENANCE_DATE_THRESHOLDS,
    distance_thresholds: DistanceThresholds = DISTANCE_THRESHOLDS,
) -> Optional[UpcomingMaintenance]:
    """
    Classify one maintenance record.

    Returns None when the record has no next-service target, or only a km
    target and no live odometer to compare it to. When both a date and a
    km target exist, the more severe tier wins.
    """
    date_urgency = None
    distance_urgency = None

    if record.proximo_servicio_fecha is not None:
        date_urgency = classify_by_date(record.proximo_servicio_fecha, today, date_thresholds)

    current_km = record.vehicle.kilometraje_total if record.vehicle else None
    if record.proximo_servicio_km is not None and current_km is not None:
        distance_urgency = classify_by_distance(
            record.proximo_servicio_km, current_km, distance_thresholds
        )

    tier = most_severe(
        date_urgency.tier if date_urgency else None,
        distance_urgency.tier if distance_urgency else None,
    )
    if tier is None:
        return None
    return UpcomingMaintenance(
        record=record,
        tier=tier,
        date_urgency=date_urgency,
        distance_urgency=distance_urgency,
    )


def _maintenance_sort_key(item: UpcomingMaintenance):
    days = item.days_until if item.days_until is not None else float("inf")
    km = item.km_remaining if item.km_remaining is not None else float("inf")
    return (item.tier.value, days, km, item.record.vehicle_alias)


def upcoming_maintenance(
    records: Iterable["MaintenanceRecord"],
    today: date,
    date_thresholds: DateThresholds = MAINTENANCE_DATE_THRESHOLDS,
    distance_thresholds: DistanceThresholds = DISTANCE_THRESHOLDS,
    vehicle_alias: Optional[str] = None,
) -> List[UpcomingMaintenance]:
    """Classify all upcoming services, most urgent first."""
    items = []
    for record in records:
        if not record.is_upcoming:
            continue
        if vehicle_alias and record.vehicle_alias != vehicle_alias:
            continue
        item = classify_maintenance(record, today, date_thresholds, distance_thresholds)
        if item is not None:
            items.append(item)
    items.sort(key=_maintenance_sort_key)
    return items


def count_maintenance(items: Iterable[UpcomingMaintenance]) -> MaintenanceCounts:
    """Tally classified services per tier."""
    counts = MaintenanceCounts()
    for item in items:
        if item.tier == UrgencyTier.OVERDUE:
            counts.overdue += 1
        elif item.tier == UrgencyTier.URGENT:
            counts.urgent += 1
        elif item.tier == UrgencyTier.SOON:
            counts.soon += 1
        else:
            counts.scheduled += 1
    return counts


def upcoming_expenses(
    records: Iterable["RecurringExpenseRecord"],
    today: date,
    thresholds: DateThresholds = EXPENSE_DATE_THRESHOLDS,
    days: Optional[int] = None,
    vehicle_alias: Optional[str] = None,
) -> List[UpcomingExpense]:
    """
    Classify the next payment of each recurring expense.

    Non-recurring expenses are skipped. With `days`, payments further out
    than the window are dropped; overdue ones are always kept.
    """
    items = []
    for record in records:
        if not record.es_recurrente:
            continue
        if vehicle_alias and record.vehicle_alias != vehicle_alias:
            continue
        urgency = classify_by_date(record.proximo_pago, today, thresholds)
        if days is not None and urgency.days_offset > days:
            continue
        items.append(UpcomingExpense(record=record, urgency=urgency))
    items.sort(key=lambda i: (i.record.proximo_pago, i.record.categoria))
    return items


def summarize_upcoming_expenses(items: Iterable[UpcomingExpense]) -> UpcomingExpenseSummary:
    """Total amount due plus how many fall within a week and a month."""
    summary = UpcomingExpenseSummary()
    for item in items:
        summary.total_amount += item.record.monto
        summary.count += 1
        if item.days_until <= 7:
            summary.due_this_week += 1
        if item.days_until <= 30:
            summary.due_this_month += 1
    return summary
