"""Folding records into totals, counts and zero-guarded ratios."""

from dataclasses import dataclass
from typing import Dict, Iterable, Union

from .calculations import require_number

DEFAULT_GROUP = "Otro"
LITERS_PER_GALLON = 3.78541


@dataclass
class AggregateResult:
    """Totals for a set of amounts."""

    total_amount: float = 0.0
    count: int = 0
    average: float = 0.0
    percentage_of_grand_total: float = 0.0


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return numerator / denominator


def average_per_item(total: float, count: int) -> float:
    return safe_ratio(total, count)


def percentage_of(part: float, whole: float) -> float:
    return safe_ratio(part, whole) * 100


def cost_per_distance(total_cost: float, total_distance: float) -> float:
    """Cost per km driven (0 when nothing was driven)."""
    return safe_ratio(total_cost, total_distance)


def distance_per_fuel_unit(total_distance: float, total_fuel_units: float) -> float:
    """Km per gallon or litre (0 when no fuel was recorded)."""
    return safe_ratio(total_distance, total_fuel_units)


def liters_from_gallons(gallons: float) -> float:
    return gallons * LITERS_PER_GALLON


def _amount_of(record) -> float:
    if isinstance(record, dict):
        value = record.get("amount")
    else:
        value = getattr(record, "amount", None)
    return require_number(value, "amount", allow_negative=False)


def _group_of(record) -> str:
    if isinstance(record, dict):
        key = record.get("group_key", record.get("groupKey"))
    else:
        key = getattr(record, "group_key", None)
    return key or DEFAULT_GROUP


def _finish(total: float, count: int, grand_total: float) -> AggregateResult:
    return AggregateResult(
        total_amount=total,
        count=count,
        average=average_per_item(total, count),
        percentage_of_grand_total=percentage_of(total, grand_total),
    )


def accumulate(
    records: Iterable, grouped: bool = False
) -> Union[AggregateResult, Dict[str, AggregateResult]]:
    """
    Fold records into an AggregateResult.

    Records are anything with an ``amount`` (attribute or dict key) and,
    for grouped mode, a ``group_key``. Amounts are validated before they
    reach the sum; a negative or non-numeric amount raises ValidationError.

    Ungrouped: one result whose percentage is 100 when the total is
    positive. Grouped: a dict keyed by group in first-seen order, each
    percentage relative to the grand total.
    """
    if not grouped:
        total = 0.0
        count = 0
        for record in records:
            total += _amount_of(record)
            count += 1
        return _finish(total, count, total)

    sums: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for record in records:
        amount = _amount_of(record)
        key = _group_of(record)
        if key not in sums:
            sums[key] = 0.0
            counts[key] = 0
        sums[key] += amount
        counts[key] += 1

    grand_total = sum(sums.values())
    return {key: _finish(sums[key], counts[key], grand_total) for key in sums}
