"""Expense records and recurrence cadence."""

from enum import Enum
from typing import Optional

from .calculations import calc_next_payment, parse_date, require_number
from .errors import ValidationError


class Frequency(Enum):
    """Recurrence cadence of an expense, valued in months."""

    MENSUAL = 1
    TRIMESTRAL = 3
    SEMESTRAL = 6
    ANUAL = 12

    @property
    def months(self) -> int:
        return self.value

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value) -> Optional["Frequency"]:
        """Accept an enum, a Spanish label or the backend's English value."""
        if value is None or value == "":
            return None
        if isinstance(value, Frequency):
            return value
        key = str(value).strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        raise ValidationError(f"Unknown recurrence frequency: {value!r}")


_ALIASES = {
    "mensual": Frequency.MENSUAL,
    "monthly": Frequency.MENSUAL,
    "trimestral": Frequency.TRIMESTRAL,
    "quarterly": Frequency.TRIMESTRAL,
    "semestral": Frequency.SEMESTRAL,
    "semiannual": Frequency.SEMESTRAL,
    "biannual": Frequency.SEMESTRAL,
    "anual": Frequency.ANUAL,
    "annual": Frequency.ANUAL,
    "yearly": Frequency.ANUAL,
}


class ExpenseRecord:
    """A non-fuel, non-maintenance expense (insurance, tolls, parking...)."""

    def __init__(
        self,
        vehicle_alias: Optional[str],
        categoria: str,
        monto,
        fecha=None,
        descripcion: Optional[str] = None,
        es_deducible_impuestos: bool = False,
        id: Optional[str] = None,
    ):
        self.id = id
        self.vehicle_alias = vehicle_alias
        self.categoria = categoria
        self.monto = require_number(monto, "monto", allow_negative=False)
        self.fecha = parse_date(fecha)
        self.descripcion = descripcion
        self.es_deducible_impuestos = bool(es_deducible_impuestos)

    @property
    def es_recurrente(self) -> bool:
        return False

    @property
    def amount(self) -> float:
        return self.monto

    @property
    def group_key(self) -> str:
        return self.categoria


class RecurringExpenseRecord(ExpenseRecord):
    """An expense that repeats on a cadence and has a next due date."""

    def __init__(
        self,
        vehicle_alias: Optional[str],
        categoria: str,
        monto,
        proximo_pago,
        frecuencia_recurrencia,
        fecha=None,
        descripcion: Optional[str] = None,
        es_deducible_impuestos: bool = False,
        id: Optional[str] = None,
    ):
        super().__init__(
            vehicle_alias,
            categoria,
            monto,
            fecha=fecha,
            descripcion=descripcion,
            es_deducible_impuestos=es_deducible_impuestos,
            id=id,
        )
        self.proximo_pago = parse_date(proximo_pago)
        if self.proximo_pago is None:
            raise ValidationError("Recurring expense requires proximoPago")
        self.frecuencia_recurrencia = Frequency.parse(frecuencia_recurrencia)

    @property
    def es_recurrente(self) -> bool:
        return True

    @property
    def following_payment(self):
        """Due date of the payment after the next one."""
        if self.frecuencia_recurrencia is None:
            return None
        return calc_next_payment(self.proximo_pago, self.frecuencia_recurrencia.months)
