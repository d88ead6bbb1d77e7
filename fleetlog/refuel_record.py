"""RefuelRecord class for fuel purchases."""

from typing import Optional

from .aggregates import safe_ratio
from .calculations import optional_number, parse_date, require_number


class RefuelRecord:
    """A fuel purchase."""

    def __init__(
        self,
        vehicle_alias: str,
        tipo_combustible: str,
        cantidad_gastada,
        galones=None,
        precio_por_galon=None,
        fecha=None,
        notas_adicionales: Optional[str] = None,
        id: Optional[str] = None,
    ):
        self.id = id
        self.vehicle_alias = vehicle_alias
        self.tipo_combustible = tipo_combustible
        self.cantidad_gastada = require_number(
            cantidad_gastada, "cantidadGastada", allow_negative=False
        )
        self.galones = optional_number(galones, "galones", allow_negative=False)
        self._precio_por_galon = optional_number(
            precio_por_galon, "precioPorGalon", allow_negative=False
        )
        self.fecha = parse_date(fecha)
        self.notas_adicionales = notas_adicionales

    @property
    def precio_por_galon(self) -> float:
        """Explicit price, else spend / gallons (0 without gallons)."""
        if self._precio_por_galon is not None:
            return self._precio_por_galon
        return safe_ratio(self.cantidad_gastada, self.galones or 0)

    @property
    def amount(self) -> float:
        return self.cantidad_gastada

    @property
    def group_key(self) -> str:
        return self.tipo_combustible
