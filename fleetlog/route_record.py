"""RouteRecord class for logged trips."""

from typing import Optional

from .calculations import parse_date, require_number


class RouteRecord:
    """A trip driven with a vehicle."""

    def __init__(
        self,
        vehicle_alias: str,
        distancia_recorrida,
        fecha=None,
        notas_adicionales: Optional[str] = None,
        id: Optional[str] = None,
    ):
        self.id = id
        self.vehicle_alias = vehicle_alias
        self.distancia_recorrida = require_number(
            distancia_recorrida, "distanciaRecorrida", allow_negative=False
        )
        self.fecha = parse_date(fecha)
        self.notas_adicionales = notas_adicionales

    @property
    def amount(self) -> float:
        return self.distancia_recorrida
