"""MaintenanceRecord class for performed and scheduled services."""

from typing import Optional

from .calculations import optional_number, parse_date
from .vehicle_ref import VehicleRef


class MaintenanceRecord:
    """A maintenance performed on a vehicle, with an optional next service."""

    def __init__(
        self,
        vehicle_alias: str,
        tipo: str,
        fecha=None,
        costo=None,
        kilometraje=None,
        descripcion: Optional[str] = None,
        proveedor: Optional[str] = None,
        notas: Optional[str] = None,
        proximo_servicio_fecha=None,
        proximo_servicio_km=None,
        vehicle: Optional[VehicleRef] = None,
        id: Optional[str] = None,
    ):
        self.id = id
        self.vehicle_alias = vehicle_alias
        self.tipo = tipo
        self.fecha = parse_date(fecha)
        self.costo = optional_number(costo, "costo", allow_negative=False)
        self.kilometraje = optional_number(kilometraje, "kilometraje", allow_negative=False)
        self.descripcion = descripcion
        self.proveedor = proveedor
        self.notas = notas
        self.proximo_servicio_fecha = parse_date(proximo_servicio_fecha)
        self.proximo_servicio_km = optional_number(
            proximo_servicio_km, "proximoServicioKm", allow_negative=False
        )
        self.vehicle = vehicle

    @property
    def is_upcoming(self) -> bool:
        """False when neither a next-service date nor km is set."""
        return self.proximo_servicio_fecha is not None or self.proximo_servicio_km is not None

    @property
    def amount(self) -> float:
        return self.costo or 0.0

    @property
    def group_key(self) -> str:
        return self.tipo
