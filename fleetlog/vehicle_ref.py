"""VehicleRef class for vehicle identification and odometer state."""

from typing import Optional

from .calculations import optional_number


class VehicleRef:
    """A registered vehicle, keyed by its user-chosen alias."""

    def __init__(
        self,
        alias: str,
        marca: Optional[str] = None,
        modelo: Optional[int] = None,
        plates: Optional[str] = None,
        kilometraje_inicial: Optional[float] = None,
        kilometraje_total: Optional[float] = None,
        is_active: bool = True,
    ):
        self.alias = alias
        self.marca = marca
        self.modelo = modelo
        self.plates = plates
        self.kilometraje_inicial = optional_number(
            kilometraje_inicial, "kilometrajeInicial", allow_negative=False
        )
        self.kilometraje_total = optional_number(
            kilometraje_total, "kilometrajeTotal", allow_negative=False
        )
        self.is_active = True if is_active is None else bool(is_active)

    @property
    def name(self) -> str:
        """Human-readable vehicle name."""
        parts = [str(p) for p in (self.marca, self.modelo) if p]
        if not parts:
            return self.alias
        return f"{self.alias} ({' '.join(parts)})"

    @property
    def current_km(self) -> Optional[float]:
        """Live odometer, falling back to the initial reading."""
        if self.kilometraje_total is not None:
            return self.kilometraje_total
        return self.kilometraje_inicial

    @property
    def distance_driven(self) -> float:
        """Kilometres driven since the vehicle was registered."""
        if self.kilometraje_total is None or self.kilometraje_inicial is None:
            return 0.0
        return max(self.kilometraje_total - self.kilometraje_inicial, 0.0)
