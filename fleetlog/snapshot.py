"""Snapshot class - all records of a fleet as read at one point in time."""

from typing import List, Optional

from .expense_record import ExpenseRecord
from .maintenance_record import MaintenanceRecord
from .refuel_record import RefuelRecord
from .route_record import RouteRecord
from .vehicle_ref import VehicleRef


class Snapshot:
    """Vehicles with their routes, refuels, expenses and maintenance."""

    def __init__(
        self,
        vehicles: List[VehicleRef],
        routes: Optional[List[RouteRecord]] = None,
        refuels: Optional[List[RefuelRecord]] = None,
        expenses: Optional[List[ExpenseRecord]] = None,
        maintenance: Optional[List[MaintenanceRecord]] = None,
    ):
        self.vehicles = vehicles
        self.routes = routes or []
        self.refuels = refuels or []
        self.expenses = expenses or []
        self.maintenance = maintenance or []

    def get_vehicle(self, alias: str) -> Optional[VehicleRef]:
        """Find a vehicle by alias (case-insensitive)."""
        for vehicle in self.vehicles:
            if vehicle.alias.lower() == alias.lower():
                return vehicle
        return None

    @property
    def active_vehicles(self) -> List[VehicleRef]:
        return [v for v in self.vehicles if v.is_active]

    @property
    def recurring_expenses(self) -> List[ExpenseRecord]:
        return [e for e in self.expenses if e.es_recurrente]

    def routes_for(self, alias: str) -> List[RouteRecord]:
        return [r for r in self.routes if r.vehicle_alias == alias]

    def join(self) -> None:
        """
        Attach each maintenance record to its vehicle, and fill in the
        current odometer of vehicles that don't state one
        (initial reading plus distance of logged routes).
        """
        for vehicle in self.vehicles:
            if vehicle.kilometraje_total is None and vehicle.kilometraje_inicial is not None:
                driven = sum(r.distancia_recorrida for r in self.routes_for(vehicle.alias))
                vehicle.kilometraje_total = vehicle.kilometraje_inicial + driven

        for record in self.maintenance:
            if record.vehicle is None and record.vehicle_alias:
                record.vehicle = self.get_vehicle(record.vehicle_alias)
