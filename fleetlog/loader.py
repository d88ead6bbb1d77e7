"""Snapshot loading/saving and payload parsing for fleet records."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .calculations import parse_date, require_number
from .errors import ValidationError
from .expense_record import ExpenseRecord, RecurringExpenseRecord
from .maintenance_record import MaintenanceRecord
from .refuel_record import RefuelRecord
from .route_record import RouteRecord
from .snapshot import Snapshot
from .vehicle_ref import VehicleRef

logger = logging.getLogger(__name__)

SECTIONS = ("vehicles", "routes", "refuels", "expenses", "maintenance")

# Record type each snapshot section holds
SECTION_TYPES = {
    "vehicles": VehicleRef,
    "routes": RouteRecord,
    "refuels": RefuelRecord,
    "expenses": ExpenseRecord,
    "maintenance": MaintenanceRecord,
}


def parse_vehicle(dct: Dict[str, Any]) -> VehicleRef:
    return VehicleRef(
        dct["alias"],
        dct.get("marca"),
        dct.get("modelo"),
        dct.get("plates"),
        dct.get("kilometrajeInicial"),
        dct.get("kilometrajeTotal"),
        dct.get("isActive", True),
    )


def parse_route(dct: Dict[str, Any]) -> RouteRecord:
    return RouteRecord(
        dct.get("vehicleAlias"),
        dct["distanciaRecorrida"],
        parse_date(dct.get("fecha")),
        dct.get("notasAdicionales"),
        id=dct.get("_id"),
    )


def parse_refuel(dct: Dict[str, Any]) -> RefuelRecord:
    return RefuelRecord(
        dct.get("vehicleAlias"),
        dct.get("tipoCombustible") or "Regular",
        dct["cantidadGastada"],
        dct.get("galones"),
        dct.get("precioPorGalon"),
        parse_date(dct.get("fecha")),
        dct.get("notasAdicionales"),
        id=dct.get("_id"),
    )


def parse_expense(dct: Dict[str, Any]) -> ExpenseRecord:
    """Recurring when flagged or when it carries a next payment date."""
    common = dict(
        fecha=parse_date(dct.get("fecha")),
        descripcion=dct.get("descripcion"),
        es_deducible_impuestos=dct.get("esDeducibleImpuestos", False),
        id=dct.get("_id"),
    )
    if dct.get("esRecurrente") or dct.get("proximoPago"):
        return RecurringExpenseRecord(
            dct.get("vehicleAlias"),
            dct["categoria"],
            dct["monto"],
            parse_date(dct.get("proximoPago")),
            dct.get("frecuenciaRecurrencia"),
            **common,
        )
    return ExpenseRecord(dct.get("vehicleAlias"), dct["categoria"], dct["monto"], **common)


def parse_maintenance(dct: Dict[str, Any]) -> MaintenanceRecord:
    vehicle = dct.get("vehicle")
    if isinstance(vehicle, dict):
        vehicle = parse_vehicle(vehicle)
    alias = dct.get("vehicleAlias") or (vehicle.alias if vehicle else None)
    return MaintenanceRecord(
        alias,
        dct.get("tipo") or "Otro",
        fecha=parse_date(dct.get("fecha")),
        costo=dct.get("costo"),
        kilometraje=dct.get("kilometraje"),
        descripcion=dct.get("descripcion"),
        proveedor=dct.get("proveedor"),
        notas=dct.get("notas"),
        proximo_servicio_fecha=parse_date(dct.get("proximoServicioFecha")),
        proximo_servicio_km=dct.get("proximoServicioKm"),
        vehicle=vehicle,
        id=dct.get("_id"),
    )


def _parse_object(dct: Dict[str, Any]):
    """Parse a dictionary into the record type its keys identify."""
    # Top-level snapshot document
    if any(section in dct for section in SECTIONS) and "alias" not in dct:
        return Snapshot(
            vehicles=dct.get("vehicles") or [],
            routes=dct.get("routes") or [],
            refuels=dct.get("refuels") or [],
            expenses=dct.get("expenses") or [],
            maintenance=dct.get("maintenance") or [],
        )
    elif "distanciaRecorrida" in dct:
        return parse_route(dct)
    elif "cantidadGastada" in dct:
        return parse_refuel(dct)
    elif "categoria" in dct and "monto" in dct:
        return parse_expense(dct)
    elif "tipo" in dct or "proximoServicioFecha" in dct or "proximoServicioKm" in dct:
        return parse_maintenance(dct)
    elif "alias" in dct:
        return parse_vehicle(dct)
    # Unknown structures pass through untouched
    return dct


def load_snapshot(filename: Union[str, Path]) -> Snapshot:
    """Load a snapshot YAML file into records joined by vehicle alias."""
    with open(filename, "rb") as fp:
        raw = yaml.load(fp, Loader=yaml.SafeLoader) or {}
    # Round-trip through JSON so dates become strings and the hook sees plain dicts
    json_data = json.dumps(raw, default=str)
    snapshot = json.loads(json_data, object_hook=_parse_object)
    if not isinstance(snapshot, Snapshot):
        raise ValidationError(f"{filename} is not a fleet snapshot")
    snapshot.join()
    logger.debug(
        "Loaded %s: %d vehicles, %d maintenance, %d expenses",
        filename,
        len(snapshot.vehicles),
        len(snapshot.maintenance),
        len(snapshot.expenses),
    )
    return snapshot


def _dump(filename: Union[str, Path], data: Dict[str, Any]) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def save_current_km(filename: Union[str, Path], alias: str, km: float) -> None:
    """
    Update kilometrajeTotal of one vehicle in a snapshot file.

    The odometer never goes backwards: a reading below the stored one
    raises ValidationError.
    """
    km = require_number(km, "km", allow_negative=False)
    with open(filename, "r") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader) or {}

    for vehicle in data.get("vehicles") or []:
        if vehicle.get("alias") == alias:
            previous = vehicle.get("kilometrajeTotal")
            if previous is not None and km < previous:
                raise ValidationError(
                    f"Odometer for '{alias}' cannot go back from {previous:,.0f} to {km:,.0f}"
                )
            vehicle["kilometrajeTotal"] = km
            break
    else:
        raise KeyError(f"Vehicle '{alias}' not found in {filename}")

    _dump(filename, data)
    logger.info("Updated %s odometer to %s in %s", alias, km, filename)


def append_record(filename: Union[str, Path], section: str, payload: Dict[str, Any]) -> None:
    """
    Append a raw payload to a snapshot section (e.g. expenses).

    The payload is parsed first so malformed records, or records of
    another section, never reach the file.
    """
    if section not in SECTIONS:
        raise ValidationError(f"Unknown section '{section}' (expected one of {', '.join(SECTIONS)})")
    parsed = _parse_object(dict(payload))
    if not isinstance(parsed, SECTION_TYPES[section]):
        raise ValidationError(f"Payload is not a valid {section} record")

    with open(filename, "r") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader) or {}
    if data.get(section) is None:
        data[section] = []
    data[section].append(payload)

    _dump(filename, data)
    logger.info("Appended %s record to %s", section, filename)


def load_records(payloads: List[Dict[str, Any]]) -> List:
    """Parse a list of API payloads, keeping only recognized records."""
    records = []
    for payload in payloads:
        record = _parse_object(payload)
        if isinstance(record, dict):
            logger.warning("Skipping unrecognized payload with keys %s", sorted(payload))
            continue
        records.append(record)
    return records
