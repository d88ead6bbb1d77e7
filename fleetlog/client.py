"""
REST client for the fleet backend.

Fetches vehicles, expenses, maintenance and statistics as JSON and turns
them into fleetlog records. Every list endpoint answers with a
``{"data": [...]}`` envelope; the client unwraps it.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from .config import Settings
from .errors import ApiError, AuthError, ConfigError
from .loader import load_records, parse_vehicle
from .stats import VehicleStats, normalize_stats

logger = logging.getLogger(__name__)


class ApiClient:
    """Thin wrapper around a requests.Session with bearer-token auth."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        if not base_url:
            raise ConfigError("FLEETLOG_API_BASE_URL is not set")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_settings(cls, settings: Settings) -> "ApiClient":
        return cls(
            settings.api_base_url,
            token=settings.api_token,
            timeout=settings.timeout,
        )

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a path and return its decoded JSON body."""
        url = f"{self.base_url}{path}"
        query = {k: v for k, v in (params or {}).items() if v not in (None, "")}
        logger.debug("GET %s %s", url, query)
        try:
            response = self.session.get(url, params=query or None, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Request to %s failed: %s", url, e)
            raise ApiError(f"Could not reach {url}: {e}") from e

        if response.status_code == 401:
            raise AuthError("No autorizado", status_code=401)
        if not response.ok:
            message = _error_message(response)
            logger.warning("GET %s returned %s: %s", url, response.status_code, message)
            raise ApiError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Invalid JSON from {url}", status_code=response.status_code) from e

    def _get_list(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        body = self._get(path, params)
        if isinstance(body, dict):
            body = body.get("data") or []
        return body if isinstance(body, list) else []

    def vehicles(self):
        return [parse_vehicle(v) for v in self._get_list("/api/vehicles")]

    def upcoming_maintenance(self):
        """Maintenance records with a next service, joined with their vehicle."""
        return load_records(self._get_list("/api/maintenance/upcoming"))

    def upcoming_expenses(self, vehicle_alias: Optional[str] = None, days: Optional[int] = None):
        params = {"vehicleAlias": vehicle_alias, "days": days}
        return load_records(self._get_list("/api/expenses/upcoming", params))

    def expenses(
        self,
        vehicle_alias: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ):
        params = {
            "vehicleAlias": vehicle_alias,
            "startDate": start.isoformat() if start else None,
            "endDate": end.isoformat() if end else None,
        }
        return load_records(self._get_list("/api/expenses", params))

    def expenses_summary(
        self,
        vehicle_alias: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        """Raw per-category rows as aggregated by the backend."""
        params = {
            "vehicleAlias": vehicle_alias,
            "startDate": start.isoformat() if start else None,
            "endDate": end.isoformat() if end else None,
        }
        return self._get_list("/api/expenses/summary", params)

    def refuels(self, vehicle_alias: Optional[str] = None):
        return load_records(self._get_list("/api/refuels", {"vehicleAlias": vehicle_alias}))

    def vehicle_stats(self, alias: str) -> VehicleStats:
        body = self._get(f"/api/vehicles/{alias}/stats")
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            body = body["data"]
        return normalize_stats(body or {})


def _error_message(response: requests.Response) -> str:
    """Backend error text: JSON `message`/`error` if present, else the status."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return f"HTTP {response.status_code}"
