"""Exception hierarchy for fleetlog."""

from typing import Optional


class FleetlogError(Exception):
    """Base class for all fleetlog errors."""


class ValidationError(FleetlogError, ValueError):
    """Malformed number or date reached the core."""


class ParseError(ValidationError):
    """A date string could not be parsed."""


class ConfigError(FleetlogError):
    """An environment setting has an invalid value."""


class ApiError(FleetlogError):
    """The REST backend answered with an error or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthError(ApiError):
    """The backend rejected the token (HTTP 401)."""
