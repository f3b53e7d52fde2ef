"""
Exceptions for the SpoonFeeder client, configuration and CLI.

The renderer itself never raises; these cover talking to the content API
and reading local configuration.
"""

from typing import Optional, Dict, Any


class SpoonFeederError(Exception):
    """Base exception for SpoonFeeder."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(SpoonFeederError):
    """Invalid configuration value."""
    pass


class AuthenticationError(SpoonFeederError):
    """Missing, invalid or expired token (401/403)."""
    pass


class APIError(SpoonFeederError):
    """Content API request failed."""

    def __init__(
        self,
        message: str,
        status_code: int,
        error_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.error_type = error_type
        super().__init__(message, details)


class NotFoundError(APIError):
    """Resource not found (404)."""

    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=404, error_type="not_found", details=details)


class ServerError(APIError):
    """Server-side failure (5xx)."""

    def __init__(
        self,
        message: str = "Server error",
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        super().__init__(message, status_code=status_code, error_type="server_error", details=details)


class ValidationError(APIError):
    """Request rejected as invalid (400/422)."""

    def __init__(
        self,
        message: str = "Validation error",
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 400
    ):
        super().__init__(message, status_code=status_code, error_type="validation_error", details=details)
