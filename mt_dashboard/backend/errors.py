"""
Error taxonomy for MetaTrader Account Dashboard

AuthExpired is fatal to the session. TransportFailure and MalformedResponse
are recoverable: the last good data stays on screen.
"""

from typing import Optional


class DashboardError(Exception):
    """Base class for every error the dashboard surfaces."""

    recoverable = True

    def __init__(self, message: str, endpoint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint

    def __str__(self) -> str:
        if self.endpoint:
            return f"{self.message} ({self.endpoint})"
        return self.message


class AuthExpired(DashboardError):
    """The backend rejected the session token."""

    recoverable = False


class TransportFailure(DashboardError):
    """Network unreachable, timeout or unexpected HTTP status."""


class MalformedResponse(DashboardError):
    """Response body does not have the expected shape."""


class LoginRejected(DashboardError):
    """Credentials were refused by the login endpoint."""

    recoverable = False


class LoginValidationError(DashboardError):
    """Login form is incomplete; nothing was sent."""
