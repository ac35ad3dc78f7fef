"""
Typed failures surfaced by the sync orchestrator, event store and leaderboard.

The matcher and the accumulator never raise; everything that talks to a remote
or validates user input reports through these types.
"""


class GrowseedError(Exception):
    """Base exception for remote and validation failures."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}


class ValidationFailure(GrowseedError):
    """Missing credentials or key; raised before any network call."""


class AuthFailure(GrowseedError):
    """Bad credentials, no session, or a 401 from an authenticated call."""


class TransportFailure(GrowseedError):
    """Network unreachable or non-2xx response."""


class FormatFailure(GrowseedError):
    """Remote answered 2xx but the body has an unexpected shape."""
