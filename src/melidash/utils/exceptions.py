from typing import Optional


class MeliDashError(Exception):
    """Base exception for the project."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(MeliDashError):
    """Raised when a user, invite, rule, review or chat does not exist."""
    status_code = 404


class ValidationError(MeliDashError):
    """Raised when input fails domain validation."""
    status_code = 400

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class ConflictError(MeliDashError):
    """Raised when creating something that already exists."""
    status_code = 409


class AuthenticationError(MeliDashError):
    """Raised on bad credentials or an invalid token."""
    status_code = 401


class MarketplaceError(MeliDashError):
    """Raised by marketplace clients when an API call fails."""
    status_code = 502
