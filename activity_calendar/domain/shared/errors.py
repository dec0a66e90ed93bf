"""
Domain exceptions.

Typed exceptions for explicit error handling.
"""

from __future__ import annotations

from typing import Optional


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    All domain-specific exceptions inherit from this.
    Allows catching all domain errors with single except clause.
    """

    pass


# ═══════════════════════════════════════════════════════════
# VALIDATION EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ValidationError(DomainError):
    """
    Value object construction failed.

    Raised when:
    - Negative distance, duration or calories
    - Empty activity ID
    - Invalid calendar date or month

    Example:
        >>> raise ValidationError("Distance cannot be negative")
    """

    pass


# ═══════════════════════════════════════════════════════════
# EXTERNAL SERVICE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class AuthenticationError(DomainError):
    """
    Remote activity source reports the user is not logged in.

    Raised when:
    - No access token is available
    - COROS API answers 401/403

    Example:
        >>> raise AuthenticationError("Not authenticated with COROS")
    """

    pass


class ExternalServiceError(DomainError):
    """
    External service call failed.

    Base class for all external service errors.
    """

    pass


class ApiError(ExternalServiceError):
    """
    Remote API transport or non-2xx error.

    Raised when:
    - Network error or timeout after retries
    - Non-2xx HTTP status
    - Response payload has no recognizable activity list

    Example:
        >>> raise ApiError("COROS API error: 502", status_code=502)
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# ═══════════════════════════════════════════════════════════
# INFRASTRUCTURE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class InfrastructureError(DomainError):
    """
    Infrastructure layer error.

    Base class for storage and cache errors.
    """

    pass


class CacheError(InfrastructureError):
    """
    Cache operation failed.

    Raised when:
    - Backing store unreadable or unwritable
    - Serialization error

    Example:
        >>> raise CacheError("Cannot write store file")
    """

    pass


class CacheCorruptionError(CacheError):
    """
    Backing store document is malformed.

    Raised while parsing a file store document that is not a JSON object.
    The store handles it by moving the file aside. A malformed month entry
    inside a readable store is not an exception: the monthly cache reports
    it as a lookup result and deletes the entry.
    """

    pass
