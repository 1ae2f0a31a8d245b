"""Exception hierarchy for playback metrics.

Base: PlaybackMetricsError. Specific: RegistryError, AuthenticationError.

Recording itself never raises; these cover registry construction
and the HTTP adapter around it.
"""

from __future__ import annotations

from typing import Any, Optional


class PlaybackMetricsError(Exception):
    """Base exception for all playback-metrics errors.

    Attributes:
        message: Human-readable error description.
        detail: Additional context or structured data about the error.
        original_exception: The underlying exception that caused this error.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        detail: Optional[Any] = None,
        original_exception: Optional[Exception] = None,
    ) -> None:
        """Initialize PlaybackMetricsError.

        Args:
            message: Human-readable error description.
            detail: Additional context (dict, str, or any serializable data).
            original_exception: The underlying exception that triggered this error.
        """
        self.message = message
        self.detail = detail
        self.original_exception = original_exception
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return a detailed string representation."""
        parts = [self.message]
        if self.detail:
            parts.append(f"Detail: {self.detail}")
        if self.original_exception:
            parts.append(f"Caused by: {type(self.original_exception).__name__}: {self.original_exception}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for API responses.

        Returns:
            Dictionary with error, detail, and cause fields.
        """
        result: dict[str, Any] = {"error": self.message}
        if self.detail:
            result["detail"] = self.detail
        if self.original_exception:
            result["cause"] = str(self.original_exception)
        return result


class RegistryError(PlaybackMetricsError):
    """Error while registering metric families.

    Raised when: a family name is already registered in the target
    CollectorRegistry, or the client rejects a metric definition.
    """

    def __init__(
        self,
        message: str = "Metric registry setup failed",
        detail: Optional[Any] = None,
        original_exception: Optional[Exception] = None,
    ) -> None:
        super().__init__(message=message, detail=detail, original_exception=original_exception)


class AuthenticationError(PlaybackMetricsError):
    """Missing or invalid X-API-Key on an event endpoint."""

    def __init__(
        self,
        message: str = "Authentication failed",
        detail: Optional[Any] = None,
        original_exception: Optional[Exception] = None,
    ) -> None:
        super().__init__(message=message, detail=detail, original_exception=original_exception)
