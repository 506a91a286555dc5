"""Standardized exception hierarchy for route resolution and pricing."""

from typing import Any

GENERIC_USER_MESSAGE = "An unexpected error occurred. Please try again."


class ShuttlePricingError(Exception):
    """Base exception for all route resolution and pricing errors."""

    default_user_message = GENERIC_USER_MESSAGE

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def user_message(self) -> str:
        return self.default_user_message


class TransientError(ShuttlePricingError):
    """Errors that may succeed on retry."""

    pass


class NetworkError(TransientError):
    """Network-related transient errors (timeout, connection refused)."""

    pass


class ServiceUnavailableError(TransientError):
    """External service temporarily unavailable (5xx responses)."""

    pass


class PermanentError(ShuttlePricingError):
    """Errors that will not succeed on retry."""

    pass


class ValidationError(PermanentError):
    """Invalid input or data format."""

    pass


class ConfigurationError(PermanentError):
    """Missing or invalid configuration."""

    pass


class ValidationFault(ValidationError):
    """Trip input cannot be priced (missing pickup/dropoff, zero or NaN distance).

    The message is written for the operator and is shown as-is.
    """

    @property
    def user_message(self) -> str:
        return self.message


class ProviderFault(ShuttlePricingError):
    """Geocoding or directions call to the mapping provider failed."""

    default_user_message = (
        "Unable to calculate the route right now. Please check the addresses and try again."
    )

    def __init__(
        self,
        message: str,
        status: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status = status


class TimeoutFault(ProviderFault):
    """Waiting for an in-flight route resolution exceeded its bound."""

    default_user_message = "Route calculation is taking too long. Please try again."


class RateLimitExceededError(ProviderFault):
    """Per-minute quota for a provider API is exhausted."""

    default_user_message = "Too many route lookups in a short time. Please wait a moment."


class ProviderCooldownError(ProviderFault):
    """Provider API is cooling down after consecutive failures."""

    default_user_message = (
        "The mapping service is temporarily unavailable. Please try again shortly."
    )


class PricingServiceFault(ShuttlePricingError):
    """Pricing service returned a non-2xx or malformed response."""

    default_user_message = "Error recalculating price"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        server_message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.server_message = server_message

    @property
    def user_message(self) -> str:
        return self.server_message or self.default_user_message
