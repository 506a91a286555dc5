from .exceptions import (
    ConfigurationError,
    NetworkError,
    PermanentError,
    PricingServiceFault,
    ProviderCooldownError,
    ProviderFault,
    RateLimitExceededError,
    ServiceUnavailableError,
    ShuttlePricingError,
    TimeoutFault,
    TransientError,
    ValidationError,
    ValidationFault,
)
from .retry import RetryConfig, with_retry

__all__ = [
    "ConfigurationError",
    "NetworkError",
    "PermanentError",
    "PricingServiceFault",
    "ProviderCooldownError",
    "ProviderFault",
    "RateLimitExceededError",
    "RetryConfig",
    "ServiceUnavailableError",
    "ShuttlePricingError",
    "TimeoutFault",
    "TransientError",
    "ValidationError",
    "ValidationFault",
    "with_retry",
]
