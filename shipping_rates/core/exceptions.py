"""
Shipping Rates Exception Hierarchy

Structured exception classes for the rate-resolution engine.
All exceptions include code, message, and details so failures can be logged
and inspected without parsing message strings.

Exception Hierarchy:
    RatingBaseError
    ├── ShippingError
    ├── NotShippableError
    ├── CarrierError
    │   ├── CarrierTimeoutError
    │   ├── CarrierResponseError
    │   └── CarrierRequestRejectedError
    └── ConfigurationError

Only ShippingError is meant to reach callers of RateResolver.compute().
NotShippableError and CarrierError are internal and are always translated
by the resolver.
"""
import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class RatingBaseError(Exception):
    """
    Base exception for all rate-engine errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
        severity: P0-P3 severity level
    """

    default_code: str = "RATING_ERROR"
    default_severity: str = "P2"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity or self.default_severity
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# SHIPPING ERRORS
# =============================================================================

class ShippingError(RatingBaseError):
    """The carrier could not be consulted for this request."""
    default_code = "SHIPPING_ERROR"
    default_severity = "P1"


class NotShippableError(RatingBaseError):
    """Package weight/destination combination is not serviced by the carrier."""
    default_code = "NOT_SHIPPABLE"
    default_severity = "P3"

    def __init__(
        self,
        message: str,
        country_code: Optional[str] = None,
        max_weight: Optional[Any] = None,
        package_weight: Optional[Any] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "country_code": country_code,
            "max_weight": str(max_weight) if max_weight is not None else None,
            "package_weight": str(package_weight) if package_weight is not None else None,
        })
        super().__init__(message, details=details, **kwargs)


# =============================================================================
# CARRIER ERRORS
# =============================================================================

class CarrierError(RatingBaseError):
    """Base exception for carrier transport/protocol failures."""
    default_code = "CARRIER_ERROR"
    default_severity = "P1"

    def __init__(
        self,
        message: str,
        carrier_code: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details["carrier_code"] = carrier_code
        self.carrier_code = carrier_code
        super().__init__(message, details=details, **kwargs)


class CarrierTimeoutError(CarrierError):
    """Carrier did not answer in time."""
    default_code = "CARRIER_TIMEOUT"


class CarrierResponseError(CarrierError):
    """Carrier answered with something we could not parse."""
    default_code = "CARRIER_BAD_RESPONSE"


class CarrierRequestRejectedError(CarrierError):
    """Carrier refused the rate request (bad address, auth, etc.)."""
    default_code = "CARRIER_REQUEST_REJECTED"
    default_severity = "P2"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(RatingBaseError):
    """Invalid operator configuration."""
    default_code = "CONFIGURATION_ERROR"
    default_severity = "P0"
