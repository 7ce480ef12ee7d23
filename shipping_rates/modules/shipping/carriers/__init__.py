"""
Carrier Registry and Factory

- CarrierFactory creates gateway instances from a carrier code
- Gateways self-register with @register_carrier
"""
from typing import Any, Dict, List, Type
import logging

from shipping_rates.core.exceptions import ConfigurationError
from shipping_rates.modules.shipping.carriers.base import CarrierGateway

logger = logging.getLogger(__name__)

# Registry of carrier implementations
_CARRIER_REGISTRY: Dict[str, Type[CarrierGateway]] = {}


def register_carrier(carrier_code: str):
    """
    Decorator to register a carrier implementation.

    Usage:
        @register_carrier("ups")
        class UPSGateway(CarrierGateway):
            ...
    """
    def decorator(cls: Type[CarrierGateway]):
        _CARRIER_REGISTRY[carrier_code.lower()] = cls
        logger.debug(f"Registered carrier: {carrier_code} -> {cls.__name__}")
        return cls
    return decorator


class CarrierFactory:
    """Factory for creating carrier gateway instances."""

    @classmethod
    def get_carrier(cls, carrier_code: str, **options: Any) -> CarrierGateway:
        """
        Get a carrier gateway instance.

        Args:
            carrier_code: Registered carrier code (case-insensitive)
            **options: Passed to the gateway constructor

        Raises:
            ConfigurationError: If no gateway is registered for the code
        """
        carrier_cls = _CARRIER_REGISTRY.get(carrier_code.lower())
        if not carrier_cls:
            raise ConfigurationError(
                f"No implementation registered for carrier: {carrier_code}",
                code="CARRIER_NOT_REGISTERED",
                details={"registered": sorted(_CARRIER_REGISTRY)},
            )
        return carrier_cls(**options)

    @classmethod
    def get_registered_carriers(cls) -> List[str]:
        """Get list of all registered carrier codes."""
        return sorted(_CARRIER_REGISTRY)


def get_carrier(carrier_code: str, **options: Any) -> CarrierGateway:
    """Equivalent to CarrierFactory.get_carrier()."""
    return CarrierFactory.get_carrier(carrier_code, **options)


# Import carriers to trigger registration
# These imports must be at the bottom to avoid circular imports
from shipping_rates.modules.shipping.carriers.bogus import BogusCarrier  # noqa: E402, F401
