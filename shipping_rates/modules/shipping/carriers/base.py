"""
Carrier Gateway Interface

Every carrier integration implements find_rates(). Production gateways and
test doubles are swapped by construction: the resolver only ever sees a
CarrierGateway.

Contract:
- find_rates() returns a RateQuoteResult whose service names are unique
- any transport/protocol failure (timeout, malformed response, rejected
  request) is raised as CarrierError or one of its subclasses
"""
from abc import ABC, abstractmethod

from shipping_rates.core.config import ShippingConfig
from shipping_rates.modules.shipping.models import PackageDescriptor, RateQuoteResult


class CarrierGateway(ABC):
    """
    Abstract base class for carrier rating services.

    Timeouts and retries, if any, are owned by the gateway.
    """

    @property
    @abstractmethod
    def carrier_code(self) -> str:
        """Return the registry code, e.g. "ups"."""
        pass

    @property
    @abstractmethod
    def carrier_name(self) -> str:
        """Return the human-readable carrier name."""
        pass

    @abstractmethod
    async def find_rates(self, package: PackageDescriptor, config: ShippingConfig) -> RateQuoteResult:
        """
        Get rates for every service the carrier offers for this package.

        Args:
            package: Package to quote; weight is sent as
                package.carrier_weight(config) in config.units
            config: Configuration snapshot for this request

        Returns:
            RateQuoteResult (possibly empty)

        Raises:
            CarrierError: On any transport/protocol failure
        """
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.carrier_code}>"
