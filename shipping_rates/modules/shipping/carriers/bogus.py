"""
Bogus Carrier

Credential-free gateway returning a fixed rate table. Used for local
development and tests; it can also be told to fail so degraded paths can be
exercised without a live carrier.
"""
import logging
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from shipping_rates.core.config import ShippingConfig
from shipping_rates.core.exceptions import CarrierError
from shipping_rates.modules.shipping.carriers import register_carrier
from shipping_rates.modules.shipping.carriers.base import CarrierGateway
from shipping_rates.modules.shipping.models import PackageDescriptor, RateQuoteResult

logger = logging.getLogger(__name__)

# Prices in cents
DEFAULT_BOGUS_RATES = (
    ("Bogus Calculator", 999),
    ("Bogus Express", 1999),
)


@register_carrier("bogus")
class BogusCarrier(CarrierGateway):
    """Fixed-table carrier. Every find_rates() call is recorded in .calls."""

    def __init__(
        self,
        rates: Optional[Iterable[Tuple[str, Any]]] = None,
        error: Optional[CarrierError] = None,
        raw_params: Optional[Mapping[str, Any]] = None,
    ):
        self._rates = tuple(DEFAULT_BOGUS_RATES if rates is None else rates)
        self._error = error
        self._raw_params = dict(raw_params or {"carrier": "bogus"})
        self.calls: List[Tuple[PackageDescriptor, ShippingConfig]] = []

    @property
    def carrier_code(self) -> str:
        return "bogus"

    @property
    def carrier_name(self) -> str:
        return "Bogus Carrier"

    def set_rates(self, rates: Iterable[Tuple[str, Any]]) -> None:
        self._rates = tuple(rates)

    def fail_with(self, error: Optional[CarrierError]) -> None:
        """Make subsequent calls raise error (None restores normal behaviour)."""
        self._error = error

    async def find_rates(self, package: PackageDescriptor, config: ShippingConfig) -> RateQuoteResult:
        self.calls.append((package, config))
        if self._error is not None:
            raise self._error

        weight = package.carrier_weight(config)
        logger.debug(
            f"[BOGUS] Quoting {weight} ({config.units.value}) to "
            f"{package.destination.country_code} {package.destination.postal_code or ''}"
        )
        return RateQuoteResult.from_pairs(self._rates, raw_params=self._raw_params)
