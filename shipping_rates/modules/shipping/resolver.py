"""
Rate Resolver

Answers the two questions the checkout asks a shipping method:
- available(package): can this carrier quote the package at all?
- compute(package): what does this resolver's service cost?

Per call:
    eligibility check -> cache lookup -> (miss) carrier fetch -> cache put
    -> service selection -> handling fee

Carrier failures never escape: available() degrades to False, compute()
raises ShippingError. Ineligible packages never reach the carrier.
"""
import asyncio
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Union

from shipping_rates.core.config import ConfigHolder, ShippingConfig
from shipping_rates.core.exceptions import (
    CarrierError,
    CarrierResponseError,
    NotShippableError,
    ShippingError,
)
from shipping_rates.modules.shipping.carriers.base import CarrierGateway
from shipping_rates.modules.shipping.eligibility import EligibilityPolicy
from shipping_rates.modules.shipping.models import PackageDescriptor, RateQuoteResult
from shipping_rates.modules.shipping.rate_cache import RateCache, make_cache_key

logger = logging.getLogger(__name__)

# Carrier prices and the handling fee are in cents
MINOR_UNITS_PER_MAJOR = Decimal("100")
PRICE_QUANTUM = Decimal("0.01")


class RateResolver:
    """
    Resolves the price of one carrier service for a package.

    A resolver is bound to a single service name; it defaults to the class
    description, so named subclasses only need to override ``description``.
    """

    description = "Generic Service"

    def __init__(
        self,
        carrier: CarrierGateway,
        cache: RateCache,
        config: Union[ShippingConfig, ConfigHolder],
        eligibility: Optional[EligibilityPolicy] = None,
        service_name: Optional[str] = None,
        dedupe_inflight: bool = False,
    ):
        """
        Args:
            carrier: Gateway used on cache misses
            cache: Rate cache shared by available() and compute()
            config: Fixed snapshot, or a holder an operator may update
            eligibility: Country/weight policy (default: unrestricted)
            service_name: Carrier service to price (default: description)
            dedupe_inflight: Share one carrier call between concurrent
                misses for the same package
        """
        self.carrier = carrier
        self.cache = cache
        self._config = config if isinstance(config, ConfigHolder) else ConfigHolder(config)
        self.eligibility = eligibility or EligibilityPolicy.unrestricted()
        self._service_name = service_name
        self.dedupe_inflight = dedupe_inflight
        self._inflight: Dict[str, "asyncio.Future[RateQuoteResult]"] = {}

    @property
    def service_name(self) -> str:
        return self._service_name or self.description

    @property
    def config(self) -> ShippingConfig:
        return self._config.current()

    def cache_key(self, package: PackageDescriptor, config: Optional[ShippingConfig] = None) -> str:
        return make_cache_key(package, config or self.config)

    async def invalidate(self, package: PackageDescriptor) -> bool:
        """Drop the cached rate set for package."""
        return await self.cache.evict(self.cache_key(package))

    async def available(self, package: PackageDescriptor) -> bool:
        """
        True when the carrier returns any rate for the package.

        Whether this resolver's own service is among the rates does not
        matter here.
        """
        config = self.config
        try:
            self.eligibility.is_package_shippable(package)
        except NotShippableError as e:
            logger.info(f"[RATES] {self.service_name} unavailable: {e.message}")
            return False

        try:
            rates = await self.retrieve_rates(package, config)
        except CarrierError as e:
            logger.warning(f"[RATES] {self.service_name} unavailable, carrier failed: {e.message}")
            return False

        return not rates.is_empty

    async def compute(self, package: PackageDescriptor) -> Optional[Decimal]:
        """
        Price of this resolver's service, handling fee included.

        The carrier price and the handling fee are in minor units (cents);
        the result is their sum converted to major units, e.g. 999 + 100
        returns Decimal("10.99"). Do not divide the result again.

        Returns:
            Price in major currency units, or None when the package is not
            shippable or the carrier does not offer this service

        Raises:
            ShippingError: The carrier could not be consulted
        """
        config = self.config
        try:
            self.eligibility.is_package_shippable(package)
        except NotShippableError as e:
            logger.info(f"[RATES] {self.service_name} not computed: {e.message}")
            return None

        try:
            rates = await self.retrieve_rates(package, config)
        except CarrierError as e:
            raise ShippingError(
                f"Unable to get rates from {self.carrier.carrier_name}: {e.message}",
                code="CARRIER_UNAVAILABLE",
                details={"service_name": self.service_name, "carrier_error": e.to_dict()},
            ) from e

        rate = rates.find(self.service_name)
        if rate is None:
            logger.debug(
                f"[RATES] {self.service_name!r} not in carrier rates {rates.service_names()}"
            )
            return None

        return self._final_price(rate.price, config.handling_fee)

    @staticmethod
    def _final_price(price: Decimal, handling_fee: Decimal) -> Decimal:
        total = (price + handling_fee) / MINOR_UNITS_PER_MAJOR
        return total.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)

    async def retrieve_rates(
        self,
        package: PackageDescriptor,
        config: Optional[ShippingConfig] = None,
    ) -> RateQuoteResult:
        """
        Read-through lookup: cache first, carrier on a miss.

        Raises:
            CarrierError: Carrier failed (nothing is cached)
        """
        config = config or self.config
        key = make_cache_key(package, config)

        cached = await self.cache.get(key)
        if cached is not None:
            return cached

        if self.dedupe_inflight:
            return await self._fetch_shared(key, package, config)
        return await self._fetch_and_store(key, package, config)

    async def _fetch_shared(
        self,
        key: str,
        package: PackageDescriptor,
        config: ShippingConfig,
    ) -> RateQuoteResult:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store(key, package, config))
            self._inflight[key] = task

            def _forget(done: "asyncio.Future[RateQuoteResult]") -> None:
                if self._inflight.get(key) is done:
                    del self._inflight[key]
                # every waiter may have been cancelled already
                if not done.cancelled():
                    done.exception()

            task.add_done_callback(_forget)
        # a cancelled caller must not cancel the fetch other callers wait on
        return await asyncio.shield(task)

    async def _fetch_and_store(
        self,
        key: str,
        package: PackageDescriptor,
        config: ShippingConfig,
    ) -> RateQuoteResult:
        carrier_code = self.carrier.carrier_code
        try:
            result = await self.carrier.find_rates(package, config)
        except CarrierError:
            raise
        except Exception as e:
            raise CarrierError(
                f"Unexpected {type(e).__name__} from carrier: {e}",
                carrier_code=carrier_code,
            ) from e

        if not isinstance(result, RateQuoteResult):
            raise CarrierResponseError(
                f"Carrier returned {type(result).__name__}, expected RateQuoteResult",
                carrier_code=carrier_code,
            )

        await self.cache.put(key, result)
        logger.info(
            f"[RATES] Fetched {len(result.rates)} rates from {carrier_code} "
            f"for {package.destination.country_code}"
        )
        return result

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} service={self.service_name!r} carrier={self.carrier.carrier_code}>"
