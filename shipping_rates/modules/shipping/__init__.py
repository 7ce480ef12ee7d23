"""
Shipping Module

- Carrier-agnostic package and rate data classes
- CarrierGateway interface with a registry/factory
- Rate cache, eligibility policy and the RateResolver that composes them
"""
from shipping_rates.modules.shipping.models import (
    Address,
    PackageDescriptor,
    PackageItem,
    RateQuoteResult,
    ServiceRate,
    UnitsSystem,
)
from shipping_rates.modules.shipping.carriers import CarrierFactory, get_carrier, register_carrier
from shipping_rates.modules.shipping.carriers.base import CarrierGateway
from shipping_rates.modules.shipping.carriers.bogus import BogusCarrier
from shipping_rates.modules.shipping.rate_cache import (
    InMemoryRateCache,
    RateCache,
    RedisRateCache,
    create_rate_cache,
    make_cache_key,
)
from shipping_rates.modules.shipping.eligibility import EligibilityPolicy
from shipping_rates.modules.shipping.resolver import RateResolver
from shipping_rates.modules.shipping.calculators import (
    BogusCalculator,
    BogusExpressCalculator,
    create_rate_resolver,
)

__all__ = [
    "Address",
    "PackageDescriptor",
    "PackageItem",
    "RateQuoteResult",
    "ServiceRate",
    "UnitsSystem",
    "CarrierFactory",
    "get_carrier",
    "register_carrier",
    "CarrierGateway",
    "BogusCarrier",
    "InMemoryRateCache",
    "RateCache",
    "RedisRateCache",
    "create_rate_cache",
    "make_cache_key",
    "EligibilityPolicy",
    "RateResolver",
    "BogusCalculator",
    "BogusExpressCalculator",
    "create_rate_resolver",
]
