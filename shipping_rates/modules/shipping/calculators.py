"""
Named shipping calculators and the resolver factory.

A calculator is a RateResolver bound to one carrier service through its
``description``. create_rate_resolver() wires settings, carrier and cache
together for the embedding application.
"""
import logging
from typing import Any, Mapping, Optional, Type

from shipping_rates.core.config import ConfigHolder, Settings, settings as default_settings
from shipping_rates.modules.shipping.carriers import get_carrier
from shipping_rates.modules.shipping.eligibility import EligibilityPolicy
from shipping_rates.modules.shipping.rate_cache import RateCache, create_rate_cache
from shipping_rates.modules.shipping.resolver import RateResolver

logger = logging.getLogger(__name__)


class BogusCalculator(RateResolver):
    """Calculator for the bogus carrier's default service."""
    description = "Bogus Calculator"


class BogusExpressCalculator(RateResolver):
    description = "Bogus Express"


def create_rate_resolver(
    service_name: Optional[str] = None,
    carrier_code: Optional[str] = None,
    settings: Optional[Settings] = None,
    cache: Optional[RateCache] = None,
    eligibility: Optional[EligibilityPolicy] = None,
    config_holder: Optional[ConfigHolder] = None,
    resolver_cls: Type[RateResolver] = RateResolver,
    carrier_options: Optional[Mapping[str, Any]] = None,
) -> RateResolver:
    """
    Build a resolver from process settings.

    Args:
        service_name: Carrier service to price (default: resolver_cls.description)
        carrier_code: Registered carrier (default: settings.SHIPPING_CARRIER)
        settings: Settings instance (default: module settings)
        cache: Shared rate cache (default: create_rate_cache(settings))
        eligibility: Country/weight policy (default: unrestricted)
        config_holder: Share one operator-updatable config between resolvers
        resolver_cls: RateResolver subclass to instantiate
        carrier_options: Passed to the carrier constructor

    Raises:
        ConfigurationError: Unknown carrier or invalid shipping settings
    """
    settings = settings or default_settings
    carrier = get_carrier(carrier_code or settings.SHIPPING_CARRIER, **dict(carrier_options or {}))
    holder = config_holder or ConfigHolder(settings.shipping_config())

    resolver = resolver_cls(
        carrier=carrier,
        cache=cache if cache is not None else create_rate_cache(settings),
        config=holder,
        eligibility=eligibility,
        service_name=service_name,
    )
    logger.debug(f"Created {resolver!r}")
    return resolver
