"""
Pytest configuration and fixtures for the shipping rate engine tests.
"""
import os
import pytest
from decimal import Decimal

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["REDIS_URL"] = ""

from shipping_rates.core.config import ShippingConfig, UnitsSystem
from shipping_rates.modules.shipping.calculators import BogusCalculator
from shipping_rates.modules.shipping.carriers.bogus import BogusCarrier
from shipping_rates.modules.shipping.eligibility import EligibilityPolicy
from shipping_rates.modules.shipping.models import Address, PackageDescriptor, PackageItem
from shipping_rates.modules.shipping.rate_cache import InMemoryRateCache


@pytest.fixture
def origin() -> Address:
    """Stock location address."""
    return Address(
        country_code="US",
        postal_code="90210",
        state_province="CA",
        city="Beverly Hills",
        address_line1="1 Warehouse Way",
    )


@pytest.fixture
def destination() -> Address:
    """US ship address."""
    return Address(
        country_code="US",
        postal_code="75227",
        state_province="TX",
        city="Dallas",
        address_line1="4157 Lawnview Ave",
    )


@pytest.fixture
def package(origin, destination) -> PackageDescriptor:
    """Two line items: 2 x 1lb and 2 x 2lb (6lb total)."""
    return PackageDescriptor(
        origin=origin,
        destination=destination,
        items=[
            PackageItem(weight=Decimal("1"), quantity=2, sku="VAR-1"),
            PackageItem(weight=Decimal("2"), quantity=2, sku="VAR-2"),
        ],
        units=UnitsSystem.IMPERIAL,
    )


@pytest.fixture
def shipping_config() -> ShippingConfig:
    """Imperial units, multiplier 1, no handling fee."""
    return ShippingConfig(units="imperial", unit_weight_multiplier=1, handling_fee=0)


@pytest.fixture
def rate_cache() -> InMemoryRateCache:
    return InMemoryRateCache()


@pytest.fixture
def carrier() -> BogusCarrier:
    """Carrier quoting the bogus service at $9.99."""
    return BogusCarrier(rates=[("Bogus Calculator", 999)])


@pytest.fixture
def calculator(carrier, rate_cache, shipping_config) -> BogusCalculator:
    return BogusCalculator(
        carrier=carrier,
        cache=rate_cache,
        config=shipping_config,
        eligibility=EligibilityPolicy.unrestricted(),
    )
