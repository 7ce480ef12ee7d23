"""
Carrier-agnostic shipping data classes.

PackageDescriptor is the normalized shipment content handed to the rate
engine by the surrounding platform. ServiceRate / RateQuoteResult are what a
carrier gateway returns.

Prices are expressed in the currency's minor unit (cents), which is how
carrier rating APIs report them.
"""
import html
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from shipping_rates.core.config import ShippingConfig, UnitsSystem

__all__ = [
    "UnitsSystem",
    "Address",
    "PackageItem",
    "PackageDescriptor",
    "ServiceRate",
    "RateQuoteResult",
    "to_decimal",
]


def to_decimal(value: Any, name: str = "value") -> Decimal:
    """Convert ints, strings and floats to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"{name} is not a valid decimal: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"{name} must be finite, got {value!r}")
    return result


@dataclass(frozen=True)
class Address:
    """Shipping address. Only country_code and postal_code drive rating."""
    country_code: str
    postal_code: Optional[str] = None
    state_province: Optional[str] = None
    city: Optional[str] = None
    address_line1: Optional[str] = None

    def __post_init__(self):
        code = (self.country_code or "").strip().upper()
        if len(code) != 2 or not code.isalpha():
            raise ValueError(f"country_code must be ISO alpha-2, got {self.country_code!r}")
        object.__setattr__(self, "country_code", code)
        if self.postal_code is not None:
            object.__setattr__(self, "postal_code", self.postal_code.strip())

    def fingerprint(self) -> List[Optional[str]]:
        parts = [self.country_code, self.postal_code, self.state_province, self.city, self.address_line1]
        return [None if p is None else str(p).strip().lower() for p in parts]


@dataclass(frozen=True)
class PackageItem:
    """One line of package content. weight is per unit; None means unknown."""
    weight: Optional[Decimal]
    quantity: int = 1
    sku: Optional[str] = None

    def __post_init__(self):
        if self.quantity < 0:
            raise ValueError(f"quantity must be >= 0, got {self.quantity}")
        if self.weight is not None:
            weight = to_decimal(self.weight, "weight")
            if weight < 0:
                raise ValueError(f"weight must be >= 0, got {weight}")
            object.__setattr__(self, "weight", weight)

    @property
    def line_weight(self) -> Decimal:
        if self.weight is None:
            return Decimal("0")
        return self.weight * self.quantity


@dataclass(frozen=True)
class PackageDescriptor:
    """
    Shippable content of one shipment.

    Items with a missing weight contribute nothing to total_weight. The
    carrier-facing weight substitutes ShippingConfig.default_item_weight for
    those items (see carrier_weight()).
    """
    origin: Address
    destination: Address
    items: Tuple[PackageItem, ...] = ()
    units: UnitsSystem = UnitsSystem.IMPERIAL

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))
        object.__setattr__(self, "units", UnitsSystem(self.units))

    @property
    def total_weight(self) -> Decimal:
        return sum((item.line_weight for item in self.items), Decimal("0"))

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    def weight_with_defaults(self, default_item_weight: Decimal) -> Decimal:
        """Total weight with default_item_weight applied to unweighted items."""
        default_item_weight = to_decimal(default_item_weight, "default_item_weight")
        total = Decimal("0")
        for item in self.items:
            weight = item.weight
            if weight is None or weight <= 0:
                weight = default_item_weight
            total += weight * item.quantity
        return total

    def carrier_weight(self, config: ShippingConfig) -> Decimal:
        """Weight to send to the carrier, in config.units."""
        return self.weight_with_defaults(config.default_item_weight) * config.unit_weight_multiplier


@dataclass(frozen=True)
class ServiceRate:
    """A single carrier service quote. price is in minor units (cents)."""
    service_name: str
    price: Decimal

    def __post_init__(self):
        # Carriers HTML-escape registered marks, e.g. "UPS&#174; Ground"
        object.__setattr__(self, "service_name", html.unescape(str(self.service_name)).strip())
        price = to_decimal(self.price, "price")
        if price < 0:
            raise ValueError(f"price must be >= 0, got {price}")
        object.__setattr__(self, "price", price)


@dataclass(frozen=True)
class RateQuoteResult:
    """Ordered rate set from one carrier response plus raw carrier metadata."""
    rates: Tuple[ServiceRate, ...] = ()
    raw_params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "rates", tuple(self.rates))

    @property
    def is_empty(self) -> bool:
        return not self.rates

    def service_names(self) -> List[str]:
        return [rate.service_name for rate in self.rates]

    def find(self, service_name: str) -> Optional[ServiceRate]:
        """Return the first rate whose service name matches exactly."""
        wanted = html.unescape(service_name).strip()
        for rate in self.rates:
            if rate.service_name == wanted:
                return rate
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rates": [
                {"service_name": rate.service_name, "price": str(rate.price)}
                for rate in self.rates
            ],
            "raw_params": dict(self.raw_params),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RateQuoteResult":
        return cls(
            rates=tuple(
                ServiceRate(service_name=r["service_name"], price=r["price"])
                for r in data.get("rates", [])
            ),
            raw_params=data.get("raw_params") or {},
        )

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, Any]], raw_params: Optional[Mapping[str, Any]] = None) -> "RateQuoteResult":
        """Build from (service_name, price) pairs."""
        return cls(
            rates=tuple(ServiceRate(name, price) for name, price in pairs),
            raw_params=raw_params or {},
        )
