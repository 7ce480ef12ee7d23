"""
Eligibility policy: can the carrier ship this package at all?

Decided locally from a per-country maximum weight table, before any carrier
data is fetched.

Max weight semantics:
    None -> the carrier does not ship to that country
    0    -> shipped, no weight restriction for that country
    > 0  -> shipped when package total weight <= max
"""
import logging
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from shipping_rates.core.exceptions import NotShippableError
from shipping_rates.modules.shipping.models import PackageDescriptor, to_decimal

logger = logging.getLogger(__name__)


class EligibilityPolicy:
    """Per-country maximum package weights, in the package's own units."""

    def __init__(
        self,
        max_weights: Optional[Mapping[str, Any]] = None,
        default_max_weight: Optional[Any] = None,
    ):
        """
        Args:
            max_weights: ISO alpha-2 country code -> max weight (None = not serviced)
            default_max_weight: Used for countries missing from max_weights.
                None means unlisted countries are not serviced.
        """
        self._max_weights: Dict[str, Optional[Decimal]] = {}
        for country_code, max_weight in (max_weights or {}).items():
            self._max_weights[country_code.strip().upper()] = self._check_max(max_weight)
        self._default_max_weight = self._check_max(default_max_weight)

    @staticmethod
    def _check_max(value: Any) -> Optional[Decimal]:
        if value is None:
            return None
        value = to_decimal(value, "max_weight")
        if value < 0:
            raise ValueError(f"max_weight must be >= 0, got {value}")
        return value

    @classmethod
    def unrestricted(cls) -> "EligibilityPolicy":
        """Every country serviced, no weight ceiling."""
        return cls(default_max_weight=Decimal("0"))

    def max_weight_for_country(self, country_code: str) -> Optional[Decimal]:
        code = (country_code or "").strip().upper()
        if code in self._max_weights:
            return self._max_weights[code]
        return self._default_max_weight

    def is_package_shippable(self, package: PackageDescriptor) -> bool:
        """
        Check the package against the destination country's weight limit.

        Returns:
            True when shippable

        Raises:
            NotShippableError: Country not serviced, or package too heavy
        """
        country_code = package.destination.country_code
        max_weight = self.max_weight_for_country(country_code)

        if max_weight is None:
            logger.debug(f"[ELIGIBILITY] Carrier does not ship to {country_code}")
            raise NotShippableError(
                f"The selected service does not ship to {country_code}",
                country_code=country_code,
            )

        # zero is "no limit", never "nothing allowed"
        if max_weight == 0:
            return True

        weight = package.total_weight
        if weight > max_weight:
            logger.debug(f"[ELIGIBILITY] {weight} exceeds max {max_weight} for {country_code}")
            raise NotShippableError(
                f"The maximum per package weight for the selected service to "
                f"{country_code} is {max_weight}",
                country_code=country_code,
                max_weight=max_weight,
                package_weight=weight,
            )
        return True
