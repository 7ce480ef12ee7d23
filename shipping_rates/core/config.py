"""
Application configuration

Process settings come from the environment (or a .env file) through
pydantic-settings. The rate engine itself never reads ``settings`` directly:
it is handed an immutable ShippingConfig snapshot, or a ConfigHolder that an
operator can swap at runtime without disturbing in-flight requests.
"""
import enum
import logging
import threading
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shipping_rates.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class UnitsSystem(str, enum.Enum):
    """Unit system the carrier expects package weights in."""
    IMPERIAL = "imperial"
    METRIC = "metric"


class ShippingConfig(BaseModel):
    """
    Immutable configuration snapshot read by the rate engine on every call.

    handling_fee is expressed in the same minor currency unit (cents) as the
    carrier's quoted prices and is added flat. Unknown keys are rejected, so
    a misspelled operator update fails instead of being dropped.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    units: UnitsSystem = UnitsSystem.IMPERIAL
    unit_weight_multiplier: Decimal = Field(default=Decimal("1"), gt=0)
    handling_fee: Decimal = Field(default=Decimal("0"), ge=0)
    default_item_weight: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("units", mode="before")
    @classmethod
    def normalize_units(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @classmethod
    def build(cls, **values: Any) -> "ShippingConfig":
        """Validate values, raising ConfigurationError instead of ValidationError."""
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid shipping configuration: {e.error_count()} error(s)",
                details={"errors": [err["msg"] for err in e.errors()]},
            ) from e


class ConfigHolder:
    """
    Thread-safe holder for the current ShippingConfig.

    Readers take one snapshot per request with current(); writers replace the
    snapshot atomically. A rejected update leaves the previous snapshot active.
    """

    def __init__(self, config: Optional[ShippingConfig] = None):
        self._config = config or ShippingConfig()
        self._lock = threading.Lock()

    def current(self) -> ShippingConfig:
        return self._config

    def update(self, **changes: Any) -> ShippingConfig:
        """
        Apply operator changes and return the new snapshot.

        Raises:
            ConfigurationError: If the resulting configuration is invalid
        """
        with self._lock:
            merged: Dict[str, Any] = {**self._config.model_dump(), **changes}
            new_config = ShippingConfig.build(**merged)
            self._config = new_config
        logger.info(f"[CONFIG] Shipping configuration updated: {sorted(changes)}")
        return new_config


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    APP_NAME: str = "Shipping Rates"
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    # Rate calculation
    SHIPPING_UNITS: UnitsSystem = UnitsSystem.IMPERIAL
    SHIPPING_UNIT_MULTIPLIER: Decimal = Decimal("1")
    SHIPPING_HANDLING_FEE: Decimal = Decimal("0")  # minor units (cents)
    SHIPPING_DEFAULT_ITEM_WEIGHT: Decimal = Decimal("0")
    SHIPPING_CARRIER: str = "bogus"

    # Rate cache
    RATE_CACHE_TTL_SECONDS: int = 0  # 0 = entries never expire
    RATE_CACHE_MAX_SIZE: int = 1000
    RATE_CACHE_PREFIX: str = "rates:"

    # Redis (shared rate cache across instances); empty = in-memory cache
    REDIS_URL: str = ""

    @field_validator("SHIPPING_UNITS", mode="before")
    @classmethod
    def normalize_units(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("RATE_CACHE_TTL_SECONDS", "RATE_CACHE_MAX_SIZE")
    @classmethod
    def non_negative(cls, v):
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    def shipping_config(self) -> ShippingConfig:
        """Build the rate-engine snapshot from process settings."""
        return ShippingConfig.build(
            units=self.SHIPPING_UNITS,
            unit_weight_multiplier=self.SHIPPING_UNIT_MULTIPLIER,
            handling_fee=self.SHIPPING_HANDLING_FEE,
            default_item_weight=self.SHIPPING_DEFAULT_ITEM_WEIGHT,
        )


settings = Settings()
