"""
Tests for settings, configuration snapshots and operator updates.
"""
import pytest
from decimal import Decimal

from pydantic import ValidationError

from shipping_rates.core.config import ConfigHolder, Settings, ShippingConfig, UnitsSystem
from shipping_rates.core.exceptions import ConfigurationError


class TestShippingConfig:

    def test_defaults(self):
        config = ShippingConfig()

        assert config.units is UnitsSystem.IMPERIAL
        assert config.unit_weight_multiplier == Decimal("1")
        assert config.handling_fee == Decimal("0")
        assert config.default_item_weight == Decimal("0")

    def test_units_case_insensitive(self):
        assert ShippingConfig(units="METRIC").units is UnitsSystem.METRIC

    def test_frozen(self):
        config = ShippingConfig()

        with pytest.raises(ValidationError):
            config.handling_fee = Decimal("5")

    @pytest.mark.parametrize("values", [
        {"unit_weight_multiplier": 0},
        {"unit_weight_multiplier": -16},
        {"handling_fee": -1},
        {"default_item_weight": -0.1},
        {"units": "stones"},
        {"handling_fe": 100},
    ])
    def test_build_rejects_invalid_values(self, values):
        with pytest.raises(ConfigurationError) as exc_info:
            ShippingConfig.build(**values)

        assert exc_info.value.code == "CONFIGURATION_ERROR"
        assert exc_info.value.details["errors"]


class TestConfigHolder:

    def test_update_swaps_snapshot(self):
        holder = ConfigHolder()
        before = holder.current()

        after = holder.update(handling_fee=100, units="metric")

        assert holder.current() is after
        assert after.handling_fee == Decimal("100")
        assert after.units is UnitsSystem.METRIC
        # snapshots already handed out are untouched
        assert before.handling_fee == Decimal("0")

    def test_unknown_key_rejected(self):
        holder = ConfigHolder(ShippingConfig(handling_fee=50))

        with pytest.raises(ConfigurationError) as exc_info:
            holder.update(handling_fe=100)

        assert exc_info.value.details["errors"]
        assert holder.current().handling_fee == Decimal("50")

    def test_invalid_update_keeps_previous_snapshot(self):
        holder = ConfigHolder(ShippingConfig(handling_fee=50))

        with pytest.raises(ConfigurationError):
            holder.update(unit_weight_multiplier=0)

        assert holder.current().handling_fee == Decimal("50")
        assert holder.current().unit_weight_multiplier == Decimal("1")


class TestSettings:

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SHIPPING_UNITS", "Metric")
        monkeypatch.setenv("SHIPPING_UNIT_MULTIPLIER", "1000")
        monkeypatch.setenv("SHIPPING_HANDLING_FEE", "250")

        config = Settings().shipping_config()

        assert config.units is UnitsSystem.METRIC
        assert config.unit_weight_multiplier == Decimal("1000")
        assert config.handling_fee == Decimal("250")

    def test_invalid_shipping_settings_raise_configuration_error(self):
        settings = Settings(SHIPPING_UNIT_MULTIPLIER=Decimal("0"))

        with pytest.raises(ConfigurationError):
            settings.shipping_config()

    def test_negative_cache_size_rejected(self):
        with pytest.raises(ValidationError):
            Settings(RATE_CACHE_MAX_SIZE=-1)


class TestConfigureLogging:

    def test_sets_package_level(self):
        import logging
        from shipping_rates.core.logging_config import configure_logging

        configure_logging("debug")

        assert logging.getLogger("shipping_rates").level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        import logging
        from shipping_rates.core.logging_config import configure_logging

        configure_logging("chatty")

        assert logging.getLogger("shipping_rates").level == logging.INFO
