"""Settings unit tests."""

import pytest

from replenishment_engine.analyzers.validation import InvalidInputError
from replenishment_engine.config import Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.items_table == "Items"
        assert settings.default_min_threshold_general == 10
        assert settings.default_min_threshold_ppe == 5
        assert settings.indicator_window_days == 30
        assert settings.abc_window_days == 90

    def test_environment_overrides(self):
        settings = Settings.from_env({
            "AWS_DEFAULT_REGION": "us-west-2",
            "RECEIPTS_TABLE": "StockEntries",
            "FORECAST_WINDOW_DAYS": "60",
            "LOG_LEVEL": "debug",
        })
        assert settings.region_name == "us-west-2"
        assert settings.receipts_table == "StockEntries"
        assert settings.forecast_window_days == 60
        assert settings.log_level == "DEBUG"

    def test_non_integer_rejected(self):
        with pytest.raises(InvalidInputError):
            Settings.from_env({"ABC_WINDOW_DAYS": "ninety"})

    def test_non_positive_window_rejected(self):
        with pytest.raises(InvalidInputError):
            Settings.from_env({"INDICATOR_WINDOW_DAYS": "0"})
