"""Test configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from trade_compass.core.config import AnalyticsConfig, RiskSettings, Settings, load_settings
from trade_compass.core.errors import ConfigError

CONFIGS_DIR = Path(__file__).resolve().parents[2] / "configs"


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.risk.max_daily_loss_percent == 0.0
        assert settings.analytics.default_base_balance == 10_000.0
        assert settings.analytics.dashboard_days == 30
        assert settings.analytics.warning_threshold_percent == 50.0
        assert settings.observability.log_level == "INFO"

    def test_shipped_config(self):
        settings = load_settings(CONFIGS_DIR / "compass.toml")
        assert settings.risk.max_daily_loss_percent == 4.0
        assert settings.risk.max_weekly_loss_percent == 10.0
        assert settings.risk.target_daily_profit_percent == 3.0
        assert settings.risk.target_weekly_profit_percent == 15.0
        assert settings.analytics.timeline_weeks == 12

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "nope.toml")
        assert settings.risk.max_daily_loss_percent == 0.0

    def test_overrides_merge_sections(self, quiet_config):
        settings = load_settings(quiet_config, overrides={"risk": {"max_daily_loss_percent": 2.5}})
        assert settings.risk.max_daily_loss_percent == 2.5
        assert settings.risk.max_weekly_loss_percent == 10.0
        assert settings.observability.log_level == "ERROR"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("COMPASS_RISK__MAX_DAILY_LOSS_PERCENT", "3")
        assert Settings().risk.max_daily_loss_percent == 3.0

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[risk\nmax_daily_loss_percent = ")
        with pytest.raises(ConfigError):
            load_settings(path)


class TestRiskSettings:
    def test_none_means_disabled(self):
        settings = RiskSettings(max_daily_loss_percent=None)
        assert settings.max_daily_loss_percent == 0.0

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            RiskSettings(max_weekly_loss_percent=-1)


class TestAnalyticsConfig:
    def test_no_timezone(self):
        assert AnalyticsConfig().get_tzinfo() is None

    def test_known_timezone(self):
        tz = AnalyticsConfig(timezone="UTC").get_tzinfo()
        assert tz is not None

    def test_unknown_timezone(self):
        with pytest.raises(ConfigError, match="Unknown timezone"):
            AnalyticsConfig(timezone="Mars/Olympus_Mons").get_tzinfo()

    @pytest.mark.parametrize("threshold", [0, 100, 150])
    def test_warning_threshold_bounds(self, threshold):
        with pytest.raises(ValidationError):
            AnalyticsConfig(warning_threshold_percent=threshold)
