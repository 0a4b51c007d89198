"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from parlourease.config import (
    AppConfig,
    SalonConfig,
    ScheduleConfig,
    ShellConfig,
    StoreConfig,
    _safe_bool,
    _safe_int,
    _validate_config,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_open_hour_out_of_range(self):
        config = replace(AppConfig(), schedule=replace(ScheduleConfig(), open_hour=24))
        with pytest.raises(ValueError, match="SALON_OPEN_HOUR"):
            _validate_config(config)

    def test_close_before_open(self):
        config = replace(AppConfig(), schedule=replace(ScheduleConfig(), open_hour=18, close_hour=9))
        with pytest.raises(ValueError, match="SALON_CLOSE_HOUR"):
            _validate_config(config)

    def test_zero_interval_rejected(self):
        config = replace(AppConfig(), schedule=replace(ScheduleConfig(), slot_interval_minutes=0))
        with pytest.raises(ValueError, match="SLOT_INTERVAL_MINUTES"):
            _validate_config(config)

    def test_festival_interval_too_long(self):
        config = replace(
            AppConfig(), schedule=replace(ScheduleConfig(), festival_slot_interval_minutes=90)
        )
        with pytest.raises(ValueError, match="FESTIVAL_SLOT_INTERVAL_MINUTES"):
            _validate_config(config)

    def test_collections_must_differ(self):
        config = replace(
            AppConfig(),
            store=replace(StoreConfig(), services_collection="data", bookings_collection="data"),
        )
        with pytest.raises(ValueError, match="must differ"):
            _validate_config(config)

    def test_unknown_timezone(self):
        config = replace(AppConfig(), salon=replace(SalonConfig(), timezone="Mars/Olympus_Mons"))
        with pytest.raises(ValueError, match="SALON_TIMEZONE"):
            _validate_config(config)

    def test_empty_shell_app_id(self):
        config = replace(AppConfig(), admin_shell=ShellConfig(app_id="", app_name="Admin"))
        with pytest.raises(ValueError, match="ADMIN_APP_ID"):
            _validate_config(config)


class TestEnvParsing:
    def test_safe_int_reads_env(self, monkeypatch):
        monkeypatch.setenv("TEST_HOURS", "7")
        assert _safe_int("TEST_HOURS", "9") == 7

    def test_safe_int_uses_default(self, monkeypatch):
        monkeypatch.delenv("TEST_HOURS", raising=False)
        assert _safe_int("TEST_HOURS", "9") == 9

    def test_safe_int_names_variable(self, monkeypatch):
        monkeypatch.setenv("TEST_HOURS", "nine")
        with pytest.raises(ValueError, match="TEST_HOURS"):
            _safe_int("TEST_HOURS", "9")

    @pytest.mark.parametrize("raw", ["1", "true", "Yes", "ON"])
    def test_safe_bool_true(self, monkeypatch, raw):
        monkeypatch.setenv("TEST_FLAG", raw)
        assert _safe_bool("TEST_FLAG", "false") is True

    @pytest.mark.parametrize("raw", ["0", "false", "No", "off"])
    def test_safe_bool_false(self, monkeypatch, raw):
        monkeypatch.setenv("TEST_FLAG", raw)
        assert _safe_bool("TEST_FLAG", "true") is False

    def test_safe_bool_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("TEST_FLAG", "maybe")
        with pytest.raises(ValueError, match="TEST_FLAG"):
            _safe_bool("TEST_FLAG", "true")


class TestDefaults:
    def test_shell_defaults(self):
        config = AppConfig()
        assert config.admin_shell.app_id == "com.parlourease.admin"
        assert config.admin_shell.app_name == "Parlour Ease Admin"
        assert config.client_shell.app_id == "com.parlourease.client"
        assert config.client_shell.web_dir == "out"

    def test_empty_timezone_means_host_local(self):
        assert SalonConfig(timezone="").tzinfo is None
