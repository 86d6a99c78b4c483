from __future__ import annotations

import pytest
from ocpi_hub.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    build_hub_settings,
    env_bool,
    get_config,
)


class TestGetConfig:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("production", ProductionConfig),
            ("Testing", TestingConfig),
            ("development", DevelopmentConfig),
            ("unknown", DevelopmentConfig),
        ],
    )
    def test_selects_by_app_env(self, monkeypatch, value, expected):
        monkeypatch.setenv("APP_ENV", value)
        assert get_config() is expected

    def test_defaults_to_development(self, monkeypatch):
        monkeypatch.delenv("APP_ENV", raising=False)
        assert get_config() is DevelopmentConfig


class TestEnvBool:
    @pytest.mark.parametrize("raw", ["1", "true", "YES", " on "])
    def test_truthy(self, monkeypatch, raw):
        monkeypatch.setenv("SOME_FLAG", raw)
        assert env_bool("SOME_FLAG") is True

    def test_missing_uses_default(self, monkeypatch):
        monkeypatch.delenv("SOME_FLAG", raising=False)
        assert env_bool("SOME_FLAG", True) is True


class TestHubSettings:
    def test_from_config(self):
        settings = build_hub_settings(
            {
                "OCPI_VERSION": "2.3",
                "HUB_BASE_URL": "https://hub.example.com/ocpi/2.3/",
                "HUB_PARTY_ID": "HBX",
                "HUB_COUNTRY_CODE": "NL",
                "HUB_BUSINESS_NAME": "Example Hub",
                "TOKEN_MINT_ATTEMPTS": 5,
            }
        )

        assert settings.base_url == "https://hub.example.com/ocpi/2.3"
        assert settings.party_id == "HBX"
        assert settings.country_code == "NL"
        assert settings.business_name == "Example Hub"
        assert settings.token_mint_attempts == 5

    def test_defaults(self):
        settings = build_hub_settings({"TOKEN_MINT_ATTEMPTS": 0})

        assert settings.base_url == "http://localhost:8080/ocpi/2.3"
        assert settings.version == "2.3"
        assert settings.party_id == "HUB"
        assert settings.token_mint_attempts == 1
