"""Tests for environment-driven settings."""

import pytest

from aggregator.config import DEFAULT_OWNER, Settings
from aggregator.constants import WETH_BASE
from tests.helpers import OWNER


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings == Settings()
        assert settings.port == 8000
        assert settings.system_fee_numerator == 25
        assert settings.partner_fee_numerator == 50
        assert settings.owner == DEFAULT_OWNER
        assert settings.wrapped_native == WETH_BASE
        assert settings.snapshot_path is None

    def test_reads_environment(self):
        settings = Settings.from_env(
            {
                "AGGREGATOR_PORT": "9000",
                "AGGREGATOR_DEBUG": "TRUE",
                "AGGREGATOR_LOG_JSON": "1",
                "AGGREGATOR_SNAPSHOT": "/tmp/venues.json",
                "AGGREGATOR_PARTNER_FEE_NUMERATOR": "30",
                "AGGREGATOR_OWNER": OWNER,
            }
        )
        assert settings.port == 9000
        assert settings.debug
        assert settings.log_json
        assert settings.snapshot_path == "/tmp/venues.json"
        assert settings.partner_fee_numerator == 30
        assert settings.owner == OWNER

    @pytest.mark.parametrize("value", ["no", "false", "0", ""])
    def test_false_values(self, value):
        assert not Settings.from_env({"AGGREGATOR_DEBUG": value}).debug

    def test_empty_int_uses_default(self):
        assert Settings.from_env({"AGGREGATOR_PORT": ""}).port == 8000

    def test_bad_int_names_variable(self):
        with pytest.raises(ValueError, match="AGGREGATOR_SYSTEM_FEE_NUMERATOR"):
            Settings.from_env({"AGGREGATOR_SYSTEM_FEE_NUMERATOR": "lots"})

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("AGGREGATOR_HOST", "127.0.0.1")
        assert Settings.from_env().host == "127.0.0.1"

    def test_lists_and_rpc(self):
        settings = Settings.from_env(
            {
                "AGGREGATOR_SUPPORTED_POOLS": f"{OWNER}, ,{DEFAULT_OWNER}",
                "AGGREGATOR_RPC_URL": "http://localhost:8545",
                "AGGREGATOR_RPC_V3_ROUTERS": OWNER,
            }
        )
        assert settings.supported_pools == (OWNER, DEFAULT_OWNER)
        assert settings.rpc_url == "http://localhost:8545"
        assert settings.rpc_v2_routers == ()
        assert settings.rpc_v3_routers == (OWNER,)


class TestApiKeys:
    def test_none_by_default(self):
        assert Settings.from_env({}).api_keys == {}

    def test_parses_key_address_pairs(self):
        upper = "0x" + OWNER[2:].upper()
        settings = Settings.from_env({"AGGREGATOR_API_KEYS": f"alpha:{upper}, beta:{DEFAULT_OWNER}"})
        assert settings.api_keys == {"alpha": OWNER, "beta": DEFAULT_OWNER}

    @pytest.mark.parametrize("value", ["alpha", ":0xabc", "alpha:"])
    def test_malformed_entry_names_variable(self, value):
        with pytest.raises(ValueError, match="AGGREGATOR_API_KEYS"):
            Settings.from_env({"AGGREGATOR_API_KEYS": value})
