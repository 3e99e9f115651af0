from __future__ import annotations

import pytest

from orbit_custom_fee_rollup import config as config_module
from orbit_custom_fee_rollup.chains import ARBITRUM_ONE, ARBITRUM_SEPOLIA
from orbit_custom_fee_rollup.config import DEFAULT_KEYSET, load_settings
from orbit_custom_fee_rollup.errors import MissingRequiredConfig, OrbitDeploymentError

from .conftest import DEPLOYER_KEY, FEE_TOKEN


@pytest.mark.parametrize("missing", ["DEPLOYER_PRIVATE_KEY", "CUSTOM_FEE_TOKEN_ADDRESS"])
def test_load_settings_requires_deployer_and_fee_token(base_env, missing):
    env = dict(base_env)
    del env[missing]
    with pytest.raises(MissingRequiredConfig) as excinfo:
        load_settings(env)
    assert excinfo.value.name == missing
    assert missing in str(excinfo.value)


def test_load_settings_treats_blank_values_as_missing(base_env):
    env = dict(base_env, CUSTOM_FEE_TOKEN_ADDRESS="   ")
    with pytest.raises(MissingRequiredConfig):
        load_settings(env)


def test_load_settings_defaults(base_env):
    env = dict(base_env)
    env.pop("PARENT_CHAIN_RPC")
    settings = load_settings(env)

    assert settings.deployer_private_key == DEPLOYER_KEY
    assert settings.custom_fee_token_address == FEE_TOKEN
    assert settings.parent_chain_rpc is None
    assert settings.batch_poster_private_key is None
    assert settings.validator_private_key is None
    assert settings.parent_chain is ARBITRUM_SEPOLIA
    assert settings.keyset == bytes.fromhex(DEFAULT_KEYSET[2:])
    assert settings.rollup_creator is None


def test_load_settings_reads_optional_values(base_env):
    env = dict(
        base_env,
        KEYSET="0xabcd",
        PARENT_CHAIN_ID="42161",
        ROLLUP_CREATOR_ADDRESS="0x" + "11" * 20,
    )
    settings = load_settings(env)
    assert settings.keyset == b"\xab\xcd"
    assert settings.parent_chain is ARBITRUM_ONE
    assert settings.rollup_creator == "0x" + "11" * 20


@pytest.mark.parametrize(
    "overrides",
    [
        {"CUSTOM_FEE_TOKEN_ADDRESS": "0x1234"},
        {"KEYSET": "0xnothex"},
        {"KEYSET": "0xabc"},
        {"PARENT_CHAIN_ID": "1"},
        {"PARENT_CHAIN_ID": "arbitrum"},
        {"ROLLUP_CREATOR_ADDRESS": "creator"},
    ],
)
def test_load_settings_rejects_malformed_values(base_env, overrides):
    with pytest.raises(OrbitDeploymentError):
        load_settings(dict(base_env, **overrides))


def test_settings_repr_hides_private_keys(base_env):
    settings = load_settings(dict(base_env, BATCH_POSTER_PRIVATE_KEY="0x" + "22" * 32))
    text = repr(settings)
    assert DEPLOYER_KEY not in text
    assert "22" * 32 not in text
    assert FEE_TOKEN in text


def test_load_settings_uses_process_environment(monkeypatch, base_env):
    for key, value in base_env.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setattr(config_module, "load_dotenv", lambda override=False: False)

    settings = load_settings()
    assert settings.custom_fee_token_address == FEE_TOKEN
