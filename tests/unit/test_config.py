"""
Unit tests for chain configuration loading.
"""

import os

import pytest
from pydantic import ValidationError

from nftauction.core.config import ENV_PREFIX, ChainConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep NFTA_* variables from leaking between tests."""
    names = [ENV_PREFIX + name.upper() for name in ChainConfig.model_fields]
    for name in names:
        monkeypatch.delenv(name, raising=False)
    yield
    for name in names:
        os.environ.pop(name, None)


def test_defaults():
    config = ChainConfig()
    assert config.chain_id == 31337
    assert config.account_count == 10
    assert config.initial_balance == 10_000 * 10**18
    assert config.gas_price == 10**9
    assert config.block_time == 1
    assert config.genesis_timestamp is None


def test_config_is_frozen():
    config = ChainConfig()
    with pytest.raises(ValidationError):
        config.chain_id = 1


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        ChainConfig(account_count=0)
    with pytest.raises(ValidationError):
        ChainConfig(block_time=0)
    with pytest.raises(ValidationError):
        ChainConfig(gas_price=0)


def test_env_override(monkeypatch, tmp_path):
    monkeypatch.setenv("NFTA_CHAIN_ID", "1337")
    monkeypatch.setenv("NFTA_ACCOUNT_COUNT", "4")
    config = load_config(str(tmp_path / "missing.env"))
    assert config.chain_id == 1337
    assert config.account_count == 4


def test_dotenv_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("NFTA_BLOCK_TIME=12\nNFTA_GENESIS_TIMESTAMP=1700000000\n")
    config = load_config(str(env_file))
    assert config.block_time == 12
    assert config.genesis_timestamp == 1_700_000_000


def test_environment_wins_over_dotenv(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("NFTA_BLOCK_TIME=12\n")
    monkeypatch.setenv("NFTA_BLOCK_TIME", "3")
    assert load_config(str(env_file)).block_time == 3


def test_explicit_overrides_win(monkeypatch, tmp_path):
    monkeypatch.setenv("NFTA_CHAIN_ID", "1337")
    config = load_config(str(tmp_path / "missing.env"), chain_id=5)
    assert config.chain_id == 5


def test_invalid_env_value(monkeypatch, tmp_path):
    monkeypatch.setenv("NFTA_BLOCK_TIME", "soon")
    with pytest.raises(ValidationError):
        load_config(str(tmp_path / "missing.env"))
