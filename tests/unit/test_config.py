"""
test_config.py
"""
import pytest

from src.feedrelay.exceptions import ConfigError
from src.feedrelay.utils.config import load_config

VALID_TOML = """
[sui]
rpc_url = "https://fullnode.testnet.sui.io:443"
oracle_builder_package_id = "0xabc"

[response]
price_decimals = 8
"""


def test_load_config_from_env(tmp_path, monkeypatch):
    path = tmp_path / "config.toml"
    path.write_text(VALID_TOML, encoding="utf-8")
    monkeypatch.setenv("CONFIG_PATH", str(path))

    config = load_config()

    assert config.sui.rpc_url == "https://fullnode.testnet.sui.io:443"
    assert config.sui.oracle_builder_package_id == "0xabc"
    assert config.response.price_decimals == 8


def test_missing_env_var(monkeypatch):
    monkeypatch.delenv("CONFIG_PATH", raising=False)
    with pytest.raises(ConfigError, match="CONFIG_PATH"):
        load_config()


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Failed to read config file"):
        load_config(str(tmp_path / "nope.toml"))


def test_invalid_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[sui\nrpc_url = ", encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed to parse config file"):
        load_config(str(path))


@pytest.mark.parametrize("body", [
    VALID_TOML.replace("price_decimals = 8", "price_decimals = -1"),
    VALID_TOML.replace("price_decimals = 8", "price_decimals = 20"),
    VALID_TOML.replace('oracle_builder_package_id = "0xabc"', ""),
])
def test_schema_violations(tmp_path, body):
    path = tmp_path / "config.toml"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid config file"):
        load_config(str(path))
