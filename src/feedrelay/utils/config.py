"""
Configuration loader.

Reads the TOML file named by the ``CONFIG_PATH`` environment variable and
validates it against ``AppConfig``.  Loading happens once at startup so
configuration errors surface before the server accepts requests.

Expected TOML structure::

    [sui]
    rpc_url = "https://fullnode.testnet.sui.io:443"
    oracle_builder_package_id = "0x3c15...7127"

    [response]
    price_decimals = 8
"""
import os
import tomllib
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.feedrelay.exceptions import ConfigError

CONFIG_PATH_ENV = "CONFIG_PATH"

# 10**19 is the largest power of ten below 2**64.
MAX_PRICE_DECIMALS = 19


class SuiConfig(BaseModel):
    rpc_url: str = Field(..., min_length=1, description="Sui full node JSON-RPC URL")
    oracle_builder_package_id: str = Field(
        ..., min_length=1,
        description="Package publishing oracle_builder::PriceFeed",
    )


class ResponseConfig(BaseModel):
    price_decimals: int = Field(
        ..., ge=0, le=MAX_PRICE_DECIMALS,
        description="Fixed-point decimals applied to every price",
    )


class AppConfig(BaseModel):
    """Validated process configuration, immutable after startup."""

    model_config = ConfigDict(frozen=True)

    sui: SuiConfig
    response: ResponseConfig


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load and validate the configuration file.

    Args:
        config_path: Explicit path; defaults to ``$CONFIG_PATH``.

    Raises:
        ConfigError: If the path is unset, the file is missing, the TOML is
            invalid or the content violates the schema.
    """
    config_path = config_path or os.getenv(CONFIG_PATH_ENV)
    if not config_path:
        logger.critical(f"{CONFIG_PATH_ENV} environment variable is not set")
        raise ConfigError(f"{CONFIG_PATH_ENV} environment variable is not set")

    path = Path(config_path)
    logger.info(f"Loading config from: {path}")

    if not path.exists():
        logger.critical(f"Config file not found at: {path}")
        raise ConfigError(f"Failed to read config file at: {path}")

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        logger.critical(f"Invalid TOML in config file: {e}")
        raise ConfigError(f"Failed to parse config file at: {path}") from e

    try:
        config = AppConfig.model_validate(raw)
    except ValidationError as e:
        logger.critical(f"Config schema violation: {e}")
        raise ConfigError(f"Invalid config file at {path}: {e}") from e

    logger.info("Config loaded successfully")
    return config
