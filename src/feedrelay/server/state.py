"""
Process-wide application state.

Built once at startup and shared read-only by every request handler: the
signing key, the loaded configuration and the clients wired into the
pipeline.  Nothing here is mutated after construction.
"""
import os
from dataclasses import dataclass
from typing import Optional

import requests
from loguru import logger

from src.feedrelay.core.pipeline import PriceFeedPipeline
from src.feedrelay.data.adapters.http_adapter import HttpPriceSource
from src.feedrelay.oracle.signer import EnclaveSigner
from src.feedrelay.sui.client import SuiClient
from src.feedrelay.utils.config import AppConfig

SIGNER_KEY_ENV = "ENCLAVE_SIGNER_KEY"


@dataclass(frozen=True)
class AppState:
    config: AppConfig
    signer: EnclaveSigner
    sui_client: SuiClient
    pipeline: PriceFeedPipeline

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        private_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> "AppState":
        """Wire the signer, clients and pipeline for *config*.

        Args:
            config: Validated application configuration.
            private_key: Hex signing key; falls back to
                         ``$ENCLAVE_SIGNER_KEY`` and then to an ephemeral key.
            session: Optional HTTP session for the Sui client and the price
                     source, mainly for tests.
        """
        signer = EnclaveSigner(private_key=private_key or os.getenv(SIGNER_KEY_ENV))

        sui_client = SuiClient(
            rpc_url=config.sui.rpc_url,
            oracle_builder_package_id=config.sui.oracle_builder_package_id,
            session=session,
        )
        pipeline = PriceFeedPipeline(
            sui_client=sui_client,
            price_source=HttpPriceSource(session=session),
            signer=signer,
            price_decimals=config.response.price_decimals,
        )

        logger.info(
            f"App state ready: rpc={config.sui.rpc_url} "
            f"| decimals={config.response.price_decimals}"
        )
        return cls(config=config, signer=signer, sui_client=sui_client, pipeline=pipeline)
