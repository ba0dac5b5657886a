"""
Typed view of the on-chain ``oracle_builder::PriceFeed`` object.

The Sui JSON-RPC API returns Move object fields as untyped JSON; the client
validates them field by field and freezes the result into this model so the
rest of the pipeline never touches raw RPC data.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

PRICE_FEED_MODULE = "oracle_builder"
PRICE_FEED_STRUCT = "PriceFeed"


def price_feed_type(package_id: str) -> str:
    """Fully-qualified Move type of a PriceFeed published by *package_id*."""
    return f"{package_id}::{PRICE_FEED_MODULE}::{PRICE_FEED_STRUCT}"


class PriceFeedDescriptor(BaseModel):
    """Where and how to fetch a price, as configured on chain."""

    model_config = ConfigDict(frozen=True)

    oracle_id: str = Field(..., description="Oracle identifier echoed into the result")
    is_valid: bool = Field(..., description="Feeds marked invalid are never queried")
    api_key: Optional[str] = Field(None, description="Credential for the external API")
    api_key_config: Optional[str] = Field(
        None,
        description="Header scheme for the credential: 'Bearer' or 'x-api-key'",
    )
    underlying_url: str = Field(..., description="External endpoint returning JSON")
    response_field: str = Field(..., description="Path expression locating the price")
    live_url: str = Field(..., description="Informational link, not used for pricing")

    def __repr__(self) -> str:
        # Keep credentials out of logs and tracebacks.
        return (
            f"PriceFeedDescriptor(oracle_id={self.oracle_id!r}, "
            f"is_valid={self.is_valid}, underlying_url={self.underlying_url!r}, "
            f"response_field={self.response_field!r})"
        )

    __str__ = __repr__
