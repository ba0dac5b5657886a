"""
Pydantic schemas for the signed price attestation.

These models define both the JSON returned to callers and the exact field
order that is BCS-encoded and signed.  The on-chain verifier rebuilds the
same ``IntentMessage`` bytes, so field order and integer widths here are
part of the wire contract.
"""
from enum import IntEnum

from pydantic import BaseModel, Field

from src.feedrelay.oracle import bcs

U64_MAX = bcs.U64_MAX


class IntentScope(IntEnum):
    """Domain separator encoded as the first byte of every signed message.

    A signature produced for one scope never verifies for another, even when
    the payload bytes are identical.
    """

    PRICE_FEED = 0
    PROCESS_DATA = 1


class PriceFeedResult(BaseModel):
    """Price attestation payload."""

    oracle_id: str
    price_feed_id: str = Field(..., description="PriceFeed object id from the request")
    price: int = Field(
        ..., ge=0, le=U64_MAX,
        description="Fixed-point price scaled by 10^price_decimals",
    )
    timestamp_ms: int = Field(
        ..., ge=0, le=U64_MAX,
        description="Capture time (Unix epoch milliseconds)",
    )

    def to_bcs(self) -> bytes:
        return (
            bcs.encode_str(self.oracle_id)
            + bcs.encode_str(self.price_feed_id)
            + bcs.encode_u64(self.price)
            + bcs.encode_u64(self.timestamp_ms)
        )


class IntentMessage(BaseModel):
    """Scope-tagged, timestamped wrapper around the payload that gets signed."""

    intent: IntentScope
    timestamp_ms: int = Field(..., ge=0, le=U64_MAX)
    data: PriceFeedResult

    def to_bcs(self) -> bytes:
        """Canonical signing bytes: ``u8 intent | u64 timestamp_ms | data``."""
        return (
            bcs.encode_u8(int(self.intent))
            + bcs.encode_u64(self.timestamp_ms)
            + self.data.to_bcs()
        )


class SignedEnvelope(BaseModel):
    """Complete response: the intent message plus its signature."""

    response: IntentMessage
    signature: str = Field(
        ...,
        description="Hex-encoded EIP-191 signature over the BCS intent message",
    )


class PriceFeedRequest(BaseModel):
    price_feed_id: str = Field(..., min_length=1)


class ProcessDataRequest(BaseModel):
    """Request wrapper accepted by ``/process_data``."""

    payload: PriceFeedRequest
