"""
Envelope signer with EIP-191 message signing.

Wraps a price payload into a scope-tagged ``IntentMessage``, BCS-encodes it,
signs the bytes with the process key using EIP-191 personal-sign, and
returns the complete ``SignedEnvelope``.  ECDSA nonces are derived per
RFC 6979, so identical inputs always produce identical signatures.
"""
from typing import Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from loguru import logger

from src.feedrelay.oracle.schemas import (
    IntentMessage,
    IntentScope,
    PriceFeedResult,
    SignedEnvelope,
)


class EnclaveSigner:
    """Holds the process signing key and signs intent messages."""

    def __init__(self, private_key: Optional[str] = None):
        """
        Args:
            private_key: Hex-encoded secp256k1 private key (with or without
                         ``0x`` prefix).  When ``None`` an ephemeral key is
                         generated; it lives only as long as the process.
        """
        if private_key is None:
            self._account = Account.create()
            logger.warning("No signing key configured, generated an ephemeral key.")
        else:
            if not private_key.startswith("0x"):
                private_key = "0x" + private_key
            self._account = Account.from_key(private_key)

        logger.info(f"EnclaveSigner initialised. Signer: {self._account.address}")

    @property
    def address(self) -> str:
        """Checksummed address derived from the signing key."""
        return self._account.address

    def build(
        self,
        payload: PriceFeedResult,
        timestamp_ms: int,
        scope: IntentScope = IntentScope.PRICE_FEED,
    ) -> SignedEnvelope:
        """Sign *payload* under *scope* at *timestamp_ms*.

        Returns:
            A ``SignedEnvelope`` carrying the intent message and the
            hex-encoded signature over its BCS bytes.
        """
        message = IntentMessage(intent=scope, timestamp_ms=timestamp_ms, data=payload)
        signing_bytes = message.to_bcs()

        signed = self._account.sign_message(encode_defunct(primitive=signing_bytes))
        signature = bytes(signed.signature).hex()

        logger.debug(
            f"Signed {scope.name} message ({len(signing_bytes)} bytes) "
            f"by {self._account.address[:10]}..."
        )
        return SignedEnvelope(response=message, signature=signature)


def recover_signer(envelope: SignedEnvelope) -> str:
    """Recover the address that produced *envelope*'s signature."""
    message = encode_defunct(primitive=envelope.response.to_bcs())
    return Account.recover_message(message, signature=bytes.fromhex(envelope.signature))
