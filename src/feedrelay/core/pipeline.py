"""
Price feed pipeline.

Runs one request through the linear transform chain::

    RECEIVED -> DESCRIPTOR_FETCHED -> VALIDITY_CHECKED -> EXTERNAL_FETCHED
    -> VALUE_EXTRACTED -> NORMALIZED -> TIMESTAMPED -> SIGNED -> DELIVERED

Any ``RelayError`` moves the run to FAILED: the error is tagged with the
last stage reached and re-raised.  There is no retry and no partial
result.  The pipeline object itself holds only read-only collaborators, so
one instance serves concurrent requests.
"""
import time
from enum import Enum
from typing import Callable

from loguru import logger

from src.feedrelay.core.normalizer import normalize
from src.feedrelay.core.path import extract
from src.feedrelay.data.base import PriceSource
from src.feedrelay.exceptions import (
    ClockError,
    FeedInvalidError,
    NumericParseError,
    PriceOverflowError,
    RelayError,
    ValueTypeError,
)
from src.feedrelay.oracle.schemas import IntentScope, PriceFeedResult, SignedEnvelope
from src.feedrelay.oracle.signer import EnclaveSigner
from src.feedrelay.sui.client import SuiClient


class PipelineStage(str, Enum):
    RECEIVED = "received"
    DESCRIPTOR_FETCHED = "descriptor_fetched"
    VALIDITY_CHECKED = "validity_checked"
    EXTERNAL_FETCHED = "external_fetched"
    VALUE_EXTRACTED = "value_extracted"
    NORMALIZED = "normalized"
    TIMESTAMPED = "timestamped"
    SIGNED = "signed"
    DELIVERED = "delivered"


def current_timestamp_ms() -> int:
    """Current UTC time in Unix epoch milliseconds."""
    now_ms = time.time_ns() // 1_000_000
    if now_ms < 0:
        raise ClockError(
            f"Failed to get current timestamp: clock is before the Unix epoch ({now_ms} ms)"
        )
    return now_ms


class PriceFeedPipeline:
    """Turns a PriceFeed object id into a signed price attestation."""

    def __init__(
        self,
        sui_client: SuiClient,
        price_source: PriceSource,
        signer: EnclaveSigner,
        price_decimals: int,
        clock: Callable[[], int] = current_timestamp_ms,
    ):
        """
        Args:
            sui_client: Resolves PriceFeed descriptors on chain.
            price_source: Fetches the external JSON payload.
            signer: Signs the final intent message.
            price_decimals: Fixed-point scale applied to every price.
            clock: Millisecond timestamp source, overridable in tests.
        """
        self.sui_client = sui_client
        self.price_source = price_source
        self.signer = signer
        self.price_decimals = price_decimals
        self.clock = clock

    def run(self, price_feed_id: str) -> SignedEnvelope:
        """Execute the full chain for *price_feed_id*.

        Raises:
            RelayError: Any subclass, with ``stage`` set to the last stage
                the run completed before failing.
        """
        # Every record logged during the run, including the clients', carries
        # the feed id in its extra dict.
        with logger.contextualize(price_feed_id=price_feed_id):
            return self._run(price_feed_id)

    def _run(self, price_feed_id: str) -> SignedEnvelope:
        stage = PipelineStage.RECEIVED
        logger.info(f"Processing price feed {price_feed_id}")

        try:
            descriptor = self.sui_client.fetch_price_feed(price_feed_id)
            stage = PipelineStage.DESCRIPTOR_FETCHED

            # Checked before any external call is made.
            if not descriptor.is_valid:
                raise FeedInvalidError(f"Price feed {price_feed_id} is not valid")
            stage = PipelineStage.VALIDITY_CHECKED

            document = self.price_source.fetch(descriptor)
            stage = PipelineStage.EXTERNAL_FETCHED

            raw_price = extract(document, descriptor.response_field)
            stage = PipelineStage.VALUE_EXTRACTED
            logger.debug(f"Extracted raw price {raw_price!r} from '{descriptor.response_field}'")

            try:
                price = normalize(raw_price, self.price_decimals)
            except (ValueTypeError, NumericParseError, PriceOverflowError) as e:
                raise type(e)(
                    f"Price field '{descriptor.response_field}': {e.message}"
                ) from e
            stage = PipelineStage.NORMALIZED

            timestamp_ms = self.clock()
            stage = PipelineStage.TIMESTAMPED

            envelope = self.signer.build(
                PriceFeedResult(
                    oracle_id=descriptor.oracle_id,
                    price_feed_id=price_feed_id,
                    price=price,
                    timestamp_ms=timestamp_ms,
                ),
                timestamp_ms,
                IntentScope.PRICE_FEED,
            )
            stage = PipelineStage.SIGNED

        except RelayError as e:
            e.stage = stage
            logger.error(
                f"Price feed {price_feed_id} failed after stage {stage.value}: {e}"
            )
            raise

        stage = PipelineStage.DELIVERED
        logger.success(
            f"Price feed {price_feed_id} {stage.value}: price={price} "
            f"(decimals={self.price_decimals}) at {timestamp_ms}"
        )
        return envelope
