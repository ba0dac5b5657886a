"""
Price relay entry point.

Serves the signing API, or runs a single pipeline pass for one PriceFeed
object and prints the signed envelope:
  1. Configure logging (``--log-level`` or ``$LOG_LEVEL``) and load
     configuration from ``$CONFIG_PATH``.
  2. Initialise the signing key (``$ENCLAVE_SIGNER_KEY`` or ephemeral).
  3. Serve ``/process_data`` or resolve ``--feed`` once.

Usage::

    uv run main.py --port 3000
    uv run main.py --feed 0xb2b9...7e50
"""
import argparse
import json
import sys

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

import uvicorn  # noqa: E402

from src.feedrelay.exceptions import RelayError  # noqa: E402
from src.feedrelay.server.app import create_app  # noqa: E402
from src.feedrelay.server.state import AppState  # noqa: E402
from src.feedrelay.utils.config import load_config  # noqa: E402
from src.feedrelay.utils.logger import LEVELS, setup_logger  # noqa: E402


def run_once(state: AppState, price_feed_id: str) -> int:
    """Resolve *price_feed_id* once and print the envelope as JSON."""
    try:
        envelope = state.pipeline.run(price_feed_id)
    except RelayError as e:
        logger.error(f"Pipeline failed: {e}")
        return 1

    print(json.dumps(envelope.model_dump(mode="json"), indent=2))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="feedrelay: signed prices for on-chain PriceFeed objects",
    )
    parser.add_argument(
        "--host", type=str, default="0.0.0.0",
        help="Interface to bind the HTTP server to",
    )
    parser.add_argument(
        "--port", type=int, default=3000,
        help="Port for the HTTP server",
    )
    parser.add_argument(
        "--feed", type=str, default=None,
        help="Resolve this PriceFeed object id once and exit",
    )
    parser.add_argument(
        "--log-level", type=str.upper, default=None, choices=LEVELS,
        help="Terminal log level (defaults to $LOG_LEVEL, then INFO)",
    )
    args = parser.parse_args()

    try:
        setup_logger(level=args.log_level)
    except ValueError as e:
        parser.error(str(e))

    try:
        config = load_config()
    except RelayError as e:
        logger.error(f"Startup failed: {e}")
        sys.exit(1)

    state = AppState.from_config(config)

    if args.feed:
        sys.exit(run_once(state, args.feed))

    logger.info(f"Starting feedrelay on {args.host}:{args.port}")
    logger.info(f"  Signer: {state.signer.address}")
    uvicorn.run(create_app(state), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
