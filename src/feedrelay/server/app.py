"""
HTTP boundary for the price relay.

Routes:
  - ``GET /``: liveness ping.
  - ``GET /health_check``: signer address and active configuration.
  - ``POST /process_data``: run the pipeline for one PriceFeed object id
    and return the signed envelope.

The route handlers are plain ``def`` functions, so FastAPI runs each
request in its worker thread pool while the blocking network calls of the
pipeline execute.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger

from src.feedrelay.exceptions import RelayError
from src.feedrelay.oracle.schemas import ProcessDataRequest, SignedEnvelope
from src.feedrelay.server.state import AppState


def create_app(state: AppState) -> FastAPI:
    """Build the FastAPI application bound to *state*."""
    app = FastAPI(
        title="feedrelay",
        description="Signed fixed-point prices for on-chain PriceFeed descriptors",
    )

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={
                "error": str(exc),
                "kind": type(exc).__name__,
                "stage": exc.stage.value if exc.stage is not None else None,
            },
        )

    @app.get("/", response_class=PlainTextResponse)
    def ping() -> str:
        return "Pong!"

    @app.get("/health_check")
    def health_check() -> dict:
        return {
            "status": "ok",
            "signer_address": state.signer.address,
            "oracle_builder_package_id": state.config.sui.oracle_builder_package_id,
            "price_decimals": state.config.response.price_decimals,
            "endpoints": ["/", "/health_check", "/process_data"],
        }

    @app.post("/process_data", response_model=SignedEnvelope)
    def process_data(request: ProcessDataRequest) -> SignedEnvelope:
        price_feed_id = request.payload.price_feed_id
        logger.info(f"process_data request for {price_feed_id}")
        return state.pipeline.run(price_feed_id)

    return app
