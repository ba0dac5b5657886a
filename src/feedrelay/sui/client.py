"""
Sui JSON-RPC client for PriceFeed descriptors.

Issues a single ``sui_getObject`` call per request and validates the
untyped response step by step.  The type check against the configured
package id is the only thing standing between an arbitrary object address
and the pipeline, so it is an exact string comparison.
"""
from typing import Any, Dict, Optional

import requests
from loguru import logger

from src.feedrelay.exceptions import RpcProtocolError, RpcTransportError
from src.feedrelay.sui.schemas import PriceFeedDescriptor, price_feed_type

GET_OBJECT_OPTIONS = {
    "showType": True,
    "showOwner": True,
    "showPreviousTransaction": False,
    "showDisplay": False,
    "showContent": True,
    "showBcs": False,
    "showStorageRebate": False,
}

REQUIRED_STRING_FIELDS = ("oracle_id", "underlying_url", "response_field", "live_url")
OPTIONAL_STRING_FIELDS = ("api_key", "api_key_config")


class SuiClient:
    """Fetches and validates PriceFeed objects from a Sui full node."""

    def __init__(
        self,
        rpc_url: str,
        oracle_builder_package_id: str,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            rpc_url: Sui full node JSON-RPC endpoint.
            oracle_builder_package_id: Package that publishes the
                ``oracle_builder::PriceFeed`` type.
            session: Optional HTTP session.  By default every call goes through
                     a fresh ``requests`` session so concurrent requests share
                     no connection state.
        """
        self.rpc_url = rpc_url
        self.oracle_builder_package_id = oracle_builder_package_id
        self.expected_type = price_feed_type(oracle_builder_package_id)
        self._http = session or requests

    @staticmethod
    def build_request(object_address: str) -> Dict[str, Any]:
        """JSON-RPC body for ``sui_getObject`` on *object_address*."""
        return {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "sui_getObject",
            "params": [object_address, dict(GET_OBJECT_OPTIONS)],
        }

    def fetch_price_feed(self, object_address: str) -> PriceFeedDescriptor:
        """Fetch the PriceFeed object at *object_address*.

        Raises:
            RpcTransportError: If the node cannot be reached or answers with
                an HTTP error status.
            RpcProtocolError: If the response is malformed, carries an RPC
                error, or the object is not a PriceFeed of the configured
                package.
        """
        logger.debug(f"Fetching PriceFeed object {object_address} from {self.rpc_url}")

        try:
            response = self._http.post(
                self.rpc_url,
                json=self.build_request(object_address),
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Sui RPC request failed: {e}")
            raise RpcTransportError(f"Failed to send request to Sui RPC: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise RpcProtocolError(f"Failed to parse response from Sui RPC: {e}") from e

        descriptor = self.parse_price_feed(body)
        logger.info(
            f"Resolved PriceFeed {object_address} "
            f"(oracle {descriptor.oracle_id}, valid={descriptor.is_valid})"
        )
        return descriptor

    def parse_price_feed(self, body: Any) -> PriceFeedDescriptor:
        """Validate a raw ``sui_getObject`` response into a descriptor."""
        if not isinstance(body, dict):
            raise RpcProtocolError("Sui RPC response is not a JSON object")

        if "error" in body:
            raise RpcProtocolError(f"Sui RPC error: {body['error']}")

        result = body.get("result")
        if not isinstance(result, dict):
            raise RpcProtocolError("No result in RPC response")

        data = result.get("data")
        if not isinstance(data, dict):
            # Missing objects come back as {"result": {"error": {...}}}.
            detail = result.get("error")
            if detail is not None:
                raise RpcProtocolError(f"No data in result: {detail}")
            raise RpcProtocolError("No data in result")

        object_type = data.get("type")
        if not isinstance(object_type, str):
            raise RpcProtocolError("Missing object type")
        if object_type != self.expected_type:
            raise RpcProtocolError(
                f"Expected PriceFeed type {self.expected_type}, got {object_type}"
            )

        content = data.get("content")
        if not isinstance(content, dict):
            raise RpcProtocolError("Missing content")

        fields = content.get("fields")
        if not isinstance(fields, dict):
            raise RpcProtocolError("Missing fields in content")

        values: Dict[str, Any] = {}
        for name in REQUIRED_STRING_FIELDS:
            value = fields.get(name)
            if not isinstance(value, str):
                raise RpcProtocolError(f"Missing or invalid {name} field")
            values[name] = value

        is_valid = fields.get("is_valid")
        if not isinstance(is_valid, bool):
            raise RpcProtocolError("Missing or invalid is_valid field")
        values["is_valid"] = is_valid

        # Option<String> renders as null when unset; any other type is rejected.
        for name in OPTIONAL_STRING_FIELDS:
            value = fields.get(name)
            if value is not None and not isinstance(value, str):
                raise RpcProtocolError(
                    f"Invalid {name} field: expected a string, got {type(value).__name__}"
                )
            values[name] = value

        return PriceFeedDescriptor(**values)
