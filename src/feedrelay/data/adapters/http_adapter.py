"""
HTTP/JSON price source.

Performs one authenticated GET against the descriptor's ``underlying_url``.
No retries and no timeout override: a failed call fails the request.
Fractional JSON numbers are decoded as ``Decimal`` so the price keeps the
exact digits the API sent.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import requests
from loguru import logger

from src.feedrelay.data.base import PriceSource, build_auth_headers
from src.feedrelay.exceptions import ExternalParseError, ExternalTransportError
from src.feedrelay.sui.schemas import PriceFeedDescriptor


class HttpPriceSource(PriceSource):
    """Concrete PriceSource backed by ``requests``."""

    def __init__(self, session: Optional[requests.Session] = None):
        """
        Args:
            session: Optional HTTP session.  By default every call goes through
                     a fresh ``requests`` session so concurrent requests share
                     no connection state.
        """
        self._http = session or requests

    def fetch(self, descriptor: PriceFeedDescriptor) -> Any:
        """GET the descriptor's URL and decode the JSON body.

        Raises:
            UnsupportedAuthSchemeError: Before any request is sent, if the
                descriptor names an unknown auth scheme.
            ExternalTransportError: If the request fails or returns an HTTP
                error status.
            ExternalParseError: If the body is not valid JSON or holds a
                number ``Decimal`` cannot represent.
        """
        headers = build_auth_headers(descriptor)
        url = descriptor.underlying_url

        logger.info(
            f"Querying price source {url} "
            f"| auth: {descriptor.api_key_config if headers else 'none'}"
        )

        try:
            response = self._http.get(url, headers=headers)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Price source request failed: {e}")
            raise ExternalTransportError(
                f"Failed to get price feed response: {e}"
            ) from e

        # A number literal with an unrepresentable exponent raises
        # InvalidOperation, which is not a ValueError.
        try:
            payload = response.json(parse_float=Decimal)
        except (ValueError, InvalidOperation) as e:
            logger.error(f"Price source returned an undecodable body from {url}")
            raise ExternalParseError(
                f"Failed to parse price feed response: {e}"
            ) from e

        logger.debug(f"Price source {url} answered with status {response.status_code}")
        return payload
