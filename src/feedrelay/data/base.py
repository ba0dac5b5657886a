"""
Abstract base class for external price sources.

A price source takes a PriceFeed descriptor and returns the decoded JSON
document served at its ``underlying_url``.  Extracting and scaling the
price is left to the pipeline, so every source only has to deal with
transport and authentication.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict

from loguru import logger

from src.feedrelay.exceptions import UnsupportedAuthSchemeError
from src.feedrelay.sui.schemas import PriceFeedDescriptor

BEARER_SCHEME = "Bearer"
API_KEY_SCHEME = "x-api-key"


def build_auth_headers(descriptor: PriceFeedDescriptor) -> Dict[str, str]:
    """Return the authentication header configured by *descriptor*.

    At most one header is produced.  A credential without a scheme (or a
    scheme without a credential) yields no header.

    Raises:
        UnsupportedAuthSchemeError: If ``api_key_config`` is not one of
            ``"Bearer"`` or ``"x-api-key"``.
    """
    api_key = descriptor.api_key
    scheme = descriptor.api_key_config

    if api_key is None or scheme is None:
        if api_key is not None or scheme is not None:
            logger.warning(
                f"Feed {descriptor.oracle_id} sets only one of api_key / "
                "api_key_config; sending the request unauthenticated."
            )
        return {}

    if scheme == BEARER_SCHEME:
        return {"Authorization": f"Bearer {api_key}"}
    if scheme == API_KEY_SCHEME:
        return {"x-api-key": api_key}

    logger.error(f"Unsupported api_key_config '{scheme}' on feed {descriptor.oracle_id}")
    raise UnsupportedAuthSchemeError(f"Unsupported api_key_config: {scheme}")


class PriceSource(ABC):
    """Contract that all external price adapters must satisfy."""

    @abstractmethod
    def fetch(self, descriptor: PriceFeedDescriptor) -> Any:
        """Fetch the raw JSON price payload for *descriptor*.

        Args:
            descriptor: A validated descriptor whose ``is_valid`` flag has
                        already been checked by the caller.

        Returns:
            The decoded JSON document (``dict``, ``list`` or scalar).
        """
