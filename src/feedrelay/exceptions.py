"""
Error taxonomy for the price relay.

Every failure in the transform chain is terminal for the request: there is
no retry and no fallback value.  Each class maps to one kind of failure so
the HTTP layer (and tests) can tell them apart without parsing messages.
"""
from enum import Enum
from typing import Optional


class RelayError(Exception):
    """Base exception for all relay failures.

    ``stage`` is filled in by the pipeline with the stage that was being
    executed when the error was raised.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.stage = None


class ConfigError(RelayError):
    """Raised when the configuration file is missing or invalid."""


class RpcTransportError(RelayError):
    """Raised when the Sui RPC endpoint cannot be reached."""


class RpcProtocolError(RelayError):
    """Raised when the RPC response is malformed or not a PriceFeed."""


class FeedInvalidError(RelayError):
    """Raised when the descriptor marks itself as invalid."""


class UnsupportedAuthSchemeError(RelayError):
    """Raised when ``api_key_config`` names an unknown header scheme."""


class ExternalTransportError(RelayError):
    """Raised when the external price API request fails."""


class ExternalParseError(RelayError):
    """Raised when the external price API does not return JSON."""


class PathErrorKind(str, Enum):
    MISSING_FIELD = "missing_field"
    INVALID_INDEX = "invalid_index"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    MALFORMED_PATH = "malformed_path"


class PathExtractionError(RelayError):
    """Raised when a path expression cannot be resolved."""

    def __init__(
        self,
        kind: PathErrorKind,
        message: str,
        path: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.path = path

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"Failed to extract price from field '{self.path}': {self.message}"


class ValueTypeError(RelayError):
    """Raised when the extracted value is neither a string nor a number."""


class NumericParseError(RelayError):
    """Raised when a string price is not a valid decimal number."""


class PriceOverflowError(RelayError):
    """Raised when the scaled price does not fit in an unsigned 64-bit integer."""


class ClockError(RelayError):
    """Raised when the system clock cannot produce a Unix timestamp."""
