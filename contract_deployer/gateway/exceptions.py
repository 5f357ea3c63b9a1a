"""
Exceptions for the chain gateway module.
"""
from typing import Optional


class GatewayError(Exception):
    """Base exception for chain gateway errors."""
    pass


class GatewayConnectionError(GatewayError):
    """Raised when the RPC endpoint cannot be reached."""
    pass


class GatewayResponseError(GatewayError):
    """Raised when the node answers with an error."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.error_code = error_code
        super().__init__(message)


class GatewayTimeoutError(GatewayError):
    """Raised when a transaction is not confirmed in time."""
    pass
