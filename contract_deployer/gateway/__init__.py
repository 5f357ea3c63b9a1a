"""
Chain gateway for contract-deployer.

``Web3Gateway`` talks to a live node over JSON-RPC; ``StubGateway``
simulates a local chain in memory.
"""
from .base import ChainGateway
from .exceptions import (
    GatewayError, GatewayConnectionError, GatewayResponseError, GatewayTimeoutError
)
from .stub_gateway import StubGateway
from .web3_gateway import Web3Gateway

__all__ = [
    "ChainGateway",
    "Web3Gateway",
    "StubGateway",
    "GatewayError",
    "GatewayConnectionError",
    "GatewayResponseError",
    "GatewayTimeoutError",
]
