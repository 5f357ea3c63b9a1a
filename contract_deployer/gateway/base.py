"""
Chain gateway interface.

The pipeline never talks to a node directly; it goes through a
``ChainGateway`` so the same code drives a live JSON-RPC endpoint or the
in-memory stub chain.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

from ..models import TxReceipt


class ChainGateway(ABC):
    """
    Abstract base class for chain gateway implementations.

    Implementations raise ``GatewayError`` subclasses and nothing else
    for node-side failures.
    """

    @abstractmethod
    def accounts(self) -> List[str]:
        """
        Addresses this gateway can send transactions from.

        Returns:
            Checksummed addresses, preferred signer first
        """
        pass

    @abstractmethod
    def chain_id(self) -> int:
        pass

    @abstractmethod
    def block_number(self) -> int:
        pass

    @abstractmethod
    def get_balance(self, address: str) -> int:
        """Native balance of ``address`` in wei."""
        pass

    @abstractmethod
    def deploy_contract(
        self,
        abi: List[Dict[str, Any]],
        bytecode: str,
        sender: str,
        constructor_args: Sequence[Any] = ()
    ) -> str:
        """
        Submit a contract creation transaction.

        Returns:
            Transaction hash as a 0x-prefixed hex string

        Raises:
            GatewayResponseError: If the node rejects the transaction
            GatewayConnectionError: If the node cannot be reached
        """
        pass

    @abstractmethod
    def get_transaction(self, tx_hash: str) -> Dict[str, int]:
        """
        Gas parameters of a submitted transaction.

        Returns:
            ``{"gas": int, "gasPrice": int}``
        """
        pass

    @abstractmethod
    def wait_for_receipt(self, tx_hash: str, timeout: float) -> TxReceipt:
        """
        Block until the transaction is mined.

        Raises:
            GatewayTimeoutError: If no receipt arrives within ``timeout`` seconds
        """
        pass

    @abstractmethod
    def call(self, address: str, abi: List[Dict[str, Any]], function_name: str, *args: Any) -> Any:
        """Run a read-only contract call and return the decoded value."""
        pass
