"""
In-memory chain gateway.

Simulates a local development chain: deployments are mined instantly
and view functions answer from a per-contract state table. Used for
dry runs and as a deterministic gateway in tests.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from web3 import Web3

from ..config import LOCAL_CHAIN_ID
from ..models import TxReceipt
from .base import ChainGateway
from .exceptions import (
    GatewayConnectionError, GatewayResponseError, GatewayTimeoutError
)

logger = logging.getLogger(__name__)

# First two Hardhat default accounts
DEFAULT_ACCOUNTS = [
    "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
    "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
]
DEFAULT_BALANCE = 10_000 * 10**18
DEFAULT_GAS_PRICE = 1_875_000_000
CREATION_GAS = 1_500_000


def _zero_value(output_type: str, sender: str) -> Any:
    """Initial value a freshly constructed contract reports for a getter."""
    if output_type == "address":
        return sender
    if output_type == "bool":
        return False
    if output_type == "string":
        return ""
    if output_type.startswith(("uint", "int")):
        return 0
    if output_type.startswith("bytes"):
        return b""
    return None


class StubGateway(ChainGateway):
    """
    A simple in-memory gateway.

    Failure modes can be switched on per instance to exercise the
    pipeline's error handling.
    """

    def __init__(
        self,
        chain_id: int = LOCAL_CHAIN_ID,
        accounts: Optional[Sequence[str]] = None,
        balances: Optional[Dict[str, int]] = None,
        block_number: int = 0,
        gas_price: int = DEFAULT_GAS_PRICE,
        contract_state: Optional[Dict[str, Any]] = None,
        failing_calls: Optional[Dict[str, str]] = None,
        reject_submission: Optional[str] = None,
        confirmation_timeout: bool = False,
        unreachable: bool = False
    ):
        """
        Initialize the stub chain.

        Args:
            chain_id: Chain ID to report
            accounts: Signer addresses (defaults to Hardhat's first two)
            balances: Wei balance per address (defaults to 10,000 ETH each)
            block_number: Current block height
            gas_price: Gas price applied to every transaction
            contract_state: Values returned by view calls, by function name;
                overrides the ABI-derived defaults
            failing_calls: Function name -> revert reason for view calls
            reject_submission: If set, creation transactions fail with this reason
            confirmation_timeout: If True, receipts never arrive
            unreachable: If True, every RPC fails with a connection error
        """
        self._chain_id = chain_id
        self._accounts = list(DEFAULT_ACCOUNTS if accounts is None else accounts)
        self._balances: Dict[str, int] = {a: DEFAULT_BALANCE for a in self._accounts}
        self._balances.update(balances or {})
        self._block_number = block_number
        self.gas_price = gas_price
        self.contract_state = dict(contract_state or {})
        self.failing_calls = dict(failing_calls or {})
        self.reject_submission = reject_submission
        self.confirmation_timeout = confirmation_timeout
        self.unreachable = unreachable

        self._nonces: Dict[str, int] = {}
        self._transactions: Dict[str, Dict[str, Any]] = {}
        self._contracts: Dict[str, Dict[str, Any]] = {}
        self.deployments: List[str] = []

    def _check_reachable(self) -> None:
        if self.unreachable:
            raise GatewayConnectionError("Stub chain is unreachable")

    def accounts(self) -> List[str]:
        self._check_reachable()
        return list(self._accounts)

    def chain_id(self) -> int:
        self._check_reachable()
        return self._chain_id

    def block_number(self) -> int:
        self._check_reachable()
        return self._block_number

    def get_balance(self, address: str) -> int:
        self._check_reachable()
        return self._balances.get(address, 0)

    def deploy_contract(
        self,
        abi: List[Dict[str, Any]],
        bytecode: str,
        sender: str,
        constructor_args: Sequence[Any] = ()
    ) -> str:
        self._check_reachable()
        if self.reject_submission:
            raise GatewayResponseError(self.reject_submission, error_code="-32000")

        cost = CREATION_GAS * self.gas_price
        if self._balances.get(sender, 0) < cost:
            raise GatewayResponseError(
                "insufficient funds for gas * price + value", error_code="-32000"
            )

        nonce = self._nonces.get(sender, 0)
        self._nonces[sender] = nonce + 1
        address = Web3.to_checksum_address("0x" + bytes(Web3.keccak(text=f"{sender}:{nonce}")[-20:]).hex())
        tx_hash = "0x" + bytes(Web3.keccak(text=f"{sender}:{nonce}:{bytecode}")).hex()

        state: Dict[str, Any] = {}
        for item in abi:
            if item.get("type") != "function" or item.get("inputs"):
                continue
            if item.get("stateMutability") not in ("view", "pure"):
                continue
            outputs = item.get("outputs") or []
            if len(outputs) == 1:
                state[item["name"]] = _zero_value(outputs[0].get("type", ""), sender)
        state.update(self.contract_state)

        self._block_number += 1
        self._balances[sender] -= cost
        self._contracts[address] = state
        self._transactions[tx_hash] = {
            "gas": CREATION_GAS,
            "gasPrice": self.gas_price,
            "from": sender,
            "contractAddress": address,
            "blockNumber": self._block_number,
        }
        self.deployments.append(address)
        logger.debug(f"Stub deployment of {address} in block {self._block_number}")
        return tx_hash

    def get_transaction(self, tx_hash: str) -> Dict[str, int]:
        self._check_reachable()
        tx = self._transactions.get(tx_hash)
        if tx is None:
            raise GatewayResponseError(f"Unknown transaction {tx_hash}")
        return {"gas": tx["gas"], "gasPrice": tx["gasPrice"]}

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> TxReceipt:
        self._check_reachable()
        if self.confirmation_timeout:
            raise GatewayTimeoutError(
                f"Transaction {tx_hash} is not in the chain after {timeout} seconds"
            )
        tx = self._transactions.get(tx_hash)
        if tx is None:
            raise GatewayResponseError(f"Unknown transaction {tx_hash}")
        return TxReceipt(
            transactionHash=tx_hash,
            blockNumber=tx["blockNumber"],
            status=1,
            gasUsed=tx["gas"] * 9 // 10,
            contractAddress=tx["contractAddress"],
            effectiveGasPrice=tx["gasPrice"],
            **{"from": tx["from"]}
        )

    def call(self, address: str, abi: List[Dict[str, Any]], function_name: str, *args: Any) -> Any:
        self._check_reachable()
        if address not in self._contracts:
            raise GatewayResponseError(f"No contract at {address}")
        if function_name in self.failing_calls:
            raise GatewayResponseError(f"execution reverted: {self.failing_calls[function_name]}")
        state = self._contracts[address]
        if function_name not in state:
            raise GatewayResponseError(f"Function '{function_name}' not found in ABI")
        return state[function_name]
