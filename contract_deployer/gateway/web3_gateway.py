"""
JSON-RPC chain gateway built on web3.py.
"""
import logging
import urllib.parse
from typing import Any, Dict, List, Optional, Sequence

import requests
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception

from ..models import TxReceipt
from .base import ChainGateway
from .exceptions import (
    GatewayError, GatewayConnectionError, GatewayResponseError, GatewayTimeoutError
)

logger = logging.getLogger(__name__)

# Errors web3.py and its HTTP transport surface for RPC failures
_RPC_ERRORS = (Web3Exception, ValueError, requests.RequestException, OSError)


def _to_hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


def _translate_error(action: str, exc: Exception) -> GatewayError:
    """Map a web3/requests exception onto the gateway hierarchy."""
    if isinstance(exc, TimeExhausted):
        return GatewayTimeoutError(f"{action} timed out: {exc}")
    if isinstance(exc, (requests.ConnectionError, requests.Timeout, ConnectionError)):
        return GatewayConnectionError(f"{action} failed, node unreachable: {exc}")

    # Node errors arrive as {"code": ..., "message": ...} payloads
    payload = exc.args[0] if exc.args else None
    rpc_response = getattr(exc, "rpc_response", None)
    if isinstance(rpc_response, dict) and isinstance(rpc_response.get("error"), dict):
        payload = rpc_response["error"]
    if isinstance(payload, dict):
        code = payload.get("code")
        message = payload.get("message", str(payload))
        return GatewayResponseError(
            f"{action} failed: {message}",
            error_code=str(code) if code is not None else None
        )
    return GatewayResponseError(f"{action} failed: {exc}")


class Web3Gateway(ChainGateway):
    """
    Gateway to an EVM node over HTTP JSON-RPC.

    When private keys are given, transactions are signed locally with
    eth-account and sent raw; otherwise the node's unlocked accounts
    (e.g. a Hardhat or Anvil node) are used.
    """

    def __init__(
        self,
        rpc_url: str,
        private_keys: Optional[Sequence[str]] = None,
        request_timeout: int = 30,
        poll_latency: float = 0.5,
        w3: Optional[Web3] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the gateway.

        Args:
            rpc_url: Node endpoint (http:// only for localhost/127.0.0.1)
            private_keys: Hex private keys; first one becomes the deployer
            request_timeout: HTTP timeout per RPC request in seconds
            poll_latency: Receipt polling interval in seconds
            w3: Preconfigured Web3 instance (tests)
            logger: Optional logger instance

        Raises:
            ValueError: If a remote URL does not use https, or a key is invalid
        """
        parsed = urllib.parse.urlparse(rpc_url)
        host = parsed.netloc.split(":")[0]
        is_local = host in ("localhost", "127.0.0.1")
        if parsed.scheme != "https" and not is_local:
            raise ValueError(f"rpc_url must use https:// for remote nodes (got: {parsed.scheme}://)")

        self.rpc_url = rpc_url
        self.poll_latency = poll_latency
        self.logger = logger or logging.getLogger(__name__)
        self.w3 = w3 or Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout}))

        self._local_accounts: Dict[str, LocalAccount] = {}
        for key in private_keys or []:
            try:
                account = Account.from_key(key)
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid deployer private key: {type(e).__name__}")
            self._local_accounts[account.address] = account

    def accounts(self) -> List[str]:
        if self._local_accounts:
            return list(self._local_accounts)
        try:
            return [Web3.to_checksum_address(a) for a in self.w3.eth.accounts]
        except _RPC_ERRORS as e:
            raise _translate_error("eth_accounts", e) from e

    def chain_id(self) -> int:
        try:
            return int(self.w3.eth.chain_id)
        except _RPC_ERRORS as e:
            raise _translate_error("eth_chainId", e) from e

    def block_number(self) -> int:
        try:
            return int(self.w3.eth.block_number)
        except _RPC_ERRORS as e:
            raise _translate_error("eth_blockNumber", e) from e

    def get_balance(self, address: str) -> int:
        try:
            return int(self.w3.eth.get_balance(Web3.to_checksum_address(address)))
        except _RPC_ERRORS as e:
            raise _translate_error("eth_getBalance", e) from e

    def deploy_contract(
        self,
        abi: List[Dict[str, Any]],
        bytecode: str,
        sender: str,
        constructor_args: Sequence[Any] = ()
    ) -> str:
        signer = self._local_accounts.get(sender)

        try:
            # Argument encoding errors surface here, before anything is sent
            contract = self.w3.eth.contract(abi=abi, bytecode=bytecode)
            constructor = contract.constructor(*constructor_args)
            if signer is None:
                tx_hash = constructor.transact({"from": sender})
            else:
                nonce = self.w3.eth.get_transaction_count(sender, "pending")
                tx = constructor.build_transaction({"from": sender, "nonce": nonce})
                self.logger.debug(f"Built creation tx: nonce={nonce} gas={tx.get('gas')}")
                signed = signer.sign_transaction(tx)
                tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except _RPC_ERRORS + (TypeError,) as e:
            raise _translate_error("Contract creation", e) from e

        tx_hash_hex = _to_hex(tx_hash)
        self.logger.info(f"Creation transaction sent: {tx_hash_hex}")
        return tx_hash_hex

    def get_transaction(self, tx_hash: str) -> Dict[str, int]:
        try:
            tx = self.w3.eth.get_transaction(tx_hash)
        except _RPC_ERRORS as e:
            raise _translate_error("eth_getTransactionByHash", e) from e
        gas_price = tx.get("gasPrice") or tx.get("maxFeePerGas") or 0
        return {"gas": int(tx["gas"]), "gasPrice": int(gas_price)}

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> TxReceipt:
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=timeout,
                poll_latency=self.poll_latency
            )
        except _RPC_ERRORS as e:
            raise _translate_error(f"Waiting for {tx_hash}", e) from e
        return self._convert_receipt(receipt)

    def call(self, address: str, abi: List[Dict[str, Any]], function_name: str, *args: Any) -> Any:
        contract = self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
        try:
            function = getattr(contract.functions, function_name)
        except AttributeError:
            raise GatewayResponseError(f"Function '{function_name}' not found in ABI")
        try:
            return function(*args).call()
        except _RPC_ERRORS as e:
            raise _translate_error(f"Call {function_name}()", e) from e

    def _convert_receipt(self, web3_receipt: Any) -> TxReceipt:
        """
        Convert a web3 receipt to our TxReceipt model

        Args:
            web3_receipt: The web3 transaction receipt (AttributeDict)

        Returns:
            Our TxReceipt model
        """
        receipt_dict = dict(web3_receipt)
        for key, value in list(receipt_dict.items()):
            if isinstance(value, (bytes, bytearray)):
                receipt_dict[key] = _to_hex(value)
        return TxReceipt.model_validate(receipt_dict)
