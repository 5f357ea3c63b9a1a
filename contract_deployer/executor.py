"""
Submission of the contract creation transaction.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from .artifact import ContractArtifact
from .config import DEFAULT_CONFIRMATION_TIMEOUT
from .exceptions import DeploymentError, ErrorKind
from .gateway import ChainGateway, GatewayError
from .models import ReceiptMeta, TxReceipt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractHandle:
    """A deployed contract and the receipt of its creation transaction"""
    address: str
    receipt: ReceiptMeta
    artifact: ContractArtifact
    gateway: ChainGateway

    def call(self, function_name: str, *args: Any) -> Any:
        """Run a read-only function on the contract."""
        return self.gateway.call(self.address, self.artifact.abi, function_name, *args)

    def balance(self) -> int:
        """Native balance held by the contract, in wei."""
        return self.gateway.get_balance(self.address)


class DeploymentExecutor:
    """
    Deploys an artifact and waits for it to be mined.

    Nothing here is retried: a resubmitted creation transaction would
    produce a second contract at a different address.
    """

    def __init__(
        self,
        gateway: ChainGateway,
        confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
        reporter=None,
        logger: Optional[logging.Logger] = None
    ):
        self.gateway = gateway
        self.confirmation_timeout = confirmation_timeout
        self.reporter = reporter
        self.logger = logger or logging.getLogger(__name__)

    def deploy(
        self,
        artifact: ContractArtifact,
        sender: str,
        constructor_args: Sequence[Any] = ()
    ) -> ContractHandle:
        """
        Deploy ``artifact`` from ``sender``.

        Returns:
            ContractHandle for the confirmed contract

        Raises:
            ArtifactError: If the artifact has no deployable bytecode
            DeploymentError: SubmissionRejected or ConfirmationTimeout
        """
        artifact.ensure_deployable()
        if self.reporter:
            self.reporter.deploying(artifact)

        try:
            tx_hash = self.gateway.deploy_contract(
                artifact.abi, artifact.bytecode, sender, constructor_args
            )
        except GatewayError as e:
            self.logger.error(f"Creation transaction for {artifact.contract_name} rejected: {e}")
            raise DeploymentError(str(e), ErrorKind.SUBMISSION_REJECTED) from e

        self.logger.debug(f"Waiting up to {self.confirmation_timeout}s for {tx_hash}")
        try:
            receipt = self.gateway.wait_for_receipt(tx_hash, self.confirmation_timeout)
        except GatewayError as e:
            # The transaction may still be mined later
            self.logger.error(f"No confirmation for {tx_hash}: {e}")
            raise DeploymentError(
                f"Transaction {tx_hash} was not confirmed: {e}",
                ErrorKind.CONFIRMATION_TIMEOUT,
                tx_hash=tx_hash
            ) from e

        if receipt.status != 1:
            raise DeploymentError(
                f"Creation transaction {tx_hash} reverted in block {receipt.block_number}",
                ErrorKind.SUBMISSION_REJECTED,
                tx_hash=tx_hash
            )
        if not receipt.contract_address:
            raise DeploymentError(
                f"Receipt for {tx_hash} has no contract address",
                ErrorKind.SUBMISSION_REJECTED,
                tx_hash=tx_hash
            )

        gas_limit, gas_price = self._gas_figures(tx_hash, receipt)
        meta = ReceiptMeta(
            tx_hash=tx_hash,
            block_number=receipt.block_number,
            gas_limit=gas_limit,
            gas_price=gas_price,
            gas_used=receipt.gas_used
        )
        handle = ContractHandle(
            address=receipt.contract_address,
            receipt=meta,
            artifact=artifact,
            gateway=self.gateway
        )
        self.logger.info(f"{artifact.contract_name} deployed at {handle.address} (tx {tx_hash})")
        if self.reporter:
            self.reporter.deployed(handle)
        return handle

    def _gas_figures(self, tx_hash: str, receipt: TxReceipt) -> Tuple[int, int]:
        """
        Gas limit and price of the confirmed creation transaction.

        Load-balanced nodes may not serve the transaction yet even though
        its receipt exists; the receipt's figures are used then.
        """
        try:
            tx = self.gateway.get_transaction(tx_hash)
        except GatewayError as e:
            self.logger.warning(f"Transaction lookup for {tx_hash} failed, using receipt figures: {e}")
            return receipt.gas_used, receipt.effective_gas_price or 0
        return tx["gas"], tx["gasPrice"]
