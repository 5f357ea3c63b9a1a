"""
Console narrative for a deployment run.

Everything here is presentation; the only decision it makes is whether
an explorer verification command applies to the network.
"""
import sys
from typing import Optional, TextIO

from web3 import Web3

from .artifact import ContractArtifact
from .config import DEFAULT_EXPLORER_TOOL, LOCAL_CHAIN_ID, is_local_chain
from .executor import ContractHandle
from .models import AccountInfo, NetworkInfo
from .outcome import Fatal, PipelineOutcome, Success
from .recorder import RecordOutcome
from .verifier import VerificationResult

RULE = "-" * 60


def explorer_command(
    network: NetworkInfo,
    address: str,
    tool: str = DEFAULT_EXPLORER_TOOL,
    local_chain_id: int = LOCAL_CHAIN_ID
) -> Optional[str]:
    """
    Build the explorer verification command.

    Returns:
        ``<tool> verify --network <name> <address>``, or None on the
        local development chain
    """
    if is_local_chain(network.chain_id, local_chain_id):
        return None
    return f"{tool} verify --network {network.name} {address}"


class SummaryReporter:
    """Writes progress and the final summary to a text stream"""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        explorer_tool: str = DEFAULT_EXPLORER_TOOL,
        local_chain_id: int = LOCAL_CHAIN_ID
    ):
        self.stream = stream or sys.stdout
        self.explorer_tool = explorer_tool
        self.local_chain_id = local_chain_id

    def _line(self, text: str = "") -> None:
        print(text, file=self.stream)

    # Progress

    def start(self, artifact: ContractArtifact) -> None:
        self._line(f"Starting {artifact.contract_name} deployment...")
        self._line()

    def account(self, address: str) -> None:
        self._line(f"Deploying contracts with account: {address}")

    def balance(self, account: AccountInfo) -> None:
        self._line(f"Account balance: {Web3.from_wei(account.balance, 'ether')} ETH")
        self._line()

    def deploying(self, artifact: ContractArtifact) -> None:
        self._line(f"Deploying {artifact.contract_name} contract...")

    def deployed(self, handle: ContractHandle) -> None:
        receipt = handle.receipt
        self._line(f"{handle.artifact.contract_name} contract deployed successfully!")
        self._line(f"Contract address: {handle.address}")
        self._line(f"Transaction hash: {receipt.tx_hash}")
        self._line(f"Gas limit: {receipt.gas_limit}")
        self._line(f"Gas used: {receipt.gas_used}")
        self._line(f"Gas price: {Web3.from_wei(receipt.gas_price, 'gwei')} gwei")
        self._line()

    def contract_info(self, network: NetworkInfo, account: AccountInfo, handle: ContractHandle) -> None:
        self._line("Contract Information:")
        self._line(RULE)
        self._line(f"Contract Name: {handle.artifact.contract_name}")
        self._line(f"Contract Address: {handle.address}")
        self._line(f"Deployer Address: {account.address}")
        self._line(f"Network: {network.name} (chainId {network.chain_id})")
        self._line(f"Block Number: {handle.receipt.block_number}")
        self._line(RULE)
        self._line()

    def verification(self, result: VerificationResult) -> None:
        self._line("Verifying initial contract state...")
        for query in result.results.values():
            if query.ok:
                self._line(f"  ok   {query.label}: {query.display}")
            else:
                self._line(f"  FAIL {query.label}: {query.error}")
        self._line()

    def record_saved(self, outcome: RecordOutcome) -> None:
        if outcome.saved:
            self._line(f"Deployment info saved to: {outcome.path}")
        else:
            self._line(f"Warning: could not save deployment info: {outcome.error.message}")

    # Final report

    def next_steps(self, artifact: ContractArtifact) -> None:
        self._line("Next Steps:")
        self._line(RULE)
        self._line("1. Save the contract address for frontend integration")
        self._line("2. Verify the contract on a block explorer (optional)")
        functions = artifact.mutating_functions()
        if functions:
            self._line("3. Try the contract functions:")
            for signature in functions:
                self._line(f"   - {signature}")
        self._line(RULE)
        self._line()

    def report(self, outcome: PipelineOutcome) -> int:
        """
        Render the end of the run.

        Returns:
            Process exit status for ``outcome``
        """
        if isinstance(outcome, Success):
            self._report_success(outcome)
        elif isinstance(outcome, Fatal):
            self._report_failure(outcome)
        return outcome.exit_code

    def _report_success(self, outcome: Success) -> None:
        self.next_steps(outcome.handle.artifact)

        command = explorer_command(
            outcome.network, outcome.handle.address, self.explorer_tool, self.local_chain_id
        )
        if command:
            self._line("Explorer Verification Command:")
            self._line(command)
            self._line()

        self._line("Deployment completed successfully!")
        if outcome.verification.failures:
            names = ", ".join(r.name for r in outcome.verification.failures)
            self._line(f"Note: state verification reported errors for: {names}")
        self._line()
        self._line("Deployment Summary:")
        self._line(f"Contract Address: {outcome.handle.address}")
        self._line(f"Deployer: {outcome.account.address}")
        if outcome.record_outcome.saved:
            self._line(f"Record: {outcome.record_outcome.path}")

    def _report_failure(self, outcome: Fatal) -> None:
        error = outcome.error
        self._line()
        self._line("Deployment failed:")
        self._line(f"{error.kind.value}: {error.message}")
        tx_hash = getattr(error, "tx_hash", None)
        if tx_hash:
            self._line(f"Transaction hash: {tx_hash} (check it on the network before redeploying)")
