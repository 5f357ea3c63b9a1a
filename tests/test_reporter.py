"""
Tests for SummaryReporter and the explorer command.
"""
import io

from hypothesis import given, strategies as st

from contract_deployer.exceptions import (
    DeploymentError, ErrorKind, PersistenceError, ResolutionError
)
from contract_deployer.executor import DeploymentExecutor
from contract_deployer.models import AccountInfo, NetworkInfo
from contract_deployer.outcome import Fatal, Success
from contract_deployer.recorder import RecordOutcome
from contract_deployer.reporter import SummaryReporter, explorer_command
from contract_deployer.verifier import QueryResult, VerificationResult
from conftest import DEPLOYER

ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

network_names = st.text(
    min_size=1, max_size=20,
    alphabet=st.characters(whitelist_categories=("Ll", "Nd"), whitelist_characters="-")
)


@given(chain_id=st.integers(min_value=1, max_value=2**63).filter(lambda c: c != 31337), name=network_names)
def test_explorer_command_present_off_local_chain(chain_id, name):
    network = NetworkInfo(name=name, chain_id=chain_id, block_number=1)
    assert explorer_command(network, ADDRESS) == f"npx hardhat verify --network {name} {ADDRESS}"


@given(name=network_names)
def test_explorer_command_absent_on_local_chain(name):
    network = NetworkInfo(name=name, chain_id=31337, block_number=1)
    assert explorer_command(network, ADDRESS) is None


def test_explorer_command_custom_tool_and_local_chain():
    network = NetworkInfo(name="dev", chain_id=1337, block_number=0)

    assert explorer_command(network, ADDRESS, local_chain_id=1337) is None
    assert explorer_command(network, ADDRESS, tool="forge") == f"forge verify --network dev {ADDRESS}"


def _success(stub_gateway, artifact, network, record_outcome=None, verification=None):
    handle = DeploymentExecutor(stub_gateway).deploy(artifact, DEPLOYER)
    return Success(
        record=None,
        network=network,
        account=AccountInfo(address=DEPLOYER, balance=10**18),
        handle=handle,
        verification=verification or VerificationResult(),
        record_outcome=record_outcome or RecordOutcome(path="deployments/deployment-x-1.json"),
    )


class TestReport:

    def test_success_on_public_network(self, stub_gateway, project_artifact, reporter, console):
        network = NetworkInfo(name="sepolia", chain_id=11155111, block_number=9)
        outcome = _success(stub_gateway, project_artifact, network)

        assert reporter.report(outcome) == 0

        text = console.getvalue()
        assert "Next Steps:" in text
        assert "   - createProject(string, uint256)" in text
        assert f"npx hardhat verify --network sepolia {outcome.handle.address}" in text
        assert "Deployment completed successfully!" in text
        assert f"Contract Address: {outcome.handle.address}" in text
        assert f"Deployer: {DEPLOYER}" in text
        assert "Record: deployments/deployment-x-1.json" in text

    def test_success_on_local_chain_has_no_explorer_command(self, stub_gateway, project_artifact, reporter, console):
        network = NetworkInfo(name="localhost", chain_id=31337, block_number=9)

        reporter.report(_success(stub_gateway, project_artifact, network))

        assert "Explorer Verification Command" not in console.getvalue()

    def test_success_notes_failed_queries_and_missing_record(self, stub_gateway, project_artifact, reporter, console):
        network = NetworkInfo(name="localhost", chain_id=31337, block_number=9)
        verification = VerificationResult({
            "owner": QueryResult(name="owner", label="Contract owner", error="execution reverted"),
        })
        record_outcome = RecordOutcome(error=PersistenceError("read-only file system"))

        exit_code = reporter.report(
            _success(stub_gateway, project_artifact, network, record_outcome, verification)
        )

        text = console.getvalue()
        assert exit_code == 0
        assert "state verification reported errors for: owner" in text
        assert "Record:" not in text

    def test_failure(self, reporter, console):
        outcome = Fatal(error=ResolutionError("No signing account", ErrorKind.NO_ACCOUNT))

        assert reporter.report(outcome) == 1

        text = console.getvalue()
        assert "Deployment failed:" in text
        assert "NoAccount: No signing account" in text
        assert "Deployment completed successfully!" not in text

    def test_failure_with_pending_transaction(self, reporter, console):
        error = DeploymentError("not confirmed", ErrorKind.CONFIRMATION_TIMEOUT, tx_hash="0xfeed")

        reporter.report(Fatal(error=error))

        assert "Transaction hash: 0xfeed" in console.getvalue()


def test_progress_lines(stub_gateway, project_artifact):
    stream = io.StringIO()
    reporter = SummaryReporter(stream=stream)

    reporter.balance(AccountInfo(address=DEPLOYER, balance=10**18))
    reporter.deployed(DeploymentExecutor(stub_gateway).deploy(project_artifact, DEPLOYER))

    text = stream.getvalue()
    assert "Account balance: 1 ETH" in text
    assert "Gas price: 1.875 gwei" in text
    assert "Gas limit: 1500000" in text
