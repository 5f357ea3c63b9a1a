"""
Pytest fixtures for the contract-deployer tests.
"""
import io
import json
import time
from datetime import datetime, timezone

import pytest

from contract_deployer.artifact import ContractArtifact
from contract_deployer.config import NetworkConfig
from contract_deployer.gateway import StubGateway
from contract_deployer.gateway.stub_gateway import DEFAULT_ACCOUNTS
from contract_deployer.recorder import ProvenanceRecorder
from contract_deployer.reporter import SummaryReporter

# Constants for testing
TEST_RPC_URL = "http://127.0.0.1:8545"
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
DEPLOYER = DEFAULT_ACCOUNTS[0]
FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, 123000, tzinfo=timezone.utc)

PROJECT_ABI = [
    {"inputs": [], "stateMutability": "nonpayable", "type": "constructor"},
    {
        "inputs": [],
        "name": "owner",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "projectCounter",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "platformFeePercent",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "registerClient",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [
            {"internalType": "string", "name": "title", "type": "string"},
            {"internalType": "uint256", "name": "deadline", "type": "uint256"}
        ],
        "name": "createProject",
        "outputs": [],
        "stateMutability": "payable",
        "type": "function"
    },
    {
        "anonymous": False,
        "inputs": [{"indexed": True, "internalType": "address", "name": "client", "type": "address"}],
        "name": "ClientRegistered",
        "type": "event"
    }
]
PROJECT_BYTECODE = "0x608060405234801561001057600080fd5b50610150806100206000396000f3fe"


# Make time.sleep instantaneous so web3's HTTP retries don't slow the suite down
@pytest.fixture(autouse=True)
def _fast_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda *_a, **_kw: None)


@pytest.fixture(autouse=True)
def _reset_network_cache():
    NetworkConfig._networks_cache = None
    yield
    NetworkConfig._networks_cache = None


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the developer's deployment settings out of the tests"""
    for name in (
        "DEPLOY_NETWORK", "DEPLOY_RPC_URL", "DEPLOYER_PRIVATE_KEY", "DEPLOY_CONTRACT",
        "DEPLOY_ARTIFACT", "DEPLOY_ARTIFACTS_DIR", "DEPLOYMENTS_DIR",
        "DEPLOY_CONFIRMATION_TIMEOUT", "DEPLOY_EXPLORER_TOOL", "DEPLOY_LOCAL_CHAIN_ID",
        "LOCALHOST_RPC_URL", "SEPOLIA_RPC_URL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project_artifact():
    """A Hardhat-style artifact for the Project contract"""
    return ContractArtifact(
        contract_name="Project",
        abi=PROJECT_ABI,
        bytecode=PROJECT_BYTECODE,
    )


@pytest.fixture
def artifact_file(tmp_path):
    """Project artifact written in the Hardhat output layout"""
    path = tmp_path / "artifacts" / "contracts" / "Project.sol" / "Project.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps({
        "_format": "hh-sol-artifact-1",
        "contractName": "Project",
        "sourceName": "contracts/Project.sol",
        "abi": PROJECT_ABI,
        "bytecode": PROJECT_BYTECODE,
        "deployedBytecode": "0x6080",
        "linkReferences": {},
        "deployedLinkReferences": {}
    }))
    return path


@pytest.fixture
def stub_gateway():
    """Local chain with ten ETH in the deployer account at block 4"""
    return StubGateway(
        balances={DEPLOYER: 10 * 10**18},
        block_number=4,
        contract_state={"platformFeePercent": 5},
    )


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def records_dir(tmp_path):
    return tmp_path / "deployments"


@pytest.fixture
def recorder(records_dir, fixed_clock):
    return ProvenanceRecorder(records_dir, clock=fixed_clock)


@pytest.fixture
def console():
    return io.StringIO()


@pytest.fixture
def reporter(console):
    return SummaryReporter(stream=console)
