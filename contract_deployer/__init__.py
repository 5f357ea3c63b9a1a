"""
contract-deployer: deploy a compiled contract and keep a provenance record.
"""
from .version import __version__
from .artifact import ContractArtifact, find_artifact
from .config import DeployConfig, NetworkConfig, LOCAL_CHAIN_ID
from .exceptions import (
    ErrorKind,
    DeployerError,
    ResolutionError,
    ArtifactError,
    DeploymentError,
    PersistenceError,
)
from .executor import ContractHandle, DeploymentExecutor
from .gateway import ChainGateway, StubGateway, Web3Gateway
from .models import AccountInfo, DeploymentRecord, NetworkInfo, ReceiptMeta, TxReceipt
from .outcome import Fatal, PipelineOutcome, Success
from .pipeline import DeploymentPipeline
from .recorder import ProvenanceRecorder, RecordOutcome
from .reporter import SummaryReporter, explorer_command
from .resolver import NetworkContextResolver
from .verifier import StateVerifier, VerificationResult

__all__ = [
    "__version__",
    "ContractArtifact",
    "find_artifact",
    "DeployConfig",
    "NetworkConfig",
    "LOCAL_CHAIN_ID",
    "ErrorKind",
    "DeployerError",
    "ResolutionError",
    "ArtifactError",
    "DeploymentError",
    "PersistenceError",
    "ContractHandle",
    "DeploymentExecutor",
    "ChainGateway",
    "StubGateway",
    "Web3Gateway",
    "AccountInfo",
    "DeploymentRecord",
    "NetworkInfo",
    "ReceiptMeta",
    "TxReceipt",
    "Fatal",
    "PipelineOutcome",
    "Success",
    "DeploymentPipeline",
    "ProvenanceRecorder",
    "RecordOutcome",
    "SummaryReporter",
    "explorer_command",
    "NetworkContextResolver",
    "StateVerifier",
    "VerificationResult",
]
