"""
Result types returned by the deployment pipeline.
"""
from dataclasses import dataclass
from typing import Union

from .exceptions import DeployerError
from .executor import ContractHandle
from .models import AccountInfo, DeploymentRecord, NetworkInfo
from .recorder import RecordOutcome
from .verifier import VerificationResult


@dataclass(frozen=True)
class Success:
    """The contract is deployed; verification and persistence are diagnostics."""
    record: DeploymentRecord
    network: NetworkInfo
    account: AccountInfo
    handle: ContractHandle
    verification: VerificationResult
    record_outcome: RecordOutcome

    @property
    def exit_code(self) -> int:
        return 0


@dataclass(frozen=True)
class Fatal:
    """The run stopped before a contract was confirmed."""
    error: DeployerError

    @property
    def kind(self):
        return self.error.kind

    @property
    def exit_code(self) -> int:
        return 1


PipelineOutcome = Union[Success, Fatal]
