"""
Exceptions raised by the deployment pipeline.

Every pipeline error carries an ``ErrorKind`` so the outcome can be
classified without inspecting message text.
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """
    Failure classification for pipeline errors.

    The string values are what gets printed and logged.
    """
    NO_ACCOUNT = "NoAccount"
    GATEWAY_UNAVAILABLE = "GatewayUnavailable"
    CHAIN_ID_MISMATCH = "ChainIdMismatch"
    ARTIFACT_INVALID = "ArtifactInvalid"
    SUBMISSION_REJECTED = "SubmissionRejected"
    CONFIRMATION_TIMEOUT = "ConfirmationTimeout"
    PERSISTENCE_FAILED = "PersistenceFailed"


# Kinds that abort the pipeline with a non-zero exit status
FATAL_KINDS = frozenset({
    ErrorKind.NO_ACCOUNT,
    ErrorKind.GATEWAY_UNAVAILABLE,
    ErrorKind.CHAIN_ID_MISMATCH,
    ErrorKind.ARTIFACT_INVALID,
    ErrorKind.SUBMISSION_REJECTED,
    ErrorKind.CONFIRMATION_TIMEOUT,
})


class DeployerError(Exception):
    """Base exception for contract-deployer errors."""

    default_kind: ErrorKind = ErrorKind.GATEWAY_UNAVAILABLE

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        self.kind = kind or self.default_kind
        self.message = message
        super().__init__(message)

    @property
    def fatal(self) -> bool:
        return self.kind in FATAL_KINDS

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class ResolutionError(DeployerError):
    """Raised when the network or the deployer account cannot be resolved."""
    default_kind = ErrorKind.GATEWAY_UNAVAILABLE


class ArtifactError(DeployerError):
    """Raised when a contract artifact is missing or not deployable."""
    default_kind = ErrorKind.ARTIFACT_INVALID


class DeploymentError(DeployerError):
    """Raised when the creation transaction is rejected or never confirmed."""
    default_kind = ErrorKind.SUBMISSION_REJECTED

    def __init__(
        self,
        message: str,
        kind: Optional[ErrorKind] = None,
        tx_hash: Optional[str] = None
    ):
        self.tx_hash = tx_hash
        super().__init__(message, kind)


class PersistenceError(DeployerError):
    """Raised when a deployment record cannot be written."""
    default_kind = ErrorKind.PERSISTENCE_FAILED
