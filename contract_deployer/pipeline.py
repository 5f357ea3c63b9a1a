"""
DeploymentPipeline - runs one deployment from resolution to record.
"""
import logging
from typing import Any, Optional, Sequence

from .artifact import ContractArtifact
from .config import DEFAULT_CONFIRMATION_TIMEOUT
from .exceptions import DeployerError
from .executor import DeploymentExecutor
from .gateway import ChainGateway
from .outcome import Fatal, PipelineOutcome, Success
from .recorder import ProvenanceRecorder
from .reporter import SummaryReporter
from .resolver import NetworkContextResolver
from .verifier import StateVerifier

logger = logging.getLogger(__name__)


class DeploymentPipeline:
    """
    Resolve, deploy, verify, record, in that order.

    Fatal errors end the run as a ``Fatal`` outcome. Verification and
    persistence problems are carried inside ``Success``.
    """

    def __init__(
        self,
        gateway: ChainGateway,
        artifact: ContractArtifact,
        recorder: Optional[ProvenanceRecorder] = None,
        reporter: Optional[SummaryReporter] = None,
        verifier: Optional[StateVerifier] = None,
        network_name: Optional[str] = None,
        confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
        constructor_args: Sequence[Any] = (),
        logger: Optional[logging.Logger] = None
    ):
        self.gateway = gateway
        self.artifact = artifact
        self.recorder = recorder or ProvenanceRecorder()
        self.reporter = reporter or SummaryReporter()
        self.verifier = verifier or StateVerifier()
        self.constructor_args = tuple(constructor_args)
        self.logger = logger or logging.getLogger(__name__)

        self.resolver = NetworkContextResolver(
            gateway, network_name=network_name, reporter=self.reporter, logger=logger
        )
        self.executor = DeploymentExecutor(
            gateway, confirmation_timeout=confirmation_timeout, reporter=self.reporter, logger=logger
        )

    def run(self) -> PipelineOutcome:
        """Execute the pipeline once."""
        self.reporter.start(self.artifact)
        try:
            network, account = self.resolver.resolve()
            handle = self.executor.deploy(self.artifact, account.address, self.constructor_args)
        except DeployerError as e:
            return Fatal(error=e)

        # Built before verification so a failing query cannot affect it
        record = self.recorder.build_record(network, account, handle)
        self.reporter.contract_info(network, account, handle)

        verification = self.verifier.verify(handle)
        self.reporter.verification(verification)

        record_outcome = self.recorder.save(record)
        self.reporter.record_saved(record_outcome)

        return Success(
            record=record,
            network=network,
            account=account,
            handle=handle,
            verification=verification,
            record_outcome=record_outcome
        )
