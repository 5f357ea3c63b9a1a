"""
Deployment record construction and persistence.
"""
import re
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional, Union

from .config import DEFAULT_DEPLOYMENTS_DIR
from .exceptions import PersistenceError
from .executor import ContractHandle
from .models import AccountInfo, DeploymentRecord, NetworkInfo

logger = logging.getLogger(__name__)

# Last epoch-millis value handed out by record_key, shared process-wide
_last_key_millis = 0
_key_lock = threading.Lock()

_MAX_KEY_ATTEMPTS = 100
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2024-05-01T12:00:00.000Z"""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class RecordOutcome:
    """Where the record went, or why it could not be written"""
    path: Optional[Path] = None
    error: Optional[PersistenceError] = None

    @property
    def saved(self) -> bool:
        return self.path is not None


class ProvenanceRecorder:
    """
    Writes ``deployment-<network>-<epochMillis>.json`` files.

    Write failures are reported in the returned RecordOutcome and logged
    as warnings; they never abort the run.
    """

    def __init__(
        self,
        deployments_dir: Union[str, Path] = DEFAULT_DEPLOYMENTS_DIR,
        clock: Callable[[], datetime] = _utc_now,
        logger: Optional[logging.Logger] = None
    ):
        self.deployments_dir = Path(deployments_dir)
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

    def build_record(
        self,
        network: NetworkInfo,
        account: AccountInfo,
        handle: ContractHandle,
        deployed_at: Optional[datetime] = None
    ) -> DeploymentRecord:
        """Assemble the record from resolver and executor output only."""
        return DeploymentRecord(
            contract_name=handle.artifact.contract_name,
            contract_address=handle.address,
            deployer=account.address,
            network=network.name,
            chain_id=network.chain_id,
            block_number=handle.receipt.block_number,
            transaction_hash=handle.receipt.tx_hash,
            gas_used=str(handle.receipt.gas_limit),
            gas_price=str(handle.receipt.gas_price),
            deployment_time=format_timestamp(deployed_at or self.clock()),
            abi=handle.artifact.interface_description()
        )

    def record_key(self, network_name: str) -> str:
        """
        Storage key for a new record.

        Keys are strictly increasing within the process even when the
        clock has not advanced.
        """
        global _last_key_millis
        safe_name = _UNSAFE_NAME_CHARS.sub("-", network_name) or "unknown"
        with _key_lock:
            millis = (self.clock() - _EPOCH) // timedelta(milliseconds=1)
            if millis <= _last_key_millis:
                millis = _last_key_millis + 1
            _last_key_millis = millis
        return f"deployment-{safe_name}-{millis}"

    def save(self, record: DeploymentRecord) -> RecordOutcome:
        """Persist ``record``; never raises."""
        try:
            path = self._write(record)
        except PersistenceError as e:
            self.logger.warning(f"Could not save deployment info: {e.message}")
            return RecordOutcome(error=e)
        self.logger.info(f"Deployment info saved to {path}")
        return RecordOutcome(path=path)

    def _write(self, record: DeploymentRecord) -> Path:
        """
        Write the record under a fresh key.

        Raises:
            PersistenceError: If the directory or file cannot be written
        """
        try:
            self.deployments_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot create {self.deployments_dir}: {e}") from e

        content = record.to_json() + "\n"
        for _ in range(_MAX_KEY_ATTEMPTS):
            path = self.deployments_dir / f"{self.record_key(record.network)}.json"
            try:
                with open(path, "x", encoding="utf-8") as f:
                    f.write(content)
                return path
            except FileExistsError:
                continue
            except OSError as e:
                raise PersistenceError(f"Cannot write {path}: {e}") from e
        raise PersistenceError(f"No free record key in {self.deployments_dir}")
