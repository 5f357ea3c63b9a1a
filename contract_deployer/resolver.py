"""
Resolution of the target network and the deploying account.
"""
import logging
from typing import Optional, Tuple

from .config import NetworkConfig
from .exceptions import ErrorKind, ResolutionError
from .gateway import ChainGateway, GatewayError
from .models import AccountInfo, NetworkInfo

logger = logging.getLogger(__name__)


class NetworkContextResolver:
    """Determines which network we are on and who is deploying."""

    def __init__(
        self,
        gateway: ChainGateway,
        network_name: Optional[str] = None,
        reporter=None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Args:
            gateway: Chain gateway to query
            network_name: Configured network name; when it is in the network
                table its chain ID must match the node's
            reporter: Optional SummaryReporter for progress lines
            logger: Optional logger instance
        """
        self.gateway = gateway
        self.network_name = network_name
        self.reporter = reporter
        self.logger = logger or logging.getLogger(__name__)

    def resolve(self) -> Tuple[NetworkInfo, AccountInfo]:
        """
        Snapshot network metadata and the deployer account.

        Returns:
            (NetworkInfo, AccountInfo)

        Raises:
            ResolutionError: NoAccount, GatewayUnavailable or ChainIdMismatch
        """
        try:
            accounts = self.gateway.accounts()
            if not accounts:
                raise ResolutionError(
                    "No signing account available; set DEPLOYER_PRIVATE_KEY or unlock a node account",
                    ErrorKind.NO_ACCOUNT
                )
            deployer = accounts[0]
            if self.reporter:
                self.reporter.account(deployer)

            balance = self.gateway.get_balance(deployer)
            account = AccountInfo(address=deployer, balance=balance)
            if self.reporter:
                self.reporter.balance(account)

            chain_id = self.gateway.chain_id()
            block_number = self.gateway.block_number()
        except GatewayError as e:
            self.logger.error(f"Chain gateway unavailable: {e}")
            raise ResolutionError(str(e), ErrorKind.GATEWAY_UNAVAILABLE) from e

        network = NetworkInfo(
            name=self._network_name(chain_id),
            chain_id=chain_id,
            block_number=block_number
        )
        self.logger.info(
            f"Resolved network {network.name} (chainId={network.chain_id}, "
            f"block={network.block_number}), deployer {account.address}"
        )
        return network, account

    def _network_name(self, chain_id: int) -> str:
        if self.network_name:
            if NetworkConfig.has_network(self.network_name):
                expected = NetworkConfig.get_chain_id(self.network_name)
                if expected != chain_id:
                    raise ResolutionError(
                        f"Chain ID mismatch for network '{self.network_name}': "
                        f"expected {expected}, node reports {chain_id}",
                        ErrorKind.CHAIN_ID_MISMATCH
                    )
            return self.network_name
        return NetworkConfig.name_for_chain_id(chain_id) or "unknown"
