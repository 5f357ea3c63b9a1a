"""
Network table and run configuration for contract-deployer.
"""
import os
import json
import logging
import importlib.resources
from dataclasses import dataclass, field, fields
from typing import Dict, Any, Optional, List, Mapping

logger = logging.getLogger(__name__)

# Chain ID of the Hardhat/Anvil development chain; it never gets an
# explorer verification command.
LOCAL_CHAIN_ID = 31337

DEFAULT_NETWORK = "localhost"
DEFAULT_CONTRACT = "Project"
DEFAULT_ARTIFACTS_DIR = "artifacts"
DEFAULT_DEPLOYMENTS_DIR = "deployments"
DEFAULT_CONFIRMATION_TIMEOUT = 120.0
DEFAULT_EXPLORER_TOOL = "npx hardhat"


class NetworkConfig:
    """Lookups into the packaged ``networks.json`` table"""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load the network table, caching it after the first read.

        Returns:
            Mapping of network name to ``{"chainId": int, "rpc": str}``
        """
        if cls._networks_cache is None:
            resource = importlib.resources.files("contract_deployer").joinpath("networks.json")
            with resource.open("r", encoding="utf-8") as f:
                cls._networks_cache = json.load(f)
        return cls._networks_cache

    @classmethod
    def has_network(cls, network: str) -> bool:
        return network in cls.load_networks()

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        """
        Get the table entry for a network.

        Raises:
            ValueError: If the network is unknown
        """
        networks = cls.load_networks()
        if network not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Unknown network '{network}'. Available networks: {available}")
        return networks[network]

    @classmethod
    def get_chain_id(cls, network: str) -> int:
        return int(cls.get_network(network)["chainId"])

    @classmethod
    def name_for_chain_id(cls, chain_id: int) -> Optional[str]:
        """First network in the table registered for ``chain_id``, if any."""
        for name, entry in cls.load_networks().items():
            if int(entry["chainId"]) == chain_id:
                return name
        return None

    @classmethod
    def get_rpc_url(cls, network: str, override: Optional[str] = None) -> str:
        """
        Resolve the RPC URL for a network.

        Precedence: ``override``, then ``<NETWORK>_RPC_URL`` from the
        environment, then the table entry.
        """
        if override:
            return override
        env_name = network.upper().replace("-", "_") + "_RPC_URL"
        env_value = os.environ.get(env_name)
        if env_value:
            logger.debug(f"Using RPC URL from {env_name}")
            return env_value
        return cls.get_network(network)["rpc"]


def is_local_chain(chain_id: int, local_chain_id: int = LOCAL_CHAIN_ID) -> bool:
    """True if ``chain_id`` is the local development chain."""
    return chain_id == local_chain_id


def _split_keys(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [k.strip() for k in value.split(",") if k.strip()]


@dataclass
class DeployConfig:
    """Settings for a single deployment run"""
    network: str = DEFAULT_NETWORK
    rpc_url: Optional[str] = None
    private_keys: List[str] = field(default_factory=list, repr=False)
    contract_name: str = DEFAULT_CONTRACT
    artifact_path: Optional[str] = None
    artifacts_dir: str = DEFAULT_ARTIFACTS_DIR
    deployments_dir: str = DEFAULT_DEPLOYMENTS_DIR
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT
    explorer_tool: str = DEFAULT_EXPLORER_TOOL
    local_chain_id: int = LOCAL_CHAIN_ID

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, **overrides: Any) -> "DeployConfig":
        """
        Build a configuration from environment variables.

        Keyword overrides that are not ``None`` take precedence over the
        environment, which in turn takes precedence over the defaults.

        Raises:
            ValueError: If a numeric variable cannot be parsed or an
                override names an unknown setting
        """
        env = os.environ if env is None else env

        values: Dict[str, Any] = {}
        if env.get("DEPLOY_NETWORK"):
            values["network"] = env["DEPLOY_NETWORK"]
        if env.get("DEPLOY_RPC_URL"):
            values["rpc_url"] = env["DEPLOY_RPC_URL"]
        values["private_keys"] = _split_keys(env.get("DEPLOYER_PRIVATE_KEY"))
        if env.get("DEPLOY_CONTRACT"):
            values["contract_name"] = env["DEPLOY_CONTRACT"]
        if env.get("DEPLOY_ARTIFACT"):
            values["artifact_path"] = env["DEPLOY_ARTIFACT"]
        if env.get("DEPLOY_ARTIFACTS_DIR"):
            values["artifacts_dir"] = env["DEPLOY_ARTIFACTS_DIR"]
        if env.get("DEPLOYMENTS_DIR"):
            values["deployments_dir"] = env["DEPLOYMENTS_DIR"]
        if env.get("DEPLOY_EXPLORER_TOOL"):
            values["explorer_tool"] = env["DEPLOY_EXPLORER_TOOL"]

        try:
            if env.get("DEPLOY_CONFIRMATION_TIMEOUT"):
                values["confirmation_timeout"] = float(env["DEPLOY_CONFIRMATION_TIMEOUT"])
            if env.get("DEPLOY_LOCAL_CHAIN_ID"):
                values["local_chain_id"] = int(env["DEPLOY_LOCAL_CHAIN_ID"])
        except ValueError as e:
            raise ValueError(f"Invalid numeric setting in environment: {e}")

        known = {f.name for f in fields(cls)}
        for key, value in overrides.items():
            if key not in known:
                raise ValueError(f"Unknown setting: {key}")
            if value is not None:
                values[key] = value

        return cls(**values)

    def resolve_rpc_url(self) -> str:
        """
        RPC URL for this run.

        Raises:
            ValueError: If no URL is configured and the network is unknown
        """
        return NetworkConfig.get_rpc_url(self.network, override=self.rpc_url)
