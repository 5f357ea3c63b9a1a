"""
Command line entry point: ``contract-deploy``.
"""
import sys
import json
import logging
import argparse
from typing import List, Optional

from .artifact import ContractArtifact, find_artifact
from .config import DeployConfig, LOCAL_CHAIN_ID, NetworkConfig
from .exceptions import ArtifactError
from .gateway import ChainGateway, StubGateway, Web3Gateway
from .outcome import Fatal
from .pipeline import DeploymentPipeline
from .recorder import ProvenanceRecorder
from .reporter import SummaryReporter
from .version import __version__

logger = logging.getLogger("contract_deployer")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contract-deploy",
        description="Deploy a compiled contract and record its provenance.")
    parser.add_argument(
        "--network",
        help="Network name (default: $DEPLOY_NETWORK or localhost)"
    )
    parser.add_argument(
        "--rpc-url",
        help="RPC endpoint; overrides the network table and <NETWORK>_RPC_URL"
    )
    parser.add_argument(
        "--contract",
        help="Contract name to look up under the artifacts directory (default: Project)"
    )
    parser.add_argument(
        "--artifact",
        help="Path to a compiled artifact JSON file"
    )
    parser.add_argument(
        "--artifacts-dir",
        help="Hardhat/Foundry artifacts directory (default: artifacts)"
    )
    parser.add_argument(
        "--deployments-dir",
        help="Where deployment records are written (default: deployments)"
    )
    parser.add_argument(
        "--constructor-args",
        help="Constructor arguments as a JSON array",
        default="[]"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds to wait for confirmation (default: 120)"
    )
    parser.add_argument(
        "--explorer-tool",
        help="Command prefix for the explorer verify command (default: 'npx hardhat')"
    )
    parser.add_argument(
        "--dry-run",
        help="Deploy against an in-memory simulated chain",
        action="store_true"
    )
    parser.add_argument(
        "--debug",
        help="Enable debug logging",
        action="store_true"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    return parser


def load_artifact(config: DeployConfig) -> ContractArtifact:
    """
    Load the artifact named by the configuration.

    Raises:
        ArtifactError: If it cannot be found or parsed
    """
    if config.artifact_path:
        return ContractArtifact.load(config.artifact_path)
    return ContractArtifact.load(find_artifact(config.artifacts_dir, config.contract_name))


def build_gateway(config: DeployConfig, dry_run: bool = False) -> ChainGateway:
    """
    Create the gateway for this run.

    Raises:
        ValueError: If the RPC URL or a private key is invalid
    """
    if dry_run:
        chain_id = LOCAL_CHAIN_ID
        if NetworkConfig.has_network(config.network):
            chain_id = NetworkConfig.get_chain_id(config.network)
        logger.info(f"Dry run: simulating {config.network} (chainId={chain_id})")
        return StubGateway(chain_id=chain_id)
    return Web3Gateway(config.resolve_rpc_url(), private_keys=config.private_keys)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format=LOG_FORMAT)

    try:
        constructor_args = json.loads(args.constructor_args)
        if not isinstance(constructor_args, list):
            raise ValueError("--constructor-args must be a JSON array")
        config = DeployConfig.from_env(
            network=args.network,
            rpc_url=args.rpc_url,
            contract_name=args.contract,
            artifact_path=args.artifact,
            artifacts_dir=args.artifacts_dir,
            deployments_dir=args.deployments_dir,
            confirmation_timeout=args.timeout,
            explorer_tool=args.explorer_tool
        )
        artifact = load_artifact(config)
        gateway = build_gateway(config, dry_run=args.dry_run)
    except ArtifactError as e:
        logger.error(f"Deployment failed: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    reporter = SummaryReporter(
        explorer_tool=config.explorer_tool,
        local_chain_id=config.local_chain_id
    )
    pipeline = DeploymentPipeline(
        gateway=gateway,
        artifact=artifact,
        recorder=ProvenanceRecorder(config.deployments_dir),
        reporter=reporter,
        network_name=config.network,
        confirmation_timeout=config.confirmation_timeout,
        constructor_args=constructor_args
    )
    outcome = pipeline.run()
    if isinstance(outcome, Fatal):
        logger.error(f"Deployment failed: {outcome.error}")
    return reporter.report(outcome)


if __name__ == "__main__":
    sys.exit(main())
