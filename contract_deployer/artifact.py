"""
Loading of compiled contract artifacts.

Two layouts are understood:

- Hardhat: ``{"contractName": ..., "abi": [...], "bytecode": "0x..."}``
- Foundry: ``{"abi": [...], "bytecode": {"object": "0x..."}}``
"""
import re
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .exceptions import ArtifactError

logger = logging.getLogger(__name__)

# Solidity library link placeholder, e.g. __$0123...$__
_LINK_PLACEHOLDER = re.compile(r"__\$[0-9a-fA-F]{34}\$__")


@dataclass(frozen=True)
class ContractArtifact:
    """A compiled, deployable contract"""
    contract_name: str
    abi: List[Dict[str, Any]]
    bytecode: str
    source_path: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], name: Optional[str] = None,
                  source_path: Optional[str] = None) -> "ContractArtifact":
        """
        Build an artifact from parsed artifact JSON.

        Raises:
            ArtifactError: If ``abi`` or ``bytecode`` is missing
        """
        if not isinstance(data, dict) or "abi" not in data or "bytecode" not in data:
            raise ArtifactError(f"Artifact {source_path or name} must contain 'abi' and 'bytecode'")

        bytecode = data["bytecode"]
        if isinstance(bytecode, dict):
            bytecode = bytecode.get("object", "")
        if bytecode and not bytecode.startswith("0x"):
            bytecode = "0x" + bytecode

        contract_name = data.get("contractName") or name
        if not contract_name:
            raise ArtifactError(f"Cannot determine contract name for artifact {source_path}")

        return cls(
            contract_name=contract_name,
            abi=list(data["abi"]),
            bytecode=bytecode or "",
            source_path=source_path
        )

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ContractArtifact":
        """
        Load an artifact file.

        Raises:
            ArtifactError: If the file is missing, unreadable or malformed
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ArtifactError(f"Artifact not found: {path}")
        except (OSError, json.JSONDecodeError) as e:
            raise ArtifactError(f"Cannot read artifact {path}: {e}")

        artifact = cls.from_dict(data, name=path.stem, source_path=str(path))
        logger.debug(f"Loaded artifact {artifact.contract_name} from {path}")
        return artifact

    def ensure_deployable(self) -> None:
        """
        Refuse artifacts that cannot produce a contract.

        Raises:
            ArtifactError: If bytecode is empty or has unlinked libraries
        """
        if not self.bytecode or self.bytecode == "0x":
            raise ArtifactError(
                f"{self.contract_name} has no bytecode (abstract contract or interface?)"
            )
        placeholders = sorted(set(_LINK_PLACEHOLDER.findall(self.bytecode)))
        if placeholders:
            raise ArtifactError(
                f"{self.contract_name} has unlinked libraries: {', '.join(placeholders)}"
            )

    def interface_description(self) -> str:
        """ABI as a compact JSON string, as stored in deployment records."""
        return json.dumps(self.abi, separators=(",", ":"))

    def mutating_functions(self) -> List[str]:
        """Names of state-changing functions, in ABI order."""
        names = []
        for item in self.abi:
            if item.get("type") != "function":
                continue
            if item.get("stateMutability") in ("view", "pure"):
                continue
            signature = f"{item['name']}({', '.join(i.get('type', '') for i in item.get('inputs', []))})"
            if signature not in names:
                names.append(signature)
        return names


def find_artifact(artifacts_dir: Union[str, Path], contract_name: str) -> Path:
    """
    Locate ``<contract_name>.json`` inside a Hardhat or Foundry output tree.

    Hardhat debug files (``*.dbg.json``) are ignored.

    Raises:
        ArtifactError: If no artifact or more than one artifact matches
    """
    root = Path(artifacts_dir)
    if not root.is_dir():
        raise ArtifactError(f"Artifacts directory not found: {root}")

    matches = sorted(
        p for p in root.rglob(f"{contract_name}.json")
        if not p.name.endswith(".dbg.json")
    )
    if not matches:
        raise ArtifactError(f"No artifact for contract '{contract_name}' under {root}")
    if len(matches) > 1:
        listed = ", ".join(str(p) for p in matches)
        raise ArtifactError(
            f"Multiple artifacts for contract '{contract_name}': {listed}. "
            "Pass the artifact path explicitly."
        )
    return matches[0]
