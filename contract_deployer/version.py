"""
Version information for contract-deployer.
"""
import importlib.metadata
import pathlib
import tomli

# Installed package metadata wins over the source tree
try:
    __version__ = importlib.metadata.version("contract-deployer")
except importlib.metadata.PackageNotFoundError:
    try:
        path = pathlib.Path(__file__).parent.parent / "pyproject.toml"
        with path.open("rb") as f:
            data = tomli.load(f)
        __version__ = data["project"]["version"]
    except (FileNotFoundError, KeyError):
        __version__ = "0.1.0"
