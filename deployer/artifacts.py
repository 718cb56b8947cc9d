"""
Hardhat build output access
Loads contract artifacts, their build info, and extracts plain ABI files
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from eth_abi import encode

from .exceptions import ArtifactError, ArtifactNotFoundError, InvalidArtifactError
from .models import ArtifactKind

logger = logging.getLogger(__name__)


def read_artifact(file_path) -> Dict[str, Any]:
    """
    Load a hardhat artifact JSON file.

    Raises:
        ArtifactNotFoundError: If the file does not exist
        InvalidArtifactError: If the file cannot be read, is not JSON or has no ABI list
    """
    try:
        with open(file_path, 'r') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ArtifactNotFoundError(f"Artifact {file_path} not found") from e
    except (OSError, ValueError) as e:
        raise InvalidArtifactError(f"Artifact {file_path} could not be read: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("abi"), list):
        raise InvalidArtifactError(f"Artifact {file_path} has no ABI")
    return data


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract as produced by hardhat"""
    contract_name: str
    source_name: str
    abi: List[Dict[str, Any]] = field(default_factory=list)
    bytecode: str = "0x"
    path: Optional[Path] = None

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"

    def constructor_types(self) -> List[str]:
        for entry in self.abi:
            if entry.get("type") == "constructor":
                return [item["type"] for item in entry.get("inputs", [])]
        return []

    def encode_constructor_args(self, args: Sequence[Any]) -> str:
        """
        ABI-encode constructor arguments as the explorer expects them.

        Returns:
            Hex string without the 0x prefix; empty when the constructor takes no arguments
        """
        types = self.constructor_types()
        if len(types) != len(args):
            raise ValueError(
                f"{self.contract_name} constructor takes {len(types)} argument(s), got {len(args)}"
            )
        if not types:
            return ""
        return encode(types, list(args)).hex()


class ArtifactStore:
    """Loads artifacts from a hardhat `artifacts/` directory, caching by contract name."""

    def __init__(self, artifacts_dir: Path = Path("artifacts")):
        self.artifacts_dir = Path(artifacts_dir)
        self._cache: Dict[str, ContractArtifact] = {}

    @property
    def contracts_dir(self) -> Path:
        return self.artifacts_dir / "contracts"

    def get(self, kind: ArtifactKind) -> ContractArtifact:
        return self.load(kind.contract_name)

    def load(self, contract_name: str) -> ContractArtifact:
        if contract_name in self._cache:
            return self._cache[contract_name]

        path = self._find(contract_name)
        data = read_artifact(path)

        artifact = ContractArtifact(
            contract_name=data.get("contractName", contract_name),
            source_name=data.get("sourceName", f"contracts/{contract_name}.sol"),
            abi=data["abi"],
            bytecode=data.get("bytecode", "0x"),
            path=path,
        )
        if artifact.bytecode in ("", "0x"):
            raise InvalidArtifactError(f"Artifact {path} has no deployable bytecode")
        self._cache[contract_name] = artifact
        return artifact

    def build_info(self, artifact: ContractArtifact) -> Dict[str, Any]:
        """
        Load the hardhat build info a contract was compiled in.

        The `<Name>.dbg.json` file next to the artifact points at the build info
        file relative to itself.

        Raises:
            ArtifactNotFoundError: If the debug file or build info is missing
            InvalidArtifactError: If either file is not valid JSON
        """
        if artifact.path is None:
            raise ArtifactNotFoundError(f"No artifact path recorded for {artifact.contract_name}")
        dbg_path = artifact.path.with_name(f"{artifact.contract_name}.dbg.json")
        try:
            with open(dbg_path, 'r') as f:
                build_info_ref = json.load(f)["buildInfo"]
            build_info_path = (dbg_path.parent / build_info_ref).resolve()
            with open(build_info_path, 'r') as f:
                return json.load(f)
        except (FileNotFoundError, KeyError) as e:
            raise ArtifactNotFoundError(f"Build info for {artifact.contract_name} not found: {e}") from e
        except (OSError, ValueError, TypeError) as e:
            raise InvalidArtifactError(f"Build info for {artifact.contract_name} is malformed: {e}") from e

    def _find(self, contract_name: str) -> Path:
        if not self.contracts_dir.exists():
            raise ArtifactNotFoundError(
                f"Artifacts directory {self.contracts_dir} not found. Please compile the contracts first."
            )
        for candidate in sorted(self.contracts_dir.rglob(f"{contract_name}.json")):
            return candidate
        raise ArtifactNotFoundError(f"No artifact for contract {contract_name} under {self.contracts_dir}")


def generate_abis(artifacts_dir: Path = Path("artifacts"), output_dir: Optional[Path] = None) -> List[Path]:
    """
    Extract the ABI of every compiled contract into a plain JSON file.

    Debug files (`*.dbg.json`) are skipped. A file that cannot be parsed is
    logged and skipped; the rest are still written.

    Args:
        artifacts_dir: Hardhat artifacts directory
        output_dir: Destination, defaults to `<artifacts_dir>/generated-src`

    Returns:
        Paths of the written ABI files

    Raises:
        ArtifactNotFoundError: If `<artifacts_dir>/contracts` does not exist
    """
    artifacts_dir = Path(artifacts_dir)
    contracts_dir = artifacts_dir / "contracts"
    output_dir = Path(output_dir) if output_dir is not None else artifacts_dir / "generated-src"
    if not contracts_dir.is_dir():
        raise ArtifactNotFoundError(f"Artifacts directory {contracts_dir} not found")

    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for path in sorted(contracts_dir.rglob("*.json")):
        if path.name.endswith(".dbg.json"):
            continue
        try:
            artifact = read_artifact(path)
        except ArtifactError as e:
            logger.error(f"Error processing {path}: {e}")
            continue

        output_path = output_dir / f"{artifact.get('contractName', path.stem)}.json"
        with open(output_path, 'w') as f:
            json.dump(artifact["abi"], f, indent=2)
            f.write("\n")
        logger.info(f"Generated ABI file: {output_path.name}")
        written.append(output_path)

    logger.info(f"ABI generation complete ({len(written)} file(s))")
    return written
