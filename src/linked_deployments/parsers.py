"""Compiled artifact parsers for linked-deployments library."""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import MalformedArtifactError
from .linking import find_placeholders
from .types import Artifact


class ArtifactFormat(Enum):
    """
    Compiled artifact file format types.

    Value strings appear as source_format on parsed artifacts:
    - TRUFFLE: build/contracts/*.json from truffle compile
    - HARDHAT: artifacts/**/*.json from hardhat compile (hh-sol-artifact-1)
    - MINIMAL: any JSON object with abi and bytecode
    """

    TRUFFLE = "truffle"
    HARDHAT = "hardhat"
    MINIMAL = "minimal"


def detect_artifact_format(data: Any) -> Optional[ArtifactFormat]:
    """
    Detect which compiler produced an artifact.

    Args:
        data: Decoded artifact JSON

    Returns:
        ArtifactFormat.HARDHAT if _format is an hh-sol-artifact
        ArtifactFormat.TRUFFLE if the object names its contract
        ArtifactFormat.MINIMAL if it only has abi and bytecode
        None if the JSON is not an artifact
    """
    if not isinstance(data, dict):
        return None

    if str(data.get("_format", "")).startswith("hh-sol-artifact"):
        return ArtifactFormat.HARDHAT

    if "contractName" in data and "abi" in data:
        return ArtifactFormat.TRUFFLE

    if "abi" in data and "bytecode" in data:
        return ArtifactFormat.MINIMAL

    return None


def _scan_link_references(bytecode: str) -> Dict[str, List[str]]:
    """
    Map library names to truffle-style placeholders found in bytecode.

    Hashed solc placeholders (__$...$__) cannot be mapped back to a name and
    are left for the linker to report.
    """
    references: Dict[str, List[str]] = {}
    for placeholder in find_placeholders(bytecode):
        name = placeholder.strip("_")
        if not name or name.startswith("$"):
            continue
        references.setdefault(name, []).append(placeholder)
    return references


def _hardhat_link_references(data: Dict[str, Any], bytecode: str) -> Dict[str, List[str]]:
    """
    Read placeholders from hardhat linkReferences.

    linkReferences maps source file -> library name -> list of
    {"start", "length"} byte offsets into the bytecode.
    """
    body = bytecode[2:] if bytecode.startswith("0x") else bytecode
    references: Dict[str, List[str]] = {}
    for libraries in data.get("linkReferences", {}).values():
        for name, offsets in libraries.items():
            tokens = references.setdefault(name, [])
            for offset in offsets:
                start = offset["start"] * 2
                token = body[start:start + offset["length"] * 2]
                if token and token not in tokens:
                    tokens.append(token)
    return references


def parse_artifact(file_path: Path) -> Tuple[str, Artifact]:
    """
    Parse a compiled artifact JSON file.

    Args:
        file_path: Path to artifact JSON file

    Returns:
        Tuple of (contract name, Artifact)

    Raises:
        MalformedArtifactError: If the file is not an artifact or lacks ABI or bytecode
    """
    with open(file_path) as f:
        data = json.load(f)

    artifact_format = detect_artifact_format(data)
    if artifact_format is None:
        raise MalformedArtifactError(f"Not a compiled artifact: {file_path}")

    try:
        abi = data["abi"]
        bytecode = data["bytecode"]
    except KeyError as e:
        raise MalformedArtifactError(f"Missing {e} in artifact: {file_path}") from None

    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    match artifact_format:
        case ArtifactFormat.HARDHAT:
            name = data.get("contractName", file_path.stem)
            link_references = _hardhat_link_references(data, bytecode)
        case ArtifactFormat.TRUFFLE:
            name = data["contractName"]
            link_references = _scan_link_references(bytecode)
        case _:
            name = file_path.stem
            link_references = _scan_link_references(bytecode)

    return name, Artifact(
        abi=abi,
        bytecode=bytecode,
        link_references=link_references,
        source_format=artifact_format.value,
    )
