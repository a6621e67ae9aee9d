"""Build directory ingestion for linked-deployments library."""

import json
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

from .exceptions import ArtifactNotFoundError, MalformedArtifactError
from .graph import DependencyGraph
from .parsers import parse_artifact
from .types import Artifact, Unit, UnitKind

logger = logging.getLogger(__name__)


def load_artifacts(build_dir: Union[Path, str]) -> Dict[str, Artifact]:
    """
    Load every compiled artifact in a build directory.

    Searches recursively, so both truffle's flat build/contracts and
    hardhat's nested artifacts/ trees work. Hardhat debug files
    (*.dbg.json) and other non-artifact JSON are skipped.
    When two files define the same contract name, the first in sorted path
    order wins and the other is skipped with a warning.

    Args:
        build_dir: Directory containing artifact JSON files

    Returns:
        Dictionary mapping contract name -> Artifact

    Raises:
        ArtifactNotFoundError: If build_dir does not exist
    """
    build_path = Path(build_dir)
    if not build_path.is_dir():
        raise ArtifactNotFoundError(f"Build directory not found: {build_path}")

    artifacts: Dict[str, Artifact] = {}
    for artifact_file in sorted(build_path.rglob("*.json")):
        if artifact_file.name.endswith(".dbg.json"):
            continue

        try:
            name, artifact = parse_artifact(artifact_file)
        except (MalformedArtifactError, json.JSONDecodeError):
            # Skip files that are not compiled artifacts
            logger.debug("Skipping non-artifact file %s", artifact_file)
            continue

        if name in artifacts:
            logger.warning(
                "Duplicate artifact for %s at %s; keeping the first one found", name, artifact_file
            )
            continue

        artifacts[name] = artifact

    return artifacts


def build_graph(
    artifacts: Mapping[str, Artifact],
    dependencies: Mapping[str, Optional[Sequence[str]]],
) -> DependencyGraph:
    """
    Build a dependency graph from artifacts and a dependency declaration.

    Units that some other unit depends on are marked as libraries.

    Args:
        artifacts: Contract name -> Artifact
        dependencies: Unit name -> dependency names, in declaration order.
                      None infers dependencies from the artifact's link
                      references, sorted by name.

    Returns:
        DependencyGraph over the declared units

    Raises:
        ArtifactNotFoundError: If a declared unit has no artifact
        UnknownDependencyError: If a dependency is not itself declared
    """
    resolved: Dict[str, List[str]] = {}
    for name, declared in dependencies.items():
        if name not in artifacts:
            raise ArtifactNotFoundError(f"No compiled artifact for '{name}'")
        if declared is None:
            resolved[name] = sorted(artifacts[name].link_references)
        else:
            resolved[name] = list(declared)

    libraries = {dep for deps in resolved.values() for dep in deps}

    return DependencyGraph(
        Unit(
            name=name,
            artifact=artifacts[name],
            dependencies=tuple(deps),
            kind=UnitKind.LIBRARY if name in libraries else UnitKind.CONTRACT,
        )
        for name, deps in resolved.items()
    )
