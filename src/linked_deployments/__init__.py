"""
linked-deployments: Python library for deploying and linking interdependent contracts
"""

from importlib.metadata import PackageNotFoundError, version

from .deployers import Deployer, JsonRpcDeployer
from .exceptions import (
    ArtifactNotFoundError,
    CycleDetectedError,
    DeploymentError,
    DeployTransportError,
    DuplicateUnitError,
    IncompleteLinkingError,
    InvalidAddressError,
    InvalidTransitionError,
    MalformedArtifactError,
    NetworkMismatchError,
    NotYetDeployedError,
    UnitDeploymentFailedError,
    UnitNotFoundError,
    UnknownDependencyError,
    UnresolvedDependencyError,
)
from .graph import DependencyGraph
from .linking import LinkResolver
from .orchestrator import DeploymentOrchestrator, deploy_from_build_dir, deploy_graph
from .registry import ArtifactRegistry
from .types import Artifact, DeploymentRecord, DeploymentStatus, Unit, UnitKind

try:
    __version__ = version("linked-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "DeploymentOrchestrator",
    "deploy_graph",
    "deploy_from_build_dir",
    "DependencyGraph",
    "ArtifactRegistry",
    "LinkResolver",
    "Deployer",
    "JsonRpcDeployer",
    "Artifact",
    "Unit",
    "UnitKind",
    "DeploymentRecord",
    "DeploymentStatus",
    "DeploymentError",
    "DuplicateUnitError",
    "UnknownDependencyError",
    "CycleDetectedError",
    "UnitNotFoundError",
    "InvalidTransitionError",
    "NotYetDeployedError",
    "NetworkMismatchError",
    "InvalidAddressError",
    "UnresolvedDependencyError",
    "IncompleteLinkingError",
    "DeployTransportError",
    "UnitDeploymentFailedError",
    "ArtifactNotFoundError",
    "MalformedArtifactError",
]
