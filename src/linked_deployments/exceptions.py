"""Custom exception classes for linked-deployments library."""

from typing import Any, List, Optional


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class DuplicateUnitError(DeploymentError, ValueError):
    """Raised when two units in a graph share the same name."""

    pass


class UnknownDependencyError(DeploymentError, ValueError):
    """Raised when a unit depends on a name that is not in the graph."""

    def __init__(self, unit: str, dependency: str):
        super().__init__(
            f"Unit '{unit}' depends on '{dependency}', which is not in the graph"
        )
        self.unit = unit
        self.dependency = dependency


class CycleDetectedError(DeploymentError, ValueError):
    """Raised when the dependency graph has no valid deployment order."""

    def __init__(self, units: List[str]):
        super().__init__(f"Dependency cycle detected: {' -> '.join(units)}")
        self.units = units


class UnitNotFoundError(DeploymentError, KeyError):
    """Raised when a unit name is not known to a graph or registry."""

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""


class InvalidTransitionError(DeploymentError, RuntimeError):
    """Raised when a deployment record is moved out of a terminal state."""

    pass


class NotYetDeployedError(DeploymentError, RuntimeError):
    """Raised when the address of a unit that is not deployed is requested."""

    pass


class NetworkMismatchError(DeploymentError, ValueError):
    """Raised when a registry for one network is used to deploy to another."""

    pass


class InvalidAddressError(DeploymentError, ValueError):
    """Raised when a deployed address is not 20 hex-encoded bytes."""

    pass


class UnresolvedDependencyError(DeploymentError, RuntimeError):
    """Raised when linking is attempted before a dependency is deployed."""

    def __init__(self, unit: str, dependency: str):
        super().__init__(
            f"Cannot link '{unit}': dependency '{dependency}' is not deployed"
        )
        self.unit = unit
        self.dependency = dependency


class IncompleteLinkingError(DeploymentError, RuntimeError):
    """Raised when placeholders remain in bytecode after linking."""

    def __init__(self, unit: str, placeholders: List[str]):
        super().__init__(
            f"Bytecode for '{unit}' still contains unresolved placeholders: "
            f"{', '.join(placeholders)}"
        )
        self.unit = unit
        self.placeholders = placeholders


class DeployTransportError(DeploymentError, RuntimeError):
    """Raised when a deployment transaction cannot be submitted or mined."""

    pass


class UnitDeploymentFailedError(DeploymentError, RuntimeError):
    """Raised when a run halts because a unit failed to deploy."""

    def __init__(self, unit: str, network: str, registry: Optional[Any] = None):
        super().__init__(f"Deployment of '{unit}' to network '{network}' failed")
        self.unit = unit
        self.network = network
        self.registry = registry


class ArtifactNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when no compiled artifact exists for a unit."""

    pass


class MalformedArtifactError(DeploymentError, ValueError):
    """Raised when an artifact file is missing ABI or bytecode."""

    pass
