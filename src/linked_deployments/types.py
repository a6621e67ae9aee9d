"""Data types and dataclasses for linked-deployments library."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class UnitKind(Enum):
    """
    Kind of deployable unit.

    Advisory only: a contract may itself be linked into other contracts.
    """

    LIBRARY = "library"
    CONTRACT = "contract"


class DeploymentStatus(Enum):
    """
    Per-unit deployment state within one run.

    PENDING -> LINKING -> DEPLOYED | FAILED, or PENDING -> DEPLOYED | FAILED
    for units without dependencies. DEPLOYED and FAILED are terminal.
    """

    PENDING = "pending"
    LINKING = "linking"
    DEPLOYED = "deployed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (DeploymentStatus.DEPLOYED, DeploymentStatus.FAILED)


@dataclass(frozen=True)
class Artifact:
    """Compiled contract: ABI and bytecode template."""

    abi: List[Dict[str, Any]]  # Full contract ABI
    bytecode: str  # "0x"-prefixed hex, may contain placeholder slots
    # Dependency name -> placeholder tokens standing in for its address
    link_references: Dict[str, List[str]] = field(default_factory=dict)
    source_format: Optional[str] = None  # "truffle", "hardhat" or "minimal"


@dataclass(frozen=True)
class Unit:
    """A deployable module and the units whose addresses it links against."""

    name: str
    artifact: Artifact
    dependencies: Tuple[str, ...] = ()
    kind: UnitKind = UnitKind.CONTRACT

    def __post_init__(self) -> None:
        # Accept any iterable of names but store an immutable tuple
        object.__setattr__(self, "dependencies", tuple(self.dependencies))


@dataclass
class DeploymentRecord:
    """Deployment state of one unit on one network."""

    # Required fields
    unit: str
    network: str
    status: DeploymentStatus = DeploymentStatus.PENDING

    # Filled in as the run progresses
    address: Optional[str] = None
    error: Optional[str] = None
    bytecode: Optional[str] = None  # Linked bytecode that was submitted
