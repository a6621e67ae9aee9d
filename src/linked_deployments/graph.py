"""Dependency graph over deployable units."""

from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .exceptions import (
    CycleDetectedError,
    DuplicateUnitError,
    UnitNotFoundError,
    UnknownDependencyError,
)
from .types import Artifact, Unit, UnitKind

# Visitation markers for the depth-first traversal
_UNVISITED = 0
_IN_PROGRESS = 1
_DONE = 2


class DependencyGraph:
    """
    Immutable set of units and their "deploy and link before" edges.

    An edge A -> B means B declares A as a dependency: A must be deployed and
    its address linked into B's bytecode before B is deployed.
    """

    def __init__(self, units: Iterable[Unit]):
        """
        Build a graph from units in declaration order.

        Args:
            units: Units to deploy; declaration order breaks ordering ties

        Raises:
            DuplicateUnitError: If two units share a name
            UnknownDependencyError: If a unit depends on a name not in the graph
        """
        self._units: Dict[str, Unit] = {}
        for unit in units:
            if unit.name in self._units:
                raise DuplicateUnitError(f"Unit '{unit.name}' declared more than once")
            self._units[unit.name] = unit

        for unit in self._units.values():
            for dependency in unit.dependencies:
                if dependency not in self._units:
                    raise UnknownDependencyError(unit.name, dependency)

        self._order: Optional[List[str]] = None

    @classmethod
    def from_pairs(
        cls,
        pairs: Sequence[Tuple[Unit, Iterable[str]]],
        kinds: Optional[Dict[str, UnitKind]] = None,
    ) -> "DependencyGraph":
        """
        Build a graph from (unit, dependency names) pairs.

        The dependency names given in each pair replace whatever the unit
        itself declares.

        Args:
            pairs: Sequence of (unit, dependency identifiers)
            kinds: Optional overrides of each unit's kind

        Returns:
            DependencyGraph over the given units
        """
        kinds = kinds or {}
        units = []
        for unit, dependencies in pairs:
            units.append(
                Unit(
                    name=unit.name,
                    artifact=unit.artifact,
                    dependencies=tuple(dependencies),
                    kind=kinds.get(unit.name, unit.kind),
                )
            )
        return cls(units)

    def __getitem__(self, name: str) -> Unit:
        try:
            return self._units[name]
        except KeyError:
            raise UnitNotFoundError(f"Unit '{name}' not found in graph") from None

    def __contains__(self, name: object) -> bool:
        return name in self._units

    def __iter__(self) -> Iterator[Unit]:
        return iter(self._units.values())

    def __len__(self) -> int:
        return len(self._units)

    def names(self) -> List[str]:
        """Return unit names in declaration order."""
        return list(self._units)

    def dependencies_of(self, name: str) -> Tuple[str, ...]:
        """Return the direct dependencies of a unit."""
        return self[name].dependencies

    def dependents_of(self, name: str) -> List[str]:
        """Return units that directly depend on a unit, in declaration order."""
        if name not in self._units:
            raise UnitNotFoundError(f"Unit '{name}' not found in graph")
        return [unit.name for unit in self._units.values() if name in unit.dependencies]

    def artifacts(self) -> Dict[str, Artifact]:
        """Return unit name -> artifact."""
        return {name: unit.artifact for name, unit in self._units.items()}

    def topological_order(self) -> List[str]:
        """
        Get a deployment order in which every dependency precedes its dependents.

        Units are visited in declaration order and each unit's dependencies in
        the order it declares them, so the result is deterministic.

        Returns:
            List of unit names

        Raises:
            CycleDetectedError: If a unit transitively depends on itself
        """
        if self._order is None:
            self._order = self._compute_order()
        return list(self._order)

    def _compute_order(self) -> List[str]:
        state: Dict[str, int] = {name: _UNVISITED for name in self._units}
        order: List[str] = []
        path: List[str] = []

        for root in self._units:
            if state[root] != _UNVISITED:
                continue

            # Explicit stack of (unit, remaining dependencies); path mirrors it
            state[root] = _IN_PROGRESS
            path.append(root)
            stack: List[Tuple[str, Iterator[str]]] = [
                (root, iter(self._units[root].dependencies))
            ]
            while stack:
                name, dependencies = stack[-1]
                for dependency in dependencies:
                    if state[dependency] == _IN_PROGRESS:
                        # Back-edge: the cycle is the path segment from dependency
                        cycle = path[path.index(dependency):] + [dependency]
                        raise CycleDetectedError(cycle)
                    if state[dependency] == _UNVISITED:
                        state[dependency] = _IN_PROGRESS
                        path.append(dependency)
                        stack.append(
                            (dependency, iter(self._units[dependency].dependencies))
                        )
                        break
                else:
                    stack.pop()
                    path.pop()
                    state[name] = _DONE
                    order.append(name)

        return order
