"""Main API for linked-deployments library."""

import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

from .constants import resolve_rpc_url
from .deployers import Deployer, JsonRpcDeployer
from .exceptions import NetworkMismatchError, UnitDeploymentFailedError
from .graph import DependencyGraph
from .ingestion import build_graph, load_artifacts
from .linking import LinkResolver, validate_address
from .manifest import load_manifest, save_manifest
from .paths import get_manifest_path
from .registry import ArtifactRegistry
from .types import Unit

logger = logging.getLogger(__name__)


class DeploymentOrchestrator:
    """
    Deploys every unit of a dependency graph, linking libraries as it goes.

    By default units are deployed one at a time in topological order. With
    concurrent=True, units whose dependencies are all deployed are dispatched
    in parallel. Either way the run is fail-fast: after the first failure no
    new unit is started.
    """

    def __init__(
        self,
        deployer: Deployer,
        resolver: Optional[LinkResolver] = None,
        concurrent: bool = False,
        max_concurrency: Optional[int] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            deployer: Collaborator that broadcasts deployments
            resolver: Link resolver (defaults to LinkResolver())
            concurrent: Dispatch independent units in parallel
            max_concurrency: Upper bound on in-flight deployments when concurrent
        """
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self.deployer = deployer
        self.resolver = resolver or LinkResolver()
        self.concurrent = concurrent
        self.max_concurrency = max_concurrency

    async def run(
        self,
        graph: DependencyGraph,
        network: str,
        registry: Optional[ArtifactRegistry] = None,
    ) -> ArtifactRegistry:
        """
        Deploy all units of a graph to a network.

        A fresh registry deploys every unit. Passing a seeded registry resumes
        a previous run: units it already records as deployed are skipped.

        Args:
            graph: Units and their dependencies
            network: Target network name
            registry: Registry to record into (defaults to a fresh one)

        Returns:
            Registry with every unit DEPLOYED

        Raises:
            CycleDetectedError: If the graph has no valid order
            NetworkMismatchError: If registry belongs to another network
            UnitDeploymentFailedError: If a deployment fails; the error names
                                       the unit and carries the registry
                                       (also raised when the deployer returns
                                       a malformed address)
            UnresolvedDependencyError: If linking runs before a dependency is deployed
            IncompleteLinkingError: If placeholders remain after linking
        """
        order = graph.topological_order()

        if registry is None:
            registry = ArtifactRegistry(network)
        elif registry.network != network:
            raise NetworkMismatchError(
                f"Registry is for network '{registry.network}', not '{network}'"
            )

        registry.initialize(graph[name] for name in order)

        remaining: List[str] = []
        for name in order:
            if registry.is_deployed(name):
                logger.info(
                    "Reusing %s at %s on %s", name, registry.address_of(name), network
                )
            else:
                remaining.append(name)

        logger.info("Deploying %d of %d units to %s", len(remaining), len(order), network)

        if self.concurrent:
            await self._run_concurrent(graph, remaining, network, registry)
        else:
            for name in remaining:
                await self._deploy_unit(graph[name], network, registry)

        return registry

    async def _run_concurrent(
        self,
        graph: DependencyGraph,
        remaining: List[str],
        network: str,
        registry: ArtifactRegistry,
    ) -> None:
        pending = list(remaining)
        in_flight: Dict["asyncio.Task[None]", str] = {}
        first_error: Optional[BaseException] = None

        while pending or in_flight:
            # Stop starting new units once anything has failed
            if first_error is None:
                for name in list(pending):
                    if self.max_concurrency and len(in_flight) >= self.max_concurrency:
                        break
                    if all(registry.is_deployed(d) for d in graph.dependencies_of(name)):
                        pending.remove(name)
                        task = asyncio.create_task(
                            self._deploy_unit(graph[name], network, registry)
                        )
                        in_flight[task] = name

            if not in_flight:
                break

            done, _ = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                in_flight.pop(task)
                error = task.exception()
                if error is not None and first_error is None:
                    first_error = error

        if first_error is not None:
            raise first_error

    async def _deploy_unit(
        self, unit: Unit, network: str, registry: ArtifactRegistry
    ) -> None:
        if unit.dependencies:
            registry.record_linking(unit.name)
            try:
                bytecode = self.resolver.resolve(unit, registry)
            except Exception as e:
                registry.record_failed(unit.name, e)
                raise
            logger.debug("Linked %s against %s", unit.name, ", ".join(unit.dependencies))
        else:
            bytecode = unit.artifact.bytecode

        logger.info("Deploying %s to %s", unit.name, network)
        try:
            address = validate_address(
                await self.deployer.deploy(bytecode, unit.artifact.abi, network)
            )
        except Exception as e:
            registry.record_failed(unit.name, e)
            logger.error("Deployment of %s to %s failed: %s", unit.name, network, e)
            raise UnitDeploymentFailedError(unit.name, network, registry) from e

        registry.record_deployed(unit.name, address, bytecode)
        logger.info("Deployed %s at %s", unit.name, address)


def deploy_graph(
    graph: DependencyGraph,
    network: str,
    deployer: Optional[Deployer] = None,
    rpc_url: Optional[str] = None,
    registry: Optional[ArtifactRegistry] = None,
    concurrent: bool = False,
    max_concurrency: Optional[int] = None,
) -> ArtifactRegistry:
    """
    Deploy a graph synchronously.

    Args:
        graph: Units and their dependencies
        network: Target network name
        deployer: Deploy collaborator (defaults to a JsonRpcDeployer for network)
        rpc_url: RPC URL for the default deployer (defaults to the network's
                 environment variable)
        registry: Seeded registry to resume from (defaults to a fresh one)
        concurrent: Dispatch independent units in parallel
        max_concurrency: Upper bound on in-flight deployments when concurrent

    Returns:
        Registry with every unit DEPLOYED

    Raises:
        ValueError: If no deployer is given and no RPC URL is configured
        UnitDeploymentFailedError: If a deployment fails
    """
    if deployer is None:
        deployer = JsonRpcDeployer(resolve_rpc_url(network, rpc_url))

    orchestrator = DeploymentOrchestrator(
        deployer, concurrent=concurrent, max_concurrency=max_concurrency
    )
    return asyncio.run(orchestrator.run(graph, network, registry))


def deploy_from_build_dir(
    build_dir: Union[Path, str],
    dependencies: Mapping[str, Optional[Sequence[str]]],
    network: str,
    deployer: Optional[Deployer] = None,
    rpc_url: Optional[str] = None,
    manifest_path: Optional[Union[Path, str]] = None,
    resume: bool = False,
    concurrent: bool = False,
) -> ArtifactRegistry:
    """
    Deploy compiled artifacts and write the resulting manifest.

    The manifest is written whether or not the run succeeds, so a failed run
    can be inspected and later resumed with resume=True.

    Args:
        build_dir: Directory of compiled artifact JSON files
        dependencies: Unit name -> dependency names, in declaration order
                      (None infers them from the artifact's link references)
        network: Target network name
        deployer: Deploy collaborator (defaults to a JsonRpcDeployer for network)
        rpc_url: RPC URL for the default deployer
        manifest_path: Where to read/write the manifest
                       (defaults to ./.linked-deployments/{network}.json)
        resume: Skip units the existing manifest records as deployed
        concurrent: Dispatch independent units in parallel

    Returns:
        Registry with every unit DEPLOYED

    Raises:
        ArtifactNotFoundError: If build_dir or a named artifact is missing
        UnitDeploymentFailedError: If a deployment fails
        IncompleteLinkingError: If linking fails; the manifest is still written
    """
    if manifest_path is None:
        manifest_path = get_manifest_path(network)
    manifest_path_obj = Path(manifest_path)

    graph = build_graph(load_artifacts(build_dir), dependencies)

    registry = ArtifactRegistry(network)
    if resume:
        manifest = load_manifest(manifest_path_obj, network)
        if manifest:
            registry = ArtifactRegistry.from_manifest(manifest)

    if deployer is None:
        deployer = JsonRpcDeployer(resolve_rpc_url(network, rpc_url))

    orchestrator = DeploymentOrchestrator(deployer, concurrent=concurrent)
    try:
        asyncio.run(orchestrator.run(graph, network, registry))
    finally:
        save_manifest(registry.to_manifest(), manifest_path_obj)
    return registry
