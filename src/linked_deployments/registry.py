"""Per-run store of deployment records for linked-deployments library."""

import threading
from typing import Any, Dict, Iterable, List, Optional

from .exceptions import (
    InvalidTransitionError,
    NotYetDeployedError,
    UnitNotFoundError,
)
from .types import DeploymentRecord, DeploymentStatus, Unit


class ArtifactRegistry:
    """
    Maps unit names to their deployment records for one run on one network.

    A fresh registry is cleared by initialize(). A seeded registry (see
    seeded() and from_manifest()) keeps units already deployed, which lets
    the orchestrator resume a partially completed run.
    """

    def __init__(self, network: str):
        self.network = network
        self._records: Dict[str, DeploymentRecord] = {}
        self._seeded = False
        self._lock = threading.Lock()

    @classmethod
    def seeded(cls, network: str, addresses: Dict[str, str]) -> "ArtifactRegistry":
        """
        Create a registry in which the given units are already deployed.

        Args:
            network: Network the addresses live on
            addresses: Unit name -> deployed address

        Returns:
            Registry in resume mode
        """
        registry = cls(network)
        for name, address in addresses.items():
            registry._records[name] = DeploymentRecord(
                unit=name,
                network=network,
                status=DeploymentStatus.DEPLOYED,
                address=address,
            )
        registry._seeded = True
        return registry

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "ArtifactRegistry":
        """
        Create a seeded registry from a manifest produced by to_manifest().

        Only deployed units are kept; failed or unfinished units will be
        deployed again.

        Args:
            manifest: Manifest dictionary

        Returns:
            Registry in resume mode

        Raises:
            KeyError: If the manifest has no network
        """
        addresses = {
            name: entry["address"]
            for name, entry in manifest.get("units", {}).items()
            if entry.get("status") == DeploymentStatus.DEPLOYED.value
            and entry.get("address")
        }
        return cls.seeded(manifest["network"], addresses)

    @property
    def is_seeded(self) -> bool:
        return self._seeded

    def initialize(self, units: Iterable[Unit]) -> None:
        """
        Create a PENDING record for every unit.

        In resume mode, records of units that are already DEPLOYED are kept.

        Args:
            units: Units taking part in the run
        """
        with self._lock:
            previous = self._records if self._seeded else {}
            records: Dict[str, DeploymentRecord] = {}
            for unit in units:
                kept = previous.get(unit.name)
                if kept is not None and kept.status == DeploymentStatus.DEPLOYED:
                    records[unit.name] = kept
                else:
                    records[unit.name] = DeploymentRecord(unit=unit.name, network=self.network)
            self._records = records

    def record_linking(self, name: str) -> None:
        """
        Mark a unit as being linked against its dependencies.

        Raises:
            InvalidTransitionError: If the unit is not PENDING
        """
        with self._lock:
            record = self._get(name)
            if record.status != DeploymentStatus.PENDING:
                raise InvalidTransitionError(
                    f"Cannot start linking '{name}' from status '{record.status.value}'"
                )
            record.status = DeploymentStatus.LINKING

    def record_deployed(self, name: str, address: str, bytecode: Optional[str] = None) -> None:
        """
        Mark a unit as deployed at an address.

        Args:
            name: Unit name
            address: Deployed address
            bytecode: Linked bytecode that was submitted

        Raises:
            InvalidTransitionError: If the unit is already DEPLOYED or FAILED
        """
        with self._lock:
            record = self._get(name)
            if record.status.is_terminal:
                raise InvalidTransitionError(
                    f"Cannot mark '{name}' deployed: already {record.status.value}"
                )
            record.status = DeploymentStatus.DEPLOYED
            record.address = address
            record.bytecode = bytecode

    def record_failed(self, name: str, cause: Any) -> None:
        """
        Mark a unit as failed. Failed units are not retried within the run.

        Args:
            name: Unit name
            cause: Exception or description of the failure

        Raises:
            InvalidTransitionError: If the unit is already DEPLOYED or FAILED
        """
        with self._lock:
            record = self._get(name)
            if record.status.is_terminal:
                raise InvalidTransitionError(
                    f"Cannot mark '{name}' failed: already {record.status.value}"
                )
            record.status = DeploymentStatus.FAILED
            record.error = str(cause) or type(cause).__name__

    def address_of(self, name: str) -> str:
        """
        Get the deployed address of a unit.

        Raises:
            UnitNotFoundError: If the unit is not in the registry
            NotYetDeployedError: If the unit is not DEPLOYED
        """
        record = self._get(name)
        if record.status != DeploymentStatus.DEPLOYED or record.address is None:
            raise NotYetDeployedError(
                f"Unit '{name}' is not deployed on '{self.network}' "
                f"(status: {record.status.value})"
            )
        return record.address

    def status_of(self, name: str) -> DeploymentStatus:
        return self._get(name).status

    def is_deployed(self, name: str) -> bool:
        record = self._records.get(name)
        return record is not None and record.status == DeploymentStatus.DEPLOYED

    def record(self, name: str) -> DeploymentRecord:
        return self._get(name)

    def records(self) -> List[DeploymentRecord]:
        """Return all records in the order units were registered."""
        return list(self._records.values())

    def failed(self) -> List[DeploymentRecord]:
        return [r for r in self._records.values() if r.status == DeploymentStatus.FAILED]

    def has_failure(self) -> bool:
        return any(r.status == DeploymentStatus.FAILED for r in self._records.values())

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __len__(self) -> int:
        return len(self._records)

    def to_manifest(self) -> Dict[str, Any]:
        """
        Export the run report as a JSON-serializable manifest.

        Returns:
            Dictionary with network and per-unit status, address and error
        """
        units: Dict[str, Any] = {}
        for record in self._records.values():
            entry: Dict[str, Any] = {
                "status": record.status.value,
                "address": record.address,
            }
            if record.error is not None:
                entry["error"] = record.error
            units[record.unit] = entry
        return {"network": self.network, "units": units}

    def _get(self, name: str) -> DeploymentRecord:
        try:
            return self._records[name]
        except KeyError:
            raise UnitNotFoundError(
                f"Unit '{name}' not found in registry for network '{self.network}'"
            ) from None
