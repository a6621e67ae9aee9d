"""Library address substitution for linked-deployments library."""

import re
import string
from typing import List

from .exceptions import (
    IncompleteLinkingError,
    InvalidAddressError,
    NotYetDeployedError,
    UnitNotFoundError,
    UnresolvedDependencyError,
)
from .registry import ArtifactRegistry
from .types import Unit

# Placeholders occupy the 40 hex characters of a 20-byte address
PLACEHOLDER_LENGTH = 40

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
# Placeholders start and end with "__"; hex bytecode never contains "_"
_PLACEHOLDER_RE = re.compile(r"__.{36}__")
_HEX_DIGITS = frozenset(string.hexdigits)


def default_placeholder(name: str) -> str:
    """
    Get the truffle-style placeholder for a library name.

    Args:
        name: Library name

    Returns:
        "__" + name, right-padded with "_" (or truncated) to 40 characters
    """
    return f"__{name}".ljust(PLACEHOLDER_LENGTH, "_")[:PLACEHOLDER_LENGTH]


def find_placeholders(bytecode: str) -> List[str]:
    """
    Find placeholder tokens left in a bytecode template.

    Args:
        bytecode: Hex bytecode, with or without "0x" prefix

    Returns:
        Distinct placeholder tokens in order of first appearance
    """
    body = bytecode[2:] if bytecode.startswith("0x") else bytecode
    found: List[str] = []
    for match in _PLACEHOLDER_RE.finditer(body):
        if match.group(0) not in found:
            found.append(match.group(0))
    return found


def validate_address(address: str) -> str:
    """
    Check that an address is "0x" followed by 40 hex characters.

    Returns:
        The address, unchanged

    Raises:
        InvalidAddressError: If the address is malformed
    """
    if not isinstance(address, str) or not _ADDRESS_RE.match(address):
        raise InvalidAddressError(f"Invalid address: {address!r}")
    return address


def _address_hex(address: str) -> str:
    return validate_address(address)[2:].lower()


class LinkResolver:
    """Produces deploy-ready bytecode by substituting library addresses."""

    def resolve(self, unit: Unit, registry: ArtifactRegistry) -> str:
        """
        Substitute every declared dependency's address into a unit's bytecode.

        Args:
            unit: Unit to link
            registry: Registry holding the dependencies' deployed addresses

        Returns:
            Linked bytecode (unchanged if the unit has no dependencies)

        Raises:
            UnresolvedDependencyError: If a dependency is not yet deployed
            InvalidAddressError: If a recorded address is malformed
            IncompleteLinkingError: If any placeholder remains after substitution
        """
        bytecode = unit.artifact.bytecode
        if not unit.dependencies:
            return bytecode

        for dependency in unit.dependencies:
            try:
                address = registry.address_of(dependency)
            except (NotYetDeployedError, UnitNotFoundError) as e:
                raise UnresolvedDependencyError(unit.name, dependency) from e

            replacement = _address_hex(address)
            for placeholder in self.placeholders_for(unit, dependency):
                bytecode = bytecode.replace(placeholder, replacement)

        leftover = self._unresolved(unit, bytecode)
        if leftover:
            raise IncompleteLinkingError(unit.name, leftover)

        return bytecode

    @staticmethod
    def placeholders_for(unit: Unit, dependency: str) -> List[str]:
        """
        Get the placeholder tokens standing in for a dependency's address.

        Falls back to the truffle-style default when the artifact declares none.
        """
        declared = unit.artifact.link_references.get(dependency)
        if declared:
            return list(declared)
        return [default_placeholder(dependency)]

    def _unresolved(self, unit: Unit, bytecode: str) -> List[str]:
        leftover = []
        for dependency in unit.dependencies:
            for placeholder in self.placeholders_for(unit, dependency):
                if placeholder in bytecode and placeholder not in leftover:
                    leftover.append(placeholder)

        for placeholder in find_placeholders(bytecode):
            if placeholder not in leftover:
                leftover.append(placeholder)

        body = bytecode[2:] if bytecode.startswith("0x") else bytecode
        if not leftover and not _HEX_DIGITS.issuperset(body):
            # Non-hex characters that do not form a recognizable placeholder
            leftover.append(next(c for c in body if c not in _HEX_DIGITS))

        return leftover
