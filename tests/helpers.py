"""Test doubles and artifact builders shared by the test suite."""

import asyncio
from typing import Any, Dict, List, Optional, Sequence, Tuple

from linked_deployments.linking import default_placeholder
from linked_deployments.types import Artifact, Unit

SAMPLE_ABI: List[Dict[str, Any]] = [
    {"type": "constructor", "inputs": [], "stateMutability": "nonpayable"},
    {"type": "function", "name": "version", "inputs": [], "outputs": []},
]

# Every test bytecode starts with this, followed by the hex-encoded unit
# name and an "ff" terminator (never part of ASCII hex)
CODE_PREFIX = "0x60806040ff"


def make_artifact(name: str, dependencies: Sequence[str] = ()) -> Artifact:
    """Build an artifact whose bytecode references each dependency twice."""
    body = name.encode().hex() + "ff"
    for dependency in dependencies:
        body += "73" + default_placeholder(dependency)
    for dependency in dependencies:
        body += "5b" + default_placeholder(dependency)
    return Artifact(abi=SAMPLE_ABI, bytecode=CODE_PREFIX + body + "00")


def make_unit(name: str, dependencies: Sequence[str] = ()) -> Unit:
    return Unit(
        name=name,
        artifact=make_artifact(name, dependencies),
        dependencies=tuple(dependencies),
    )


def unit_name(bytecode: str) -> str:
    """Recover the unit name embedded by make_artifact()."""
    body = bytecode[len(CODE_PREFIX):]
    return bytes.fromhex(body[: body.index("ff")]).decode()


def address_hex(address: str) -> str:
    return address[2:].lower()


class FakeDeployer:
    """In-memory deployer handing out sequential addresses."""

    def __init__(self, fail_on: Sequence[str] = (), delays: Optional[Dict[str, float]] = None):
        self.fail_on = set(fail_on)
        self.delays = delays or {}
        self.started: List[str] = []
        self.events: List[Tuple[str, str]] = []
        self.deployed: List[str] = []
        self.bytecodes: Dict[str, str] = {}
        self.networks: List[str] = []
        self.max_in_flight = 0
        self._in_flight = 0
        self._count = 0

    async def deploy(self, bytecode: str, abi: List[Dict[str, Any]], network: str) -> str:
        name = unit_name(bytecode)
        self.started.append(name)
        self.events.append(("start", name))
        self.networks.append(network)
        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            await asyncio.sleep(self.delays.get(name, 0))
            if name in self.fail_on:
                raise ConnectionError(f"node rejected {name}")
            self._count += 1
            self.deployed.append(name)
            self.events.append(("done", name))
            self.bytecodes[name] = bytecode
            return f"0x{self._count:040x}"
        finally:
            self._in_flight -= 1


