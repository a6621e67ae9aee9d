"""Shared pytest fixtures for linked-deployments tests."""

import json
from pathlib import Path
from typing import List

import pytest

from helpers import FakeDeployer, make_artifact, make_unit
from linked_deployments.types import Unit


@pytest.fixture
def network() -> str:
    return "development"


@pytest.fixture
def deployer() -> FakeDeployer:
    return FakeDeployer()


@pytest.fixture
def chain_units() -> List[Unit]:
    """Linear chain A -> B -> C; C links against both A and B."""
    return [make_unit("A"), make_unit("B", ["A"]), make_unit("C", ["A", "B"])]


@pytest.fixture
def lib_main_units() -> List[Unit]:
    """Two independent libraries linked into Main."""
    return [make_unit("Lib1"), make_unit("Lib2"), make_unit("Main", ["Lib1", "Lib2"])]


@pytest.fixture
def extended_units() -> List[Unit]:
    return [
        make_unit("Lib1"),
        make_unit("Lib2"),
        make_unit("Lib3", ["Lib1", "Lib2"]),
        make_unit("AdvModule", ["Lib3"]),
        make_unit("Main", ["Lib1", "Lib2", "AdvModule"]),
    ]


@pytest.fixture
def truffle_build_dir(tmp_path: Path) -> Path:
    """Write truffle-style artifacts for IceGlobal, IceSort and Ice."""
    build_dir = tmp_path / "build" / "contracts"
    build_dir.mkdir(parents=True)

    for name, dependencies in [
        ("IceGlobal", []),
        ("IceSort", []),
        ("Ice", ["IceGlobal", "IceSort"]),
    ]:
        artifact = make_artifact(name, dependencies)
        data = {
            "contractName": name,
            "abi": artifact.abi,
            "bytecode": artifact.bytecode,
            "deployedBytecode": artifact.bytecode,
            "networks": {},
        }
        (build_dir / f"{name}.json").write_text(json.dumps(data))

    return build_dir


@pytest.fixture
def temp_manifest_dir(tmp_path: Path) -> Path:
    """Create a temporary manifest directory for tests."""
    manifest_dir = tmp_path / ".linked-deployments"
    manifest_dir.mkdir(parents=True, exist_ok=True)
    return manifest_dir
