"""Dependency declarations for the project's deployment migrations."""

from typing import Dict, List, Mapping

from .graph import DependencyGraph
from .ingestion import build_graph
from .types import Artifact

# Unit name -> libraries linked into it, in deployment order
ICE_PROTOCOL: Dict[str, List[str]] = {
    "IceGlobal": [],
    "IceSort": [],
    "Ice": ["IceGlobal", "IceSort"],
}

EXTENDED: Dict[str, List[str]] = {
    "Lib1": [],
    "Lib2": [],
    "Lib3": ["Lib1", "Lib2"],
    "AdvModule": ["Lib3"],
    "Main": ["Lib1", "Lib2", "AdvModule"],
}


def ice_protocol_graph(artifacts: Mapping[str, Artifact]) -> DependencyGraph:
    """Ice with its two libraries, IceGlobal and IceSort."""
    return build_graph(artifacts, ICE_PROTOCOL)


def extended_graph(artifacts: Mapping[str, Artifact]) -> DependencyGraph:
    """Main linked against three libraries and a module built on the third."""
    return build_graph(artifacts, EXTENDED)
