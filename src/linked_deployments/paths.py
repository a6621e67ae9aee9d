"""Path management utilities for linked-deployments library."""

from pathlib import Path
from typing import Optional, Union

MANIFEST_DIR_NAME = ".linked-deployments"


def get_default_manifest_dir() -> Path:
    """
    Get default manifest directory (current working directory).

    Returns:
        Path to ./.linked-deployments
    """
    return Path.cwd() / MANIFEST_DIR_NAME


def get_manifest_path(network: str, manifest_root: Optional[Union[Path, str]] = None) -> Path:
    """
    Get the manifest file path for a network.

    Each network has its own address space, so each gets its own manifest.

    Args:
        network: Network name
        manifest_root: Custom manifest directory (defaults to ./.linked-deployments)

    Returns:
        Path to {manifest_root}/{network}.json

    Raises:
        ValueError: If the network name cannot be used as a file name
    """
    # The name becomes a single file inside the manifest directory
    if not network or network in (".", "..") or Path(network).name != network:
        raise ValueError(f"Invalid network name for a manifest: {network!r}")

    root = get_default_manifest_dir() if manifest_root is None else Path(manifest_root).absolute()
    return root / f"{network}.json"
