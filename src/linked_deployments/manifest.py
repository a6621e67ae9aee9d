"""Deployment manifest persistence for linked-deployments library."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def load_manifest(manifest_path: Path, network: Optional[str] = None) -> Dict[str, Any]:
    """
    Load an existing deployment manifest or return empty dict.

    A manifest that cannot be used to resume (unreadable, missing its units,
    or recorded for a different network) is ignored with a warning.

    Args:
        manifest_path: Path to {network}.json manifest file
        network: Expected network; None accepts any

    Returns:
        Manifest dictionary as produced by ArtifactRegistry.to_manifest()
        Empty dict if the file is missing or unusable
    """
    try:
        with open(manifest_path) as f:
            manifest = json.load(f)
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError:
        logger.warning("Ignoring corrupted manifest %s", manifest_path)
        return {}

    if not isinstance(manifest, dict) or not isinstance(manifest.get("units"), dict):
        logger.warning("Ignoring manifest without units: %s", manifest_path)
        return {}

    if network is not None and manifest.get("network") != network:
        logger.warning(
            "Ignoring manifest %s recorded for network %r, expected %r",
            manifest_path,
            manifest.get("network"),
            network,
        )
        return {}

    return manifest


def save_manifest(manifest: Dict[str, Any], manifest_path: Path) -> None:
    """
    Save a deployment manifest to disk.

    The manifest is written to a sibling temporary file first and then moved
    into place, so an interrupted write never leaves a truncated manifest.

    Args:
        manifest: Manifest dictionary
        manifest_path: Path to {network}.json manifest file

    Creates parent directories if they don't exist.
    """
    manifest_path = Path(manifest_path)
    manifest_path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = manifest_path.with_name(manifest_path.name + ".tmp")
    with open(temp_path, "w") as f:
        json.dump(manifest, f, indent=2)
    temp_path.replace(manifest_path)
