"""
State File - Local JSON record of a declared repository and its known state.

The CLI stores one resource per file:
    {"spec": {...declared attributes}, "state": {...computed attributes} | null}
"""

import json
import logging
import os
from typing import Any, Dict

from errors import ValidationError
from models import RepositoryResource, RepositorySpec, RepositoryState

logger = logging.getLogger(__name__)


def resource_to_dict(resource: RepositoryResource) -> Dict[str, Any]:
    return {
        "spec": resource.spec.to_attributes(),
        "state": resource.state.to_dict() if resource.state else None,
    }


def resource_from_dict(data: Dict[str, Any]) -> RepositoryResource:
    if not isinstance(data, dict) or "spec" not in data:
        raise ValidationError("State file must contain a 'spec' object")
    state = data.get("state")
    return RepositoryResource(
        spec=RepositorySpec.from_attributes(data["spec"]),
        state=RepositoryState.from_dict(state) if state else None,
    )


def save_resource(resource: RepositoryResource, path: str) -> None:
    """Write a resource to a state file, replacing any existing one."""
    tmp_path = f"{path}.tmp"
    try:
        with open(tmp_path, "w") as f:
            json.dump(resource_to_dict(resource), f, indent=2, sort_keys=True)
            f.write("\n")
        os.replace(tmp_path, path)
    except Exception:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    logger.debug(f"Saved state to {path}")


def load_resource(path: str) -> RepositoryResource:
    """Read a resource from a state file."""
    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid state file {path}: {e}")
    return resource_from_dict(data)


def delete_resource_file(path: str) -> None:
    """Remove a state file once its resource is gone."""
    if os.path.exists(path):
        os.remove(path)
        logger.debug(f"Removed state file {path}")
