"""
Attribute Validation - JSON Schema validation of declared repository attributes.

The declared attribute set arrives as a string-keyed mapping (a YAML or JSON
document). It is checked against REPOSITORY_SCHEMA before it is turned into
a typed RepositorySpec.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from jsonschema import Draft7Validator

logger = logging.getLogger(__name__)

REPOSITORY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["tool_shed", "owner", "name"],
    "additionalProperties": False,
    "properties": {
        "tool_shed": {"type": "string", "minLength": 1},
        "owner": {"type": "string", "minLength": 1},
        "name": {"type": "string", "minLength": 1},
        # Empty string tracks the latest installable revision
        "changeset_revision": {"type": "string", "default": ""},
        "install_tool_dependencies": {"type": "boolean", "default": False},
        "install_repository_dependencies": {"type": "boolean", "default": False},
        "install_resolver_dependencies": {"type": "boolean", "default": False},
        "tool_panel_section_id": {"type": ["string", "null"], "default": ""},
        "new_tool_panel_section_label": {"type": ["string", "null"], "default": ""},
        "remove_from_disk": {"type": "boolean", "default": True},
    },
}


def validate_attributes(
    attributes: Any, schema: Dict[str, Any] = REPOSITORY_SCHEMA
) -> Tuple[bool, Optional[str]]:
    """
    Validate declared attributes against a JSON Schema.

    Args:
        attributes: The declared attribute mapping
        schema: The JSON Schema to validate against

    Returns:
        Tuple of (is_valid, error_message)
    """
    validator = Draft7Validator(schema)
    errors = sorted(
        validator.iter_errors(attributes), key=lambda e: [str(p) for p in e.path]
    )

    if not errors:
        return True, None

    # Collect all validation errors
    error_messages = []
    for error in errors:
        path = ".".join(str(p) for p in error.absolute_path) or "(root)"
        error_messages.append(f"{path}: {error.message}")

    logger.debug(f"Attribute validation failed: {error_messages}")
    return False, "; ".join(error_messages)


def apply_defaults(
    attributes: Dict[str, Any], schema: Dict[str, Any] = REPOSITORY_SCHEMA
) -> Dict[str, Any]:
    """
    Fill in schema defaults for attributes that are absent or null.

    Args:
        attributes: Validated attribute mapping
        schema: The JSON Schema carrying the defaults

    Returns:
        A new dict with every defaulted property present.
    """
    result = dict(attributes)
    for key, prop in schema.get("properties", {}).items():
        if "default" in prop and result.get(key) is None:
            result[key] = prop["default"]
    return result
