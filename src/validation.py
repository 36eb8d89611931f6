"""
Schema Validation - JSON Schema validation of declared resource configuration.

Declared attributes are checked before any lifecycle call reaches a resource
plugin, so plugins can assume well-formed input.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from jsonschema import Draft7Validator, SchemaError

logger = logging.getLogger(__name__)


def validate_config_schema(schema: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate that a resource's configuration schema is valid JSON Schema.

    Args:
        schema: The schema to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        Draft7Validator.check_schema(schema)
        return True, None
    except SchemaError as e:
        return False, f"Invalid schema: {e.message}"


def validate_config_against_schema(
    config: Dict[str, Any], schema: Dict[str, Any]
) -> Tuple[bool, Optional[str]]:
    """
    Validate declared resource attributes against a resource's schema.

    Args:
        config: The declared attributes
        schema: The JSON Schema to validate against

    Returns:
        Tuple of (is_valid, error_message)
    """
    validator = Draft7Validator(schema, format_checker=Draft7Validator.FORMAT_CHECKER)
    errors = sorted(
        validator.iter_errors(config), key=lambda e: [str(p) for p in e.path]
    )

    if not errors:
        return True, None

    # Collect all validation errors
    error_messages = []
    for error in errors:
        path = ".".join(str(p) for p in error.absolute_path) or "(root)"
        error_messages.append(f"{path}: {error.message}")

    logger.debug(f"Configuration rejected: {error_messages}")
    return False, "; ".join(error_messages)
