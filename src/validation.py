"""
Schema Validation - JSON Schema validation of declared attributes.

Builds a Draft 7 JSON Schema from a resource descriptor and validates
declared configuration against it.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from jsonschema import Draft7Validator, ValidationError

from schema import AttributeSchema

logger = logging.getLogger(__name__)


def build_json_schema(descriptor: Mapping[str, AttributeSchema]) -> Dict[str, Any]:
    """
    Build the JSON Schema for the settable attributes of a descriptor.

    Derived attributes are left out, and additionalProperties is false, so a
    declaration that supplies a derived attribute is rejected.

    Args:
        descriptor: Ordered attribute descriptor.

    Returns:
        A Draft 7 JSON Schema dict.
    """
    properties: Dict[str, Any] = {}
    required = []
    for name, attr in descriptor.items():
        if not attr.settable:
            continue
        prop: Dict[str, Any] = {"type": attr.type, "description": attr.description}
        if not attr.required:
            prop["type"] = [attr.type, "null"]
        prop.update(attr.constraints)
        properties[name] = prop
        if attr.required:
            required.append(name)

    return {
        "type": "object",
        "required": required,
        "properties": properties,
        "additionalProperties": False,
    }


def validate_declared(
    declared: Mapping[str, Any], descriptor: Mapping[str, AttributeSchema]
) -> Tuple[bool, Optional[str]]:
    """
    Validate declared attribute values against a descriptor.

    Args:
        declared: The declared attribute values.
        descriptor: The resource descriptor.

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        validator = Draft7Validator(build_json_schema(descriptor))
        errors = sorted(
            validator.iter_errors(dict(declared)), key=lambda e: list(e.absolute_path)
        )

        if not errors:
            return True, None

        error_messages = []
        for error in errors:
            path = ".".join(str(p) for p in error.absolute_path) or "(root)"
            error_messages.append(f"{path}: {error.message}")

        return False, "; ".join(error_messages)

    except ValidationError as e:
        return False, f"Validation error: {str(e)}"
    except Exception as e:
        logger.error(f"Unexpected error during validation: {e}")
        return False, f"Validation failed: {str(e)}"
