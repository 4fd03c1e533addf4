"""JSON Schema helpers for tool descriptors."""

from typing import Any, Optional

from jsonschema import Draft7Validator


def validate_schema(data: Any, schema: dict[str, Any]) -> tuple[bool, list[str]]:
    """
    Validate data against a JSON Schema.

    Args:
        data: The data to validate
        schema: JSON Schema to validate against

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    if not schema:
        return True, []

    validator = Draft7Validator(schema)
    errors = list(validator.iter_errors(data))

    if not errors:
        return True, []

    error_messages = [
        f"{'.'.join(str(p) for p in e.path)}: {e.message}" if e.path else e.message
        for e in errors
    ]

    return False, error_messages


def object_schema(
    properties: Optional[dict[str, dict[str, Any]]] = None,
    required: Optional[list[str]] = None
) -> dict[str, Any]:
    """Build an object-typed input schema, checking it is a valid Draft 7 schema."""
    schema = {
        "type": "object",
        "properties": properties or {},
        "required": required or [],
    }
    Draft7Validator.check_schema(schema)
    return schema


def string_prop(description: str) -> dict[str, Any]:
    return {"type": "string", "description": description}


def integer_prop(description: str) -> dict[str, Any]:
    return {"type": "integer", "description": description}


def string_list_prop(description: str) -> dict[str, Any]:
    return {"type": "array", "items": {"type": "string"}, "description": description}


def object_prop(description: str) -> dict[str, Any]:
    return {"type": "object", "description": description}
