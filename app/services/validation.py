"""
JSON Schema validation service.

Used to check configuration documents before they are turned into typed
objects. Every error is collected rather than stopping at the first one,
and each message is prefixed with where in the document it occurred.
"""

from typing import Any

import jsonschema


def _location(error: jsonschema.ValidationError) -> str:
    return ".".join(str(part) for part in error.absolute_path) or "<root>"


def validate_against_schema(data: dict[str, Any], schema: dict[str, Any]) -> list[str]:
    """
    Validate a dict against a JSON schema.
    Returns a list of error messages (empty list = valid).
    """
    validator = jsonschema.Draft7Validator(schema)
    return [
        f"{_location(error)}: {error.message}"
        for error in sorted(validator.iter_errors(data), key=lambda e: list(map(str, e.absolute_path)))
    ]
