"""
Validation Utilities
====================

Input validation functions shared by the key manager and the cipher.
"""

from __future__ import annotations

from typing import Any, Mapping, Type

from pqhelper.core.exceptions import EmptyOrMissingMessage, PQHelperError


def validate_message(message: Any) -> bytes:
    """
    Validate a message and return its UTF-8 encoding.

    The empty string is a valid message; None or non-text is not.

    Raises:
        EmptyOrMissingMessage: If message is absent or not a str
    """
    if message is None:
        raise EmptyOrMissingMessage("message is required")

    if not isinstance(message, str):
        raise EmptyOrMissingMessage(
            f"message must be a string, got {type(message).__name__}"
        )

    try:
        return message.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EmptyOrMissingMessage("message is not encodable as UTF-8") from e


def require_string_field(
    data: Mapping[str, Any],
    field_name: str,
    error_cls: Type[PQHelperError],
    allow_empty: bool = False,
) -> str:
    """
    Fetch a string field from a mapping.

    Args:
        data: Source mapping
        field_name: Key to read
        error_cls: Error raised on failure
        allow_empty: If False, empty strings are rejected

    Returns:
        The field value

    Raises:
        error_cls: If the field is missing, not a string, or empty
    """
    if field_name not in data or data[field_name] is None:
        raise error_cls(f"missing {field_name}")

    value = data[field_name]
    if not isinstance(value, str):
        raise error_cls(f"{field_name} must be a string")

    if not allow_empty and not value:
        raise error_cls(f"{field_name} cannot be empty")

    return value
