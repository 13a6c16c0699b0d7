"""
Utils module - Utility functions and helpers.

This module contains encoding and validation helpers used throughout pqhelper.
"""

from pqhelper.utils.encoding import b64decode, b64encode, is_base64
from pqhelper.utils.validators import require_string_field, validate_message

__all__ = [
    "b64encode",
    "b64decode",
    "is_base64",
    "require_string_field",
    "validate_message",
]
