"""
Validation module initialization.
"""
from wiredesk.validation.validators import (
    REQUIRED_FIELDS,
    validate_required_fields,
    find_missing_field,
)

__all__ = [
    "REQUIRED_FIELDS",
    "validate_required_fields",
    "find_missing_field",
]
