"""
Request validation for wire transfer submissions.

Only presence is checked here. Field content (amount is numeric, SWIFT
format and so on) is not checked.
"""
from typing import Any, Iterable, Mapping, Optional

import structlog

from wiredesk.exceptions import MissingFieldError

logger = structlog.get_logger(__name__)


# Order matters: the first missing field is the one reported
REQUIRED_FIELDS = (
    "amount",
    "currency",
    "beneficiario",
    "dirBeneficiario",
    "bancoBeneficiario",
    "swiftBeneficiario",
    "ibanBeneficiario",
    "submitterName",
    "submitterEmail",
)


def validate_required_fields(
    data: Any,
    required: Iterable[str] = REQUIRED_FIELDS,
) -> None:
    """
    Check that every required field is present and truthy.

    Args:
        data: Submitted record (field name -> value)
        required: Field names to check, in reporting order

    Raises:
        MissingFieldError: For the first required field that is absent or falsy
    """
    if not isinstance(data, Mapping):
        data = {}

    for field in required:
        if not data.get(field):
            logger.info("wire_transfer_missing_field", field=field)
            raise MissingFieldError(field)


def find_missing_field(
    data: Any,
    required: Iterable[str] = REQUIRED_FIELDS,
) -> Optional[str]:
    """Return the first missing required field name, or None if all are present."""
    try:
        validate_required_fields(data, required)
    except MissingFieldError as exc:
        return exc.field
    return None
