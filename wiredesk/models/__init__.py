"""
Models module initialization.
"""
from wiredesk.models.wire_transfer import (
    WireTransferRequest,
    TableRow,
    RenderedDocument,
)

__all__ = [
    "WireTransferRequest",
    "TableRow",
    "RenderedDocument",
]
