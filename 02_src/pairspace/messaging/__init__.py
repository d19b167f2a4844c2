"""Messaging platform module."""

from .line_client import (
    SIGNATURE_HEADER,
    ILineClient,
    LineAPIError,
    LineClient,
    compute_signature,
    validate_signature,
)

__all__ = [
    "ILineClient",
    "LineClient",
    "LineAPIError",
    "SIGNATURE_HEADER",
    "compute_signature",
    "validate_signature",
]
