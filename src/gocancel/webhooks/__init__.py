"""gocancel webhook signature verification."""

from .exceptions import WebhookError, WebhookErrorCodes
from .payload import (
    DEFAULT_TOLERANCE,
    SIGNATURE_HEADER,
    SIGNING_VERSION,
    SignedHeader,
    compute_signature,
    generate_header,
    parse_signature_header,
    validate_payload,
    validate_payload_ignoring_tolerance,
    validate_payload_with_tolerance,
)

__all__ = [
    "DEFAULT_TOLERANCE",
    "SIGNATURE_HEADER",
    "SIGNING_VERSION",
    "SignedHeader",
    "WebhookError",
    "WebhookErrorCodes",
    "compute_signature",
    "generate_header",
    "parse_signature_header",
    "validate_payload",
    "validate_payload_ignoring_tolerance",
    "validate_payload_with_tolerance",
]
