"""Webhook signature computation and verification.

Deliveries carry a ``Gocxl-Signature`` header of the form::

    t=1495999758,v1=<hex>,v1=<hex>,v0=<ignored>

Each ``v1`` value is the hex encoded HMAC-SHA256 of ``"<t>.<raw body>"``
keyed by the endpoint's signing secret. Several ``v1`` entries are sent
while a secret is being rolled; a delivery is accepted if any of them
matches.

Usage::

    from gocancel.webhooks import WebhookError, validate_payload

    try:
        validate_payload(request_body, request.headers["Gocxl-Signature"], secret)
    except WebhookError as e:
        ...  # reject the delivery, e.code tells why
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import math
import re
import time
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..log import get_logger
from .exceptions import WebhookError, WebhookErrorCodes

SIGNATURE_HEADER = "Gocxl-Signature"
SIGNING_VERSION = "v1"
DEFAULT_TOLERANCE = timedelta(seconds=300)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_TIMESTAMP_RE = re.compile(r"[+-]?[0-9]+")

logger = get_logger(__name__)


@dataclass(frozen=True)
class SignedHeader:
    """Parsed signature header."""

    timestamp: int
    signatures: tuple[bytes, ...]


def _unix_seconds(timestamp: datetime | int | float) -> int:
    if isinstance(timestamp, datetime):
        return math.floor(timestamp.timestamp())
    return math.floor(timestamp)


def _secret_bytes(secret: str | bytes) -> bytes:
    if isinstance(secret, str):
        return secret.encode("utf-8")
    return secret


def _tolerance_seconds(tolerance: timedelta | float) -> float:
    if isinstance(tolerance, timedelta):
        return tolerance.total_seconds()
    return float(tolerance)


def compute_signature(
    timestamp: datetime | int | float,
    payload: bytes,
    secret: str | bytes,
) -> bytes:
    """Compute the v1 signature of a payload.

    Args:
        timestamp: Signing time. Only whole Unix seconds are signed.
        payload: Raw request body, byte for byte as delivered.
        secret: Endpoint signing secret.

    Returns:
        The 32 byte HMAC-SHA256 digest.
    """
    mac = hmac.new(_secret_bytes(secret), digestmod=hashlib.sha256)
    mac.update(str(_unix_seconds(timestamp)).encode("ascii"))
    mac.update(b".")
    mac.update(payload)
    return mac.digest()


def generate_header(
    payload: bytes,
    secret: str | bytes,
    timestamp: datetime | int | float | None = None,
    scheme: str = SIGNING_VERSION,
) -> str:
    """Build a signature header value for a payload.

    ``timestamp`` defaults to the current time.
    """
    if timestamp is None:
        timestamp = time.time()
    unix = _unix_seconds(timestamp)
    signature = compute_signature(unix, payload, secret)
    return f"t={unix},{scheme}={signature.hex()}"


def _parse_timestamp(value: str) -> int:
    if not _TIMESTAMP_RE.fullmatch(value):
        raise WebhookError(WebhookErrorCodes.INVALID_HEADER)
    timestamp = int(value)
    if not _INT64_MIN <= timestamp <= _INT64_MAX:
        raise WebhookError(WebhookErrorCodes.INVALID_HEADER)
    return timestamp


def parse_signature_header(header: str) -> SignedHeader:
    """Parse a ``Gocxl-Signature`` header value.

    A malformed pair or timestamp aborts the parse. A ``v1`` value that is not
    valid hex is skipped, and keys of other schemes are ignored. When ``t``
    appears more than once the last value wins. A header with signatures but
    no ``t`` at all is rejected as ``INVALID_HEADER`` rather than being read
    as signed at Unix time 0, even by ``validate_payload_ignoring_tolerance``.

    Raises:
        WebhookError: ``NOT_SIGNED`` for an empty header, ``INVALID_HEADER``
            for bad syntax, ``NO_VALID_SIGNATURE`` when no ``v1`` value decodes.
    """
    if not header:
        raise WebhookError(WebhookErrorCodes.NOT_SIGNED)

    timestamp: int | None = None
    signatures: list[bytes] = []
    for pair in header.split(","):
        parts = pair.split("=")
        if len(parts) != 2:
            raise WebhookError(WebhookErrorCodes.INVALID_HEADER)
        key, value = parts

        if key == "t":
            # last one wins
            timestamp = _parse_timestamp(value)
        elif key == SIGNING_VERSION:
            try:
                signatures.append(binascii.unhexlify(value))
            except ValueError:
                continue

    if not signatures:
        raise WebhookError(WebhookErrorCodes.NO_VALID_SIGNATURE)
    if timestamp is None:
        raise WebhookError(WebhookErrorCodes.INVALID_HEADER)

    return SignedHeader(timestamp=timestamp, signatures=tuple(signatures))


def _validate(
    payload: bytes,
    header: str,
    secret: str | bytes,
    tolerance: timedelta | float,
    enforce_tolerance: bool,
) -> None:
    try:
        signed = parse_signature_header(header)
    except WebhookError as e:
        logger.debug("webhook_rejected", code=e.code)
        raise

    expected = compute_signature(signed.timestamp, payload, secret)
    if enforce_tolerance and time.time() - signed.timestamp > _tolerance_seconds(tolerance):
        logger.debug(
            "webhook_rejected", code=WebhookErrorCodes.TOO_OLD, signed_at=signed.timestamp
        )
        raise WebhookError(WebhookErrorCodes.TOO_OLD)

    # one v1 entry per active secret while a secret is rolled
    for signature in signed.signatures:
        if hmac.compare_digest(expected, signature):
            return

    logger.debug(
        "webhook_rejected",
        code=WebhookErrorCodes.NO_VALID_SIGNATURE,
        candidates=len(signed.signatures),
    )
    raise WebhookError(WebhookErrorCodes.NO_VALID_SIGNATURE)


def validate_payload(payload: bytes, header: str, secret: str | bytes) -> None:
    """Validate a payload against its signature header.

    Signatures older than ``DEFAULT_TOLERANCE`` are rejected.

    Raises:
        WebhookError: if the header is missing or malformed, no signature
            matches, or the timestamp is too old.
    """
    validate_payload_with_tolerance(payload, header, secret, DEFAULT_TOLERANCE)


def validate_payload_with_tolerance(
    payload: bytes,
    header: str,
    secret: str | bytes,
    tolerance: timedelta | float,
) -> None:
    """Validate a payload, rejecting signatures older than ``tolerance``.

    ``tolerance`` is a ``timedelta`` or a number of seconds. Staleness is
    checked before the signatures are compared.
    """
    _validate(payload, header, secret, tolerance, enforce_tolerance=True)


def validate_payload_ignoring_tolerance(
    payload: bytes,
    header: str,
    secret: str | bytes,
) -> None:
    """Validate a payload without checking the age of its timestamp."""
    _validate(payload, header, secret, timedelta(0), enforce_tolerance=False)
