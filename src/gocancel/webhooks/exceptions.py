"""Webhook verification errors."""

from __future__ import annotations

from ..exceptions import GoCancelError


class WebhookErrorCodes:
    """WebhookError code constants."""

    NOT_SIGNED: str = "NOT_SIGNED"
    INVALID_HEADER: str = "INVALID_HEADER"
    NO_VALID_SIGNATURE: str = "NO_VALID_SIGNATURE"
    TOO_OLD: str = "TOO_OLD"


_MESSAGES: dict[str, str] = {
    WebhookErrorCodes.NOT_SIGNED: "webhook has no Gocxl-Signature header",
    WebhookErrorCodes.INVALID_HEADER: "webhook has invalid Gocxl-Signature header",
    WebhookErrorCodes.NO_VALID_SIGNATURE: "webhook had no valid signature",
    WebhookErrorCodes.TOO_OLD: "timestamp wasn't within tolerance",
}


class WebhookError(GoCancelError):
    """Raised when a webhook delivery fails signature verification."""

    def __init__(self, code: str, message: str | None = None) -> None:
        super().__init__(code=code, message=message or _MESSAGES.get(code, code))
