"""gocancel exception types."""

from __future__ import annotations


class GoCancelError(Exception):
    """Base error for everything raised by the gocancel package."""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class GoCancelErrorCodes:
    """GoCancelError code constants."""

    HTTP_ERROR: str = "HTTP_ERROR"
    API_ERROR: str = "API_ERROR"
    DECODE_ERROR: str = "DECODE_ERROR"
    INVALID_BASE_URL: str = "INVALID_BASE_URL"


class ApiError(GoCancelError):
    """Error response returned by the GoCancel API."""

    def __init__(
        self,
        status_code: int,
        method: str,
        url: str,
        api_code: str = "",
        api_message: str = "",
    ) -> None:
        self.status_code = status_code
        self.method = method
        self.url = url
        self.api_code = api_code
        self.api_message = api_message
        super().__init__(
            code=GoCancelErrorCodes.API_ERROR,
            message=f"{method} {url}: {api_code} ({status_code}) {api_message}",
        )

    def matches(self, other: object) -> bool:
        """Report whether other describes the same API failure."""
        if not isinstance(other, ApiError):
            return False
        return (
            self.api_code == other.api_code
            and self.api_message == other.api_message
            and self.status_code == other.status_code
        )
