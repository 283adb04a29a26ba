"""GoCancel API client library."""

from .exceptions import ApiError, GoCancelError, GoCancelErrorCodes
from .http_client import HttpClient, check_response
from .log import configure_logging, get_logger
from .models import DEFAULT_BASE_URL, DEFAULT_USER_AGENT, ClientConfig

__all__ = [
    "ApiError",
    "ClientConfig",
    "DEFAULT_BASE_URL",
    "DEFAULT_USER_AGENT",
    "GoCancelError",
    "GoCancelErrorCodes",
    "HttpClient",
    "check_response",
    "configure_logging",
    "get_logger",
]
