"""GoCancel API HTTP client."""

from __future__ import annotations

import json
from typing import Any

import httpx

from .exceptions import ApiError, GoCancelError, GoCancelErrorCodes
from .log import get_logger
from .models import ClientConfig

MEDIA_TYPE = "application/json"

_BODYLESS_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

logger = get_logger(__name__)


def _parse_error_body(resp: httpx.Response) -> tuple[str, str]:
    """Extract (code, message) from an ``{"error": {...}}`` body, if any."""
    try:
        data = resp.json()
    except ValueError:
        return "", ""
    if not isinstance(data, dict):
        return "", ""
    error = data.get("error")
    if not isinstance(error, dict):
        return "", ""
    return str(error.get("code") or ""), str(error.get("message") or "")


def check_response(resp: httpx.Response) -> None:
    """Raise ApiError unless the response has a 2xx status code."""
    if 200 <= resp.status_code <= 299:
        return
    api_code, api_message = _parse_error_body(resp)
    raise ApiError(
        status_code=resp.status_code,
        method=resp.request.method,
        url=str(resp.request.url),
        api_code=api_code,
        api_message=api_message,
    )


class HttpClient:
    """httpx based client for the GoCancel REST API."""

    def __init__(self, config: ClientConfig | None = None) -> None:
        self._config = config or ClientConfig()

    @property
    def config(self) -> ClientConfig:
        return self._config

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._config.timeout_seconds)

    def new_request(self, method: str, url: str, body: Any = None) -> httpx.Request:
        """Build an API request.

        url is resolved relative to the configured base URL and should not
        start with a slash. For methods other than GET, HEAD and OPTIONS the
        body is sent JSON encoded.
        """
        base_url = httpx.URL(self._config.base_url)
        if not base_url.path.endswith("/"):
            raise GoCancelError(
                code=GoCancelErrorCodes.INVALID_BASE_URL,
                message=(
                    f"base URL must have a trailing slash, but {self._config.base_url!r} does not"
                ),
            )
        target = base_url.join(url)
        method = method.upper()

        headers: dict[str, str] = {}
        content = b""
        if method not in _BODYLESS_METHODS:
            if body is not None:
                content = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = MEDIA_TYPE

        headers.update(self._config.headers)
        headers["Accept"] = MEDIA_TYPE
        headers["User-Agent"] = self._config.user_agent
        if self._config.access_token:
            headers["Authorization"] = f"Bearer {self._config.access_token}"

        if method in _BODYLESS_METHODS:
            return httpx.Request(method, target, headers=headers)
        return httpx.Request(method, target, headers=headers, content=content)

    async def bare_do(self, request: httpx.Request) -> httpx.Response:
        """Send a request and return the response with its body read.

        Raises:
            ApiError: the API answered with a non-2xx status.
            GoCancelError: the request could not be sent.
        """
        logger.debug("api_request", method=request.method, url=str(request.url))
        try:
            async with self._make_client() as client:
                resp = await client.send(request)
        except httpx.HTTPError as e:
            raise GoCancelError(
                code=GoCancelErrorCodes.HTTP_ERROR,
                message=f"{request.method} {request.url}: {e}",
                cause=e,
            ) from e

        try:
            check_response(resp)
        except ApiError as e:
            logger.debug(
                "api_error", code=e.code, status_code=e.status_code, api_code=e.api_code
            )
            raise
        return resp

    async def do(self, request: httpx.Request) -> Any:
        """Send a request and return the JSON decoded body.

        An empty body decodes to None.
        """
        resp = await self.bare_do(request)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise GoCancelError(
                code=GoCancelErrorCodes.DECODE_ERROR,
                message=f"Failed to decode response from {request.method} {request.url}",
                cause=e,
            ) from e

    async def download(
        self, request: httpx.Request, accept: str = "application/octet-stream"
    ) -> bytes:
        """Send a request for a binary document and return its content."""
        request.headers["Accept"] = accept
        resp = await self.bare_do(request)
        return resp.content
