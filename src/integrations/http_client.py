"""Async HTTP client wrapper shared by all pod clients.

Wraps ``httpx.AsyncClient`` with:
- URL building from a base URL, endpoint path and query params
- Default JSON headers plus bearer-token injection
- Content-type aware response parsing into ``ApiResponse``
- Request/response logging, including a curl reproduction at DEBUG
- Full request context logged and ``TransportError`` raised on network failure

Use it as an async context manager so the connection pool is always closed:

    >>> async with ApiClient("https://api.dev.voltmoney.in", pod_name="los") as client:
    ...     response = await client.request("GET", "/health")
"""

import json
import shlex
from dataclasses import dataclass, field
from typing import Any, Literal, Optional
from urllib.parse import urlencode

import httpx

from src.integrations.exceptions import TransportError
from src.utils.logging_config import get_logger

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

_UNSET: Any = object()


@dataclass
class ApiResponse:
    """Parsed HTTP response.

    Attributes:
        status: HTTP status code
        headers: Response headers (lower-cased names)
        body: Parsed JSON for JSON responses, text otherwise
        ok: True for 2xx statuses
    """

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    ok: bool = False


def build_curl_command(
    method: str,
    url: str,
    headers: dict[str, str],
    body: Optional[Any] = None,
) -> str:
    """Render a request as a copy-pasteable curl command."""
    parts = [f"curl -X {method} {shlex.quote(url)}"]
    for name, value in headers.items():
        parts.append(f"-H {shlex.quote(f'{name}: {value}')}")
    if body is not None:
        data = body if isinstance(body, str) else json.dumps(body)
        parts.append(f"--data-raw {shlex.quote(data)}")
    return " \\\n  ".join(parts)


class ApiClient:
    """Base HTTP helper for one pod of the platform.

    Args:
        base_url: Scheme and host, endpoints are appended to it
        pod_name: Logger category (``los``, ``lms``)
        timeout: Request timeout in seconds
        transport: Optional httpx transport (``httpx.MockTransport`` in tests)
    """

    def __init__(
        self,
        base_url: str,
        pod_name: str = "los",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.pod_name = pod_name
        self.timeout = timeout
        self.logger = get_logger(pod_name)
        self._auth_token = ""
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "ApiClient":
        self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def open(self) -> None:
        """Create the underlying connection pool if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def aclose(self) -> None:
        """Close the connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def set_auth_token(self, token: str) -> None:
        """Store the bearer token sent with subsequent requests."""
        self._auth_token = token
        self.logger.info("Auth token updated")

    def get_auth_token(self) -> str:
        """Return the current bearer token ('' when unset)."""
        return self._auth_token

    def build_url(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> str:
        """Join base URL and endpoint, appending a query string when given."""
        url = f"{self.base_url}{endpoint}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    def build_headers(self, additional_headers: Optional[dict[str, str]] = None) -> dict[str, str]:
        """Default JSON headers, bearer token if set, then caller overrides."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self._auth_token:
            headers["Authorization"] = f"Bearer {self._auth_token}"
        return {**headers, **(additional_headers or {})}

    @staticmethod
    def parse_response(response: httpx.Response) -> Any:
        """JSON for application/json responses, text for anything else.

        An empty or malformed JSON body is returned as text so status checks
        still see the response.
        """
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError:
                return response.text
        return response.text

    async def request(
        self,
        method: HttpMethod,
        endpoint: str,
        *,
        json: Any = _UNSET,
        content: Optional[str | bytes] = None,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> ApiResponse:
        """Send one request and return the parsed response.

        Non-2xx statuses are returned, not raised; callers validate them.

        Args:
            method: HTTP method
            endpoint: Path relative to ``base_url``
            json: JSON value to serialize as the body
            content: Pre-serialized body, sent byte-for-byte
            params: Query parameters
            headers: Extra headers merged over the defaults

        Raises:
            TransportError: On connection, timeout or protocol failures
            RuntimeError: If the client has not been opened
        """
        if self._client is None:
            raise RuntimeError("ApiClient is not open; use 'async with' or call open()")

        url = self.build_url(endpoint, params)
        request_headers = self.build_headers(headers)
        if content is not None:
            logged_body = content.decode("utf-8") if isinstance(content, bytes) else content
        else:
            logged_body = None if json is _UNSET else json

        self.logger.info(f"{method} {url}")
        if logged_body is not None:
            self.logger.debug(f"Request body: {logged_body}")
        self.logger.debug(
            f"curl:\n{build_curl_command(method, url, request_headers, logged_body)}"
        )

        send_kwargs: dict[str, Any] = {"headers": request_headers}
        if content is not None:
            send_kwargs["content"] = content
        elif json is not _UNSET:
            send_kwargs["json"] = json

        try:
            response = await self._client.request(method, url, **send_kwargs)
        except httpx.HTTPError as e:
            self.logger.error(f"Request failed: {method} {url}")
            self.logger.error(f"Request headers: {request_headers}")
            if logged_body is not None:
                self.logger.error(f"Request body: {logged_body}")
            self.logger.error(f"Error message: {type(e).__name__}: {e}")
            raise TransportError(str(e) or type(e).__name__, method, url, logged_body) from e

        result = ApiResponse(
            status=response.status_code,
            headers=dict(response.headers),
            body=self.parse_response(response),
            ok=response.is_success,
        )

        self.logger.info(f"Response status: {result.status}")
        self.logger.debug(f"Response body: {result.body}")
        return result
