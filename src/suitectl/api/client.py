"""
HTTP client for the office-suite REST APIs.

:class:`ApiRequest` is an immutable description of one call; it is built
once per row so that every retry sends the identical body.
:class:`ApiClient` executes requests over :mod:`httpx` and turns the
Google-style error envelope::

    {"error": {"code": 404, "message": "File not found: F1.", "errors": [{"reason": "notFound"}]}}

into :class:`RemoteTransientError` (429, 500, 502, 503, 504, transport
failures, timeouts) or :class:`RemoteFatalError` (everything else).

Credential acquisition is outside this module: the client sends the bearer
token it is given.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from suitectl import __version__
from suitectl.core.errors import ConfigError, RemoteError, RemoteFatalError, RemoteTransientError
from suitectl.core.logging import get_logger
from suitectl.framework.field_mask import Payload

logger = get_logger(__name__)

TRANSIENT_STATUSES = frozenset({429, 500, 502, 503, 504})


def segment(value: str) -> str:
    """Quote one URL path segment."""
    return quote(value, safe="@")


def list_fields(fields: str) -> str | None:
    """Partial-response mask for a list call; the page token is always requested."""
    if not fields:
        return None
    if "nextPageToken" in fields:
        return fields
    return f"nextPageToken,{fields}"


@dataclass(frozen=True)
class ApiRequest:
    """One remote call.

    Attributes:
        method: HTTP method
        url: Absolute URL
        params: Query parameters; ``None`` values are dropped
        body: Request payload, encoded with its force-send list
        items_key: For list calls, the response key holding the items;
            pages are followed via ``nextPageToken``
        action: The call has no meaningful response body; success is ``True``
    """

    method: str
    url: str
    params: Mapping[str, Any] = field(default_factory=dict)
    body: Payload | None = None
    items_key: str | None = None
    action: bool = False

    def query(self) -> dict[str, Any]:
        return {key: value for key, value in self.params.items() if value is not None}

    def wire_body(self) -> dict[str, Any] | None:
        return self.body.to_wire() if self.body is not None else None


def error_from_response(response: httpx.Response) -> RemoteError:
    """Build the typed error for a non-2xx response."""
    status = response.status_code
    message = response.reason_phrase or "HTTP error"
    reason = None
    try:
        envelope = response.json().get("error")
    except (ValueError, AttributeError):
        envelope = None
    if isinstance(envelope, dict):
        message = envelope.get("message") or message
        details = envelope.get("errors") or []
        if details and isinstance(details[0], dict):
            reason = details[0].get("reason")
        reason = reason or envelope.get("status")
    elif isinstance(envelope, str):
        message = envelope

    try:
        url = str(response.request.url)
    except RuntimeError:
        url = None

    cls = RemoteTransientError if status in TRANSIENT_STATUSES else RemoteFatalError
    error = cls(f"Error {status}: {message}", status=status, reason=reason)
    error.context.url = url
    return error


class ApiClient:
    """Executes :class:`ApiRequest` objects.

    Safe to share between worker threads: :class:`httpx.Client` pools
    connections and holds no per-request state.

    Parameters
    ----------
    token:
        OAuth bearer token.
    timeout:
        Per-request deadline in seconds; exceeding it is a transient error.
    transport:
        Optional httpx transport (tests use :class:`httpx.MockTransport`).
    """

    def __init__(
        self,
        token: str,
        *,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not token:
            raise ConfigError("No access token configured; set SUITECTL_ACCESS_TOKEN")
        self._http = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "User-Agent": f"suitectl/{__version__}",
                "Accept": "application/json",
            },
        )

    @classmethod
    def from_settings(cls, settings: Any) -> ApiClient:
        return cls(settings.access_token, timeout=settings.request_timeout)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # ── Execution ────────────────────────────────────────────────────

    def execute(self, request: ApiRequest) -> Any:
        """Perform ``request`` and return its decoded result.

        Returns:
            ``True`` for action requests, the list of items for paginated
            requests, otherwise the decoded JSON object.

        Raises:
            RemoteTransientError: Retryable failure
            RemoteFatalError: Non-retryable failure
        """
        if request.items_key:
            return self._paginate(request)
        data = self._send(request, request.query())
        if request.action:
            return True
        return data

    def _paginate(self, request: ApiRequest) -> list[Any]:
        params = request.query()
        items: list[Any] = []
        while True:
            page = self._send(request, params) or {}
            items.extend(page.get(request.items_key, []))
            token = page.get("nextPageToken")
            if not token:
                return items
            params = {**params, "pageToken": token}

    def _send(self, request: ApiRequest, params: dict[str, Any]) -> Any:
        body = request.wire_body()
        try:
            response = self._http.request(
                request.method,
                request.url,
                params=params,
                json=body,
            )
        except httpx.TimeoutException as e:
            raise RemoteTransientError(f"Request timed out: {e}", cause=e).with_context(url=request.url) from e
        except httpx.TransportError as e:
            raise RemoteTransientError(f"Transport error: {e}", cause=e).with_context(url=request.url) from e

        logger.debug("api.response", method=request.method, url=request.url, status=response.status_code)
        if response.is_error:
            raise error_from_response(response)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteFatalError(
                f"Invalid JSON in response: {e}", status=response.status_code, cause=e
            ).with_context(url=request.url) from e


__all__ = ["ApiClient", "ApiRequest", "TRANSIENT_STATUSES", "error_from_response", "list_fields", "segment"]
