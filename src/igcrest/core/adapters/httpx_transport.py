from __future__ import annotations

import json
from typing import Any

import httpx

from igcrest.core.errors import TransportError
from igcrest.core.transport import JSON_CONTENT_TYPE, TransportResponse

_RAW_CONTENT_TYPES = {"application/xml", "text/xml"}


def _encode(body: Any, content_type: str | None) -> str:
    """Serialize a request body; XML is sent untouched, everything else as JSON."""
    if content_type in _RAW_CONTENT_TYPES:
        return body
    return json.dumps(body)


def _decode(response: httpx.Response) -> Any:
    """Parse a response body (empty -> {}, JSON when possible, text otherwise)."""
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpxTransport:
    """CatalogTransport implementation on top of httpx.AsyncClient."""

    def __init__(
        self,
        base_url: str,
        *,
        username: str | None = None,
        password: str | None = None,
        verify: bool = True,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        auth = (username, password or "") if username else None
        self._client = client or httpx.AsyncClient(
            auth=auth,
            verify=verify,
            timeout=timeout,
        )

    def _url(self, path: str) -> str:
        # Continuation links are returned fully qualified
        if path.startswith("http"):
            return path
        return f"{self.base_url}{path}"

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        content_type: str | None = None,
    ) -> TransportResponse:
        """Send one request and return status, headers and parsed body."""
        headers: dict[str, str] = {}
        content = None
        if body is not None:
            content_type = content_type or JSON_CONTENT_TYPE
            content = _encode(body, content_type)
            headers["Content-Type"] = content_type

        try:
            response = await self._client.request(
                method, self._url(path), content=content, headers=headers
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=_decode(response),
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
