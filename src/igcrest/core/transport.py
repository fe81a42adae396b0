"""Transport contract used by the catalog client.

The core never opens sockets itself. Everything goes through an object that
satisfies CatalogTransport: it performs a single request/response exchange and
returns the status code, headers and an already-deserialized body, or raises
TransportError.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "application/xml"


@dataclass(frozen=True)
class TransportResponse:
    """
    Result of a single request against the catalog.

    Attributes:
        status_code: HTTP status code returned by the server.
        headers: Response headers. Lookups should be case-insensitive,
                 use `header()` rather than indexing directly.
        body: Deserialized body (dict/list for JSON, str otherwise,
              an empty dict for an empty body).
    """

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None

    def header(self, name: str) -> str | None:
        """Return a header value, matching the name case-insensitively."""
        want = name.lower()
        for key, value in self.headers.items():
            if key.lower() == want:
                return value
        return None


class CatalogTransport(Protocol):
    """Interface for executing one request/response cycle."""

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        content_type: str | None = None,
    ) -> TransportResponse:
        """Send a request and return the parsed response."""
        ...
