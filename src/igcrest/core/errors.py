"""Error taxonomy for catalog operations.

Every error raised by the core for catalog state derives from CatalogError so
callers (CLI, automation, tests) can catch a single base class. Malformed
arguments (e.g. REPLACE_SOME without a replace type) raise ValueError.
Ambiguous search results are deliberately not represented here: they are
logged and the first result is used.
"""

from __future__ import annotations

import json
from typing import Any, Mapping


class CatalogError(RuntimeError):
    """Base class for all catalog client errors."""


class ConfigError(CatalogError):
    """Raised when connection configuration is missing or invalid."""


class TransportError(CatalogError):
    """Raised when the request could not be exchanged with the catalog at all."""


class UnsuccessfulStatusError(CatalogError):
    """Raised when a response status code does not match the expected success code."""

    def __init__(
        self,
        status_code: int,
        expected: int,
        response_body: Any = None,
        request_body: Any = None,
    ):
        self.status_code = status_code
        self.expected = expected
        self.response_body = response_body
        self.request_body = request_body
        super().__init__(
            f"Unsuccessful request {status_code} (expected {expected})"
            f"\n   response: {_render(response_body)}"
            f"\n   request : {_render(request_body)}"
        )


class NotFoundError(CatalogError):
    """Raised when a resolution query yields no result."""

    def __init__(self, message: str, query: Mapping[str, Any] | None = None):
        self.query = dict(query) if query is not None else None
        if self.query is not None:
            message = f"{message}: {json.dumps(self.query)}"
        super().__init__(message)


class InvariantViolationError(CatalogError):
    """Raised when a result breaks an expectation the operation cannot recover from."""


class IdentityCacheMissError(CatalogError, KeyError):
    """Raised when a container identity has not been cached by the caller."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


def _render(body: Any) -> str:
    """Render a request/response body for diagnostics."""
    if body is None:
        return ""
    if isinstance(body, str):
        return body
    try:
        return json.dumps(body)
    except (TypeError, ValueError):
        return repr(body)
