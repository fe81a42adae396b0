"""Aggregation of paged search results.

The catalog returns large result sets one page at a time; each page carries a
`paging` object whose `next` member points at the following page. Pages are
fetched strictly one after another because each continuation reference comes
from the previous response. Any failure aborts the whole aggregation: the
caller never sees a partial list.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from igcrest.core.assets import PagedResultSet


class PagingClient(Protocol):
    """Interface for the catalog calls pagination depends on."""

    async def get_other(self, path: str, success_code: int = 200) -> Any:
        """GET an arbitrary path or URL."""
        ...

    async def search(self, query: Mapping[str, Any]) -> dict[str, Any]:
        """Run a search and return its first page."""
        ...


async def next_page(
    client: PagingClient, paging: Mapping[str, Any] | None
) -> PagedResultSet:
    """
    Retrieve the page following the one described by `paging`.

    Args:
        client: Catalog client used to follow the continuation reference.
        paging: The `paging` member of a results object (may be None).

    Returns:
        The next page, or an empty terminal page (without any request)
        when there is no continuation reference.
    """
    if not paging or "next" not in paging:
        return PagedResultSet()
    body = await client.get_other(paging["next"], 200)
    return PagedResultSet.from_json(body)


async def all_pages(
    client: PagingClient,
    items: list[dict[str, Any]],
    paging: Mapping[str, Any] | None,
) -> list[dict[str, Any]]:
    """
    Retrieve all remaining pages and return every item in server order.

    Args:
        client: Catalog client used to follow continuation references.
        items: Items already received (usually the first page).
        paging: The `paging` member that accompanied `items`.

    Returns:
        `items` followed by the items of every remaining page. Aggregation
        stops at the first page that contributes no items.
    """
    collected = list(items)
    while True:
        page = await next_page(client, paging)
        if not page.items:
            return collected
        collected.extend(page.items)
        paging = page.paging


async def search_all(
    client: PagingClient, query: Mapping[str, Any]
) -> list[dict[str, Any]]:
    """Run a search and aggregate every page of its results."""
    first = PagedResultSet.from_json(await client.search(query))
    return await all_pages(client, first.items, first.paging)
