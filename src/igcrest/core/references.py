"""Resolution of asset RIDs across catalog environments.

RIDs are only meaningful inside one catalog deployment, while types and names
generally carry over. Given an item captured in one environment (type, name
and `_context`), this module rebuilds a search that pins the same asset down
in another environment by filtering on every ancestor's name, and returns the
RID found there.

Searches use a page size of 2: all that matters is whether there are zero,
one or several matches. Several matches are tolerated (a warning is logged
and the first result wins), zero matches raise NotFoundError.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Protocol

from igcrest.core.assets import Asset, SearchQuery, as_asset
from igcrest.core.errors import NotFoundError
from igcrest.core.types import (
    DATA_FILE_FOLDER_TYPE,
    FOLDER_SEPARATOR,
    HOST_ENGINE_TYPE,
    is_file_related,
    query_property_name,
)

logger = logging.getLogger(__name__)

RESOLUTION_PAGE_SIZE = 2


class SearchClient(Protocol):
    """Interface for the search call used by reference resolution."""

    async def search(self, query: Mapping[str, Any]) -> dict[str, Any]:
        ...


def trim_folder_path(folder_path: str) -> str:
    """Strip exactly one leading and one trailing separator from a folder path."""
    if folder_path.startswith(FOLDER_SEPARATOR):
        folder_path = folder_path[len(FOLDER_SEPARATOR) :]
    if folder_path.endswith(FOLDER_SEPARATOR):
        folder_path = folder_path[: -len(FOLDER_SEPARATOR)]
    return folder_path


def build_rid_query(
    item: Asset | Mapping[str, Any],
    replacements: Mapping[str, str] | None = None,
) -> SearchQuery:
    """
    Build the search that locates `item` in another environment.

    The context is walked from the immediate parent out to the root. Each
    ancestor becomes a `<dotted path>.name = <value>` condition, where the
    dotted path grows by one (rewritten) type per ancestor. Ancestors whose
    type is dropped add neither a condition nor a path segment. Folder
    ancestors are instead gathered into one path and matched with a single
    `<path>.path` condition anchored just below the host of file assets.

    Args:
        item: The item as captured in the source environment.
        replacements: Replacement names keyed by ancestor type (e.g. a host
                      name that differs between environments). Only the
                      value changes, never the property filtered on.

    Returns:
        The search query (page size 2).
    """
    item = as_asset(item)
    replacements = replacements or {}
    query = SearchQuery(types=[item.type], page_size=RESOLUTION_PAGE_SIZE)
    query.where("name", item.name)

    ctx_path = ""
    folder_path = ""
    pre_host_path = ""
    first = True
    for entry in reversed(item.context):
        if entry.type == DATA_FILE_FOLDER_TYPE:
            folder_path = entry.name + FOLDER_SEPARATOR + folder_path
            continue

        value = replacements.get(entry.type, entry.name)
        if entry.type == HOST_ENGINE_TYPE and is_file_related(item.type):
            pre_host_path = ctx_path

        prop = query_property_name(item.type, entry.type)
        if not prop:
            continue
        ctx_path = prop if first else f"{ctx_path}.{prop}"
        first = False
        query.where(f"{ctx_path}.name", value)

    if folder_path:
        anchor = f"{pre_host_path}.path" if pre_host_path else "path"
        query.where(anchor, trim_folder_path(folder_path))

    return query


async def resolve_rid(
    client: SearchClient,
    item: Asset | Mapping[str, Any],
    replacements: Mapping[str, str] | None = None,
) -> str:
    """
    Return the RID of `item` in the environment `client` is connected to.

    Raises:
        NotFoundError: If no asset matches (the error carries the query).
    """
    query = build_rid_query(item, replacements).to_dict()
    logger.debug("Querying mapped item with: %s", json.dumps(query))
    results = await client.search(query)
    items = results.get("items") or []
    if not items:
        raise NotFoundError("No items found with query", query)
    if len(items) > 1:
        logger.warning(
            "Multiple items found with query -- returning first item. %s",
            json.dumps(query),
        )
    return items[0]["_id"]


async def context_for_id(
    client: SearchClient, rid: str, asset_type: str
) -> list[dict[str, Any]]:
    """
    Return the `_context` of an asset given its RID and type.

    Raises:
        NotFoundError: If no asset has this RID.
    """
    query = (
        SearchQuery(types=[asset_type], page_size=RESOLUTION_PAGE_SIZE)
        .where("_id", rid)
        .to_dict()
    )
    results = await client.search(query)
    items = results.get("items") or []
    if not items:
        raise NotFoundError(f"No items found with RID '{rid}'", query)
    if len(items) > 1:
        logger.warning("Multiple items found with RID '%s' -- returning first item.", rid)
    return list(items[0].get("_context") or [])
