"""Relationship updates, including partial replacement of multi-valued relationships.

The REST API can only append to a relationship or replace it wholesale.
REPLACE_SOME is therefore synthesized client-side as read-modify-write:

  1) read every existing related asset (all pages)
  2) keep aside the RIDs of the type being replaced
  3) search that type with the caller's conditions, restricted to those RIDs
  4) drop the matches from the full list (order preserved)
  5) write the result back with replace semantics

Related assets of other types sharing the same property are left untouched.
A failure in any step aborts before anything is written.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Protocol, Sequence

from igcrest.core.assets import (
    Asset,
    Condition,
    RelationshipDelta,
    RelationshipMode,
    SearchQuery,
    as_asset,
)
from igcrest.core.errors import NotFoundError
from igcrest.core.paging import all_pages, search_all

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


class RelationshipClient(Protocol):
    """Interface for the catalog calls used by relationship updates."""

    async def search(self, query: Mapping[str, Any]) -> dict[str, Any]:
        ...

    async def get_other(self, path: str, success_code: int = 200) -> Any:
        ...

    async def update(self, rid: str, value: Mapping[str, Any]) -> dict[str, Any]:
        ...


def relationship_payload(
    relationship_property: str, ids: Sequence[str], mode: RelationshipMode
) -> dict[str, Any]:
    """Build the update body for a relationship property."""
    rest_mode = "append" if mode == RelationshipMode.APPEND else "replace"
    return {relationship_property: {"items": list(ids), "mode": rest_mode}}


def _as_conditions(
    conditions: Iterable[Condition | Mapping[str, Any]] | None,
) -> list[Condition]:
    return [c if isinstance(c, Condition) else Condition.from_dict(c) for c in conditions or []]


async def _existing_relationships(
    client: RelationshipClient,
    asset: Asset,
    relationship_property: str,
    page_size: int,
) -> list[dict[str, Any]]:
    query = SearchQuery(
        types=[asset.type],
        properties=[relationship_property],
        page_size=page_size,
    ).where("_id", asset.id)
    results = await client.search(query.to_dict())
    items = results.get("items") or []
    if not items:
        raise NotFoundError(f"No '{asset.type}' found with RID '{asset.id}'", query.to_dict())
    related = items[0].get(relationship_property) or {}
    return await all_pages(client, related.get("items") or [], related.get("paging"))


async def plan_replace_some(
    client: RelationshipClient,
    from_asset: Asset | Mapping[str, Any],
    relationship_property: str,
    replace_type: str,
    conditions: Iterable[Condition | Mapping[str, Any]] | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> RelationshipDelta:
    """
    Work out which related RIDs a REPLACE_SOME update keeps, without writing.

    Args:
        client: Catalog client.
        from_asset: Asset whose relationship is being changed.
        relationship_property: Relationship property on `from_asset`.
        replace_type: Type of the related assets eligible for removal.
        conditions: Conditions selecting which of those to remove.
        page_size: Page size for both reads.

    Returns:
        A RelationshipDelta with the full, candidate, dropped and final RIDs.
    """
    asset = as_asset(from_asset)
    existing = await _existing_relationships(client, asset, relationship_property, page_size)

    all_ids = [r["_id"] for r in existing]
    candidate_ids = [r["_id"] for r in existing if r.get("_type") == replace_type]

    dropped_ids: list[str] = []
    if candidate_ids:
        scope = SearchQuery(
            types=[replace_type],
            conditions=_as_conditions(conditions),
            page_size=page_size,
        ).where("_id", candidate_ids, operator="in")
        dropped_ids = [r["_id"] for r in await search_all(client, scope.to_dict())]

    dropped = set(dropped_ids)
    final_ids = [rid for rid in all_ids if rid not in dropped]
    logger.debug(
        "Replacing %d of %d '%s' relationships on %s",
        len(dropped), len(all_ids), relationship_property, asset.id,
    )
    return RelationshipDelta(
        all_ids=tuple(all_ids),
        candidate_ids=tuple(candidate_ids),
        dropped_ids=tuple(dropped_ids),
        final_ids=tuple(final_ids),
    )


async def add_relationship(
    client: RelationshipClient,
    from_asset: Asset | Mapping[str, Any],
    to_ids: Sequence[str],
    relationship_property: str,
    mode: RelationshipMode | str,
    replace_type: str | None = None,
    conditions: Iterable[Condition | Mapping[str, Any]] | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> dict[str, Any]:
    """
    Add (or replace) relationships on an asset.

    APPEND and REPLACE_ALL send a single update with `to_ids`. REPLACE_SOME
    removes the related assets of `replace_type` that match `conditions`
    and keeps everything else; it does not add `to_ids`.

    Returns:
        The result of the update request.

    Raises:
        ValueError: If REPLACE_SOME is requested without a replace type.
    """
    mode = RelationshipMode(mode)
    asset = as_asset(from_asset)

    if mode != RelationshipMode.REPLACE_SOME:
        payload = relationship_payload(relationship_property, to_ids, mode)
        return await client.update(asset.id, payload)

    if not replace_type:
        raise ValueError("REPLACE_SOME requires a replace type.")

    delta = await plan_replace_some(
        client,
        asset,
        relationship_property,
        replace_type,
        conditions,
        page_size,
    )
    payload = relationship_payload(
        relationship_property, delta.final_ids, RelationshipMode.REPLACE_SOME
    )
    return await client.update(asset.id, payload)
