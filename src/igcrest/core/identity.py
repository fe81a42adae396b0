"""Identity derivation for catalog assets.

An identity describes an asset by the names of its ancestors keyed by type,
which (unlike a RID) carries over between environments. Container identities
(e.g. for a database table) are expensive for file-based assets because the
folder path has to be fetched separately, so callers keep a cache of them
keyed by container RID. The cache belongs to the caller: this module reads
it, writes only when asked to via `cache_container_identity`, and always
hands out copies.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, MutableMapping, Protocol, Sequence

from igcrest.core.assets import Asset, ContextEntry, Identity, as_asset
from igcrest.core.errors import (
    IdentityCacheMissError,
    InvariantViolationError,
    NotFoundError,
)
from igcrest.core.types import DATA_FILE_TYPE, container_type_for

logger = logging.getLogger(__name__)

DEFAULT_DELIMITER = "::"

ContainerIdentityCache = MutableMapping[str, Identity]


class PropertiesClient(Protocol):
    """Interface for the property lookup needed by file-based containers."""

    async def get_asset_properties_by_id(
        self,
        rid: str,
        asset_type: str,
        properties: str | Sequence[str],
        max_items: int = 1,
        include_context: bool = False,
    ) -> dict[str, Any]:
        ...


def asset_container_id(asset: Asset | Mapping[str, Any]) -> str:
    """
    Return the RID of the container of an asset (e.g. the table of a column).

    Raises:
        InvariantViolationError: If the asset's type is not a data container child.
        NotFoundError: If no ancestor of the container type is in the context.
    """
    asset = as_asset(asset)
    container_type = container_type_for(asset.type)
    if container_type is None:
        raise InvariantViolationError(
            f"Type '{asset.type}' is not contained by a data container."
        )
    for entry in asset.context:
        if entry.type == container_type and entry.id is not None:
            return entry.id
    raise NotFoundError(
        f"No '{container_type}' ancestor found in the context of '{asset.name}'."
    )


def asset_identity(
    asset: Asset | Mapping[str, Any],
    container_identities: Mapping[str, Identity],
) -> Identity:
    """
    Return the identity of an asset, derived from its container's cached identity.

    The cached container identity is copied, never modified.
    """
    asset = as_asset(asset)
    container_id = asset_container_id(asset)
    cached = container_identities.get(container_id)
    if cached is None:
        raise IdentityCacheMissError(
            f"No cached identity for container '{container_id}'."
        )
    identity = cached.copy()
    identity.id = asset.id
    identity.names[asset.type] = asset.name
    return identity


def _file_root_id(context: Sequence[ContextEntry]) -> str | None:
    file_ids = [c.id for c in context if c.type == DATA_FILE_TYPE]
    if len(file_ids) > 1:
        raise InvariantViolationError(
            f"Context contains {len(file_ids)} '{DATA_FILE_TYPE}' ancestors; expected at most one."
        )
    return file_ids[0] if file_ids else None


async def container_identity(
    client: PropertiesClient,
    context: Sequence[ContextEntry | Mapping[str, Any]],
    container_id: str,
    max_items: int = 1,
) -> Identity:
    """
    Build the identity of a container from the context of one of its children.

    File-based containers need the directory path of their data file, which is
    not part of the context, so exactly one extra lookup is issued for them.
    Any other container is resolved without a request.

    Args:
        client: Catalog client used for the data file path lookup.
        context: Context of an asset inside the container (root first).
        container_id: RID of the container.
        max_items: Page size for the path lookup.

    Returns:
        The container's identity.

    Raises:
        NotFoundError: If the data file of a file-based container is missing.
        InvariantViolationError: If the context holds several data files.
    """
    entries = [c if isinstance(c, ContextEntry) else ContextEntry.from_item(c) for c in context]
    identity = Identity(id=container_id)
    for entry in entries:
        identity.names[entry.type] = entry.name

    file_id = _file_root_id(entries)
    if file_id is not None:
        res = await client.get_asset_properties_by_id(
            file_id, DATA_FILE_TYPE, ["path"], max_items, False
        )
        if not res:
            raise NotFoundError(f"No '{DATA_FILE_TYPE}' found with RID '{file_id}'")
        identity.path = res.get("path")
    return identity


async def cache_container_identity(
    client: PropertiesClient,
    asset: Asset | Mapping[str, Any],
    container_identities: ContainerIdentityCache,
) -> Identity:
    """
    Return an asset's identity, deriving and caching its container identity if needed.

    This is the only place the resolver writes into the caller's cache, and
    it only adds the entry for the container it derived itself.
    """
    asset = as_asset(asset)
    container_id = asset_container_id(asset)
    if container_id not in container_identities:
        logger.debug("Caching identity of container %s", container_id)
        container_identities[container_id] = await container_identity(
            client, asset.context, container_id
        )
    return asset_identity(asset, container_identities)


def item_identity_string(
    item: Asset | Mapping[str, Any], delimiter: str = DEFAULT_DELIMITER
) -> str:
    """
    Build an identity string from an item's context and name.

    Two items with the same chain of names produce the same string whatever
    their RIDs are, e.g. `DB::SCHEMA::TABLE`.

    Args:
        item: A REST item (with `_context`) or an Asset.
        delimiter: Separator between components (empty falls back to `::`).
    """
    item = as_asset(item)
    if not delimiter:
        delimiter = DEFAULT_DELIMITER
    return delimiter.join([c.name for c in item.context] + [item.name])
