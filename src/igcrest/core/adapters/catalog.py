from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from igcrest.core.errors import UnsuccessfulStatusError
from igcrest.core.transport import (
    JSON_CONTENT_TYPE,
    XML_CONTENT_TYPE,
    CatalogTransport,
    TransportResponse,
)

logger = logging.getLogger(__name__)

REST_ROOT = "/ibm/iis/igc-rest/v1"


class CatalogClient:
    """Adapter around the catalog REST API (search, CRUD, types, lineage, attributes)."""

    def __init__(self, transport: CatalogTransport) -> None:
        self.transport = transport

    async def aclose(self) -> None:
        """Release the transport, if it holds resources."""
        close = getattr(self.transport, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> CatalogClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _call(
        self,
        method: str,
        path: str,
        success_code: int,
        body: Any = None,
        content_type: str | None = None,
    ) -> TransportResponse:
        """Send one request and fail unless the expected status code comes back."""
        if body is not None and content_type is None:
            content_type = JSON_CONTENT_TYPE
        logger.debug("%s %s", method, path)
        res = await self.transport.request(method, path, body, content_type)
        if res.status_code != success_code:
            raise UnsuccessfulStatusError(
                res.status_code,
                success_code,
                response_body=res.body,
                request_body=body,
            )
        return res

    async def search(self, query: Mapping[str, Any]) -> dict[str, Any]:
        """Run a search (query as REST JSON) and return the first page of results."""
        res = await self._call("POST", f"{REST_ROOT}/search/", 200, dict(query))
        return res.body

    async def update(self, rid: str, value: Mapping[str, Any]) -> dict[str, Any]:
        """Update an asset with the provided values."""
        res = await self._call("PUT", f"{REST_ROOT}/assets/{rid}", 200, dict(value))
        return res.body

    async def create(self, asset_type: str, value: Mapping[str, Any]) -> str:
        """Create an asset and return its RID (taken from the Location header)."""
        payload = dict(value)
        payload["_type"] = asset_type
        res = await self._call("POST", f"{REST_ROOT}/assets", 201, payload)
        location = res.header("Location") or ""
        return location[location.rfind("/") + 1 :] if location else ""

    async def delete_asset_by_id(self, rid: str) -> Any:
        """Delete a specific asset."""
        res = await self._call("DELETE", f"{REST_ROOT}/assets/{rid}", 200)
        return res.body

    async def get_other(self, path: str, success_code: int = 200) -> Any:
        """Make a general GET request (path may be a fully-qualified URL)."""
        res = await self._call("GET", path, success_code)
        return res.body

    async def get_types(self) -> list[dict[str, Any]]:
        """Return all asset types known to the catalog."""
        return await self.get_other(f"{REST_ROOT}/types/")

    async def get_asset_type_names_to_ids(self) -> dict[str, str]:
        """Return a mapping of type display name to unique type id."""
        types = await self.get_types()
        return {t["_name"]: t["_id"] for t in types}

    async def get_asset_by_id(self, rid: str) -> dict[str, Any]:
        """
        Return every detail of an asset.

        Builds a large object and is noticeably slower than asking for
        specific properties through `get_asset_properties_by_id`.
        """
        return await self.get_other(f"{REST_ROOT}/assets/{rid}")

    async def get_asset_property_by_id(self, rid: str, prop: str) -> Any:
        """Return a single property of an asset."""
        return await self.get_other(f"{REST_ROOT}/assets/{rid}/{prop}")

    async def get_asset_properties_by_id(
        self,
        rid: str,
        asset_type: str,
        properties: str | Sequence[str],
        max_items: int = 1,
        include_context: bool = False,
    ) -> dict[str, Any]:
        """
        Return only the requested properties of an asset.

        Args:
            rid: RID of the asset.
            asset_type: REST type of the asset.
            properties: Property name(s) to retrieve.
            max_items: Page size for multi-valued properties.
            include_context: Return the whole item (including `_context`)
                             instead of just the requested properties.

        Returns:
            The requested properties, or an empty mapping if no asset matched.
        """
        if isinstance(properties, str):
            properties = [properties]
        query = {
            "pageSize": max_items,
            "properties": list(properties),
            "types": [asset_type],
            "where": {
                "conditions": [{"property": "_id", "operator": "=", "value": rid}],
                "operator": "and",
            },
        }
        results = await self.search(query)
        items = results.get("items") or []
        if len(items) > 1:
            logger.warning(
                "Found more than one asset with RID '%s' -- only returning the first one.",
                rid,
            )
        if not items:
            return {}
        if include_context:
            return items[0]
        return {p: items[0].get(p) for p in properties}

    async def get_assets_in_collection(
        self, collection_name: str, max_items: int
    ) -> list[dict[str, Any]]:
        """Return the assets of a named collection (first collection if several match)."""
        query = {
            "pageSize": max_items,
            "properties": ["assets"],
            "types": ["collection"],
            "where": {
                "conditions": [
                    {"property": "name", "operator": "=", "value": collection_name}
                ],
                "operator": "and",
            },
        }
        results = await self.search(query)
        items = results.get("items") or []
        if len(items) > 1:
            logger.warning(
                "Found more than one collection called '%s' -- only taking assets from the first one.",
                collection_name,
            )
        if not items:
            logger.warning("No assets found in the collection '%s'.", collection_name)
            return []
        return list((items[0].get("assets") or {}).get("items") or [])

    async def detect_lineage_for_job(self, rid: str) -> Any:
        """Ask the catalog to detect lineage for a job (accepted asynchronously)."""
        return await self.get_other(f"{REST_ROOT}/flows/detectFlows/dsjob/{rid}", 202)

    async def upload_lineage_flow(self, xml: str) -> Any:
        """Create lineage flows from a flow XML document."""
        res = await self._call(
            "POST", f"{REST_ROOT}/flows/upload", 200, xml, XML_CONTENT_TYPE
        )
        return res.body

    async def get_bundles(self) -> list[str]:
        """Return the names of the asset type bundles already deployed."""
        return await self.get_other(f"{REST_ROOT}/bundles/")

    async def get_custom_attributes(self, max_items: int) -> Any:
        """Return the custom attribute definitions."""
        return await self.get_other(
            f"{REST_ROOT}/administration/attributes/?begin=0&pageSize={max_items}"
        )

    async def create_custom_attribute(self, definition: Mapping[str, Any]) -> Any:
        """Create a custom attribute."""
        res = await self._call(
            "POST", f"{REST_ROOT}/administration/attributes", 200, dict(definition)
        )
        return res.body

    async def update_custom_attribute(
        self, rid: str, definition: Mapping[str, Any]
    ) -> Any:
        """Update an existing custom attribute."""
        res = await self._call(
            "PUT", f"{REST_ROOT}/administration/attributes/{rid}", 200, dict(definition)
        )
        return res.body
