"""Core domain models for catalog assets and searches.

These models represent catalog entities in a simple form, independent of the
transport and of CLI concerns. REST items use underscore-prefixed keys
(`_id`, `_type`, `_name`, `_context`); the `from_item` constructors translate
them so the rest of the core works with attributes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


@dataclass(frozen=True)
class ContextEntry:
    """One ancestor in an asset's containment context."""

    type: str
    name: str
    id: str | None = None

    @classmethod
    def from_item(cls, item: Mapping[str, Any]) -> ContextEntry:
        return cls(
            type=str(item["_type"]),
            name=str(item["_name"]),
            id=item.get("_id"),
        )

    def to_item(self) -> dict[str, Any]:
        out: dict[str, Any] = {"_type": self.type, "_name": self.name}
        if self.id is not None:
            out["_id"] = self.id
        return out


@dataclass(frozen=True)
class Asset:
    """
    A node in the catalog's containment tree.

    Attributes:
        id: RID of the asset, only stable within one environment.
        type: REST type of the asset (e.g. `database_column`).
        name: Name of the asset.
        context: Ancestors ordered from the root to the immediate parent.
    """

    id: str | None
    type: str
    name: str
    context: tuple[ContextEntry, ...] = ()

    @classmethod
    def from_item(cls, item: Mapping[str, Any]) -> Asset:
        """Build an Asset from a single entry of a REST `items` array."""
        return cls(
            id=item.get("_id"),
            type=str(item["_type"]),
            name=str(item["_name"]),
            context=tuple(ContextEntry.from_item(c) for c in item.get("_context") or []),
        )

    def to_item(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "_type": self.type,
            "_name": self.name,
            "_context": [c.to_item() for c in self.context],
        }
        if self.id is not None:
            out["_id"] = self.id
        return out


@dataclass
class Identity:
    """
    Environment-independent description of an asset.

    `names` maps each ancestor type (and the asset's own type) to its name.
    Identities handed out by the resolver are always independent copies, so
    mutating one never changes a cached container identity.
    """

    id: str | None = None
    names: dict[str, str] = field(default_factory=dict)
    path: str | None = None

    def copy(self) -> Identity:
        return Identity(id=self.id, names=dict(self.names), path=self.path)

    def to_dict(self) -> dict[str, Any]:
        """Flatten into the `{"_id": ..., <type>: <name>, "path": ...}` shape."""
        out: dict[str, Any] = {"_id": self.id}
        out.update(self.names)
        if self.path is not None:
            out["path"] = self.path
        return out


@dataclass(frozen=True)
class PagedResultSet:
    """One page of search results plus its continuation reference (if any)."""

    items: list[dict[str, Any]] = field(default_factory=list)
    paging: Mapping[str, Any] | None = None

    @classmethod
    def from_json(cls, body: Mapping[str, Any] | None) -> PagedResultSet:
        body = body or {}
        return cls(items=list(body.get("items") or []), paging=body.get("paging"))


@dataclass(frozen=True)
class Condition:
    """A single `where` condition of a search."""

    property: str
    value: Any
    operator: str = "="

    def to_dict(self) -> dict[str, Any]:
        return {"property": self.property, "operator": self.operator, "value": self.value}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Condition:
        return cls(
            property=str(raw["property"]),
            value=raw.get("value"),
            operator=str(raw.get("operator", "=")),
        )


@dataclass
class SearchQuery:
    """A catalog search, rendered into the REST body by `to_dict()`."""

    types: list[str]
    properties: list[str] = field(default_factory=lambda: ["name"])
    conditions: list[Condition] = field(default_factory=list)
    operator: str = "and"
    page_size: int | None = None

    def where(self, prop: str, value: Any, operator: str = "=") -> SearchQuery:
        self.conditions.append(Condition(property=prop, value=value, operator=operator))
        return self

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "properties": list(self.properties),
            "types": list(self.types),
        }
        if self.page_size is not None:
            out["pageSize"] = self.page_size
        if self.conditions:
            out["where"] = {
                "conditions": [c.to_dict() for c in self.conditions],
                "operator": self.operator,
            }
        return out


class RelationshipMode(str, Enum):
    """
    How a relationship update treats the existing related assets.

    Values:
        APPEND: Add the given RIDs to the existing relationships.
        REPLACE_ALL: Replace every existing relationship with the given RIDs.
        REPLACE_SOME: Remove only the existing relationships matched by a
                      type and set of conditions, keeping all others.
    """

    APPEND = "APPEND"
    REPLACE_ALL = "REPLACE_ALL"
    REPLACE_SOME = "REPLACE_SOME"


@dataclass(frozen=True)
class RelationshipDelta:
    """Read-side result of a REPLACE_SOME reconciliation."""

    all_ids: tuple[str, ...]
    candidate_ids: tuple[str, ...]
    dropped_ids: tuple[str, ...]
    final_ids: tuple[str, ...]


def as_asset(item: Asset | Mapping[str, Any]) -> Asset:
    """Accept either an Asset or a raw REST item."""
    if isinstance(item, Asset):
        return item
    return Asset.from_item(item)
