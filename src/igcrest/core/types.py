"""Catalog type vocabulary: containment maps and search-property rewrite rules.

The containment maps describe which data containers own which child types.
The rewrite rules translate an ancestor's REST type into the property name a
search must use to filter on it. Rules are declared in a single table keyed
by ancestor type, and a fallback rule handles namespaced (bundle) types.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping

DATA_CONTAINER_TYPES_TO_CHILDREN: Mapping[str, str] = {
    "database_table": "database_columns",
    "data_file_record": "data_file_fields",
}

DATA_CHILDREN_TO_CONTAINER_TYPES: Mapping[str, str] = {
    "database_column": "database_table",
    "data_file_field": "data_file_record",
}

DATA_FILE_TYPE = "data_file"
DATA_FILE_FOLDER_TYPE = "data_file_folder"
HOST_ENGINE_TYPE = "host_(engine)"
FOLDER_SEPARATOR = "/"
BUNDLE_TYPE_PREFIX = "$"
BUNDLE_ID_SEPARATOR = "-"


def is_file_related(asset_type: str) -> bool:
    """Return True for data file types (`data_file`, `data_file_record`, ...)."""
    return asset_type.startswith(DATA_FILE_TYPE)


class RewriteRule(ABC):
    """Translates an ancestor type into a search property name."""

    @abstractmethod
    def apply(self, asset_type: str, ancestor_type: str) -> str:
        """
        Return the property name to filter on.

        An empty string means the ancestor must not be filtered on at all.
        """
        ...


@dataclass(frozen=True)
class Rename(RewriteRule):
    """Always use a different property name."""

    target: str

    def apply(self, asset_type: str, ancestor_type: str) -> str:
        return self.target


@dataclass(frozen=True)
class RenameForFiles(RewriteRule):
    """Use a different property name only when the searched type is file-related."""

    target: str

    def apply(self, asset_type: str, ancestor_type: str) -> str:
        if is_file_related(asset_type):
            return self.target
        return ancestor_type


@dataclass(frozen=True)
class Drop(RewriteRule):
    """Do not filter on this ancestor."""

    def apply(self, asset_type: str, ancestor_type: str) -> str:
        return ""


@dataclass(frozen=True)
class StripNamespace(RewriteRule):
    """Turn `$<bundle>-<type>` into `$<type>`."""

    def apply(self, asset_type: str, ancestor_type: str) -> str:
        cut = ancestor_type.find(BUNDLE_ID_SEPARATOR)
        if cut < 0:
            return ancestor_type
        return BUNDLE_TYPE_PREFIX + ancestor_type[cut + 1 :]


@dataclass(frozen=True)
class Keep(RewriteRule):
    def apply(self, asset_type: str, ancestor_type: str) -> str:
        return ancestor_type


# BI relationships cannot filter reliably on these top-level qualifiers, so
# searches drop them and may return several matches.
ANCESTOR_REWRITE_RULES: Mapping[str, RewriteRule] = {
    HOST_ENGINE_TYPE: RenameForFiles("host"),
    "category": Rename("parent_category"),
    "data_class": Rename("parent_data_class"),
    "bi_root_folder": Drop(),
    "bi_server": Drop(),
}

_KEEP = Keep()
_STRIP_NAMESPACE = StripNamespace()


def rule_for(ancestor_type: str) -> RewriteRule:
    """Return the rewrite rule that applies to an ancestor type."""
    rule = ANCESTOR_REWRITE_RULES.get(ancestor_type)
    if rule is not None:
        return rule
    if ancestor_type.startswith(BUNDLE_TYPE_PREFIX):
        return _STRIP_NAMESPACE
    return _KEEP


def query_property_name(asset_type: str, ancestor_type: str) -> str:
    """Translate an ancestor type into the property name used by searches."""
    return rule_for(ancestor_type).apply(asset_type, ancestor_type)


def is_data_container(asset_type: str) -> bool:
    """Return True if the type is a data container (e.g. a database table)."""
    return asset_type in DATA_CONTAINER_TYPES_TO_CHILDREN


def data_container_child_types(asset_type: str) -> str | None:
    """Return the child relationship name of a data container type."""
    return DATA_CONTAINER_TYPES_TO_CHILDREN.get(asset_type)


def container_type_for(asset_type: str) -> str | None:
    """Return the container type that owns assets of the given child type."""
    return DATA_CHILDREN_TO_CONTAINER_TYPES.get(asset_type)
