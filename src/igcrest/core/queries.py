"""Helpers for preparing queries and checking their results."""

from __future__ import annotations

import copy
import json
import logging
from typing import Any, Mapping

from igcrest.core.errors import InvariantViolationError

logger = logging.getLogger(__name__)

VARIABLE_PREFIX = "$"
RELATED_RID_VARIABLE = "$relatedObjectRID"


def replace_query_vars(
    query: Mapping[str, Any], variables: Mapping[str, Any]
) -> dict[str, Any]:
    """
    Substitute `$name` condition values with `variables[name]`.

    Returns a new query; the one passed in is left untouched.

    Raises:
        KeyError: If a referenced variable is not provided.
    """
    out = copy.deepcopy(dict(query))
    for condition in (out.get("where") or {}).get("conditions") or []:
        value = condition.get("value")
        if isinstance(value, str) and value.startswith(VARIABLE_PREFIX):
            condition["value"] = variables[value[len(VARIABLE_PREFIX) :]]
    return out


def replace_related_update_vars(update: Mapping[str, Any], rid: str) -> dict[str, Any]:
    """Inject `rid` wherever `$relatedObjectRID` appears in an update body."""
    return json.loads(json.dumps(update).replace(RELATED_RID_VARIABLE, rid))


def verify_single_item(results: Mapping[str, Any]) -> dict[str, Any]:
    """Return the only item of a result set, failing on zero or several."""
    items = results.get("items") or []
    if not items:
        raise InvariantViolationError("Did not find the entry to update.")
    if len(items) > 1:
        raise InvariantViolationError("Found multiple entries to update.")
    return items[0]


def get_single_item(results: Mapping[str, Any]) -> dict[str, Any]:
    """Return the first item of a result set, failing if there is none."""
    items = results.get("items") or []
    if not items:
        raise InvariantViolationError("Did not find the entry to update.")
    return items[0]


def sort_key(item: Mapping[str, Any]) -> str:
    """Sort key ordering REST items by RID."""
    return str(item.get("_id", ""))


def log_update_results(results: Mapping[str, Any]) -> None:
    """Log each property changed by an update."""
    logger.info("The following updates were made -")
    for key, value in results.items():
        logger.info("  - %s = %s", key, value)
