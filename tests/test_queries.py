import logging

import pytest

from igcrest.core.errors import InvariantViolationError
from igcrest.core.queries import (
    get_single_item,
    log_update_results,
    replace_query_vars,
    replace_related_update_vars,
    sort_key,
    verify_single_item,
)


def test_replace_query_vars_substitutes_and_copies():
    query = {
        "types": ["term"],
        "where": {
            "conditions": [
                {"property": "name", "operator": "=", "value": "$termName"},
                {"property": "status", "operator": "=", "value": "ACCEPTED"},
            ],
            "operator": "and",
        },
    }

    out = replace_query_vars(query, {"termName": "Revenue"})

    assert out["where"]["conditions"][0]["value"] == "Revenue"
    assert out["where"]["conditions"][1]["value"] == "ACCEPTED"
    assert query["where"]["conditions"][0]["value"] == "$termName"


def test_replace_query_vars_missing_variable():
    query = {"where": {"conditions": [{"property": "name", "value": "$nope"}]}}

    with pytest.raises(KeyError):
        replace_query_vars(query, {})


def test_replace_related_update_vars_replaces_every_occurrence():
    update = {
        "assigned_to_terms": {"items": ["$relatedObjectRID"], "mode": "append"},
        "short_description": "linked to $relatedObjectRID",
    }

    out = replace_related_update_vars(update, "abc")

    assert out == {
        "assigned_to_terms": {"items": ["abc"], "mode": "append"},
        "short_description": "linked to abc",
    }


def test_verify_single_item():
    assert verify_single_item({"items": [{"_id": "a"}]}) == {"_id": "a"}
    with pytest.raises(InvariantViolationError, match="Did not find"):
        verify_single_item({"items": []})
    with pytest.raises(InvariantViolationError, match="multiple"):
        verify_single_item({"items": [{"_id": "a"}, {"_id": "b"}]})


def test_get_single_item_takes_first():
    assert get_single_item({"items": [{"_id": "a"}, {"_id": "b"}]}) == {"_id": "a"}
    with pytest.raises(InvariantViolationError):
        get_single_item({})


def test_sort_key_orders_by_rid():
    items = [{"_id": "b"}, {"_id": "a"}, {}]

    assert [i.get("_id") for i in sorted(items, key=sort_key)] == [None, "a", "b"]


def test_log_update_results(caplog):
    caplog.set_level(logging.INFO, logger="igcrest.core.queries")

    log_update_results({"short_description": "new"})

    assert "The following updates were made -" in caplog.text
    assert "  - short_description = new" in caplog.text
