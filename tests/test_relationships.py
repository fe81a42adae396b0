import asyncio

import pytest

from igcrest.core.assets import Condition, RelationshipMode
from igcrest.core.errors import NotFoundError, UnsuccessfulStatusError
from igcrest.core.relationships import (
    add_relationship,
    plan_replace_some,
    relationship_payload,
)


class _RelClient:
    """Serves the relationship read, its continuation pages and the scoped search."""

    def __init__(
        self,
        related_first: list[dict],
        related_paging: dict | None = None,
        pages: dict | None = None,
        scoped: list[dict] | None = None,
        scoped_error: Exception | None = None,
        asset_found: bool = True,
    ):
        self.related_first = related_first
        self.related_paging = related_paging
        self.pages = pages or {}
        self.scoped = scoped or []
        self.scoped_error = scoped_error
        self.asset_found = asset_found
        self.searches: list[dict] = []
        self.updates: list[tuple[str, dict]] = []

    async def search(self, query):
        self.searches.append(query)
        if len(self.searches) == 1:
            if not self.asset_found:
                return {"items": []}
            prop = query["properties"][0]
            related = {"items": self.related_first}
            if self.related_paging:
                related["paging"] = self.related_paging
            return {"items": [{"_id": "asset", prop: related}]}
        if self.scoped_error is not None:
            raise self.scoped_error
        return {"items": self.scoped}

    async def get_other(self, path, success_code=200):
        return self.pages[path]

    async def update(self, rid, value):
        self.updates.append((rid, value))
        return value


def _rel(rid: str, rtype: str = "term") -> dict:
    return {"_id": rid, "_type": rtype, "_name": rid}


FROM = {"_id": "asset", "_type": "database_column", "_name": "C"}


def test_relationship_payload_modes():
    assert relationship_payload("assigned_to_terms", ["a"], RelationshipMode.APPEND) == {
        "assigned_to_terms": {"items": ["a"], "mode": "append"}
    }
    assert relationship_payload("assigned_to_terms", ("a",), RelationshipMode.REPLACE_ALL) == {
        "assigned_to_terms": {"items": ["a"], "mode": "replace"}
    }


@pytest.mark.parametrize(
    "mode, rest_mode",
    [(RelationshipMode.APPEND, "append"), ("REPLACE_ALL", "replace")],
)
def test_append_and_replace_all_send_one_update(mode, rest_mode):
    client = _RelClient([])

    asyncio.run(add_relationship(client, FROM, ["t1", "t2"], "assigned_to_terms", mode))

    assert client.searches == []
    assert client.updates == [
        ("asset", {"assigned_to_terms": {"items": ["t1", "t2"], "mode": rest_mode}})
    ]


def test_replace_some_keeps_unmatched_and_other_types_in_order():
    client = _RelClient(
        related_first=[_rel("a"), _rel("b")],
        related_paging={"next": "/page2"},
        pages={
            "/page2": {"items": [_rel("x", "category"), _rel("c"), _rel("d")]},
        },
        scoped=[_rel("b"), _rel("d")],
    )
    conditions = [Condition("name", "Old", operator="like {0}%")]

    asyncio.run(
        add_relationship(
            client,
            FROM,
            [],
            "assigned_to_terms",
            RelationshipMode.REPLACE_SOME,
            replace_type="term",
            conditions=conditions,
        )
    )

    assert client.updates == [
        ("asset", {"assigned_to_terms": {"items": ["a", "x", "c"], "mode": "replace"}})
    ]
    scope = client.searches[1]
    assert scope["types"] == ["term"]
    assert scope["where"]["conditions"] == [
        {"property": "name", "operator": "like {0}%", "value": "Old"},
        {"property": "_id", "operator": "in", "value": ["a", "b", "c", "d"]},
    ]
    assert conditions == [Condition("name", "Old", operator="like {0}%")]


def test_plan_replace_some_reports_delta_without_writing():
    client = _RelClient(
        related_first=[_rel("a"), _rel("b"), _rel("c"), _rel("d")],
        scoped=[_rel("b"), _rel("d")],
    )
    conditions = [{"property": "name", "operator": "=", "value": "b"}]

    delta = asyncio.run(
        plan_replace_some(client, FROM, "assigned_to_terms", "term", conditions)
    )

    assert delta.all_ids == ("a", "b", "c", "d")
    assert delta.candidate_ids == ("a", "b", "c", "d")
    assert delta.dropped_ids == ("b", "d")
    assert delta.final_ids == ("a", "c")
    assert client.updates == []
    assert conditions == [{"property": "name", "operator": "=", "value": "b"}]


def test_replace_some_without_candidates_skips_scoped_search():
    client = _RelClient(related_first=[_rel("x", "category")])

    asyncio.run(
        add_relationship(
            client, FROM, [], "assigned_to_terms", "REPLACE_SOME", replace_type="term"
        )
    )

    assert len(client.searches) == 1
    assert client.updates == [
        ("asset", {"assigned_to_terms": {"items": ["x"], "mode": "replace"}})
    ]


def test_replace_some_requires_replace_type():
    client = _RelClient([])

    with pytest.raises(ValueError, match="replace type"):
        asyncio.run(
            add_relationship(client, FROM, [], "assigned_to_terms", RelationshipMode.REPLACE_SOME)
        )
    assert client.updates == []


def test_replace_some_failure_writes_nothing():
    client = _RelClient(
        related_first=[_rel("a")],
        scoped_error=UnsuccessfulStatusError(500, 200, {"error": "boom"}),
    )

    with pytest.raises(UnsuccessfulStatusError):
        asyncio.run(
            add_relationship(
                client, FROM, [], "assigned_to_terms", "REPLACE_SOME", replace_type="term"
            )
        )
    assert client.updates == []


def test_replace_some_missing_asset():
    client = _RelClient([], asset_found=False)

    with pytest.raises(NotFoundError):
        asyncio.run(plan_replace_some(client, FROM, "assigned_to_terms", "term"))
    assert client.updates == []
