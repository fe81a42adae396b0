import asyncio
import logging

import pytest

from igcrest.core.adapters.catalog import REST_ROOT, CatalogClient
from igcrest.core.errors import UnsuccessfulStatusError
from igcrest.core.transport import TransportResponse


class _StubTransport:
    def __init__(self, responses: list[TransportResponse]):
        self.responses = list(responses)
        self.requests: list[tuple] = []
        self.closed = False

    async def request(self, method, path, body=None, content_type=None):
        self.requests.append((method, path, body, content_type))
        return self.responses.pop(0)

    async def aclose(self):
        self.closed = True


def _client(*responses: TransportResponse) -> tuple[CatalogClient, _StubTransport]:
    transport = _StubTransport(list(responses))
    return CatalogClient(transport), transport


def test_search_posts_json_to_search_endpoint():
    client, transport = _client(TransportResponse(200, body={"items": []}))

    body = asyncio.run(client.search({"types": ["term"]}))

    assert body == {"items": []}
    assert transport.requests == [
        ("POST", f"{REST_ROOT}/search/", {"types": ["term"]}, "application/json")
    ]


def test_unexpected_status_raises_with_both_bodies():
    client, _ = _client(TransportResponse(400, body={"message": "bad query"}))

    with pytest.raises(UnsuccessfulStatusError) as exc_info:
        asyncio.run(client.search({"types": ["term"]}))

    err = exc_info.value
    assert err.status_code == 400
    assert err.expected == 200
    assert "bad query" in str(err)
    assert '"types": ["term"]' in str(err)


def test_create_returns_rid_from_location_header():
    client, transport = _client(
        TransportResponse(
            201, headers={"location": f"https://igc{REST_ROOT}/assets/6662c0f2.e1b1ec6c"}
        )
    )

    rid = asyncio.run(client.create("term", {"name": "Revenue"}))

    assert rid == "6662c0f2.e1b1ec6c"
    assert transport.requests[0][2] == {"name": "Revenue", "_type": "term"}


def test_create_requires_201():
    client, _ = _client(TransportResponse(200, body={}))

    with pytest.raises(UnsuccessfulStatusError):
        asyncio.run(client.create("term", {"name": "Revenue"}))


def test_detect_lineage_expects_accepted():
    client, transport = _client(TransportResponse(202, body={}))

    asyncio.run(client.detect_lineage_for_job("job1"))

    assert transport.requests[0][:2] == ("GET", f"{REST_ROOT}/flows/detectFlows/dsjob/job1")


def test_upload_lineage_flow_sends_xml():
    client, transport = _client(TransportResponse(200, body="ok"))

    asyncio.run(client.upload_lineage_flow("<doc/>"))

    assert transport.requests[0] == (
        "POST",
        f"{REST_ROOT}/flows/upload",
        "<doc/>",
        "application/xml",
    )


def test_get_asset_properties_by_id_returns_requested_properties():
    client, transport = _client(
        TransportResponse(200, body={"items": [{"_id": "x", "path": "/p", "_context": []}]})
    )

    res = asyncio.run(client.get_asset_properties_by_id("x", "data_file", "path"))

    assert res == {"path": "/p"}
    query = transport.requests[0][2]
    assert query["pageSize"] == 1
    assert query["where"]["conditions"] == [{"property": "_id", "operator": "=", "value": "x"}]


def test_get_asset_properties_by_id_many_warns_and_takes_first(caplog):
    client, _ = _client(
        TransportResponse(200, body={"items": [{"_id": "a", "name": "A"}, {"_id": "b"}]})
    )

    with caplog.at_level(logging.WARNING):
        res = asyncio.run(
            client.get_asset_properties_by_id("a", "term", ["name"], include_context=True)
        )

    assert res == {"_id": "a", "name": "A"}
    assert "more than one asset" in caplog.text


def test_get_asset_properties_by_id_none_found():
    client, _ = _client(TransportResponse(200, body={"items": []}))

    assert asyncio.run(client.get_asset_properties_by_id("a", "term", ["name"])) == {}


def test_get_assets_in_collection(caplog):
    client, _ = _client(
        TransportResponse(200, body={"items": [{"assets": {"items": [{"_id": "a"}]}}]}),
        TransportResponse(200, body={"items": []}),
    )

    assert asyncio.run(client.get_assets_in_collection("Mine", 10)) == [{"_id": "a"}]
    with caplog.at_level(logging.WARNING):
        assert asyncio.run(client.get_assets_in_collection("Missing", 10)) == []
    assert "No assets found in the collection 'Missing'" in caplog.text


def test_get_asset_type_names_to_ids():
    client, _ = _client(
        TransportResponse(
            200, body=[{"_id": "term", "_name": "Term"}, {"_id": "category", "_name": "Category"}]
        )
    )

    assert asyncio.run(client.get_asset_type_names_to_ids()) == {
        "Term": "term",
        "Category": "category",
    }


def test_async_context_manager_closes_transport():
    client, transport = _client()

    async def _use():
        async with client:
            pass

    asyncio.run(_use())

    assert transport.closed
