import asyncio
import json

import httpx
import pytest

from igcrest.core.adapters.httpx_transport import HttpxTransport
from igcrest.core.errors import TransportError


def _transport(handler) -> HttpxTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxTransport("https://igc.example.com:9445/", client=client)


def test_request_sends_json_and_parses_response():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["content_type"] = request.headers.get("content-type")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"items": [{"_id": "a"}]})

    res = asyncio.run(_transport(handler).request("POST", "/ibm/iis/igc-rest/v1/search/", {"q": 1}))

    assert seen == {
        "url": "https://igc.example.com:9445/ibm/iis/igc-rest/v1/search/",
        "content_type": "application/json",
        "body": {"q": 1},
    }
    assert res.status_code == 200
    assert res.body == {"items": [{"_id": "a"}]}


def test_fully_qualified_urls_are_used_as_is():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        return httpx.Response(200, content=b"")

    res = asyncio.run(_transport(handler).request("GET", "https://other.example.com/next?begin=10"))

    assert seen["url"] == "https://other.example.com/next?begin=10"
    assert res.body == {}


def test_xml_body_is_sent_raw_and_text_response_kept():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = request.content.decode()
        return httpx.Response(200, text="uploaded")

    res = asyncio.run(
        _transport(handler).request("POST", "/flows/upload", "<doc/>", "application/xml")
    )

    assert seen["body"] == "<doc/>"
    assert res.body == "uploaded"


def test_headers_are_exposed_case_insensitively():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, headers={"Location": "https://igc/assets/abc"})

    res = asyncio.run(_transport(handler).request("POST", "/assets", {"_type": "term"}))

    assert res.header("LOCATION") == "https://igc/assets/abc"


def test_network_failure_becomes_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(TransportError, match="refused"):
        asyncio.run(_transport(handler).request("GET", "/types/"))
