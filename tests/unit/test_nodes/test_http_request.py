"""
Unit tests for the HTTP Request node
"""

import json

import httpx
import pytest

from halo_engine.core.execution.context import NodeExecuteContext, RequestHelpers
from halo_engine.core.execution.exceptions import NodeOperationError
from halo_engine.core.nodes.base import NodeExecutionData
from halo_engine.core.nodes.builtin.http_request.http_request import HttpRequestNode


def make_context(parameters, handler, items=({},)):
    return NodeExecuteContext(
        description=HttpRequestNode.description,
        parameters=parameters,
        input_items=[NodeExecutionData(json=dict(item)) for item in items],
        helpers=RequestHelpers(transport=httpx.MockTransport(handler)),
    )


class TestHttpRequestNode:

    @pytest.mark.asyncio
    async def test_get_returns_full_response(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"items": [1, 2]})

        context = make_context(
            {"method": "GET", "url": "https://api.example.com/items", "headers": '{"X-Trace": 7}',
             "body": '{"ignored": true}'},
            handler,
        )

        [[item]] = await HttpRequestNode().execute(context)

        assert item.json["statusCode"] == 200
        assert item.json["body"] == {"items": [1, 2]}
        assert requests[0].headers["X-Trace"] == "7"
        assert requests[0].content == b""

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(201, text="created")

        context = make_context(
            {"method": "POST", "url": "https://api.example.com/items", "body": {"name": "widget"}},
            handler,
        )

        [[item]] = await HttpRequestNode().execute(context)

        assert item.json["body"] == "created"
        assert json.loads(requests[0].content) == {"name": "widget"}

    @pytest.mark.asyncio
    async def test_failed_item_is_reported_not_raised(self):
        context = make_context(
            {"url": "https://api.example.com/missing"},
            lambda request: httpx.Response(404, json={"error": "not found"}),
            items=({"n": 1}, {"n": 2}),
        )

        [items] = await HttpRequestNode().execute(context)

        assert len(items) == 2
        assert items[0].json["statusCode"] == 500
        assert "404" in items[0].json["error"]

    @pytest.mark.asyncio
    async def test_url_required(self):
        context = make_context({"url": ""}, lambda request: httpx.Response(200))

        with pytest.raises(NodeOperationError, match="URL is required"):
            await HttpRequestNode().execute(context)

    @pytest.mark.asyncio
    async def test_per_item_urls(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json={})

        context = make_context(
            {"method": "GET", "url": ["https://a.example.com/", "https://b.example.com/"]},
            handler,
            items=({}, {}),
        )

        await HttpRequestNode().execute(context)

        assert seen == ["https://a.example.com/", "https://b.example.com/"]
