"""Tests for the bridge HTTP client against a local aiohttp server."""

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from hue_hacking.bridge_api import HueBridgeAPI, HueBridgeError, raise_for_error_body, search_bridges
from hue_hacking.responses import BridgeDiscovery


def _serve(routes, scenario):
    """Run scenario(server) while an app with the given routes is listening."""
    async def _run():
        app = web.Application()
        app.add_routes(routes)
        async with test_utils.TestServer(app) as server:
            return await scenario(server)
    return asyncio.run(_run())


def _api(server):
    return HueBridgeAPI(f"{server.host}:{server.port}", "testapp")


def test_url_building():
    api = HueBridgeAPI("localhost", "testapp")
    assert api.base_url == "http://localhost/api/testapp"
    assert api.lights_url() == "http://localhost/api/testapp/lights"
    assert api.lamp_url(2) == "http://localhost/api/testapp/lights/2"
    assert api.lamp_state_url(2) == "http://localhost/api/testapp/lights/2/state"
    assert api.group_action_url() == "http://localhost/api/testapp/groups/0/action"
    assert api.group_action_url(3) == "http://localhost/api/testapp/groups/3/action"


def test_get_returns_json():
    async def lamp(request):
        return web.json_response({"state": {"bri": 231}})

    async def scenario(server):
        api = _api(server)
        return await api.get(api.lamp_url(1))

    body = _serve([web.get("/api/testapp/lights/1", lamp)], scenario)
    assert body == {"state": {"bri": 231}}


def test_put_sends_json_body():
    received = []

    async def state(request):
        received.append(await request.json())
        return web.json_response([{"success": {"/lights/1/state/on": True}}])

    async def scenario(server):
        api = _api(server)
        return await api.put(api.lamp_state_url(1), {"on": True})

    body = _serve([web.put("/api/testapp/lights/1/state", state)], scenario)
    assert received == [{"on": True}]
    assert body == [{"success": {"/lights/1/state/on": True}}]


def test_get_accepts_text_content_type():
    async def lamp(request):
        return web.Response(text='{"state": {"on": false}}', content_type="text/html")

    async def scenario(server):
        api = _api(server)
        return await api.get(api.lamp_url(1))

    assert _serve([web.get("/api/testapp/lights/1", lamp)], scenario) == {"state": {"on": False}}


def test_error_status_raises():
    async def missing(request):
        return web.Response(status=404, text="not found")

    async def scenario(server):
        api = _api(server)
        with pytest.raises(HueBridgeError, match="404"):
            await api.get(api.lamp_url(9))

    _serve([web.get("/api/testapp/lights/9", missing)], scenario)


def test_unreachable_bridge_raises():
    api = HueBridgeAPI("127.0.0.1:1", "testapp", timeout=1.0)
    with pytest.raises(HueBridgeError):
        asyncio.run(api.get(api.lights_url()))


def test_search_bridges():
    async def discovery(request):
        return web.json_response([{"id": "785d973935391ad0", "internalipaddress": "192.168.x.x"}])

    async def scenario(server):
        return await search_bridges(url=str(server.make_url("/")))

    found = _serve([web.get("/", discovery)], scenario)
    assert found == [BridgeDiscovery("785d973935391ad0", "192.168.x.x")]
    assert found[0].internal_ip_address == "192.168.x.x"


def test_search_bridges_empty():
    async def discovery(request):
        return web.json_response([])

    async def scenario(server):
        return await search_bridges(url=str(server.make_url("/")))

    assert _serve([web.get("/", discovery)], scenario) == []


def test_error_body_with_ok_status_raises():
    async def missing(request):
        return web.json_response([{"error": {"type": 3, "address": "/lights/9",
                                             "description": "resource, /lights/9, not available"}}])

    async def scenario(server):
        api = _api(server)
        with pytest.raises(HueBridgeError, match="resource, /lights/9, not available"):
            await api.get(api.lamp_url(9))

    _serve([web.get("/api/testapp/lights/9", missing)], scenario)


def test_raise_for_error_body_passes_other_bodies():
    assert raise_for_error_body("url", {"state": {}}) == {"state": {}}
    assert raise_for_error_body("url", []) == []
    with pytest.raises(HueBridgeError, match="a; b"):
        raise_for_error_body("url", [{"error": {"description": "a"}}, {"error": {"description": "b"}}])
