"""Hue bridge HTTP API client."""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from .responses import BridgeDiscovery

_LOGGER = logging.getLogger(__name__)

DISCOVERY_URL = "https://discovery.meethue.com/"


class HueBridgeError(Exception):
    """Raised when the bridge cannot be reached or rejects a request."""


async def _request_json(method: str, url: str, timeout: float,
                        data: Optional[Dict[str, Any]] = None) -> Any:
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.request(method, url, json=data) as response:
                if response.status != 200:
                    text = await response.text()
                    raise HueBridgeError(f"{method} {url} failed with {response.status}: {text}")
                # The bridge does not always send application/json
                return await response.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise HueBridgeError(f"{method} {url} failed: {e!r}") from e


def raise_for_error_body(url: str, body: Any) -> Any:
    """Raise if a bridge answer is a list of error entries, else return it.

    The bridge answers failed GETs with status 200 and a body such as
    ``[{"error": {"type": 3, "description": "resource, /lights/9, not available"}}]``.
    """
    if isinstance(body, list):
        errors = [entry["error"] for entry in body if isinstance(entry, dict) and "error" in entry]
        if errors:
            descriptions = "; ".join(str(error.get("description", error) if isinstance(error, dict) else error)
                                     for error in errors)
            raise HueBridgeError(f"GET {url} failed: {descriptions}")
    return body


async def search_bridges(url: str = DISCOVERY_URL, timeout: float = 5.0) -> List[BridgeDiscovery]:
    """Ask the discovery endpoint for bridges on the local network."""
    bridges = await _request_json("GET", url, timeout)
    _LOGGER.debug(f"Discovery returned {bridges}")
    return [BridgeDiscovery.from_dict(b) for b in bridges or []]


class HueBridgeAPI:
    """Interface to a Hue bridge's REST API."""

    def __init__(self, ip: str, key: str, timeout: float = 2.0):
        """Initialize the API client."""
        self.ip = ip
        self.key = key
        self.timeout = timeout
        self.base_url = f"http://{ip}/api/{key}"

    def lights_url(self) -> str:
        return f"{self.base_url}/lights"

    def lamp_url(self, lamp_index: int) -> str:
        return f"{self.lights_url()}/{lamp_index}"

    def lamp_state_url(self, lamp_index: int) -> str:
        return f"{self.lamp_url(lamp_index)}/state"

    def group_action_url(self, group_index: Optional[int] = None) -> str:
        """URL of a group's action; group 0 holds every lamp."""
        return f"{self.base_url}/groups/{group_index or 0}/action"

    async def get(self, url: str) -> Any:
        """GET a bridge resource and return its JSON body."""
        return raise_for_error_body(url, await _request_json("GET", url, self.timeout))

    async def put(self, url: str, data: Dict[str, Any]) -> Any:
        """PUT a JSON body to a bridge resource and return the JSON answer."""
        _LOGGER.debug(f"PUT {url} {data}")
        return await _request_json("PUT", url, self.timeout, data)
