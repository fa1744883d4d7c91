"""Lamp and group control for a Hue bridge."""
from typing import List, Dict, Any, Optional, Union
import logging
import asyncio
import math
from dataclasses import dataclass, field

from .bridge_api import HueBridgeAPI, HueBridgeError, raise_for_error_body
from .color_manager import (
    ColorManager,
    Hex,
    Named,
    Random,
    XYPoint,
    clamp_to_range,
    kelvin_to_mired,
)
from .config import HueConfig
from .responses import GroupActionResponse, StateChangeResponse

_LOGGER = logging.getLogger(__name__)

ALL_LAMPS_GROUP = 0

OFF_STATE = {"on": False}
ON_STATE = {"on": True}
SHORT_FLASH_STATE = {"alert": "select"}
LONG_FLASH_STATE = {"alert": "lselect"}
COLOR_LOOP_EFFECT = {"effect": "colorloop"}
NO_EFFECT = {"effect": "none"}

MIN_KELVIN = 2000
MAX_KELVIN = 6000
DEFAULT_BRIGHTNESS_STEP = 10


@dataclass
class LampState:
    """Represents the current state of a lamp."""
    on: Optional[bool] = None
    bri: Optional[int] = None
    hue: Optional[int] = None
    sat: Optional[int] = None
    effect: Optional[str] = None  # colorloop/none
    xy: Optional[List[float]] = None
    ct: Optional[int] = None
    alert: Optional[str] = None  # select/lselect/none
    colormode: Optional[str] = None  # hs/xy/ct
    reachable: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LampState":
        return cls(
            on=data.get('on'),
            bri=data.get('bri'),
            hue=data.get('hue'),
            sat=data.get('sat'),
            effect=data.get('effect'),
            xy=data.get('xy'),
            ct=data.get('ct'),
            alert=data.get('alert'),
            colormode=data.get('colormode'),
            reachable=data.get('reachable'),
        )


@dataclass
class Lamp:
    """A lamp known to the bridge."""
    lamp_index: int
    name: str = ""
    type: str = ""
    modelid: str = ""
    swversion: str = ""
    state: LampState = field(default_factory=LampState)

    @classmethod
    def from_dict(cls, lamp_index: int, data: Dict[str, Any]) -> "Lamp":
        return cls(
            lamp_index=lamp_index,
            name=data.get('name', ""),
            type=data.get('type', ""),
            modelid=data.get('modelid', ""),
            swversion=data.get('swversion', ""),
            state=LampState.from_dict(data.get('state', {})),
        )


ColorArgument = Union[XYPoint, Hex, Named, Random, str, None]


class LightManager:
    """Controls the lamps and groups of one bridge."""

    def __init__(self, api: HueBridgeAPI, config: Optional[HueConfig] = None,
                 colors: Optional[ColorManager] = None):
        self.api = api
        self.config = config or HueConfig()
        self.colors = colors or ColorManager()
        self.lamp_states: Dict[int, LampState] = {}
        self._update_lock = asyncio.Lock()

    @property
    def transition_time(self) -> int:
        """Color transition time in milliseconds."""
        return self.config.transition_time

    @transition_time.setter
    def transition_time(self, value: int):
        self.config.transition_time = value

    @property
    def number_of_lamps(self) -> int:
        return self.config.number_of_lamps

    @number_of_lamps.setter
    def number_of_lamps(self, value: int):
        self.config.number_of_lamps = value

    async def init(self):
        """Fetch the initial state of the configured lamps if requested."""
        if not self.config.retrieve_initial_state:
            return
        await asyncio.gather(*[
            self._fetch_state(lamp_index)
            for lamp_index in range(1, self.config.number_of_lamps + 1)
        ])

    async def _get(self, url: str) -> Dict[str, Any]:
        data = raise_for_error_body(url, await self.api.get(url))
        if not isinstance(data, dict):
            raise HueBridgeError(f"GET {url} returned an unexpected body: {data!r}")
        return data

    async def _fetch_state(self, lamp_index: int) -> LampState:
        """Fetch and cache the current state of a lamp."""
        try:
            data = await self._get(self.api.lamp_url(lamp_index))
        except Exception as e:
            _LOGGER.error(f"Error fetching state for lamp {lamp_index}: {e}")
            raise
        state = LampState.from_dict(data.get('state', {}))
        async with self._update_lock:
            self.lamp_states[lamp_index] = state
        return state

    async def _put_state(self, lamp_index: int, data: Dict[str, Any]) -> StateChangeResponse:
        try:
            response = await self.api.put(self.api.lamp_state_url(lamp_index), data)
        except Exception as e:
            _LOGGER.error(f"Error updating lamp {lamp_index}: {e}")
            raise
        return StateChangeResponse.from_payload(response)

    async def _put_group_action(self, group_index: int, action: Dict[str, Any]) -> GroupActionResponse:
        try:
            response = await self.api.put(self.api.group_action_url(group_index), action)
        except Exception as e:
            _LOGGER.error(f"Error updating group {group_index}: {e}")
            raise
        return GroupActionResponse.from_payload(response)

    def _to_xy(self, color: ColorArgument) -> XYPoint:
        if isinstance(color, XYPoint):
            return color
        if isinstance(color, (Hex, Named, Random)):
            return self.colors.resolve(color)
        return self.colors.get_cie_color(color)

    def _build_xy_state(self, xy: XYPoint) -> Dict[str, Any]:
        state: Dict[str, Any] = {"xy": xy.to_list()}
        if self.config.transition_time is not None:
            # Bridge transition times count in 100ms steps
            state["transitiontime"] = round(self.config.transition_time / 100)
        return state

    @staticmethod
    def _build_dim_state(decrement: Optional[int] = None) -> Dict[str, int]:
        return {"bri_inc": -abs(decrement or DEFAULT_BRIGHTNESS_STEP)}

    @staticmethod
    def _build_brighten_state(increment: Optional[int] = None) -> Dict[str, int]:
        return {"bri_inc": abs(increment or DEFAULT_BRIGHTNESS_STEP)}

    async def get_lamps(self) -> List[Lamp]:
        """Get every lamp the bridge knows about."""
        data = await self._get(self.api.lights_url())
        return [Lamp.from_dict(int(key), value) for key, value in data.items()]

    async def get_lamp_states(self) -> List[LampState]:
        """Get the states of all reachable lamps."""
        lamps = await self.get_lamps()
        return [lamp.state for lamp in lamps if lamp.state.reachable]

    async def get_lamp_state(self, lamp_index: int) -> LampState:
        return await self._fetch_state(lamp_index)

    async def get_brightness(self, lamp_index: int) -> Optional[int]:
        """Brightness (0-254) of a lamp."""
        state = await self._fetch_state(lamp_index)
        return state.bri

    async def turn_on(self, lamp_index: int) -> StateChangeResponse:
        return await self._put_state(lamp_index, ON_STATE)

    async def turn_off(self, lamp_index: int) -> StateChangeResponse:
        return await self._put_state(lamp_index, OFF_STATE)

    async def turn_on_all(self) -> GroupActionResponse:
        return await self._put_group_action(ALL_LAMPS_GROUP, ON_STATE)

    async def turn_off_all(self) -> GroupActionResponse:
        return await self._put_group_action(ALL_LAMPS_GROUP, OFF_STATE)

    async def flash(self, lamp_index: int) -> StateChangeResponse:
        """Flash a lamp once."""
        return await self._put_state(lamp_index, SHORT_FLASH_STATE)

    async def flash_all(self) -> GroupActionResponse:
        return await self._put_group_action(ALL_LAMPS_GROUP, SHORT_FLASH_STATE)

    async def long_flash(self, lamp_index: int) -> StateChangeResponse:
        """Flash a lamp for about 15 seconds."""
        return await self._put_state(lamp_index, LONG_FLASH_STATE)

    async def long_flash_all(self) -> GroupActionResponse:
        return await self._put_group_action(ALL_LAMPS_GROUP, LONG_FLASH_STATE)

    async def set_color(self, lamp_index: int, color: ColorArgument = None) -> StateChangeResponse:
        """Set a lamp to a color; a random color when none is given.

        ``color`` may be CIE coordinates, a color input, a hex string or a
        CSS color name.
        """
        xy = self._to_xy(color)
        return await self._put_state(lamp_index, self._build_xy_state(xy))

    async def set_all_colors(self, color: ColorArgument = None) -> GroupActionResponse:
        xy = self._to_xy(color)
        return await self._put_group_action(ALL_LAMPS_GROUP, self._build_xy_state(xy))

    async def set_color_temperature(self, lamp_index: int, kelvin: float) -> StateChangeResponse:
        """Set the white temperature of a lamp, clamped to 2000-6000K."""
        clamped = clamp_to_range(MIN_KELVIN, MAX_KELVIN, kelvin)
        ct = math.floor(kelvin_to_mired(clamped))
        return await self._put_state(lamp_index, {"ct": ct})

    async def set_brightness(self, lamp_index: int, brightness: int) -> StateChangeResponse:
        """Set brightness 0-254; 0 does not turn the lamp off."""
        return await self._put_state(lamp_index, {"bri": brightness})

    async def set_group_brightness(self, group_index: int, brightness: int) -> GroupActionResponse:
        return await self._put_group_action(group_index, {"bri": brightness})

    async def set_all_brightness(self, brightness: int) -> GroupActionResponse:
        return await self.set_group_brightness(ALL_LAMPS_GROUP, brightness)

    async def dim(self, lamp_index: int, decrement: Optional[int] = None) -> StateChangeResponse:
        return await self._put_state(lamp_index, self._build_dim_state(decrement))

    async def dim_all(self, decrement: Optional[int] = None) -> GroupActionResponse:
        return await self._put_group_action(ALL_LAMPS_GROUP, self._build_dim_state(decrement))

    async def brighten(self, lamp_index: int, increment: Optional[int] = None) -> StateChangeResponse:
        return await self._put_state(lamp_index, self._build_brighten_state(increment))

    async def brighten_all(self, increment: Optional[int] = None) -> GroupActionResponse:
        return await self._put_group_action(ALL_LAMPS_GROUP, self._build_brighten_state(increment))

    async def start_color_loop(self, lamp_index: int) -> StateChangeResponse:
        return await self._put_state(lamp_index, COLOR_LOOP_EFFECT)

    async def stop_effect(self, lamp_index: int) -> StateChangeResponse:
        return await self._put_state(lamp_index, NO_EFFECT)
