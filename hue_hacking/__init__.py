"""Philips Hue bridge client with CIE 1931 color conversion."""
from .color_manager import (
    ColorInput,
    ColorManager,
    Gamut,
    HUE_GAMUT,
    Hex,
    InvalidColorError,
    Named,
    Random,
    RGB,
    XYPoint,
    kelvin_to_mired,
    mired_to_kelvin,
)
from .bridge_api import HueBridgeAPI, HueBridgeError, search_bridges
from .config import HueConfig, load_config
from .light_manager import Lamp, LampState, LightManager
from .responses import (
    BridgeDiscovery,
    GroupActionConfirmation,
    GroupActionResponse,
    StateChangeConfirmation,
    StateChangeResponse,
)

__version__ = "1.0.0"
