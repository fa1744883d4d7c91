#!/usr/bin/env python3
"""Color management and CIE 1931 conversions for Hue lamps.

RGB to CIE conversion is based on the Q42.HueApi work and the Philips Hue
developer notes on gamut correction.
"""
from typing import Callable, NamedTuple, Optional, Union
from dataclasses import dataclass
import logging
import math
import random
import re

from colour import COLOR_NAME_TO_RGB

_LOGGER = logging.getLogger(__name__)

_HEX_PATTERN = re.compile(r"[0-9a-fA-F]{6}")


class InvalidColorError(ValueError):
    """Raised when a color descriptor cannot be understood."""


def clamp_to_range(min_value, max_value, value):
    """Clamp value into [min_value, max_value]."""
    return min(max(min_value, value), max_value)


def _channel(value) -> int:
    return int(clamp_to_range(0, 255, value or 0))


@dataclass(frozen=True)
class RGB:
    """An RGB color with integer channels in 0-255."""
    r: int = 0
    g: int = 0
    b: int = 0

    def __post_init__(self):
        object.__setattr__(self, "r", _channel(self.r))
        object.__setattr__(self, "g", _channel(self.g))
        object.__setattr__(self, "b", _channel(self.b))

    def __str__(self) -> str:
        return f"r: {self.r}, g: {self.g}, b: {self.b}"

    def to_css_string(self) -> str:
        return f"rgb({self.r}, {self.g}, {self.b})"


@dataclass(frozen=True)
class XYPoint:
    """A point in the CIE 1931 chromaticity diagram."""
    x: float
    y: float

    def __str__(self) -> str:
        return f"{{x: {self.x}, y: {self.y}}}"

    def to_list(self) -> list:
        return [self.x, self.y]


class Gamut(NamedTuple):
    """Vertices of the triangle of colors a lamp can reproduce."""
    red: XYPoint
    lime: XYPoint
    blue: XYPoint


HUE_GAMUT = Gamut(
    red=XYPoint(0.675, 0.322),
    lime=XYPoint(0.4091, 0.518),
    blue=XYPoint(0.167, 0.04),
)

HEX_FULL_RED = "FF0000"
HEX_FULL_GREEN = "00FF00"
HEX_FULL_BLUE = "0000FF"
HEX_FULL_WHITE = "FFFFFF"


@dataclass(frozen=True)
class Hex:
    """A literal hex color such as ``ff6c22`` or ``#FF6C22``."""
    value: str

    def __post_init__(self):
        digits = self.value[1:] if self.value.startswith("#") else self.value
        if not _HEX_PATTERN.fullmatch(digits):
            raise InvalidColorError(
                f"Invalid hex color {self.value!r}: expected six hex digits")
        object.__setattr__(self, "value", digits)


@dataclass(frozen=True)
class Named:
    """A named CSS color, matched case-insensitively."""
    name: str


@dataclass(frozen=True)
class Random:
    """A uniformly random color."""


ColorInput = Union[Hex, Named, Random]


def lookup_css_color(name: str) -> Optional[str]:
    """Return the hex code of a CSS color name, or None if unknown."""
    rgb = COLOR_NAME_TO_RGB.get(name.lower())
    if rgb is None:
        return None
    return "%02x%02x%02x" % tuple(rgb)


def random_rgb_value() -> int:
    """Return a random channel value between 0 and 255."""
    return random.randint(0, 255)


def _cross_product(p1: XYPoint, p2: XYPoint) -> float:
    return p1.x * p2.y - p1.y * p2.x


def _distance(one: XYPoint, two: XYPoint) -> float:
    dx = one.x - two.x
    dy = one.y - two.y
    return math.sqrt(dx * dx + dy * dy)


def _closest_point_to_line(a: XYPoint, b: XYPoint, p: XYPoint) -> XYPoint:
    """Closest point to p on the segment a-b."""
    ap = XYPoint(p.x - a.x, p.y - a.y)
    ab = XYPoint(b.x - a.x, b.y - a.y)
    ab2 = ab.x * ab.x + ab.y * ab.y
    ap_ab = ap.x * ab.x + ap.y * ab.y
    t = clamp_to_range(0.0, 1.0, ap_ab / ab2)
    return XYPoint(a.x + ab.x * t, a.y + ab.y * t)


def _gamma_expand(c: float) -> float:
    return ((c + 0.055) / (1.0 + 0.055)) ** 2.4 if c > 0.04045 else c / 12.92


def _gamma_compress(c: float) -> float:
    return 12.92 * c if c <= 0.0031308 else (1.0 + 0.055) * c ** (1.0 / 2.4) - 0.055


def _reciprocal_mega(value: float) -> float:
    if value == 0:
        return math.copysign(math.inf, value)
    return 1e6 / value


def kelvin_to_mired(kelvin: float) -> float:
    """Convert a Kelvin temperature to mireds."""
    return _reciprocal_mega(kelvin)


def mired_to_kelvin(mired: float) -> float:
    """Convert a mired temperature to Kelvin."""
    return _reciprocal_mega(mired)


class ColorManager:
    """Converts colors between consumer formats and lamp CIE coordinates.

    The manager holds no mutable state; one instance can be shared by any
    number of callers.
    """

    def __init__(self,
                 css_lookup: Callable[[str], Optional[str]] = lookup_css_color,
                 random_channel: Callable[[], int] = random_rgb_value,
                 gamut: Gamut = HUE_GAMUT):
        self.css_lookup = css_lookup
        self.random_channel = random_channel
        self.gamut = gamut

    def parse_color_input(self, value: Optional[str]) -> ColorInput:
        """Classify a raw color string as a CSS name, hex color or random."""
        if not value:
            return Random()
        if self.css_lookup(value.lower()) is not None:
            return Named(value)
        return Hex(value)

    def resolve(self, color_input: ColorInput) -> XYPoint:
        """Resolve a color input to gamut-corrected CIE coordinates."""
        if isinstance(color_input, Named):
            hex_code = self.css_lookup(color_input.name.lower())
            if hex_code is None:
                raise InvalidColorError(f"Unknown color name {color_input.name!r}")
            return self.hex_to_cie1931(hex_code)
        if isinstance(color_input, Hex):
            return self.hex_to_cie1931(color_input.value)
        if isinstance(color_input, Random):
            rgb = RGB(self.random_channel(), self.random_channel(), self.random_channel())
            return self.rgb_to_cie1931(rgb)
        raise TypeError(f"Unsupported color input: {color_input!r}")

    def get_cie_color(self, value: Optional[str] = None) -> XYPoint:
        """CIE coordinates of a hex string or CSS name; random when empty."""
        return self.resolve(self.parse_color_input(value))

    def hex_to_rgb(self, hex_color: str) -> RGB:
        """Convert a six digit hex string to an RGB color."""
        digits = Hex(hex_color).value
        return RGB(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    def rgb_to_hex(self, rgb: RGB) -> str:
        """Convert an RGB color to a lowercase hex string."""
        return "%02x%02x%02x" % (rgb.r, rgb.g, rgb.b)

    def in_lamps_reach(self, p: XYPoint) -> bool:
        """Check whether a point lies inside the gamut triangle."""
        red, lime, blue = self.gamut
        v1 = XYPoint(lime.x - red.x, lime.y - red.y)
        v2 = XYPoint(blue.x - red.x, blue.y - red.y)
        q = XYPoint(p.x - red.x, p.y - red.y)
        denominator = _cross_product(v1, v2)
        s = _cross_product(q, v2) / denominator
        t = _cross_product(v1, q) / denominator
        return s >= 0.0 and t >= 0.0 and s + t <= 1.0

    def closest_point_in_gamut(self, p: XYPoint) -> XYPoint:
        """Project a point onto the nearest edge of the gamut triangle."""
        red, lime, blue = self.gamut
        candidates = (
            _closest_point_to_line(red, lime, p),
            _closest_point_to_line(blue, red, p),
            _closest_point_to_line(lime, blue, p),
        )
        closest = candidates[0]
        lowest = _distance(p, closest)
        for candidate in candidates[1:]:
            d = _distance(p, candidate)
            if d < lowest:
                lowest = d
                closest = candidate
        return closest

    def rgb_to_cie1931(self, rgb: RGB) -> XYPoint:
        """Convert an RGB color to the closest reproducible CIE point."""
        r = _gamma_expand(rgb.r / 255.0)
        g = _gamma_expand(rgb.g / 255.0)
        b = _gamma_expand(rgb.b / 255.0)

        X = r * 0.4360747 + g * 0.3850649 + b * 0.0930804
        Y = r * 0.2225045 + g * 0.7168786 + b * 0.0406169
        Z = r * 0.0139322 + g * 0.0971045 + b * 0.7141733

        total = X + Y + Z
        if total == 0:
            point = XYPoint(0.0, 0.0)
        else:
            point = XYPoint(X / total, Y / total)

        if not self.in_lamps_reach(point):
            point = self._nudge_into_gamut(self.closest_point_in_gamut(point))
        return point

    def _nudge_into_gamut(self, p: XYPoint) -> XYPoint:
        """Move an edge point toward the centroid until it tests as inside.

        Projected points can sit a rounding error outside the triangle.
        """
        red, lime, blue = self.gamut
        cx = (red.x + lime.x + blue.x) / 3
        cy = (red.y + lime.y + blue.y) / 3
        step = 1e-12
        while not self.in_lamps_reach(p):
            p = XYPoint(p.x + (cx - p.x) * step, p.y + (cy - p.y) * step)
            step = min(step * 2, 1.0)
        return p

    def hex_to_cie1931(self, hex_color: str) -> XYPoint:
        """Convert a hex color string to approximate CIE coordinates."""
        return self.rgb_to_cie1931(self.hex_to_rgb(hex_color))

    def cie1931_to_rgb(self, coords: XYPoint, bri: float = 1) -> RGB:
        """Approximate RGB for CIE coordinates at brightness 0-1.

        This is not an inverse of rgb_to_cie1931; it follows the Hue SDK
        recipe using the Wide RGB D65 matrix.
        """
        if not self.in_lamps_reach(coords):
            _LOGGER.debug(f"{coords} is outside the lamp gamut, projecting")
            coords = self.closest_point_in_gamut(coords)

        Y = bri
        X = Y / coords.y * coords.x
        Z = Y / coords.y * (1 - coords.x - coords.y)

        rgb = [
            X * 1.612 - Y * 0.203 - Z * 0.302,
            -X * 0.509 + Y * 1.412 + Z * 0.066,
            X * 0.026 - Y * 0.072 + Z * 0.962,
        ]
        rgb = [max(0, _gamma_compress(c)) for c in rgb]

        # Weight components by the largest one
        highest = max(rgb)
        if highest > 1:
            rgb = [c / highest for c in rgb]

        return RGB(*[math.floor(c * 255) for c in rgb])

    def cie1931_to_hex(self, coords: XYPoint, bri: float = 1) -> str:
        """Approximate hex color for CIE coordinates at brightness 0-1."""
        return self.rgb_to_hex(self.cie1931_to_rgb(coords, bri))
