"""Command line entry point for the Hue client."""
import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from typing import Any, List, Optional

from .bridge_api import HueBridgeAPI, HueBridgeError, search_bridges
from .color_manager import ColorManager, InvalidColorError
from .config import HueConfig, load_config
from .light_manager import LightManager

_LOGGER = logging.getLogger(__name__)

ALL = "all"


class HueApp:
    """Main application class."""

    def __init__(self, config: HueConfig):
        """Initialize the application."""
        self.config = config
        self.api = HueBridgeAPI(config.ip, config.key, timeout=config.timeout / 1000)
        self.colors = ColorManager()
        self.light_manager = LightManager(self.api, config, self.colors)

    async def run(self, args: argparse.Namespace) -> Any:
        """Run one command against the bridge and return its result."""
        command = args.command
        lights = self.light_manager

        if command == "search":
            return await search_bridges()
        if command == "lights":
            return await lights.get_lamps()

        await lights.init()
        target = args.target
        every = target == ALL
        lamp = None if every else int(target)

        if command == "on":
            return await (lights.turn_on_all() if every else lights.turn_on(lamp))
        if command == "off":
            return await (lights.turn_off_all() if every else lights.turn_off(lamp))
        if command == "color":
            color = self.colors.parse_color_input(args.color)
            _LOGGER.info(f"Setting {target} to {color}")
            if every:
                return await lights.set_all_colors(color)
            return await lights.set_color(lamp, color)
        if command == "temp":
            return await lights.set_color_temperature(lamp, args.kelvin)
        if command == "brightness":
            if every:
                return await lights.set_all_brightness(args.value)
            return await lights.set_brightness(lamp, args.value)
        if command == "dim":
            return await (lights.dim_all(args.step) if every else lights.dim(lamp, args.step))
        if command == "brighten":
            if every:
                return await lights.brighten_all(args.step)
            return await lights.brighten(lamp, args.step)
        if command == "flash":
            if args.long:
                return await (lights.long_flash_all() if every else lights.long_flash(lamp))
            return await (lights.flash_all() if every else lights.flash(lamp))
        if command == "colorloop":
            return await lights.start_color_loop(lamp)
        if command == "stop-effect":
            return await lights.stop_effect(lamp)
        raise ValueError(f"Unknown command {command}")


def _lamp_or_all(value: str) -> str:
    if value != ALL and not value.isdigit():
        raise argparse.ArgumentTypeError(f"expected a lamp number or '{ALL}', got {value!r}")
    return value


def _lamp(value: str) -> str:
    if not value.isdigit():
        raise argparse.ArgumentTypeError(f"expected a lamp number, got {value!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hue-hacking", description="Control Philips Hue lamps")
    parser.add_argument("--config", help="JSON options file")
    parser.add_argument("--ip", help="bridge address")
    parser.add_argument("--key", help="bridge API key")
    parser.add_argument("-v", "--verbose", action="store_true")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("search", help="discover bridges on the network")
    commands.add_parser("lights", help="list lamps")

    for name in ("on", "off"):
        commands.add_parser(name).add_argument("target", type=_lamp_or_all)

    color = commands.add_parser("color", help="set a hex or CSS color, random if omitted")
    color.add_argument("target", type=_lamp_or_all)
    color.add_argument("color", nargs="?")

    temp = commands.add_parser("temp", help="set a color temperature in Kelvin")
    temp.add_argument("target", type=_lamp)
    temp.add_argument("kelvin", type=int)

    brightness = commands.add_parser("brightness", help="set brightness 0-254")
    brightness.add_argument("target", type=_lamp_or_all)
    brightness.add_argument("value", type=int)

    for name in ("dim", "brighten"):
        step = commands.add_parser(name)
        step.add_argument("target", type=_lamp_or_all)
        step.add_argument("step", type=int, nargs="?")

    flash = commands.add_parser("flash")
    flash.add_argument("target", type=_lamp_or_all)
    flash.add_argument("--long", action="store_true")

    for name in ("colorloop", "stop-effect"):
        commands.add_parser(name).add_argument("target", type=_lamp)

    return parser


def _to_json(result: Any) -> str:
    if isinstance(result, list):
        result = [dataclasses.asdict(item) for item in result]
    elif dataclasses.is_dataclass(result):
        result = dataclasses.asdict(result)
    return json.dumps(result, indent=2)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    config = load_config(args.config)
    if args.ip:
        config.ip = args.ip
    if args.key:
        config.key = args.key

    app = HueApp(config)
    try:
        result = asyncio.run(app.run(args))
    except (HueBridgeError, InvalidColorError) as e:
        _LOGGER.error(f"{args.command} failed: {e}")
        return 1

    print(_to_json(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
