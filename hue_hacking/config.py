"""Configuration for the Hue client."""
import json
import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

_LOGGER = logging.getLogger(__name__)

DEFAULT_OPTIONS_PATH = os.path.expanduser("~/.hue-hacking.json")


@dataclass
class HueConfig:
    """Bridge address and client behaviour."""
    ip: str = "localhost"
    key: str = "testapp"
    number_of_lamps: int = 3
    retrieve_initial_state: bool = False
    transition_time: int = 400  # milliseconds
    timeout: int = 2000  # milliseconds

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HueConfig":
        """Build a config, falling back to defaults for empty values."""
        defaults = cls()
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            _LOGGER.warning(f"Ignoring unknown options: {sorted(unknown)}")
        values = {name: data.get(name) or getattr(defaults, name) for name in known}
        return cls(**values)


def load_config(path: Optional[str] = None) -> HueConfig:
    """Load options from a JSON file, then apply environment overrides.

    The file is taken from ``path``, then ``HUE_OPTIONS``, then
    ``~/.hue-hacking.json``. A missing file leaves the defaults in place.
    ``HUE_BRIDGE_IP`` and ``HUE_API_KEY`` override the file.
    """
    path = path or os.environ.get("HUE_OPTIONS", DEFAULT_OPTIONS_PATH)
    options: Dict[str, Any] = {}
    if os.path.exists(path):
        with open(path) as f:
            options = json.load(f)
        _LOGGER.debug(f"Loaded options from {path}")

    if os.environ.get("HUE_BRIDGE_IP"):
        options["ip"] = os.environ["HUE_BRIDGE_IP"]
    if os.environ.get("HUE_API_KEY"):
        options["key"] = os.environ["HUE_API_KEY"]

    return HueConfig.from_dict(options)
