"""Typed wrappers around Hue bridge responses."""
from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass, field
import logging

_LOGGER = logging.getLogger(__name__)

HueStateValue = Union[str, int, float, bool, List[float]]


@dataclass
class StateChangeConfirmation:
    """A lamp attribute the bridge reports as changed."""
    attribute: str
    value: HueStateValue


@dataclass
class GroupActionConfirmation:
    """A group action the bridge acknowledged."""
    address: str
    value: HueStateValue


def _collect_errors(response: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    errors = [update["error"] for update in response if "error" in update]
    for error in errors:
        _LOGGER.warning(f"Bridge reported error: {error}")
    return errors


@dataclass
class StateChangeResponse:
    """Changed lamp states from a PUT to ``lights/<n>/state``."""
    changed_states: List[StateChangeConfirmation] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_payload(cls, response: List[Dict[str, Any]]) -> "StateChangeResponse":
        changed_states = []
        for update in response:
            changed_state = None
            for key, value in update.get("success", {}).items():
                if "/lights/" in key and "/state/" in key:
                    changed_state = StateChangeConfirmation(key, value)
            if changed_state is not None and changed_state.value is not None:
                changed_states.append(changed_state)
        return cls(changed_states=changed_states, errors=_collect_errors(response))


@dataclass
class GroupActionResponse:
    """Acknowledged actions from a PUT to ``groups/<n>/action``."""
    acknowledged_actions: List[GroupActionConfirmation] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_payload(cls, response: List[Dict[str, Any]]) -> "GroupActionResponse":
        acknowledged_actions = []
        for update in response:
            success = update.get("success")
            if not success:
                continue
            if "address" in success:
                acknowledged_actions.append(
                    GroupActionConfirmation(success["address"], success.get("value")))
            else:
                # The bridge itself answers with {"/groups/0/action/on": true}
                for address, value in success.items():
                    acknowledged_actions.append(GroupActionConfirmation(address, value))
        return cls(acknowledged_actions=acknowledged_actions, errors=_collect_errors(response))


@dataclass
class BridgeDiscovery:
    """A bridge found through the discovery endpoint."""
    id: Optional[str] = None
    internal_ip_address: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "BridgeDiscovery":
        if not isinstance(data, dict):
            return cls()
        bridge_id = data.get("id")
        address = data.get("internalipaddress")
        return cls(
            id=bridge_id if isinstance(bridge_id, str) and bridge_id else None,
            internal_ip_address=address if isinstance(address, str) and address else None,
        )
