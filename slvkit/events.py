"""Parsing of event-queue LLSD documents: agent state updates and simulator addresses."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

__all__ = [
    "AgentState",
    "parse_agent_state_update",
    "parse_sim_address_from_event",
    "parse_look_at",
]

_INT_RE = re.compile(r"[+-]?\d+")
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_DEFAULT_LOOK_AT = (0.0, 1.0, 0.0)


@dataclass
class AgentState:
    """Agent state as reported by an AgentStateUpdate event."""

    can_modify_navmesh: bool = False
    has_modified_navmesh: bool = False
    god_level: int = 0
    hover_height: float = 0.0
    language: str = ""
    language_is_public: bool = False
    access_prefs_max: str = ""
    # (Everyone, Group, NextOwner)
    default_object_perm_masks: Tuple[int, int, int] = (0, 0, 0)


def _parse_int(text: Optional[str]) -> int:
    """A 32-bit signed integer, or 0 when the text is not one."""
    if text is None or not _INT_RE.fullmatch(text):
        return 0
    value = int(text)
    return value if _I32_MIN <= value <= _I32_MAX else 0


def _parse_float(text: Optional[str], default: float = 0.0) -> float:
    """A float without surrounding whitespace or underscores, else ``default``."""
    if text is None or not text or text != text.strip() or "_" in text:
        return default
    try:
        return float(text)
    except ValueError:
        return default


def _is_true(text: Optional[str]) -> bool:
    return (text or "") == "true"


def _pairs(node: ET.Element) -> Iterator[Tuple[Optional[str], ET.Element]]:
    """Consecutive (key text, value element) pairs of a map's children."""
    children: List[ET.Element] = list(node)
    for key, value in zip(children[0::2], children[1::2]):
        yield key.text, value


def _required_pairs(node: ET.Element) -> Iterator[Tuple[str, ET.Element]]:
    for key, value in _pairs(node):
        if key is None:
            raise ValueError("map entry has an empty key")
        yield key, value


def _apply_preferences(state: AgentState, prefs: ET.Element) -> None:
    for key, value in _required_pairs(prefs):
        if key == "god_level":
            state.god_level = _parse_int(value.text)
        elif key == "hover_height":
            state.hover_height = _parse_float(value.text)
        elif key == "language":
            state.language = value.text or ""
        elif key == "language_is_public":
            state.language_is_public = _is_true(value.text)
        elif key == "access_prefs":
            for access_key, access_value in _required_pairs(value):
                if access_key == "max":
                    state.access_prefs_max = access_value.text or ""
        elif key == "default_object_perm_masks":
            masks = {"Everyone": 0, "Group": 0, "NextOwner": 0}
            for mask_key, mask_value in _required_pairs(value):
                if mask_key in masks:
                    masks[mask_key] = _parse_int(mask_value.text)
            state.default_object_perm_masks = (
                masks["Everyone"],
                masks["Group"],
                masks["NextOwner"],
            )


def parse_agent_state_update(llsd_xml: str) -> AgentState:
    """Read an AgentState from the first ``<map>`` of an LLSD XML document.

    Raises ValueError when the XML is malformed, holds no map, or a map
    entry has an empty key.
    """
    try:
        root = ET.fromstring(llsd_xml)
    except ET.ParseError as exc:
        raise ValueError(f"malformed LLSD XML: {exc}") from None
    top = next(root.iter("map"), None)
    if top is None:
        raise ValueError("LLSD document holds no map")
    state = AgentState()
    for key, value in _required_pairs(top):
        if key == "can_modify_navmesh":
            state.can_modify_navmesh = _is_true(value.text)
        elif key == "has_modified_navmesh":
            state.has_modified_navmesh = _is_true(value.text)
        elif key == "preferences":
            _apply_preferences(state, value)
    return state


def _parse_port(text: Optional[str]) -> Optional[int]:
    if text is None or not re.fullmatch(r"\+?\d+", text):
        return None
    port = int(text)
    return port if port <= 0xFFFF else None


def parse_sim_address_from_event(xml: str) -> Optional[Tuple[str, int]]:
    """Find the simulator (ip, port) in an event-queue document, or None.

    A ``sim-ip-and-port`` entry of a body map wins at once; otherwise the
    last ``SimIP`` and ``SimPort`` entries seen are used.
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError:
        return None
    sim_ip: Optional[str] = None
    sim_port: Optional[int] = None
    last_key: Optional[str] = None
    for node in root.iter():
        if node.tag == "key":
            last_key = node.text
            continue
        if last_key is None:
            continue
        if last_key == "body" and node.tag == "map":
            for key, value in _pairs(node):
                if key == "sim-ip-and-port" and value.text is not None:
                    parts = value.text.split(":")
                    if len(parts) >= 2:
                        port = _parse_port(parts[1])
                        if port is not None:
                            return parts[0], port
                if key == "SimIP":
                    sim_ip = value.text
                if key == "SimPort":
                    sim_port = _parse_port(value.text)
        last_key = None
    if sim_ip is not None and sim_port is not None:
        return sim_ip, sim_port
    return None


def parse_look_at(text: str) -> Tuple[float, float, float]:
    """Parse ``[r1.0,r2.0,r3.0]``; components that fail to parse become 0.0.

    Anything without exactly three components gives (0.0, 1.0, 0.0).
    """
    parts = text.strip("[]").split(",")
    if len(parts) != 3:
        return _DEFAULT_LOOK_AT
    x, y, z = (_parse_float(part.lstrip("r")) for part in parts)
    return (x, y, z)