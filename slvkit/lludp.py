"""LLUDP packet building and parsing, including zero-run compression."""

from __future__ import annotations

import enum
import struct
import uuid
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

__all__ = [
    "LluPacketFlags",
    "LLUDPFrequency",
    "LluPacket",
    "zerocode",
    "zerodecode",
    "build_use_circuit_code_packet",
    "build_lludp_packet",
    "build_complete_agent_movement_packet",
    "build_region_handshake_reply_packet",
    "build_agent_throttle_packet",
    "build_agent_update_packet",
]

_RELIABLE_UNENCODED = 0x40
_UNRELIABLE_UNENCODED = 0x00
_THROTTLE_COUNT = 7


class LluPacketFlags(enum.IntFlag):
    """Header flag bits of an LLUDP packet."""

    NONE = 0x00
    RELIABLE = 0x01
    ZEROCODED = 0x80


_KNOWN_FLAGS = LluPacketFlags.RELIABLE | LluPacketFlags.ZEROCODED


class LLUDPFrequency(enum.Enum):
    """Frequency class of an LLUDP message number."""

    LOW = b"\xff\xff\x00"
    MEDIUM = b"\xff\x00\x00"
    HIGH = b"\x00\x00\x00"
    FIXED = b"\xff\xff\xff"


@dataclass
class LluPacket:
    """A parsed LLUDP packet."""

    message_id: int
    flags: LluPacketFlags
    sequence: Optional[int]
    payload: bytes

    @staticmethod
    def build_outgoing(
        message_id: int,
        flags: LluPacketFlags,
        sequence: Optional[int],
        payload: bytes,
    ) -> bytes:
        """Encode a packet: message id (LE u16), flags, optional sequence (LE u32), payload."""
        out = bytearray(message_id.to_bytes(2, "little"))
        out.append(int(flags) & 0xFF)
        if sequence is not None:
            out += sequence.to_bytes(4, "little")
        out += bytes(payload)
        return bytes(out)

    @classmethod
    def parse_incoming(cls, data: bytes) -> "LluPacket":
        """Decode a packet produced by :meth:`build_outgoing`.

        Raises ValueError when the data is too short for its header.
        """
        data = bytes(data)
        if len(data) < 3:
            raise ValueError("packet shorter than the 3-byte header")
        message_id = int.from_bytes(data[0:2], "little")
        flags = LluPacketFlags(data[2] & _KNOWN_FLAGS)
        offset = 3
        sequence = None
        if flags & LluPacketFlags.RELIABLE:
            if len(data) < 7:
                raise ValueError("reliable packet is missing its sequence number")
            sequence = int.from_bytes(data[3:7], "little")
            offset = 7
        return cls(message_id, flags, sequence, data[offset:])


def zerocode(data: bytes) -> bytes:
    """Compress runs of zero bytes into (0, count) pairs, count at most 255."""
    out = bytearray()
    i = 0
    length = len(data)
    while i < length:
        if data[i] == 0:
            count = 1
            while i + count < length and data[i + count] == 0 and count < 255:
                count += 1
            out += bytes((0, count))
            i += count
        else:
            out.append(data[i])
            i += 1
    return bytes(out)


def zerodecode(data: bytes) -> bytes:
    """Expand (0, count) pairs; a trailing lone zero byte ends decoding."""
    out = bytearray()
    i = 0
    length = len(data)
    while i < length:
        if data[i] == 0:
            if i + 1 >= length:
                break
            out += bytes(data[i + 1])
            i += 2
        else:
            out.append(data[i])
            i += 1
    return bytes(out)


def _uuid_bytes(value: uuid.UUID) -> bytes:
    return value.bytes


def _header(flags: int, packet_id: int, message_number: bytes) -> bytearray:
    out = bytearray((flags,))
    out += packet_id.to_bytes(4, "big")
    out.append(0x00)
    out += message_number
    return out


def _floats_be(values: Iterable[float]) -> bytes:
    values = list(values)
    return struct.pack(f">{len(values)}f", *values)


def build_use_circuit_code_packet(
    circuit_code: int,
    session_id: uuid.UUID,
    agent_id: uuid.UUID,
    packet_id: int,
) -> bytes:
    """Build a reliable, unencoded UseCircuitCode packet (Low 3)."""
    out = _header(_RELIABLE_UNENCODED, packet_id, b"\xff\xff\x00\x03")
    out += circuit_code.to_bytes(4, "little")
    out += _uuid_bytes(session_id)
    out += _uuid_bytes(agent_id)
    return bytes(out)


def build_lludp_packet(
    message_id: int,
    frequency: LLUDPFrequency,
    packet_id: int,
    reliable: bool,
    zerocoded: bool,
    body: bytes,
) -> bytes:
    """Build a generic packet; the packet id is little-endian here."""
    flags = LluPacketFlags.NONE
    if reliable:
        flags |= LluPacketFlags.RELIABLE
    if zerocoded:
        flags |= LluPacketFlags.ZEROCODED
    out = bytearray((int(flags),))
    out += packet_id.to_bytes(4, "little")
    out.append(0x00)
    out += frequency.value
    out.append(message_id & 0xFF)
    out += zerocode(body) if zerocoded else bytes(body)
    return bytes(out)


def build_complete_agent_movement_packet(
    agent_id: uuid.UUID,
    session_id: uuid.UUID,
    circuit_code: int,
    packet_id: int,
    position: Sequence[float],
    look_at: Sequence[float],
) -> bytes:
    """Build a reliable CompleteAgentMovement packet (Low 249).

    Position and look-at are accepted but not sent: the AgentData block
    holds only the agent id, session id and circuit code.
    """
    out = _header(_RELIABLE_UNENCODED, packet_id, b"\xff\xff\x00\xf9")
    out += _uuid_bytes(agent_id)
    out += _uuid_bytes(session_id)
    out += circuit_code.to_bytes(4, "little")
    return bytes(out)


def build_region_handshake_reply_packet(
    agent_id: uuid.UUID,
    session_id: uuid.UUID,
    flags: int,
    packet_id: int,
) -> bytes:
    """Build a reliable RegionHandshakeReply packet (High 6)."""
    out = _header(_RELIABLE_UNENCODED, packet_id, b"\x00\x00\x00\x06")
    out += _uuid_bytes(agent_id)
    out += _uuid_bytes(session_id)
    out += flags.to_bytes(4, "little")
    return bytes(out)


def build_agent_throttle_packet(
    agent_id: uuid.UUID,
    session_id: uuid.UUID,
    circuit_code: int,
    throttle: Sequence[float],
    packet_id: int,
) -> bytes:
    """Build a reliable AgentThrottle packet (Low 81) with seven big-endian floats."""
    if len(throttle) != _THROTTLE_COUNT:
        raise ValueError(f"throttle needs exactly {_THROTTLE_COUNT} values, got {len(throttle)}")
    out = _header(_RELIABLE_UNENCODED, packet_id, b"\xff\xff\x00\x51")
    out += _uuid_bytes(agent_id)
    out += _uuid_bytes(session_id)
    out += circuit_code.to_bytes(4, "big")
    out += _floats_be(throttle)
    return bytes(out)


def build_agent_update_packet(
    agent_id: uuid.UUID,
    session_id: uuid.UUID,
    position: Sequence[float],
    camera_at: Sequence[float],
    camera_eye: Sequence[float],
    controls: int,
    packet_id: int,
) -> bytes:
    """Build an unreliable AgentUpdate packet (High 4)."""
    vectors = (position, camera_at, camera_eye)
    if any(len(v) != 3 for v in vectors):
        raise ValueError("position, camera_at and camera_eye must each have 3 components")
    out = _header(_UNRELIABLE_UNENCODED, packet_id, b"\x00\x00\x00\x04")
    out += _uuid_bytes(agent_id)
    out += _uuid_bytes(session_id)
    out += _floats_be(component for vector in vectors for component in vector)
    out += controls.to_bytes(4, "big")
    return bytes(out)