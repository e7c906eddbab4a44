"""Viewer UI state: login flow, preferences, proxy settings, chat log and UI events."""

from __future__ import annotations

import enum
import queue
import random
import socket
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Iterable, Iterator, List, Optional, Tuple, Union

__all__ = [
    "ProxySettings",
    "PreferencesState",
    "LoginState",
    "LoginUiState",
    "LoginProgress",
    "UdpConnectionProgress",
    "ShowTos",
    "AgentStateUpdate",
    "InWorldReady",
    "UiEvent",
    "ChatLog",
    "UiState",
    "pick_random_udp_port",
    "send_udp_test",
]

CHAT_HISTORY_LIMIT = 50
WELCOME_MESSAGE = "Welcome to slv-rust!"

_PORT_ATTEMPTS = 20
_PORT_LOW = 10000
_PORT_HIGH = 60000
_UDP_TEST_TIMEOUT = 1.0


@dataclass
class ProxySettings:
    """Proxy configuration for UDP (SOCKS5) and HTTP(S) traffic."""

    enabled: bool = False
    socks5_host: str = ""
    socks5_port: int = 0
    http_host: str = ""
    http_port: int = 0
    disable_cert_validation: bool = False


@dataclass
class PreferencesState:
    """User preferences shown in the preferences panel."""

    enable_sound: bool = True
    volume: float = 0.8
    graphics_api: str = "vulkan"
    vsync: bool = True
    render_distance: int = 256
    max_bandwidth: int = 1500
    timeout: int = 30
    udp_test_result: Optional[str] = None
    udp_test_in_progress: bool = False


@dataclass
class LoginState:
    """Fields of the login form and flags carried to the next login."""

    username: str = ""
    password: str = ""
    status_message: str = ""
    prefs_modal_open: bool = False
    session_info: Optional[Any] = None
    agree_to_tos_next_login: bool = False
    read_critical_next_login: bool = False


class LoginUiState(enum.Enum):
    """Which screen the viewer is showing."""

    LOGIN_SPLASH = "login_splash"
    MAIN_APP = "main_app"
    LOADING_WORLD = "loading_world"
    IN_WORLD = "in_world"


_LOGIN_TEXT = {
    "idle": "Status: Ready",
    "in_progress": "Status: Logging in...",
    "success": "Status: Login successful!",
}

_UDP_TEXT = {
    "not_started": "UDP: Not started",
    "connecting": "UDP: Connecting...",
    "connected": "UDP: Connected!",
}


def _check_state(state: str, message: Optional[str], plain_states: Iterable[str]) -> None:
    plain = set(plain_states)
    if state == "error":
        if message is None:
            raise ValueError("an error state needs a message")
    elif state in plain:
        if message is not None:
            raise ValueError(f"state {state!r} carries no message")
    else:
        raise ValueError(f"unknown state {state!r}")


@dataclass(frozen=True)
class LoginProgress:
    """Progress of a login attempt: idle, in_progress, success or error (with a message)."""

    state: str = "idle"
    message: Optional[str] = None

    def __post_init__(self) -> None:
        _check_state(self.state, self.message, _LOGIN_TEXT)

    def __str__(self) -> str:
        if self.state == "error":
            return f"Status: Error: {self.message}"
        return _LOGIN_TEXT[self.state]


@dataclass(frozen=True)
class UdpConnectionProgress:
    """Progress of the simulator circuit: not_started, connecting, connected or error."""

    state: str = "not_started"
    message: Optional[str] = None

    def __post_init__(self) -> None:
        _check_state(self.state, self.message, _UDP_TEXT)

    def __str__(self) -> str:
        if self.state == "error":
            return f"UDP: Error: {self.message}"
        return _UDP_TEXT[self.state]


@dataclass(frozen=True)
class ShowTos:
    """Event: show the Terms of Service dialog."""

    tos_id: str
    tos_html: str
    message: str


@dataclass(frozen=True)
class AgentStateUpdate:
    """Event: an LLSD XML document from the event queue."""

    llsd_xml: str


@dataclass(frozen=True)
class InWorldReady:
    """Event: the agent has fully entered the world."""


UiEvent = Union[ShowTos, AgentStateUpdate, InWorldReady]


@dataclass
class ChatLog:
    """Chat lines, keeping only the most recent fifty."""

    lines: Deque[str] = field(
        default_factory=lambda: deque([WELCOME_MESSAGE], maxlen=CHAT_HISTORY_LIMIT)
    )

    def __post_init__(self) -> None:
        self.lines = deque(self.lines, maxlen=CHAT_HISTORY_LIMIT)

    def append(self, line: str) -> None:
        """Add a line, dropping the oldest once the limit is passed."""
        self.lines.append(line)

    def append_incoming(self, sender: str, message: str) -> None:
        """Add a message received from another speaker."""
        self.append(f"{sender}: {message}")

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)


def pick_random_udp_port() -> int:
    """Pick a random port in [10000, 60000) that can be bound; 0 if twenty tries fail."""
    for _ in range(_PORT_ATTEMPTS):
        port = random.randrange(_PORT_LOW, _PORT_HIGH)
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
                sock.bind(("0.0.0.0", port))
        except OSError:
            continue
        return port
    return 0


def _split_address(address: str) -> Tuple[str, int]:
    host, sep, port_text = address.rpartition(":")
    if not sep or not host:
        raise ValueError(f"address must be host:port, got {address!r}")
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"invalid port in address {address!r}") from None
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port out of range in address {address!r}")
    return host, port


def send_udp_test(address: str = "127.0.0.1:54321", message: bytes = b"slv-rust test") -> str:
    """Send one datagram from an ephemeral socket and describe the outcome.

    Raises ValueError when the address is not of the form host:port.
    """
    target = _split_address(address)
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.bind(("0.0.0.0", 0))
    except OSError as exc:
        return f"UDP bind error: {exc}"
    with sock:
        sock.settimeout(_UDP_TEST_TIMEOUT)
        try:
            sent = sock.sendto(bytes(message), target)
        except OSError as exc:
            return f"UDP send error: {exc}"
    return f"UDP sent {sent} bytes to {address}"


@dataclass
class UiState:
    """All state the viewer's UI reads and changes between frames."""

    chat_input: str = ""
    chat_messages: ChatLog = field(default_factory=ChatLog)
    inventory_items: List[str] = field(default_factory=lambda: ["Test Item 1", "Test Item 2"])
    preferences: PreferencesState = field(default_factory=PreferencesState)
    login_state: LoginState = field(default_factory=LoginState)
    login_ui_state: LoginUiState = LoginUiState.LOGIN_SPLASH
    login_progress: LoginProgress = field(default_factory=LoginProgress)
    login_results: "queue.Queue[Any]" = field(default_factory=queue.Queue)
    udp_circuit: Optional[Any] = None
    udp_progress: UdpConnectionProgress = field(default_factory=UdpConnectionProgress)
    udp_connect_results: "queue.Queue[Any]" = field(default_factory=queue.Queue)
    logout_requested: bool = False
    proxy_settings: ProxySettings = field(default_factory=ProxySettings)
    tos_required: bool = False
    tos_html: Optional[str] = None
    tos_id: Optional[str] = None
    tos_message: Optional[str] = None
    ui_events: "queue.Queue[UiEvent]" = field(default_factory=queue.Queue)
    agent_state: Optional[Any] = None
    session_udp_port: int = field(default_factory=pick_random_udp_port)

    def _clear_tos(self) -> None:
        self.tos_required = False
        self.tos_html = None
        self.tos_id = None
        self.tos_message = None

    def accept_tos(self) -> None:
        """Close the ToS dialog and agree to the terms on the next login."""
        self._clear_tos()
        self.login_state.agree_to_tos_next_login = True

    def decline_tos(self) -> None:
        """Close the ToS dialog without agreeing."""
        self._clear_tos()

    def request_logout(self) -> None:
        """Return to the login screen and flag a logout."""
        self.login_state.status_message = "User requested logout."
        self.login_ui_state = LoginUiState.LOGIN_SPLASH
        self.logout_requested = True