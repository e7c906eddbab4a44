"""Login request construction and handling of login results and UI events."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from slvkit.events import parse_agent_state_update
from slvkit.ui_state import (
    AgentStateUpdate,
    InWorldReady,
    LoginProgress,
    LoginState,
    LoginUiState,
    ShowTos,
    UiEvent,
    UiState,
)

__all__ = [
    "LoginRequest",
    "DEFAULT_TOS_ID",
    "split_username",
    "build_login_request",
    "parse_tos_required",
    "apply_login_error",
    "apply_ui_event",
]

DEFAULT_LAST_NAME = "Resident"
DEFAULT_TOS_ID = "5f4c3d82d7f18c19a1a2d23331c9ac36"
NIL_UUID = "00000000-0000-0000-0000-000000000000"

_TOS_PREFIX = "TOS_REQUIRED:"
_TOS_UI_PREFIX = "TOS_REQUIRED::"
_CRITICAL_UI_PREFIX = "CRITICAL_REQUIRED::"

_TOS_STATUS = "You must accept the Terms of Service to continue."
_CRITICAL_STATUS = "You must read and accept a critical message to continue."


@dataclass
class LoginRequest:
    """Parameters sent to the login service."""

    first: str
    last: str
    password: str = field(repr=False)
    start: str = "last"
    channel: str = "slv-rust"
    version: str = "0.3.0-alpha"
    platform: str = "linux"
    platform_string: str = "macOS 12.7.4"
    platform_version: str = "12.7.4"
    mac: str = "00:00:00:00:00:00"
    id0: str = NIL_UUID
    agree_to_tos: int = 0
    address_size: int = 64
    extended_errors: int = 1
    host_id: str = ""
    last_exec_duration: int = 30
    last_exec_event: int = 0
    last_exec_session_id: str = NIL_UUID
    mfa_hash: str = ""
    token: str = ""
    read_critical: int = 0
    options: Tuple[str, ...] = ()


def split_username(username: str) -> Tuple[str, str]:
    """Split "first.last", "First Last" or "First" into (first, last).

    A dotted name splits at the first dot; otherwise the first two
    whitespace-separated words are used, the last name defaulting to
    "Resident".
    """
    if "." in username:
        first, _, last = username.partition(".")
        return first, last
    words = username.split()
    first = words[0] if words else ""
    last = words[1] if len(words) > 1 else DEFAULT_LAST_NAME
    return first, last


def build_login_request(login_state: LoginState) -> LoginRequest:
    """Build the login request from the login form and its carried-over flags."""
    first, last = split_username(login_state.username)
    return LoginRequest(
        first=first,
        last=last,
        password=login_state.password,
        agree_to_tos=1 if login_state.agree_to_tos_next_login else 0,
        read_critical=1 if login_state.read_critical_next_login else 0,
    )


def parse_tos_required(error: str) -> Optional[Tuple[str, str]]:
    """Split a "TOS_REQUIRED:<id>:<message>" error into (tos_id, message).

    An empty id is replaced by the default ToS id. Returns None for any
    other error.
    """
    if not error.startswith(_TOS_PREFIX):
        return None
    tos_id, _, message = error[len(_TOS_PREFIX):].partition(":")
    return tos_id or DEFAULT_TOS_ID, message


def _strip_repeated_prefix(text: str, prefix: str) -> str:
    while text.startswith(prefix):
        text = text[len(prefix):]
    return text


def apply_login_error(ui: UiState, message: str) -> None:
    """Update the UI state for a failed login.

    ToS and critical-message errors open the ToS dialog and set the flag
    for the next login; anything else becomes an error status.
    """
    if message.startswith(_TOS_UI_PREFIX):
        text = _strip_repeated_prefix(message, _TOS_UI_PREFIX)
        ui.login_state.agree_to_tos_next_login = True
        status = _TOS_STATUS
    elif message.startswith(_CRITICAL_UI_PREFIX):
        text = _strip_repeated_prefix(message, _CRITICAL_UI_PREFIX)
        ui.login_state.read_critical_next_login = True
        status = _CRITICAL_STATUS
    else:
        ui.login_progress = LoginProgress("error", message)
        return
    ui.tos_required = True
    ui.tos_html = text
    ui.tos_message = text
    ui.login_progress = LoginProgress()
    ui.login_state.status_message = status


def apply_ui_event(ui: UiState, event: UiEvent) -> None:
    """Apply an event from a background task to the UI state.

    An agent state update that cannot be parsed is ignored. Raises
    TypeError for an object that is not a UI event.
    """
    if isinstance(event, ShowTos):
        ui.tos_required = True
        ui.tos_id = event.tos_id
        ui.tos_html = event.tos_html
        ui.tos_message = event.message
    elif isinstance(event, AgentStateUpdate):
        try:
            ui.agent_state = parse_agent_state_update(event.llsd_xml)
        except ValueError:
            pass
    elif isinstance(event, InWorldReady):
        ui.login_ui_state = LoginUiState.IN_WORLD
    else:
        raise TypeError(f"not a UI event: {event!r}")