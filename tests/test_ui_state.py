import socket
from unittest import mock

import pytest

from slvkit.ui_state import (
    AgentStateUpdate,
    ChatLog,
    InWorldReady,
    LoginProgress,
    LoginState,
    LoginUiState,
    PreferencesState,
    ProxySettings,
    ShowTos,
    UdpConnectionProgress,
    UiState,
    pick_random_udp_port,
    send_udp_test,
)


@pytest.fixture
def ui():
    return UiState(session_udp_port=12345)


def test_chat_log_starts_with_welcome():
    log = ChatLog()
    assert list(log) == ["Welcome to slv-rust!"]


def test_chat_log_incoming_format():
    log = ChatLog()
    log.append_incoming("Alice", "hello there")
    assert list(log)[-1] == "Alice: hello there"


def test_chat_log_keeps_last_fifty():
    log = ChatLog()
    for n in range(60):
        log.append(f"line {n}")
    assert len(log) == 50
    lines = list(log)
    assert lines[-1] == "line 59"
    assert lines[0] == "line 10"
    assert "Welcome to slv-rust!" not in lines


def test_chat_log_truncates_initial_lines():
    log = ChatLog([str(n) for n in range(70)])
    assert len(log) == 50
    assert list(log)[-1] == "69"


def test_preferences_defaults():
    prefs = PreferencesState()
    assert prefs.graphics_api == "vulkan"
    assert prefs.render_distance == 256
    assert prefs.max_bandwidth == 1500
    assert prefs.timeout == 30
    assert prefs.volume == 0.8
    assert prefs.udp_test_result is None


def test_proxy_settings_defaults():
    proxy = ProxySettings()
    assert (proxy.enabled, proxy.socks5_host, proxy.socks5_port) == (False, "", 0)
    assert proxy.disable_cert_validation is False


def test_login_state_defaults():
    state = LoginState()
    assert state.agree_to_tos_next_login is False
    assert state.read_critical_next_login is False
    assert state.session_info is None


@pytest.mark.parametrize(
    "progress, text",
    [
        (LoginProgress(), "Status: Ready"),
        (LoginProgress("in_progress"), "Status: Logging in..."),
        (LoginProgress("success"), "Status: Login successful!"),
        (LoginProgress("error", "bad"), "Status: Error: bad"),
    ],
)
def test_login_progress_text(progress, text):
    assert str(progress) == text


@pytest.mark.parametrize(
    "progress, text",
    [
        (UdpConnectionProgress(), "UDP: Not started"),
        (UdpConnectionProgress("connecting"), "UDP: Connecting..."),
        (UdpConnectionProgress("connected"), "UDP: Connected!"),
        (UdpConnectionProgress("error", "Invalid sim IP/port"), "UDP: Error: Invalid sim IP/port"),
    ],
)
def test_udp_progress_text(progress, text):
    assert str(progress) == text


@pytest.mark.parametrize("args", [("bogus",), ("error",), ("idle", "msg")])
def test_login_progress_rejects_bad_states(args):
    with pytest.raises(ValueError):
        LoginProgress(*args)


def test_udp_progress_rejects_unknown_state():
    with pytest.raises(ValueError):
        UdpConnectionProgress("flying")


def test_ui_state_defaults(ui):
    assert ui.login_ui_state is LoginUiState.LOGIN_SPLASH
    assert ui.login_progress == LoginProgress("idle")
    assert ui.udp_progress == UdpConnectionProgress("not_started")
    assert ui.inventory_items == ["Test Item 1", "Test Item 2"]
    assert list(ui.chat_messages) == ["Welcome to slv-rust!"]
    assert ui.session_udp_port == 12345


def test_accept_tos_clears_and_agrees(ui):
    ui.tos_required = True
    ui.tos_html = "<p>terms</p>"
    ui.tos_id = "abc"
    ui.tos_message = "Read this"
    ui.accept_tos()
    assert (ui.tos_required, ui.tos_html, ui.tos_id, ui.tos_message) == (False, None, None, None)
    assert ui.login_state.agree_to_tos_next_login is True


def test_decline_tos_clears_without_agreeing(ui):
    ui.tos_required = True
    ui.tos_html = "<p>terms</p>"
    ui.decline_tos()
    assert ui.tos_required is False
    assert ui.tos_html is None
    assert ui.login_state.agree_to_tos_next_login is False


def test_request_logout(ui):
    ui.login_ui_state = LoginUiState.IN_WORLD
    ui.request_logout()
    assert ui.login_ui_state is LoginUiState.LOGIN_SPLASH
    assert ui.logout_requested is True
    assert ui.login_state.status_message == "User requested logout."


def test_ui_events_queue_round_trip(ui):
    events = [ShowTos("id", "<p/>", "msg"), AgentStateUpdate("<llsd/>"), InWorldReady()]
    for event in events:
        ui.ui_events.put(event)
    received = [ui.ui_events.get_nowait() for _ in events]
    assert received == events


def test_pick_random_udp_port_in_range():
    port = pick_random_udp_port()
    assert port == 0 or 10000 <= port < 60000


def test_pick_random_udp_port_falls_back_to_zero():
    with mock.patch("slvkit.ui_state.socket.socket") as fake:
        fake.return_value.__enter__.return_value.bind.side_effect = OSError("in use")
        assert pick_random_udp_port() == 0
        assert fake.return_value.__enter__.return_value.bind.call_count == 20


def test_send_udp_test_delivers_datagram():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as receiver:
        receiver.bind(("127.0.0.1", 0))
        receiver.settimeout(2.0)
        port = receiver.getsockname()[1]
        address = f"127.0.0.1:{port}"
        result = send_udp_test(address, b"slv-rust test")
        data, _ = receiver.recvfrom(1024)
    assert data == b"slv-rust test"
    assert result == f"UDP sent {len(b'slv-rust test')} bytes to {address}"


@pytest.mark.parametrize("address", ["localhost", ":80", "127.0.0.1:notaport", "127.0.0.1:70000"])
def test_send_udp_test_rejects_bad_address(address):
    with pytest.raises(ValueError):
        send_udp_test(address, b"x")