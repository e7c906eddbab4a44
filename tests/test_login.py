import pytest

from slvkit.login import (
    DEFAULT_TOS_ID,
    LoginRequest,
    apply_login_error,
    apply_ui_event,
    build_login_request,
    parse_tos_required,
    split_username,
)
from slvkit.ui_state import (
    AgentStateUpdate,
    InWorldReady,
    LoginProgress,
    LoginState,
    LoginUiState,
    ShowTos,
    UiState,
)


def _ui():
    return UiState(session_udp_port=0)


@pytest.mark.parametrize(
    "username, expected",
    [
        ("first.last", ("first", "last")),
        ("First Last", ("First", "Last")),
        ("First", ("First", "Resident")),
        ("", ("", "Resident")),
        ("a.b.c", ("a", "b.c")),
        ("  Spaced   Name  Extra", ("Spaced", "Name")),
    ],
)
def test_split_username(username, expected):
    assert split_username(username) == expected


def test_build_login_request_defaults():
    password = "password"
    req = build_login_request(LoginState(username="Jane Doe", password=password))
    assert (req.first, req.last) == ("Jane", "Doe")
    assert req.password == password
    assert req.agree_to_tos == 0
    assert req.read_critical == 0
    assert req.channel == "slv-rust"
    assert req.version == "0.3.0-alpha"
    assert req.start == "last"
    assert req.id0 == "00000000-0000-0000-0000-000000000000"


def test_build_login_request_flags():
    password = "password"
    state = LoginState(
        username="jane",
        password=password,
        agree_to_tos_next_login=True,
        read_critical_next_login=True,
    )
    req = build_login_request(state)
    assert req.agree_to_tos == 1
    assert req.read_critical == 1
    assert req.last == "Resident"


def test_login_request_repr_hides_password():
    password = "password"
    req = LoginRequest(first="a", last="b", password=password)
    assert password not in repr(req)


def test_parse_tos_required_with_id():
    assert parse_tos_required("TOS_REQUIRED:abc:hello:there") == ("abc", "hello:there")


def test_parse_tos_required_empty_id_uses_default():
    assert parse_tos_required("TOS_REQUIRED::msg") == ("5f4c3d82d7f18c19a1a2d23331c9ac36", "msg")
    assert parse_tos_required("TOS_REQUIRED:") == (DEFAULT_TOS_ID, "")


def test_parse_tos_required_other_error():
    assert parse_tos_required("bad password") is None


def test_apply_login_error_tos():
    ui = _ui()
    ui.login_progress = LoginProgress("in_progress")
    apply_login_error(ui, "TOS_REQUIRED::Please agree")
    assert ui.tos_required is True
    assert ui.tos_html == "Please agree"
    assert ui.tos_message == "Please agree"
    assert ui.login_progress == LoginProgress()
    assert ui.login_state.agree_to_tos_next_login is True
    assert ui.login_state.status_message == "You must accept the Terms of Service to continue."


def test_apply_login_error_critical():
    ui = _ui()
    apply_login_error(ui, "CRITICAL_REQUIRED::Read this")
    assert ui.tos_required is True
    assert ui.tos_message == "Read this"
    assert ui.login_state.read_critical_next_login is True
    assert ui.login_state.agree_to_tos_next_login is False
    assert ui.login_state.status_message == (
        "You must read and accept a critical message to continue."
    )


def test_apply_login_error_plain():
    ui = _ui()
    apply_login_error(ui, "bad credentials")
    assert ui.login_progress == LoginProgress("error", "bad credentials")
    assert ui.tos_required is False


def test_apply_ui_event_show_tos():
    ui = _ui()
    apply_ui_event(ui, ShowTos(tos_id="id1", tos_html="<p>x</p>", message="m"))
    assert ui.tos_required is True
    assert (ui.tos_id, ui.tos_html, ui.tos_message) == ("id1", "<p>x</p>", "m")


def test_apply_ui_event_agent_state():
    ui = _ui()
    xml = (
        "<llsd><map><key>can_modify_navmesh</key><boolean>true</boolean>"
        "<key>preferences</key><map><key>god_level</key><integer>3</integer></map>"
        "</map></llsd>"
    )
    apply_ui_event(ui, AgentStateUpdate(xml))
    assert ui.agent_state.can_modify_navmesh is True
    assert ui.agent_state.god_level == 3


def test_apply_ui_event_bad_agent_state_is_ignored():
    ui = _ui()
    apply_ui_event(ui, AgentStateUpdate("<not xml"))
    assert ui.agent_state is None


def test_apply_ui_event_in_world():
    ui = _ui()
    apply_ui_event(ui, InWorldReady())
    assert ui.login_ui_state is LoginUiState.IN_WORLD


def test_apply_ui_event_rejects_other():
    with pytest.raises(TypeError):
        apply_ui_event(_ui(), "event")