# slvkit

Building blocks for a virtual-world viewer client, in plain Python with no
third-party dependencies.

## What is inside

- `slvkit.lludp`: LLUDP packet construction and parsing. It provides
  `LluPacket` (`build_outgoing`, `parse_incoming`), `LluPacketFlags`,
  `LLUDPFrequency` and the `zerocode` / `zerodecode` zero-run compression pair.
  It also has builders for single messages: `build_use_circuit_code_packet`,
  `build_complete_agent_movement_packet`, `build_region_handshake_reply_packet`,
  `build_agent_throttle_packet` and `build_agent_update_packet`. The generic
  `build_lludp_packet` builds any other message.
- `slvkit.camera`: a right-handed `Camera` with `build_view_projection_matrix`,
  the matrix helpers `look_at_rh`, `perspective` and `mat_mul`, a
  `CameraController` driven by key names (`process_key`, `update_camera`), and
  `CameraUniform`, whose `to_bytes` packs two 4x4 float matrices into 128 bytes.
- `slvkit.world`: `Avatar` with its `AvatarPose` frame counter, plus
  `PhysicsObject` and a `PhysicsWorld`. `PhysicsWorld.update` moves each object
  by its velocity.
- `slvkit.scene`: `SceneObject` and a `SceneGraph` keyed by object id, with
  `add_object`, `remove_object` and `update_object`.
- `slvkit.ui_state`: login, preferences, proxy and chat state. This covers
  `UiState`, `LoginState`, `PreferencesState`, `ProxySettings`, `LoginProgress`,
  `UdpConnectionProgress` and `LoginUiState`. `ChatLog` keeps the latest 50
  lines. The UI events are `ShowTos`, `AgentStateUpdate` and `InWorldReady`.
  The module also has `pick_random_udp_port` and `send_udp_test`.
- `slvkit.events`: LLSD event parsing with `AgentState`,
  `parse_agent_state_update`, `parse_sim_address_from_event` and
  `parse_look_at`.
- `slvkit.login`: `LoginRequest`, `split_username`, `build_login_request` and
  `parse_tos_required`. `apply_login_error` and `apply_ui_event` update a
  `UiState`.
- `slvkit.tos`: `render_tos_html`, which turns Terms of Service HTML into a list
  of `TosBlock` items (headings, paragraphs, links) ready for display.

## Example

```python
import uuid
from slvkit.lludp import LluPacket, LluPacketFlags, zerocode, zerodecode
from slvkit.lludp import build_use_circuit_code_packet
from slvkit.camera import Camera, CameraUniform

raw = LluPacket.build_outgoing(3, LluPacketFlags.RELIABLE, 7, b"\x01\x02")
packet = LluPacket.parse_incoming(raw)
assert packet.sequence == 7

data = bytes([1, 0, 0, 0, 2])
assert zerodecode(zerocode(data)) == data

circuit = build_use_circuit_code_packet(1234, uuid.uuid4(), uuid.uuid4(), packet_id=1)

camera = Camera(eye=(0.0, 0.0, 3.0), target=(0.0, 0.0, 0.0), up=(0.0, 1.0, 0.0),
                aspect=1.0, fovy=45.0, znear=0.1, zfar=100.0)
uniform = CameraUniform(view_proj=camera.build_view_projection_matrix())
assert len(uniform.to_bytes()) == 128
```

## What it does not do

slvkit holds data and does calculations. It does not draw anything. It has no
window, renderer, GPU pipeline or lighting. It does not run a network session.
It builds login requests and packets and parses event-queue documents, but it
does not send login requests over HTTP, poll an event queue or keep up a
simulator circuit. Preferences and proxy settings live in memory only and are
not saved to disk. The package has no command-line program.

## Tests

The test suite uses pytest, which the `test` extra installs.