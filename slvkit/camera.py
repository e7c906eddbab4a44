"""Perspective camera, keyboard-driven camera controller and the camera uniform block."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field
from typing import Sequence, Tuple

__all__ = [
    "Vec3",
    "Matrix4",
    "IDENTITY",
    "Camera",
    "CameraController",
    "CameraUniform",
    "look_at_rh",
    "perspective",
    "mat_mul",
]

Vec3 = Tuple[float, float, float]
# A 4x4 matrix stored as four columns of four components (column-major).
Matrix4 = Tuple[Tuple[float, float, float, float], ...]

IDENTITY: Matrix4 = (
    (1.0, 0.0, 0.0, 0.0),
    (0.0, 1.0, 0.0, 0.0),
    (0.0, 0.0, 1.0, 0.0),
    (0.0, 0.0, 0.0, 1.0),
)


def _sub(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def _add(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def _scale(a: Sequence[float], k: float) -> Vec3:
    return (a[0] * k, a[1] * k, a[2] * k)


def _dot(a: Sequence[float], b: Sequence[float]) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _cross(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _magnitude(a: Sequence[float]) -> float:
    return math.sqrt(_dot(a, a))


def _normalize(a: Sequence[float]) -> Vec3:
    mag = _magnitude(a)
    if mag == 0.0:
        return (math.nan, math.nan, math.nan)
    return _scale(a, 1.0 / mag)


def look_at_rh(eye: Sequence[float], target: Sequence[float], up: Sequence[float]) -> Matrix4:
    """Right-handed view matrix looking from ``eye`` towards ``target``."""
    f = _normalize(_sub(target, eye))
    s = _normalize(_cross(f, up))
    u = _cross(s, f)
    return (
        (s[0], u[0], -f[0], 0.0),
        (s[1], u[1], -f[1], 0.0),
        (s[2], u[2], -f[2], 0.0),
        (-_dot(eye, s), -_dot(eye, u), _dot(eye, f), 1.0),
    )


def perspective(fovy_degrees: float, aspect: float, znear: float, zfar: float) -> Matrix4:
    """Right-handed perspective projection with depth mapped to [-1, 1].

    Raises ValueError for a field of view outside (0, 180) degrees, a zero
    aspect ratio, non-positive clip planes or equal near and far planes.
    """
    if not 0.0 < fovy_degrees < 180.0:
        raise ValueError("field of view must lie strictly between 0 and 180 degrees")
    if aspect == 0.0:
        raise ValueError("aspect ratio must not be zero")
    if znear <= 0.0 or zfar <= 0.0:
        raise ValueError("clip planes must be positive")
    if znear == zfar:
        raise ValueError("near and far clip planes must differ")
    f = 1.0 / math.tan(math.radians(fovy_degrees) / 2.0)
    return (
        (f / aspect, 0.0, 0.0, 0.0),
        (0.0, f, 0.0, 0.0),
        (0.0, 0.0, (zfar + znear) / (znear - zfar), -1.0),
        (0.0, 0.0, (2.0 * zfar * znear) / (znear - zfar), 0.0),
    )


def mat_mul(a: Matrix4, b: Matrix4) -> Matrix4:
    """Product ``a * b`` of two column-major 4x4 matrices."""
    return tuple(
        tuple(sum(a[k][row] * col[k] for k in range(4)) for row in range(4))
        for col in b
    )


@dataclass
class Camera:
    """A perspective camera looking from ``eye`` at ``target``."""

    eye: Vec3
    target: Vec3
    up: Vec3
    aspect: float
    fovy: float
    znear: float
    zfar: float

    def build_view_projection_matrix(self) -> Matrix4:
        """Projection times view."""
        view = look_at_rh(self.eye, self.target, self.up)
        proj = perspective(self.fovy, self.aspect, self.znear, self.zfar)
        return mat_mul(proj, view)


_FORWARD_KEYS = frozenset({"KeyW", "ArrowUp"})
_LEFT_KEYS = frozenset({"KeyA", "ArrowLeft"})
_BACKWARD_KEYS = frozenset({"KeyS", "ArrowDown"})
_RIGHT_KEYS = frozenset({"KeyD", "ArrowRight"})


@dataclass
class CameraController:
    """Moves a camera from WASD / arrow key state."""

    speed: float
    is_forward_pressed: bool = False
    is_backward_pressed: bool = False
    is_left_pressed: bool = False
    is_right_pressed: bool = False

    def process_key(self, key: str, pressed: bool) -> bool:
        """Record a key change; return True when the key is one this controller uses."""
        if key in _FORWARD_KEYS:
            self.is_forward_pressed = pressed
        elif key in _LEFT_KEYS:
            self.is_left_pressed = pressed
        elif key in _BACKWARD_KEYS:
            self.is_backward_pressed = pressed
        elif key in _RIGHT_KEYS:
            self.is_right_pressed = pressed
        else:
            return False
        return True

    def update_camera(self, camera: Camera) -> None:
        """Move the camera's eye according to the keys held."""
        forward = _sub(camera.target, camera.eye)
        forward_norm = _normalize(forward)
        forward_mag = _magnitude(forward)

        # Stop short of the target so the camera never passes through it.
        if self.is_forward_pressed and forward_mag > self.speed:
            camera.eye = _add(camera.eye, _scale(forward_norm, self.speed))
        if self.is_backward_pressed:
            camera.eye = _sub(camera.eye, _scale(forward_norm, self.speed))

        right = _cross(forward_norm, camera.up)
        if self.is_right_pressed:
            camera.eye = _add(camera.eye, _scale(right, self.speed))
        if self.is_left_pressed:
            camera.eye = _sub(camera.eye, _scale(right, self.speed))


@dataclass
class CameraUniform:
    """Camera data as laid out for the GPU: two column-major 4x4 float matrices."""

    view_proj: Matrix4 = IDENTITY
    model: Matrix4 = field(default=IDENTITY)

    def to_bytes(self) -> bytes:
        """Pack both matrices as 32 little-endian 32-bit floats (128 bytes)."""
        values = [v for matrix in (self.view_proj, self.model) for col in matrix for v in col]
        return struct.pack("<32f", *values)