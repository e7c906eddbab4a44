"""Avatars and a simple physics world."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

__all__ = ["AvatarPose", "Avatar", "PhysicsObject", "PhysicsWorld"]

Vec3 = Tuple[float, float, float]

_U32_MASK = 0xFFFFFFFF


@dataclass
class AvatarPose:
    """Animation state of an avatar; currently a frame counter."""

    frame: int = 0


@dataclass
class Avatar:
    """An avatar with optional mesh and texture assignments."""

    id: int
    name: str
    mesh_id: Optional[str] = None
    texture_id: Optional[str] = None
    pose: AvatarPose = field(default_factory=AvatarPose)

    def assign_mesh(self, mesh_id: str) -> None:
        self.mesh_id = str(mesh_id)

    def assign_texture(self, texture_id: str) -> None:
        self.texture_id = str(texture_id)

    def update_animation(self) -> None:
        """Advance the pose by one frame, wrapping at 2**32."""
        self.pose.frame = (self.pose.frame + 1) & _U32_MASK

    def load_appearance(self, mesh_id: str, texture_id: str) -> None:
        """Assign both mesh and texture."""
        self.assign_mesh(mesh_id)
        self.assign_texture(texture_id)


@dataclass
class PhysicsObject:
    """A point mass with position and velocity."""

    id: int
    position: Vec3
    velocity: Vec3
    mass: float


@dataclass
class PhysicsWorld:
    """A collection of physics objects stepped together."""

    objects: List[PhysicsObject] = field(default_factory=list)

    def register_object(self, obj: PhysicsObject) -> None:
        self.objects.append(obj)

    def update(self) -> None:
        """Advance every object's position by its velocity."""
        for obj in self.objects:
            obj.position = tuple(p + v for p, v in zip(obj.position, obj.velocity))