"""Scene objects and the scene graph that holds them by id."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

__all__ = ["SceneObject", "SceneGraph"]

Vec3 = Tuple[float, float, float]
# Quaternion as (w, x, y, z).
Quaternion = Tuple[float, float, float, float]


@dataclass
class SceneObject:
    """An object placed in the scene with its transform and asset ids."""

    id: int
    mesh_id: str
    material_id: str
    position: Vec3 = (0.0, 0.0, 0.0)
    rotation: Quaternion = (1.0, 0.0, 0.0, 0.0)
    scale: Vec3 = (1.0, 1.0, 1.0)


@dataclass
class SceneGraph:
    """Scene objects keyed by their id."""

    nodes: Dict[int, SceneObject] = field(default_factory=dict)

    def add_object(self, obj: SceneObject) -> None:
        """Insert an object, replacing any with the same id."""
        self.nodes[obj.id] = obj

    def remove_object(self, object_id: int) -> Optional[SceneObject]:
        """Remove and return the object with this id, or None if absent."""
        return self.nodes.pop(object_id, None)

    def update_object(self, object_id: int, new_object: SceneObject) -> Optional[SceneObject]:
        """Store ``new_object`` under ``object_id`` and return what was there before."""
        previous = self.nodes.get(object_id)
        self.nodes[object_id] = new_object
        return previous