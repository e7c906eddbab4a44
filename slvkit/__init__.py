"""Building blocks for a virtual-world viewer: LLUDP packets, camera, world, scene, login and ToS state."""

__version__ = "0.3.0"