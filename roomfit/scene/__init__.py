"""Scaling, placement and scene registry for fixtures in a room."""

from .transform import Transform3D
from .scaling import compute_scale, get_policy
from .placement import PlacementResult, resolve_placement
from .scene import FixtureNode, RoomBounds, RoomScene

__all__ = [
    "Transform3D",
    "compute_scale",
    "get_policy",
    "PlacementResult",
    "resolve_placement",
    "FixtureNode",
    "RoomBounds",
    "RoomScene",
]
