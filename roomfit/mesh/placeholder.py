"""Placeholder geometry for fixtures whose assets could not be loaded."""

from __future__ import annotations

import trimesh

from ..core.request import AssetRequest

PLACEHOLDER_COLOR = (230, 230, 230, 255)


def placeholder_extents(request: AssetRequest) -> tuple[float, float, float]:
    """Native extents that make every scaling mode a no-op.

    The footprint is laid out in the asset's own axis convention, so the
    request's remap and yaw treat the placeholder exactly like the real asset.
    """
    remap = request.effective_remap
    extents = [0.0, 0.0, 0.0]
    for dimension in ("width", "height", "depth"):
        extents[remap.native_axis(dimension)] = request.footprint.dimension(dimension)
    return (extents[0], extents[1], extents[2])


def synthesize_placeholder(request: AssetRequest, name: str = "placeholder") -> trimesh.Scene:
    """Build a box standing in for a fixture's missing asset.

    Args:
        request: Request whose footprint the box reproduces
        name: Geometry name in the returned scene

    Returns:
        Scene holding a single box mesh
    """
    box = trimesh.creation.box(extents=placeholder_extents(request))
    box.visual.face_colors = PLACEHOLDER_COLOR
    return trimesh.Scene({name: box})
