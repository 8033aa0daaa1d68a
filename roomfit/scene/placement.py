"""Placement resolution.

Turns a loaded model and its AssetRequest into a final transform: scale,
floor contact, centering, yaw and anchoring against a room surface. Bounds
are recomputed after every transform step because scaling and rotation
change which native extents face which room axes.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, Field

from ..core.request import AXIS_INDEX
from ..mesh.bounds import BoundingVolume, compute_bounds
from .scaling import compute_scale
from .transform import Transform3D

if TYPE_CHECKING:
    import trimesh

    from ..core.request import AssetRequest
    from .scene import RoomBounds

logger = logging.getLogger(__name__)

# Upper bound on one-ulp steps when landing the lowest point on the floor
MAX_FLOOR_NUDGES = 64


class PlacementResult(BaseModel):
    """Final transform of a fixture and its authoritative size."""

    scale: tuple[float, float, float] = Field(description="Per-axis scale in native axes")
    position: tuple[float, float, float] = Field(description="Room-space translation")
    yaw: float = Field(description="Rotation about +Y in radians")
    size: tuple[float, float, float] = Field(description="Final bounding size (x, y, z)")
    bounds: BoundingVolume = Field(description="Final bounding volume")
    native_size: tuple[float, float, float] = Field(description="Size before scaling")

    model_config = {"frozen": True}

    @property
    def transform(self) -> Transform3D:
        return Transform3D(scale=self.scale, yaw=self.yaw, position=self.position)

    def to_matrix(self) -> NDArray[np.float64]:
        """4x4 matrix mapping native model coordinates into the room."""
        return self.transform.to_matrix()


def floor_offset(lowest: float, floor: float) -> float:
    """Vertical translation that lands ``lowest`` exactly on ``floor``.

    ``floor - lowest`` can round so that adding it back misses the floor by
    an ulp; the offset is stepped one representable value at a time until
    ``lowest + offset == floor`` or the step budget runs out.
    """
    offset = floor - lowest
    for _ in range(MAX_FLOOR_NUDGES):
        landed = lowest + offset
        if landed == floor:
            break
        offset = math.nextafter(offset, math.inf if landed < floor else -math.inf)
    return offset


def resolve_placement(
    model: trimesh.Scene | trimesh.Trimesh,
    request: AssetRequest,
    room: RoomBounds,
) -> PlacementResult:
    """Fit a model to its request and anchor it in the room.

    Steps, each on freshly computed bounds:
    1. scale per the request's scaling mode
    2. re-bound
    3. drop onto the floor and center X/Z on the scaled midpoint
    4. apply yaw
    5. re-bound
    6. re-center X/Z and push the anchor axis against its surface
    7. re-bound for the reported size

    Args:
        model: Loaded model in its native frame
        request: Fixture request
        room: Room surface coordinates

    Returns:
        PlacementResult for the model
    """
    native = compute_bounds(model)
    scale = compute_scale(native, request)

    scaled = compute_bounds(model, Transform3D(scale=scale))
    cx, _, cz = scaled.center
    grounded = (-cx, floor_offset(scaled.min[1], room.floor), -cz)
    logger.debug(f"Scaled size {scaled.size}, grounding offset {grounded}")

    # Rotation is applied after the grounding translation
    rotated_transform = Transform3D(scale=scale, yaw=request.yaw)
    rotated_transform.position = rotated_transform.rotate_vector(grounded)
    rotated = compute_bounds(model, rotated_transform)

    mx, _, mz = rotated.center
    position = [
        rotated_transform.position[0] - mx,
        rotated_transform.position[1],
        rotated_transform.position[2] - mz,
    ]
    axis = AXIS_INDEX[request.anchor.axis]
    position[axis] += room.anchor_coordinate(request.anchor, rotated.extent(axis))

    final_transform = Transform3D(
        scale=scale,
        yaw=request.yaw,
        position=(position[0], position[1], position[2]),
    )
    final = compute_bounds(model, final_transform)

    if final.min[1] != room.floor:
        # Floor lies between two representable sums; report the grounded value
        logger.debug(f"Lowest point {final.min[1]} rounds away from floor {room.floor}")
        final = BoundingVolume(
            min=(final.min[0], room.floor, final.min[2]),
            max=final.max,
        )

    logger.debug(
        f"{request.anchor.surface.value} anchor on {request.anchor.axis}: "
        f"position {final_transform.position}, size {final.size}"
    )

    return PlacementResult(
        scale=scale,
        position=final_transform.position,
        yaw=request.yaw,
        size=final.size,
        bounds=final,
        native_size=native.size,
    )
