"""Axis-aligned bounding volumes of loaded models.

A bounding volume is only valid for the transform it was computed under;
callers recompute after every scale or rotation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import trimesh
from pydantic import BaseModel

from ..core.request import AXIS_INDEX

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from ..scene.transform import Transform3D

logger = logging.getLogger(__name__)


class BoundingVolume(BaseModel):
    """Min/max corner of an axis-aligned box."""

    min: tuple[float, float, float]
    max: tuple[float, float, float]

    model_config = {"frozen": True}

    @classmethod
    def from_points(cls, points: NDArray[np.float64]) -> BoundingVolume:
        lo = points.min(axis=0)
        hi = points.max(axis=0)
        return cls(
            min=(float(lo[0]), float(lo[1]), float(lo[2])),
            max=(float(hi[0]), float(hi[1]), float(hi[2])),
        )

    @property
    def size(self) -> tuple[float, float, float]:
        """Return extents along (x, y, z)."""
        return (
            self.max[0] - self.min[0],
            self.max[1] - self.min[1],
            self.max[2] - self.min[2],
        )

    @property
    def center(self) -> tuple[float, float, float]:
        """Return the box midpoint."""
        return (
            (self.min[0] + self.max[0]) / 2,
            (self.min[1] + self.max[1]) / 2,
            (self.min[2] + self.max[2]) / 2,
        )

    def extent(self, axis: str | int) -> float:
        """Return the extent along one axis ('x'/'y'/'z' or index)."""
        index = AXIS_INDEX[axis] if isinstance(axis, str) else axis
        return self.size[index]


def model_points(model: trimesh.Scene | trimesh.Trimesh) -> NDArray[np.float64]:
    """Collect every vertex of a model in its native (root) frame.

    Walks all geometry nodes of the scene graph and applies each node's
    world transform, so nested GLB hierarchies are measured correctly.
    """
    if isinstance(model, trimesh.Trimesh):
        return np.asarray(model.vertices, dtype=np.float64)

    chunks = []
    graph = model.graph
    for node_name in graph.nodes_geometry:
        node_transform, geometry_name = graph.get(node_name)
        geometry = model.geometry.get(geometry_name)
        if geometry is None:
            continue

        vertices = getattr(geometry, "vertices", None)
        if vertices is None or len(vertices) == 0:
            continue

        chunks.append(trimesh.transform_points(np.asarray(vertices, dtype=np.float64), node_transform))

    if not chunks:
        raise ValueError("Model contains no geometry to measure")

    return np.vstack(chunks)


def compute_bounds(
    model: trimesh.Scene | trimesh.Trimesh,
    transform: Transform3D | None = None,
) -> BoundingVolume:
    """Compute the tight AABB of a model under an optional placement transform.

    Args:
        model: Loaded model (scene graph or single mesh)
        transform: Placement transform applied on top of the native frame

    Returns:
        BoundingVolume in the transformed coordinate space
    """
    points = model_points(model)
    if transform is not None:
        points = transform.apply_to_points(points)

    volume = BoundingVolume.from_points(points)
    logger.debug(f"Bounds {volume.min} -> {volume.max} (size {volume.size})")
    return volume
