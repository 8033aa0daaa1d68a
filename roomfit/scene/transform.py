"""3D transformation utilities for fixture placement.

Provides Transform3D for representing a per-axis scale, a yaw about the
vertical (Y) axis and a position, with conversion to 4x4 homogeneous
transformation matrices.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, Field, field_validator
from scipy.spatial.transform import Rotation


class Transform3D(BaseModel):
    """3D transformation: per-axis scale + yaw + position.

    Attributes:
        scale: XYZ scale factors (strictly positive)
        yaw: Rotation about the vertical Y axis in radians
        position: XYZ position in room units
    """

    scale: tuple[float, float, float] = Field(
        default=(1.0, 1.0, 1.0),
        description="Per-axis scale factors"
    )
    yaw: float = Field(
        default=0.0,
        description="Rotation about +Y in radians"
    )
    position: tuple[float, float, float] = Field(
        default=(0.0, 0.0, 0.0),
        description="XYZ position in room units"
    )

    model_config = {"frozen": False}

    @field_validator("scale")
    @classmethod
    def _check_scale(cls, value: tuple[float, float, float]) -> tuple[float, float, float]:
        for component in value:
            if not math.isfinite(component) or component <= 0:
                raise ValueError(
                    f"Scale components must be positive and finite, got {value}"
                )
        return value

    @field_validator("yaw")
    @classmethod
    def _check_yaw(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError(f"Yaw must be finite, got {value}")
        return value

    @field_validator("position")
    @classmethod
    def _check_position(cls, value: tuple[float, float, float]) -> tuple[float, float, float]:
        if not all(math.isfinite(c) for c in value):
            raise ValueError(f"Position must be finite, got {value}")
        return value

    def rotation_matrix(self) -> NDArray[np.float64]:
        """Return the 3x3 yaw rotation matrix."""
        return Rotation.from_euler("y", self.yaw).as_matrix()

    def to_matrix(self) -> NDArray[np.float64]:
        """Convert to 4x4 homogeneous transformation matrix.

        The transformation order is: Scale -> Rotate -> Translate
        This means the matrix is built as: T @ R @ S

        Returns:
            4x4 transformation matrix
        """
        # Scale matrix
        s = np.eye(4, dtype=np.float64)
        s[0, 0], s[1, 1], s[2, 2] = self.scale

        # Rotation matrix (yaw about Y)
        r = np.eye(4, dtype=np.float64)
        r[:3, :3] = self.rotation_matrix()

        # Translation matrix
        t = np.eye(4, dtype=np.float64)
        t[:3, 3] = self.position

        # Combined: T @ R @ S (applied right to left to vertices)
        return t @ r @ s

    def apply_to_points(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Apply transformation to an Nx3 array of points.

        Equivalent to ``to_matrix()`` but evaluated component-wise. A yaw
        never mixes the vertical axis with the horizontal ones, so Y is only
        scaled and translated and stays bit-exact.

        Args:
            points: Nx3 array of XYZ coordinates

        Returns:
            Transformed Nx3 array of points
        """
        points = np.asarray(points, dtype=np.float64)
        scaled = points * np.asarray(self.scale, dtype=np.float64)
        rot = self.rotation_matrix()

        result = np.empty_like(scaled)
        result[:, 0] = rot[0, 0] * scaled[:, 0] + rot[0, 2] * scaled[:, 2]
        result[:, 1] = scaled[:, 1]
        result[:, 2] = rot[2, 0] * scaled[:, 0] + rot[2, 2] * scaled[:, 2]
        result += np.asarray(self.position, dtype=np.float64)
        return result

    def rotate_vector(self, vector: tuple[float, float, float]) -> tuple[float, float, float]:
        """Rotate a single vector by the yaw, leaving Y untouched."""
        rot = self.rotation_matrix()
        x, y, z = vector
        return (
            float(rot[0, 0] * x + rot[0, 2] * z),
            float(y),
            float(rot[2, 0] * x + rot[2, 2] * z),
        )

    @classmethod
    def identity(cls) -> Transform3D:
        """Return identity transform (no transformation)."""
        return cls()

    def __repr__(self) -> str:
        return (
            f"Transform3D(scale={self.scale}, "
            f"yaw={self.yaw:.4f}, pos={self.position})"
        )
