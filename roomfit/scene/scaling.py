"""Scaling policies.

Each policy converts a model's native bounding size into a per-axis scale
vector that fits a requested footprint. Policies are registered per
ScalingMode; every mode has exactly one policy.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..core.request import AXIS_INDEX, AxisRemap, ScalingMode

if TYPE_CHECKING:
    from ..core.request import AssetRequest
    from ..mesh.bounds import BoundingVolume

logger = logging.getLogger(__name__)

# Native axis used as uniform reference when no remap is declared
DEFAULT_REFERENCE_AXIS = AXIS_INDEX["y"]

AXIS_NAMES = "xyz"


def safe_extent(extent: float, axis: int) -> float:
    """Guard a scaling denominator against degenerate extents.

    A zero, negative or non-finite extent is treated as a unit extent.
    """
    if not math.isfinite(extent) or extent <= 0:
        logger.warning(
            f"Degenerate native extent {extent} on {AXIS_NAMES[axis]}, using 1.0"
        )
        return 1.0
    return extent


class BasePolicy(ABC):
    """Abstract base class for scaling policies."""

    @abstractmethod
    def scale(
        self,
        native: BoundingVolume,
        request: AssetRequest,
    ) -> tuple[float, float, float]:
        """Compute the scale vector.

        Args:
            native: Bounding volume of the unscaled model
            request: Fixture request with footprint and axis convention

        Returns:
            (sx, sy, sz) scale factors in native axes
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Policy name for display/logging."""
        pass


class ExactPerAxisPolicy(BasePolicy):
    """Scale every native axis independently onto its footprint dimension.

    Reproduces the footprint exactly but may distort proportions.
    """

    @property
    def name(self) -> str:
        return ScalingMode.EXACT.value

    def scale(
        self,
        native: BoundingVolume,
        request: AssetRequest,
    ) -> tuple[float, float, float]:
        remap = request.remap or AxisRemap.identity()
        size = native.size
        factors = [1.0, 1.0, 1.0]
        for dimension in ("width", "height", "depth"):
            axis = remap.native_axis(dimension)
            target = request.footprint.dimension(dimension)
            factors[axis] = target / safe_extent(size[axis], axis)
        return (factors[0], factors[1], factors[2])


class UniformPolicy(BasePolicy):
    """Lock one footprint dimension and scale all axes by the same ratio.

    Preserves native proportions; the other two targets are advisory.
    """

    def __init__(self, dimension: str):
        self.dimension = dimension

    @property
    def name(self) -> str:
        return f"uniform_by_{self.dimension}"

    def reference_axis(self, request: AssetRequest) -> int:
        """Native axis the locked dimension is measured on."""
        if request.remap is None:
            return DEFAULT_REFERENCE_AXIS
        return request.remap.native_axis(self.dimension)

    def scale(
        self,
        native: BoundingVolume,
        request: AssetRequest,
    ) -> tuple[float, float, float]:
        axis = self.reference_axis(request)
        target = request.footprint.dimension(self.dimension)
        ratio = target / safe_extent(native.size[axis], axis)
        return (ratio, ratio, ratio)


POLICIES: dict[ScalingMode, BasePolicy] = {
    ScalingMode.EXACT: ExactPerAxisPolicy(),
    ScalingMode.UNIFORM_BY_WIDTH: UniformPolicy("width"),
    ScalingMode.UNIFORM_BY_HEIGHT: UniformPolicy("height"),
    ScalingMode.UNIFORM_BY_DEPTH: UniformPolicy("depth"),
}


def get_policy(mode: ScalingMode | str) -> BasePolicy:
    """Get the policy registered for a scaling mode.

    Raises:
        ValueError: If the mode is unknown
    """
    try:
        return POLICIES[ScalingMode(mode)]
    except (KeyError, ValueError):
        raise ValueError(
            f"Unknown scaling mode: {mode}. Available: {[m.value for m in ScalingMode]}"
        ) from None


def compute_scale(native: BoundingVolume, request: AssetRequest) -> tuple[float, float, float]:
    """Convert a native bounding size into a scale vector for a request."""
    policy = get_policy(request.mode)
    factors = policy.scale(native, request)
    logger.debug(f"{policy.name}: native {native.size} -> scale {factors}")
    return factors
