"""Declarative fixture requests.

An AssetRequest describes how to locate, scale and place one fixture's
3D asset. Requests are frozen pydantic models built once at scene-build time.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

Axis = Literal["x", "y", "z"]

AXIS_INDEX: dict[str, int] = {"x": 0, "y": 1, "z": 2}


class ScalingMode(str, Enum):
    """How a native bounding size maps onto a target footprint."""

    EXACT = "exact"
    UNIFORM_BY_WIDTH = "uniform_by_width"
    UNIFORM_BY_HEIGHT = "uniform_by_height"
    UNIFORM_BY_DEPTH = "uniform_by_depth"

    @property
    def reference_dimension(self) -> str | None:
        """Footprint dimension a uniform mode locks, None for exact."""
        return {
            ScalingMode.EXACT: None,
            ScalingMode.UNIFORM_BY_WIDTH: "width",
            ScalingMode.UNIFORM_BY_HEIGHT: "height",
            ScalingMode.UNIFORM_BY_DEPTH: "depth",
        }[self]

    @property
    def needs_remap(self) -> bool:
        """Whether the mode depends on a declared axis convention.

        Height is the model's natural vertical axis, every other mode needs
        to know which native axis is which.
        """
        return self is not ScalingMode.UNIFORM_BY_HEIGHT


class AnchorSurface(str, Enum):
    """Room surfaces a fixture can be held against."""

    BACK_WALL = "back_wall"
    FRONT_WALL = "front_wall"
    LEFT_WALL = "left_wall"
    RIGHT_WALL = "right_wall"
    FLOOR_CENTERLINE = "floor_centerline"

    @property
    def normal_axis(self) -> Literal["x", "z"]:
        """Horizontal axis perpendicular to the surface."""
        if self in (AnchorSurface.LEFT_WALL, AnchorSurface.RIGHT_WALL):
            return "x"
        return "z"


class Footprint(BaseModel):
    """Target real-world size of a fixture."""

    width: float = Field(gt=0, description="Size along room X")
    height: float = Field(gt=0, description="Size along room Y")
    depth: float = Field(gt=0, description="Size along room Z")

    model_config = {"frozen": True}

    @field_validator("width", "height", "depth")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("Footprint dimensions must be finite")
        return value

    def dimension(self, name: str) -> float:
        """Return a dimension by name ('width', 'height' or 'depth')."""
        return {"width": self.width, "height": self.height, "depth": self.depth}[name]

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.width, self.height, self.depth)


class AxisRemap(BaseModel):
    """Which native axis of an asset corresponds to each room dimension.

    Many authored assets are modelled with width along Z and depth along X;
    the remap records that convention explicitly per asset type.
    """

    width: Axis = "x"
    height: Axis = "y"
    depth: Axis = "z"
    version: int = Field(default=1, ge=1, description="Convention revision")

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_permutation(self) -> AxisRemap:
        axes = {self.width, self.height, self.depth}
        if len(axes) != 3:
            raise ValueError(
                f"Axis remap must be a permutation of x, y, z: "
                f"width={self.width}, height={self.height}, depth={self.depth}"
            )
        return self

    @classmethod
    def identity(cls) -> AxisRemap:
        return cls()

    @classmethod
    def parse(cls, text: str) -> AxisRemap:
        """Parse a 'width,height,depth' axis triple such as 'z,y,x'."""
        parts = [p.strip().lower() for p in text.split(",")]
        if len(parts) != 3:
            raise ValueError(f"Expected three comma-separated axes, got {text!r}")
        return cls(width=parts[0], height=parts[1], depth=parts[2])

    def native_axis(self, dimension: str) -> int:
        """Index of the native axis carrying a room dimension."""
        return AXIS_INDEX[getattr(self, dimension)]


class AnchorSpec(BaseModel):
    """Room surface a fixture is held against."""

    surface: AnchorSurface = AnchorSurface.FLOOR_CENTERLINE
    clearance: float = Field(default=0.0, ge=0, description="Gap to the surface")
    axis: Literal["x", "z"] | None = Field(
        default=None,
        description="Resulting axis held against the surface (defaults from surface)"
    )

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _default_axis(cls, data: object) -> object:
        if isinstance(data, dict) and data.get("axis") is None:
            surface = AnchorSurface(data.get("surface", AnchorSurface.FLOOR_CENTERLINE))
            data = {**data, "axis": surface.normal_axis}
        return data

    @model_validator(mode="after")
    def _check_axis(self) -> AnchorSpec:
        if (
            self.surface is not AnchorSurface.FLOOR_CENTERLINE
            and self.axis != self.surface.normal_axis
        ):
            raise ValueError(
                f"{self.surface.value} can only hold the {self.surface.normal_axis} axis, "
                f"got {self.axis}"
            )
        return self


class AssetRequest(BaseModel):
    """Complete description of how to locate, scale and place one fixture."""

    candidates: tuple[str, ...] = Field(
        min_length=1,
        description="Ordered identifiers to try"
    )
    footprint: Footprint
    mode: ScalingMode = ScalingMode.EXACT
    yaw: float = Field(default=0.0, description="Orientation about +Y in radians")
    anchor: AnchorSpec = Field(default_factory=AnchorSpec)
    remap: AxisRemap | None = Field(
        default=None,
        description="Native axis convention of the asset"
    )

    model_config = {"frozen": True}

    @field_validator("yaw")
    @classmethod
    def _finite_yaw(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("Yaw must be finite")
        return value

    @property
    def effective_remap(self) -> AxisRemap:
        """The declared remap, or the identity convention."""
        return self.remap or AxisRemap.identity()
