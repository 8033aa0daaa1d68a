"""Configuration management for RoomFit.

This module defines all configuration models using Pydantic for validation.
Configuration can be loaded from JSON files or constructed programmatically.
"""

from __future__ import annotations

import json
import math
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from .request import AnchorSpec, AnchorSurface, AssetRequest, AxisRemap, Footprint, ScalingMode


class RoomParams(BaseModel):
    """Fixed room dimensions.

    Width runs along X, length along Z (back wall to front wall),
    height along Y.
    """

    width: float = Field(default=32.0, gt=0, description="Room width")
    length: float = Field(default=102.0, gt=0, description="Room length (back to front wall)")
    height: float = Field(default=108.0, gt=0, description="Floor to ceiling")
    floor: float = Field(default=0.0, description="Floor plane Y coordinate")
    units: str = Field(default="in", description="Unit of every length in the config")


class FittingParams(BaseModel):
    """Parameters for the asset pipelines."""

    asset_dir: Path | None = Field(
        default=None,
        description="Base directory for relative asset identifiers"
    )
    load_timeout_s: float | None = Field(
        default=30.0,
        gt=0,
        description="Time allowed for the candidate search before falling back. None = wait forever."
    )
    strict_decode: bool = Field(
        default=False,
        description="Stop the candidate search on a malformed asset instead of trying the next one"
    )
    require_axis_remap: bool = Field(
        default=True,
        description="Reject fixtures whose scaling mode needs an axis remap but declare none"
    )


class FixtureConfig(BaseModel):
    """One fixture slot in the room."""

    name: str = Field(description="Fixture name")
    request: AssetRequest


class RoomFitConfig(BaseModel):
    """Main configuration container."""

    name: str = Field(default="Bathroom", description="Scene name")
    room: RoomParams = Field(default_factory=RoomParams)
    fitting: FittingParams = Field(default_factory=FittingParams)
    fixtures: list[FixtureConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_fixtures(self) -> RoomFitConfig:
        names = [f.name for f in self.fixtures]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate fixture names: {duplicates}")

        if self.fitting.require_axis_remap:
            missing = [
                f.name for f in self.fixtures
                if f.request.mode.needs_remap and f.request.remap is None
            ]
            if missing:
                raise ValueError(
                    f"Fixtures {missing} use a scaling mode that needs an axis remap "
                    "but declare none"
                )
        return self

    @classmethod
    def from_file(cls, path: Path | str) -> RoomFitConfig:
        """Load configuration from a JSON file."""
        path = Path(path)
        with open(path) as f:
            data = json.load(f)
        return cls.model_validate(data)

    def to_file(self, path: Path | str) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)

    @classmethod
    def default(cls) -> RoomFitConfig:
        """Sample bathroom: 102" x 32" x 108" with four authored fixtures."""
        # Width along native Z, depth along native X
        sideways = AxisRemap(width="z", height="y", depth="x")

        fixtures = [
            FixtureConfig(
                name="vanity",
                request=AssetRequest(
                    candidates=(
                        "VanityRender.glb",
                        "vanityrender.glb",
                        "Vanityrender.glb",
                        "vanityRender.glb",
                    ),
                    footprint=Footprint(width=24, height=34, depth=22.5),
                    mode=ScalingMode.UNIFORM_BY_WIDTH,
                    yaw=-math.pi / 2,
                    anchor=AnchorSpec(surface=AnchorSurface.BACK_WALL, clearance=0.25),
                    remap=sideways,
                ),
            ),
            FixtureConfig(
                name="toilet",
                request=AssetRequest(
                    candidates=("toilet.glb", "Toilet.glb", "toilet_low.glb"),
                    footprint=Footprint(width=18, height=33.25, depth=29.5),
                    mode=ScalingMode.UNIFORM_BY_HEIGHT,
                    yaw=math.pi / 2,
                    anchor=AnchorSpec(surface=AnchorSurface.FRONT_WALL, clearance=0.5),
                ),
            ),
            FixtureConfig(
                name="mirror",
                request=AssetRequest(
                    candidates=("mirror.glb", "Mirror.glb"),
                    footprint=Footprint(width=24.5, height=36, depth=1.5),
                    mode=ScalingMode.UNIFORM_BY_HEIGHT,
                    yaw=-math.pi / 2,
                    anchor=AnchorSpec(surface=AnchorSurface.BACK_WALL, clearance=0.25),
                ),
            ),
            FixtureConfig(
                name="cabinet",
                request=AssetRequest(
                    candidates=("cabinet2.glb", "Cabinet2.glb", "cabinet.glb", "Cabinet.glb"),
                    footprint=Footprint(width=25, height=11.8, depth=10),
                    mode=ScalingMode.EXACT,
                    yaw=math.pi / 2,
                    anchor=AnchorSpec(surface=AnchorSurface.FRONT_WALL, clearance=0.0),
                    remap=sideways,
                ),
            ),
        ]
        return cls(fixtures=fixtures)
