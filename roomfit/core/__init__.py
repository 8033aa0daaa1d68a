"""Core modules for RoomFit."""

from .config import FittingParams, FixtureConfig, RoomFitConfig, RoomParams
from .request import AnchorSpec, AnchorSurface, AssetRequest, AxisRemap, Footprint, ScalingMode

__all__ = [
    "FittingParams",
    "FixtureConfig",
    "RoomFitConfig",
    "RoomParams",
    "AnchorSpec",
    "AnchorSurface",
    "AssetRequest",
    "AxisRemap",
    "Footprint",
    "ScalingMode",
]
