"""Asset loading and measurement modules for RoomFit."""

from .bounds import BoundingVolume, compute_bounds
from .loader import (
    AssetDecodeError,
    AssetLoadError,
    AssetLocator,
    AssetNotFoundError,
    BaseAssetLoader,
    LocatedAsset,
    TrimeshAssetLoader,
)
from .placeholder import synthesize_placeholder

__all__ = [
    "BoundingVolume",
    "compute_bounds",
    "AssetDecodeError",
    "AssetLoadError",
    "AssetLocator",
    "AssetNotFoundError",
    "BaseAssetLoader",
    "LocatedAsset",
    "TrimeshAssetLoader",
    "synthesize_placeholder",
]
