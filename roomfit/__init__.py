"""RoomFit - fit authored 3D assets into a fixed room.

Rescales assets of unknown native scale and axis convention to a real-world
footprint, reorients them and anchors them against room surfaces with
guaranteed floor contact.
"""

__version__ = "0.1.0"

from .core.config import RoomFitConfig
from .core.request import AnchorSpec, AnchorSurface, AssetRequest, AxisRemap, Footprint, ScalingMode
from .mesh.bounds import BoundingVolume, compute_bounds
from .mesh.loader import AssetLocator, TrimeshAssetLoader
from .pipeline import FixturePipeline, build_room
from .scene.placement import PlacementResult, resolve_placement
from .scene.scene import RoomBounds, RoomScene

__all__ = [
    "RoomFitConfig",
    "AnchorSpec",
    "AnchorSurface",
    "AssetRequest",
    "AxisRemap",
    "Footprint",
    "ScalingMode",
    "BoundingVolume",
    "compute_bounds",
    "AssetLocator",
    "TrimeshAssetLoader",
    "FixturePipeline",
    "build_room",
    "PlacementResult",
    "resolve_placement",
    "RoomBounds",
    "RoomScene",
]
