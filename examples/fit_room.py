#!/usr/bin/env python3
"""Example: Build the sample bathroom with one real asset.

This script demonstrates the basic workflow for RoomFit:
1. Create or load an asset
2. Fit it to a footprint against a wall
3. Build the whole room, with placeholders for missing assets

Run with: python examples/fit_room.py
"""

import math
import tempfile
from pathlib import Path

import trimesh

from roomfit import (
    AnchorSpec,
    AnchorSurface,
    AssetRequest,
    Footprint,
    RoomBounds,
    RoomFitConfig,
    ScalingMode,
    build_room,
    compute_bounds,
    resolve_placement,
)


def create_test_toilet(path: Path) -> Path:
    """Write a toilet-sized box in metres, authored off-center."""
    box = trimesh.creation.box(extents=[0.45, 0.84, 0.75])
    box.apply_translation([0.2, 0.42, -0.1])
    trimesh.Scene(box).export(str(path))
    return path


def main():
    asset_dir = Path(tempfile.mkdtemp(prefix="roomfit_"))

    print("RoomFit - Sample Bathroom")
    print("=" * 40)

    print("\n1. Creating test asset...")
    create_test_toilet(asset_dir / "toilet.glb")
    model = trimesh.load(str(asset_dir / "toilet.glb"), force="scene")
    print(f"   Native size: {compute_bounds(model).size}")

    print("\n2. Fitting against the front wall...")
    request = AssetRequest(
        candidates=("toilet.glb",),
        footprint=Footprint(width=18, height=33.25, depth=29.5),
        mode=ScalingMode.UNIFORM_BY_HEIGHT,
        yaw=math.pi / 2,
        anchor=AnchorSpec(surface=AnchorSurface.FRONT_WALL, clearance=0.5),
    )
    placement = resolve_placement(model, request, RoomBounds())
    print(f"   Scale: {placement.scale}")
    print(f"   Position: {placement.position}")
    print(f"   Lowest point: {placement.bounds.min[1]}")

    print("\n3. Building the room...")
    config = RoomFitConfig.default()
    config.fitting.asset_dir = asset_dir
    scene = build_room(config)

    for node in scene.fixtures:
        source = "placeholder" if node.placeholder else node.source
        print(f"   {node.name:8s} {source:12s} size={tuple(round(s, 2) for s in node.placement.size)}")

    output = asset_dir / "bathroom.glb"
    scene.export(output)

    print("\n" + "=" * 40)
    print(f"Done! Scene written to {output}")


if __name__ == "__main__":
    main()
