"""Room and fixture registry data structures.

This module provides RoomBounds (the fixed surface coordinates fixtures are
anchored against), FixtureNode (one placed fixture) and RoomScene, the scene
graph context every fixture pipeline appends its node to.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

import numpy as np
import trimesh
from pydantic import BaseModel, Field, PrivateAttr

from ..core.request import AnchorSpec, AnchorSurface
from .placement import PlacementResult

if TYPE_CHECKING:
    from ..core.config import RoomParams

logger = logging.getLogger(__name__)

# Thickness of the exported floor/wall slabs
SHELL_THICKNESS = 0.5


class RoomBounds(BaseModel):
    """Fixed room geometry.

    The room is centered on the origin in X and Z with the floor at
    ``floor``: width along X, length along Z, height along Y.
    """

    width: float = Field(default=32.0, gt=0, description="Size along X")
    length: float = Field(default=102.0, gt=0, description="Size along Z")
    height: float = Field(default=108.0, gt=0, description="Size along Y")
    floor: float = Field(default=0.0, description="Floor plane Y coordinate")

    model_config = {"frozen": True}

    @classmethod
    def from_room_params(cls, params: RoomParams) -> RoomBounds:
        """Create RoomBounds from RoomParams.

        Args:
            params: Room parameters from configuration

        Returns:
            RoomBounds matching the configuration
        """
        return cls(
            width=params.width,
            length=params.length,
            height=params.height,
            floor=params.floor,
        )

    @property
    def size(self) -> tuple[float, float, float]:
        """Return room dimensions (x, y, z)."""
        return (self.width, self.height, self.length)

    @property
    def ceiling(self) -> float:
        return self.floor + self.height

    def surface_coordinate(self, surface: AnchorSurface) -> float:
        """Coordinate of a surface along its normal axis."""
        return {
            AnchorSurface.BACK_WALL: -self.length / 2,
            AnchorSurface.FRONT_WALL: self.length / 2,
            AnchorSurface.LEFT_WALL: -self.width / 2,
            AnchorSurface.RIGHT_WALL: self.width / 2,
            AnchorSurface.FLOOR_CENTERLINE: 0.0,
        }[surface]

    def anchor_coordinate(self, anchor: AnchorSpec, extent: float) -> float:
        """Center coordinate on the anchor axis for an object of given extent.

        The object is pushed off the surface by half its extent plus the
        clearance, toward the room interior.
        """
        surface = anchor.surface
        if surface is AnchorSurface.FLOOR_CENTERLINE:
            return 0.0

        base = self.surface_coordinate(surface)
        offset = extent / 2 + anchor.clearance
        if surface in (AnchorSurface.BACK_WALL, AnchorSurface.LEFT_WALL):
            return base + offset
        return base - offset

    def contains_bounds(
        self,
        min_pt: Sequence[float],
        max_pt: Sequence[float],
        tolerance: float = 1e-6,
    ) -> bool:
        """Check if a bounding box is fully inside the room."""
        return (
            -self.width / 2 - tolerance <= min_pt[0] and max_pt[0] <= self.width / 2 + tolerance and
            self.floor - tolerance <= min_pt[1] and max_pt[1] <= self.ceiling + tolerance and
            -self.length / 2 - tolerance <= min_pt[2] and max_pt[2] <= self.length / 2 + tolerance
        )

    def shell(self) -> dict[str, trimesh.Trimesh]:
        """Simple slab geometry for the floor and four walls."""
        t = SHELL_THICKNESS
        cy = self.floor + self.height / 2
        slabs = {
            "floor": ((self.width, t, self.length), (0.0, self.floor - t / 2, 0.0)),
            "back_wall": ((self.width, self.height, t), (0.0, cy, -self.length / 2 - t / 2)),
            "front_wall": ((self.width, self.height, t), (0.0, cy, self.length / 2 + t / 2)),
            "left_wall": ((t, self.height, self.length), (-self.width / 2 - t / 2, cy, 0.0)),
            "right_wall": ((t, self.height, self.length), (self.width / 2 + t / 2, cy, 0.0)),
        }
        meshes = {}
        for name, (extents, center) in slabs.items():
            transform = np.eye(4)
            transform[:3, 3] = center
            meshes[name] = trimesh.creation.box(extents=extents, transform=transform)
        return meshes


class FixtureNode(BaseModel):
    """A single fixture registered in the room."""

    name: str = Field(description="Fixture name")
    source: str | None = Field(
        default=None,
        description="Identifier the model was loaded from (None for a placeholder)"
    )
    placeholder: bool = Field(default=False, description="Whether fallback geometry was used")
    placement: PlacementResult
    failures: list[str] = Field(
        default_factory=list,
        description="Diagnostics for candidates that failed to load"
    )

    # Private attribute for the model geometry (not serialized)
    _model: trimesh.Scene | None = PrivateAttr(default=None)

    model_config = {"frozen": False}

    @property
    def model(self) -> trimesh.Scene | None:
        return self._model


class RoomScene(BaseModel):
    """The room's scene graph: room bounds plus every placed fixture.

    Pipelines receive the scene explicitly and append one node each.
    """

    name: str = Field(default="Untitled Room", description="Scene name")
    version: str = Field(default="1.0", description="Manifest version")
    room: RoomBounds = Field(default_factory=RoomBounds, description="Room geometry")
    fixtures: list[FixtureNode] = Field(
        default_factory=list,
        description="Placed fixtures in completion order"
    )

    model_config = {"frozen": False}

    def add_fixture(
        self,
        name: str,
        model: trimesh.Scene,
        placement: PlacementResult,
        source: str | None = None,
        placeholder: bool = False,
        failures: Sequence[str] = (),
    ) -> FixtureNode:
        """Register a placed fixture.

        Args:
            name: Fixture name
            model: Geometry in its native frame
            placement: Resolved placement for the geometry
            source: Identifier the model was loaded from
            placeholder: Whether the geometry is fallback geometry
            failures: Diagnostics for failed candidates

        Returns:
            The created FixtureNode
        """
        node = FixtureNode(
            name=name,
            source=source,
            placeholder=placeholder,
            placement=placement,
            failures=list(failures),
        )
        node._model = model
        self.fixtures.append(node)
        logger.info(
            f"Placed {name} at {tuple(round(c, 3) for c in placement.position)} "
            f"({'placeholder' if placeholder else source})"
        )
        return node

    def get_fixture(self, name: str) -> FixtureNode | None:
        """Get a fixture by name.

        Returns:
            FixtureNode if found, None otherwise
        """
        for node in self.fixtures:
            if node.name == name:
                return node
        return None

    def validate_bounds(self) -> tuple[bool, list[str]]:
        """Check that every fixture lies inside the room.

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors = []
        for node in self.fixtures:
            bounds = node.placement.bounds
            if not self.room.contains_bounds(bounds.min, bounds.max):
                errors.append(
                    f"Fixture '{node.name}' extends outside the room. "
                    f"Bounds: [{list(bounds.min)}, {list(bounds.max)}]"
                )
        return len(errors) == 0, errors

    def to_trimesh(self, include_shell: bool = True) -> trimesh.Scene:
        """Build a trimesh scene for rendering or export.

        Each fixture's native geometry is added under its placement matrix,
        so nested node transforms from the source asset are preserved.
        """
        out = trimesh.Scene()

        if include_shell:
            for name, mesh in self.room.shell().items():
                out.add_geometry(mesh, geom_name=f"room_{name}", node_name=f"room_{name}")

        for node in self.fixtures:
            if node.model is None:
                continue
            placement_matrix = node.placement.to_matrix()
            graph = node.model.graph
            for node_name in graph.nodes_geometry:
                node_transform, geometry_name = graph.get(node_name)
                geometry = node.model.geometry.get(geometry_name)
                if geometry is None:
                    continue
                out.add_geometry(
                    geometry.copy(),
                    geom_name=f"{node.name}/{geometry_name}",
                    node_name=f"{node.name}/{node_name}",
                    transform=placement_matrix @ node_transform,
                )

        return out

    def export(self, path: str | Path, include_shell: bool = True) -> None:
        """Export the scene to a mesh file (format from the suffix)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_trimesh(include_shell=include_shell).export(str(path))

    def save(self, path: str | Path) -> None:
        """Save the placement manifest to a JSON file.

        Args:
            path: Output file path
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)

    @classmethod
    def load(cls, path: str | Path) -> RoomScene:
        """Load a placement manifest (geometry is not restored).

        Args:
            path: Input file path

        Returns:
            Loaded RoomScene
        """
        path = Path(path)
        with open(path) as f:
            data = json.load(f)

        return cls.model_validate(data)

    def __repr__(self) -> str:
        return f"RoomScene('{self.name}', {len(self.fixtures)} fixtures)"
