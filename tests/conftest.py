"""Shared fixtures: in-memory models and loaders."""

from __future__ import annotations

import asyncio

import numpy as np
import pytest
import trimesh

from roomfit.mesh.loader import AssetDecodeError, AssetNotFoundError, BaseAssetLoader


def make_box_scene(
    extents: tuple[float, float, float],
    offset: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> trimesh.Scene:
    """Scene with one box, placed under a translated node."""
    transform = np.eye(4)
    transform[:3, 3] = offset
    scene = trimesh.Scene()
    scene.add_geometry(
        trimesh.creation.box(extents=extents),
        geom_name="body",
        node_name="body",
        transform=transform,
    )
    return scene


class FakeLoader(BaseAssetLoader):
    """Loader serving models from a dict and recording every attempt."""

    def __init__(
        self,
        models: dict[str, trimesh.Scene] | None = None,
        malformed: set[str] | None = None,
        delay: float = 0.0,
    ):
        self.models = models or {}
        self.malformed = malformed or set()
        self.delay = delay
        self.attempts: list[str] = []

    async def load(self, identifier: str) -> trimesh.Scene:
        self.attempts.append(identifier)
        if self.delay:
            await asyncio.sleep(self.delay)
        if identifier in self.malformed:
            raise AssetDecodeError(identifier, "corrupt payload")
        if identifier not in self.models:
            raise AssetNotFoundError(identifier, "missing")
        return self.models[identifier].copy()


@pytest.fixture
def box_2_4_1() -> trimesh.Scene:
    """Box with native size (2, 4, 1)."""
    return make_box_scene((2.0, 4.0, 1.0))


def write_nan_glb(path) -> None:
    """Write a GLB whose first vertex has a NaN coordinate."""
    box = trimesh.creation.box(extents=(1.0, 1.0, 1.0))
    vertices = box.vertices.copy()
    vertices[0, 0] = np.nan
    mesh = trimesh.Trimesh(vertices=vertices, faces=box.faces, process=False)
    trimesh.Scene(mesh).export(str(path))
