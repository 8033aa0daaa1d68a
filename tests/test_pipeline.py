"""Tests for fixture pipelines and room construction."""

import asyncio
import math
import threading
import time

import pytest
import trimesh

import roomfit.pipeline as pipeline_module
from roomfit.core.config import FittingParams, FixtureConfig, RoomFitConfig
from roomfit.core.request import AnchorSpec, AnchorSurface, AssetRequest, Footprint, ScalingMode
from roomfit.mesh.loader import TrimeshAssetLoader
from roomfit.pipeline import FixturePipeline, build_room, build_room_async
from roomfit.scene.scene import RoomBounds, RoomScene

from conftest import FakeLoader, make_box_scene, write_nan_glb


def toilet_request(candidates=("toilet.glb", "Toilet.glb")) -> AssetRequest:
    return AssetRequest(
        candidates=candidates,
        footprint=Footprint(width=18.0, height=33.25, depth=29.5),
        mode=ScalingMode.UNIFORM_BY_HEIGHT,
        yaw=math.pi / 2,
        anchor=AnchorSpec(surface=AnchorSurface.FRONT_WALL, clearance=0.5),
    )


def run_fixture(pipeline, name, request, scene):
    return asyncio.run(pipeline.run(name, request, scene))


class TestFixturePipeline:
    """Test a single fixture's pipeline."""

    def test_loaded_asset_is_registered(self):
        """Test a loadable candidate is fitted and appended once."""
        loader = FakeLoader({"Toilet.glb": make_box_scene((0.4, 0.8, 0.7))})
        room = RoomBounds()
        scene = RoomScene(room=room)

        node = run_fixture(FixturePipeline(loader, room), "toilet", toilet_request(), scene)

        assert scene.fixtures == [node]
        assert node.source == "Toilet.glb"
        assert node.placeholder is False
        assert node.placement.size[1] == pytest.approx(33.25)
        assert node.placement.bounds.min[1] == 0.0
        assert node.placement.bounds.max[2] == pytest.approx(51.0 - 0.5)

    def test_exhaustion_uses_placeholder_once(self, monkeypatch):
        """Test exhausted candidates synthesize exactly one placeholder."""
        calls = []
        original = pipeline_module.synthesize_placeholder

        def counting(request, name="placeholder"):
            calls.append(name)
            return original(request, name=name)

        monkeypatch.setattr(pipeline_module, "synthesize_placeholder", counting)

        loader = FakeLoader()
        room = RoomBounds()
        scene = RoomScene(room=room)
        node = run_fixture(FixturePipeline(loader, room), "toilet", toilet_request(), scene)

        assert len(calls) == 1
        assert len(scene.fixtures) == 1
        assert node.placeholder is True
        assert node.source is None
        assert len(node.failures) == 2

    def test_placeholder_is_fitted_at_unit_scale(self):
        """Test the placeholder matches the footprint without rescaling."""
        loader = FakeLoader()
        room = RoomBounds()
        scene = RoomScene(room=room)
        node = run_fixture(FixturePipeline(loader, room), "toilet", toilet_request(), scene)

        assert node.placement.scale == pytest.approx((1.0, 1.0, 1.0))
        # Yaw of 90 degrees swaps width and depth
        assert node.placement.size == pytest.approx((29.5, 33.25, 18.0))
        assert node.placement.bounds.min[1] == 0.0

    def test_timeout_falls_back(self):
        """Test a load that never finishes in time is replaced by a placeholder."""
        loader = FakeLoader({"toilet.glb": make_box_scene((1.0, 1.0, 1.0))}, delay=5.0)
        room = RoomBounds()
        scene = RoomScene(room=room)

        node = run_fixture(
            FixturePipeline(loader, room, load_timeout_s=0.05),
            "toilet",
            toilet_request(),
            scene,
        )

        assert node.placeholder is True
        assert node.failures == ["timeout"]
        assert len(scene.fixtures) == 1

    def test_strict_decode_falls_back(self):
        """Test strict mode places a placeholder instead of a later candidate."""
        loader = FakeLoader(
            {"Toilet.glb": make_box_scene((1.0, 1.0, 1.0))},
            malformed={"toilet.glb"},
        )
        room = RoomBounds()
        scene = RoomScene(room=room)

        node = run_fixture(
            FixturePipeline(loader, room, strict_decode=True),
            "toilet",
            toilet_request(),
            scene,
        )

        assert node.placeholder is True
        assert loader.attempts == ["toilet.glb"]
        assert node.failures[-1].startswith("decode:")

    def test_repeated_runs_are_identical(self):
        """Test the same request with a stateless loader yields identical results."""
        loader = FakeLoader({"toilet.glb": make_box_scene((0.41, 0.77, 0.69), offset=(0.1, 0.3, -0.2))})
        room = RoomBounds()
        pipeline = FixturePipeline(loader, room)

        first = run_fixture(pipeline, "toilet", toilet_request(), RoomScene(room=room))
        second = run_fixture(pipeline, "toilet", toilet_request(), RoomScene(room=room))

        assert first.placement == second.placement

    def test_from_params(self):
        """Test construction from FittingParams."""
        params = FittingParams(load_timeout_s=2.0, strict_decode=True)
        pipeline = FixturePipeline.from_params(FakeLoader(), RoomBounds(), params)
        assert pipeline.load_timeout_s == 2.0
        assert pipeline.locator.strict_decode is True


class TestBuildRoom:
    """Test building a whole room."""

    def test_all_fixtures_present(self):
        """Test every configured fixture ends up in the scene."""
        config = RoomFitConfig.default()
        loader = FakeLoader({"toilet.glb": make_box_scene((0.4, 0.8, 0.7))})

        scene = build_room(config, loader)

        assert sorted(n.name for n in scene.fixtures) == ["cabinet", "mirror", "toilet", "vanity"]
        assert scene.get_fixture("toilet").placeholder is False
        assert scene.get_fixture("vanity").placeholder is True
        for node in scene.fixtures:
            assert node.placement.bounds.min[1] == 0.0

    def test_fixtures_load_concurrently(self):
        """Test slow loads overlap instead of running one after another."""
        config = RoomFitConfig.default()
        models = {
            "VanityRender.glb": make_box_scene((20.0, 30.0, 20.0)),
            "toilet.glb": make_box_scene((0.4, 0.8, 0.7)),
            "mirror.glb": make_box_scene((0.1, 1.0, 0.7)),
            "cabinet2.glb": make_box_scene((0.3, 0.4, 0.8)),
        }

        async def timed():
            loop = asyncio.get_running_loop()
            start = loop.time()
            scene = await build_room_async(config, FakeLoader(models, delay=0.2))
            return scene, loop.time() - start

        scene, elapsed = asyncio.run(timed())

        assert len(scene.fixtures) == 4
        assert not any(n.placeholder for n in scene.fixtures)
        assert elapsed < 0.6

    def test_failing_pipeline_does_not_stop_others(self, monkeypatch):
        """Test an error in one fixture leaves the rest of the room intact."""
        original = pipeline_module.resolve_placement

        def flaky(model, request, room):
            if "mirror.glb" in request.candidates:
                raise RuntimeError("boom")
            return original(model, request, room)

        monkeypatch.setattr(pipeline_module, "resolve_placement", flaky)

        scene = build_room(RoomFitConfig.default(), FakeLoader())

        assert sorted(n.name for n in scene.fixtures) == ["cabinet", "toilet", "vanity"]

    def test_disk_assets(self, tmp_path):
        """Test building from real files in an asset directory."""
        trimesh.Scene(trimesh.creation.box(extents=(0.5, 1.0, 0.8))).export(str(tmp_path / "Toilet.glb"))
        config = RoomFitConfig(
            fitting=FittingParams(asset_dir=tmp_path),
            fixtures=[FixtureConfig(name="toilet", request=toilet_request())],
        )

        scene = build_room(config)

        node = scene.get_fixture("toilet")
        assert node.source == "Toilet.glb"
        assert node.placement.size[1] == pytest.approx(33.25)

    def test_non_finite_asset_gets_placeholder(self, tmp_path):
        """Test a NaN-vertex asset still leaves the fixture slot occupied."""
        write_nan_glb(tmp_path / "toilet.glb")
        config = RoomFitConfig(
            fitting=FittingParams(asset_dir=tmp_path),
            fixtures=[FixtureConfig(name="toilet", request=toilet_request(("toilet.glb",)))],
        )

        scene = build_room(config)

        node = scene.get_fixture("toilet")
        assert node is not None
        assert node.placeholder is True
        assert node.failures[0].startswith("decode:")

    def test_hung_load_does_not_block_build(self, tmp_path, monkeypatch):
        """Test the build returns on the timeout, not when a stuck load finishes."""
        release = threading.Event()

        def stuck(self, identifier):
            release.wait(5.0)
            return make_box_scene((1.0, 1.0, 1.0))

        monkeypatch.setattr(TrimeshAssetLoader, "load_sync", stuck)
        config = RoomFitConfig(
            fitting=FittingParams(asset_dir=tmp_path, load_timeout_s=0.1),
            fixtures=[FixtureConfig(name="toilet", request=toilet_request())],
        )

        start = time.monotonic()
        try:
            scene = build_room(config)
            elapsed = time.monotonic() - start
        finally:
            release.set()

        assert elapsed < 1.0
        node = scene.get_fixture("toilet")
        assert node.placeholder is True
        assert node.failures == ["timeout"]
