"""Per-fixture asset pipelines and room construction.

Each fixture runs as an independent coroutine: locate -> bound -> scale ->
re-bound -> place -> register. Only the load step suspends. Pipelines append
exactly one node to the RoomScene they are handed, so concurrent completions
never conflict.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from .mesh.loader import AssetDecodeError, AssetLoadError, AssetLocator, TrimeshAssetLoader
from .mesh.placeholder import synthesize_placeholder
from .scene.placement import resolve_placement
from .scene.scene import RoomBounds, RoomScene

if TYPE_CHECKING:
    from .core.config import FittingParams, RoomFitConfig
    from .core.request import AssetRequest
    from .mesh.loader import BaseAssetLoader
    from .scene.scene import FixtureNode

logger = logging.getLogger(__name__)


class FixturePipeline:
    """Fit and register fixtures using one loader and one room."""

    def __init__(
        self,
        loader: BaseAssetLoader,
        room: RoomBounds,
        load_timeout_s: float | None = None,
        strict_decode: bool = False,
    ):
        """Create a pipeline.

        Args:
            loader: Loader collaborator
            room: Room surface coordinates
            load_timeout_s: Budget for the whole candidate search, None to wait forever
            strict_decode: Stop searching on a malformed asset
        """
        self.locator = AssetLocator(loader, strict_decode=strict_decode)
        self.room = room
        self.load_timeout_s = load_timeout_s

    @classmethod
    def from_params(
        cls,
        loader: BaseAssetLoader,
        room: RoomBounds,
        params: FittingParams,
    ) -> FixturePipeline:
        return cls(
            loader,
            room,
            load_timeout_s=params.load_timeout_s,
            strict_decode=params.strict_decode,
        )

    async def run(self, name: str, request: AssetRequest, scene: RoomScene) -> FixtureNode:
        """Locate, fit and register one fixture.

        Falls back to placeholder geometry when no candidate loads in time.

        Args:
            name: Fixture name
            request: Fixture request
            scene: Scene registry the fixture node is appended to

        Returns:
            The registered FixtureNode
        """
        try:
            located = await asyncio.wait_for(
                self.locator.locate(request.candidates),
                timeout=self.load_timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"{name}: no asset loaded within {self.load_timeout_s}s, using placeholder"
            )
            return self._place_fallback(name, request, scene, ["timeout"])
        except AssetDecodeError as e:
            # Only reached in strict mode
            logger.error(f"{name}: malformed asset {e.identifier}, using placeholder")
            return self._place_fallback(name, request, scene, e.failures + [f"decode: {e}"])
        except AssetLoadError as e:
            logger.warning(f"{name}: no candidate loaded, using placeholder")
            return self._place_fallback(name, request, scene, e.failures)

        placement = resolve_placement(located.model, request, self.room)
        return scene.add_fixture(
            name,
            located.model,
            placement,
            source=located.identifier,
            failures=located.failures,
        )

    def _place_fallback(
        self,
        name: str,
        request: AssetRequest,
        scene: RoomScene,
        failures: list[str],
    ) -> FixtureNode:
        model = synthesize_placeholder(request, name=f"{name}_placeholder")
        placement = resolve_placement(model, request, self.room)
        return scene.add_fixture(
            name,
            model,
            placement,
            placeholder=True,
            failures=failures,
        )


async def build_room_async(
    config: RoomFitConfig,
    loader: BaseAssetLoader | None = None,
    scene: RoomScene | None = None,
) -> RoomScene:
    """Build a room and run every fixture pipeline concurrently.

    A pipeline that raises is logged and leaves its slot empty; the other
    fixtures are unaffected.

    Args:
        config: Room and fixture configuration
        loader: Loader collaborator (defaults to disk loading from asset_dir,
            closed once every pipeline has finished)
        scene: Existing scene to append to

    Returns:
        The populated RoomScene
    """
    room = RoomBounds.from_room_params(config.room)
    if scene is None:
        scene = RoomScene(name=config.name, room=room)
    owns_loader = loader is None
    if loader is None:
        loader = TrimeshAssetLoader(config.fitting.asset_dir)

    pipeline = FixturePipeline.from_params(loader, room, config.fitting)

    try:
        results = await asyncio.gather(
            *(pipeline.run(f.name, f.request, scene) for f in config.fixtures),
            return_exceptions=True,
        )
    finally:
        # Loads abandoned by a timeout must not hold up the caller
        if owns_loader:
            loader.close()

    for fixture, result in zip(config.fixtures, results):
        if isinstance(result, BaseException):
            logger.error(f"{fixture.name}: pipeline failed: {result!r}", exc_info=result)

    return scene


def build_room(
    config: RoomFitConfig,
    loader: BaseAssetLoader | None = None,
) -> RoomScene:
    """Synchronous wrapper around build_room_async."""
    return asyncio.run(build_room_async(config, loader))
