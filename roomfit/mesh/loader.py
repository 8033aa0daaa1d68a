"""Asset loading using trimesh.

This module handles loading authored 3D assets (GLB, GLTF, OBJ, STL, PLY, etc.)
and locating the first loadable asset among a fixture's candidate identifiers.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import numpy as np
import trimesh

from .bounds import model_points

logger = logging.getLogger(__name__)


class AssetLoadError(Exception):
    """A candidate identifier could not be turned into a model."""

    def __init__(self, identifier: str, message: str, failures: list[str] | None = None):
        super().__init__(f"{identifier}: {message}")
        self.identifier = identifier
        self.failures = failures or []


class AssetNotFoundError(AssetLoadError, FileNotFoundError):
    """The identifier does not resolve to an asset."""


class AssetDecodeError(AssetLoadError, ValueError):
    """The asset exists but its payload is unusable."""


class BaseAssetLoader(ABC):
    """Abstract loader collaborator.

    Implementations return a ``trimesh.Scene`` for a single identifier or
    raise an AssetLoadError subclass. Each call is independent.
    """

    @abstractmethod
    async def load(self, identifier: str) -> trimesh.Scene:
        """Load one identifier."""
        pass

    def close(self) -> None:
        """Release resources held by the loader."""


class TrimeshAssetLoader(BaseAssetLoader):
    """Load assets from disk with trimesh, off the event loop.

    Loads run on a private thread pool so that ``close`` can abandon a hung
    load without the event loop waiting for it on shutdown.
    """

    SUPPORTED_FORMATS = {".glb", ".gltf", ".obj", ".stl", ".ply", ".off", ".3mf"}

    def __init__(self, asset_dir: str | Path | None = None):
        """Create a loader.

        Args:
            asset_dir: Base directory for relative identifiers
        """
        self.asset_dir = Path(asset_dir) if asset_dir is not None else None
        self.executor = ThreadPoolExecutor(thread_name_prefix="roomfit-load")

    def resolve(self, identifier: str) -> Path:
        """Resolve an identifier to a filesystem path."""
        path = Path(identifier)
        if path.is_absolute() or self.asset_dir is None:
            return path
        return self.asset_dir / path

    async def load(self, identifier: str) -> trimesh.Scene:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, self.load_sync, identifier)

    def close(self) -> None:
        """Stop the thread pool without waiting for loads still running."""
        self.executor.shutdown(wait=False, cancel_futures=True)

    def load_sync(self, identifier: str) -> trimesh.Scene:
        """Blocking load, used by ``load`` and by the CLI info command."""
        path = self.resolve(identifier)

        # Exact-case match so case variants stay distinct candidates
        if not path.is_file() or path.name not in {p.name for p in path.parent.iterdir()}:
            raise AssetNotFoundError(identifier, f"no such file {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise AssetDecodeError(
                identifier,
                f"unsupported format {path.suffix}, supported: {sorted(self.SUPPORTED_FORMATS)}",
            )

        try:
            loaded = trimesh.load(str(path), force="scene")
        except Exception as e:
            raise AssetDecodeError(identifier, f"could not parse: {e}") from e

        if not isinstance(loaded, trimesh.Scene):
            loaded = trimesh.Scene(loaded)

        if not any(
            len(getattr(geom, "vertices", ())) > 0 for geom in loaded.geometry.values()
        ):
            raise AssetDecodeError(identifier, "no geometry found")

        if not np.isfinite(model_points(loaded)).all():
            raise AssetDecodeError(identifier, "non-finite vertex coordinates")

        return loaded


@dataclass
class LocatedAsset:
    """Result of a successful candidate search."""

    identifier: str
    model: trimesh.Scene
    failures: list[str] = field(default_factory=list)


class AssetLocator:
    """Try candidate identifiers in order until one loads."""

    def __init__(self, loader: BaseAssetLoader, strict_decode: bool = False):
        """Create a locator.

        Args:
            loader: Loader collaborator
            strict_decode: Stop the search on a malformed asset instead of
                advancing to the next candidate
        """
        self.loader = loader
        self.strict_decode = strict_decode

    async def locate(self, candidates: Sequence[str]) -> LocatedAsset:
        """Return the first candidate that loads.

        Raises:
            AssetNotFoundError: If every candidate failed
            AssetDecodeError: In strict mode, on the first malformed candidate
        """
        failures: list[str] = []

        for identifier in candidates:
            try:
                model = await self.loader.load(identifier)
            except AssetDecodeError as e:
                if self.strict_decode:
                    logger.error(f"Malformed asset {identifier}: {e}")
                    raise
                logger.warning(f"Malformed asset {identifier}, trying next: {e}")
                failures.append(f"decode: {e}")
                continue
            except AssetLoadError as e:
                logger.warning(f"Failed to load {identifier}, trying next")
                failures.append(f"not found: {e}")
                continue

            logger.debug(f"Loaded {identifier}")
            return LocatedAsset(identifier=identifier, model=model, failures=failures)

        raise AssetNotFoundError(
            ", ".join(candidates),
            f"none of {len(candidates)} candidate(s) loaded",
            failures=failures,
        )
