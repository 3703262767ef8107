"""Background asset loading with callbacks delivered on the frame thread."""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any, Callable, Optional

import numpy as np
import trimesh


logger = logging.getLogger(__name__)


class LoadState(Enum):
    PENDING = auto()
    LOADED = auto()
    FAILED = auto()


class LoadFailedError(RuntimeError):
    """Raised when the result of a failed load is requested."""


def read_mesh_vertices(path: str | Path) -> np.ndarray:
    """Load a mesh file (STL, GLB, OBJ, ...) and return its ``(N, 3)`` vertices."""

    mesh = trimesh.load(Path(path).as_posix(), force="mesh")
    vertices = np.asarray(mesh.vertices, dtype=float)
    if vertices.size == 0:
        raise ValueError(f"Mesh file {path} contains no vertices")
    return vertices


@dataclass
class AssetHandle:
    path: str
    on_load: Optional[Callable[[Any], None]] = None
    on_error: Optional[Callable[[BaseException], None]] = None
    state: LoadState = LoadState.PENDING
    error: Optional[BaseException] = None
    _result: Any = field(default=None, repr=False)
    _future: Optional[Future] = field(default=None, repr=False)

    @property
    def done(self) -> bool:
        return self.state is not LoadState.PENDING

    def result(self) -> Any:
        if self.state is LoadState.FAILED:
            raise LoadFailedError(f"Loading {self.path} failed: {self.error}") from self.error
        if self.state is LoadState.PENDING:
            raise RuntimeError(f"{self.path} is still loading")
        return self._result


class AssetLoader:
    """Reads assets on worker threads.

    Completion callbacks never run on the worker: they are delivered by
    :meth:`poll`, which the frame loop calls once per frame.
    """

    def __init__(
        self,
        max_workers: int = 2,
        reader: Callable[[str], Any] = read_mesh_vertices,
    ) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="asset")
        self._reader = reader
        self._pending: list[AssetHandle] = []
        self._closed = False

    @property
    def pending(self) -> int:
        return len(self._pending)

    def load(
        self,
        path: str | Path,
        on_load: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> AssetHandle:
        if self._closed:
            raise RuntimeError("AssetLoader has been shut down")
        handle = AssetHandle(path=str(path), on_load=on_load, on_error=on_error)
        handle._future = self._executor.submit(self._reader, str(path))
        self._pending.append(handle)
        return handle

    def poll(self) -> int:
        """Deliver callbacks for finished loads; returns how many finished.

        Every finished handle gets its callback even when an earlier one
        raises; the first callback error is re-raised afterwards.
        """

        finished = [h for h in self._pending if h._future is not None and h._future.done()]
        callback_error: Optional[BaseException] = None
        for handle in finished:
            self._pending.remove(handle)
            try:
                self._deliver(handle)
            except Exception as exc:
                logger.exception("Callback for asset %s raised", handle.path)
                if callback_error is None:
                    callback_error = exc
        if callback_error is not None:
            raise callback_error
        return len(finished)

    def _deliver(self, handle: AssetHandle) -> None:
        future = handle._future
        error = future.exception()
        if error is not None:
            handle.state = LoadState.FAILED
            handle.error = error
            logger.warning("Failed to load asset %s: %s", handle.path, error)
            if handle.on_error is not None:
                handle.on_error(error)
            return
        handle.state = LoadState.LOADED
        handle._result = future.result()
        logger.info("Loaded asset %s", handle.path)
        if handle.on_load is not None:
            handle.on_load(handle._result)

    def wait(self, timeout: float | None = None) -> int:
        """Block until current loads finish, then deliver their callbacks."""

        futures = [h._future for h in self._pending if h._future is not None]
        if futures:
            wait_futures(futures, timeout=timeout)
        return self.poll()

    def shutdown(self) -> None:
        if self._closed:
            return
        for handle in self._pending:
            if handle._future is not None:
                handle._future.cancel()
        self._pending.clear()
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._closed = True


__all__ = [
    "AssetHandle",
    "AssetLoader",
    "LoadFailedError",
    "LoadState",
    "read_mesh_vertices",
]
