from __future__ import annotations

import functools
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, Tuple

from PIL import Image

from wavesurface.utils.image_ops import fit_to_size

logger = logging.getLogger(__name__)

Decoder = Callable[[Any], Optional[Image.Image]]
SizeProvider = Callable[[], Tuple[int, int]]
Publisher = Callable[[Optional[Image.Image]], None]


def target_size(size: tuple[int, int], intrinsic: tuple[int, int]) -> tuple[int, int]:
    # Each axis falls back to the source's own size until the surface is laid out.
    w, h = size
    return (w if w > 0 else intrinsic[0], h if h > 0 else intrinsic[1])


def rasterize(img: Image.Image, size: tuple[int, int]) -> Image.Image:
    return fit_to_size(img, target_size(size, img.size))


class MaskLoader:
    """Rasterizes mask sources off the render thread.

    Every request gets a generation number. Only the result of the newest
    request is handed to ``publish``; anything that finishes after a newer
    request (or a direct :meth:`publish_now`) is dropped.
    """

    def __init__(
        self,
        decode: Decoder,
        size_provider: SizeProvider,
        publish: Publisher,
        executor: Executor | None = None,
    ):
        self._decode = decode
        self._size_provider = size_provider
        self._publish = publish
        self._lock = threading.Lock()
        self._generation = 0
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="mask-loader")

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def _bump(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def cancel_pending(self) -> None:
        self._bump()

    def publish_now(self, bitmap: Image.Image | None) -> None:
        with self._lock:
            self._generation += 1
            self._publish(bitmap)

    def load_drawable(self, image: Image.Image) -> Future:
        gen = self._bump()
        return self._executor.submit(self._run, gen, lambda: image)

    def load_resource(self, resource: Any) -> Future:
        gen = self._bump()
        return self._executor.submit(self._run, gen, functools.partial(self._decode, resource))

    def _run(self, gen: int, source: Callable[[], Image.Image | None]) -> bool:
        try:
            img = source()
            bitmap = None if img is None else rasterize(img, self._size_provider())
        except Exception as exc:
            logger.warning("could not load mask: %s", exc, exc_info=True)
            bitmap = None
        with self._lock:
            if gen != self._generation:
                logger.debug("dropping stale mask result (generation %d, current %d)", gen, self._generation)
                return False
            self._publish(bitmap)
        if bitmap is not None:
            logger.debug("mask ready: %dx%d", bitmap.width, bitmap.height)
        return True

    def shutdown(self, wait: bool = True) -> None:
        self.cancel_pending()
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
